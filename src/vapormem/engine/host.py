# -*- coding: utf-8 -*-
"""
极简宿主：示踪组分质量分数的显式更新
  Y_k^{n+1} = clip(Y_k^n + S * dt / rho, 0, 1)
  其余组分按原比例缩放，使每行 ΣY = 1
只为让膜传质核心能独立运行；不是完整的输运求解器。
"""
from __future__ import annotations
import numpy as np

from ..core.errors import ConfigurationError

__all__ = ["advance_species"]


def advance_species(zone, S: np.ndarray, dt: float, tracked: int) -> float:
    """
    【功能】用体积源项 S [kg/(m^3·s)] 推进 zone 的示踪组分质量分数（原地）。
    【输出】本步示踪组分质量变化量 [kg]（诊断用）
    """
    if zone.density is None:
        raise ConfigurationError(f"单元区 '{zone.name}' 未给出 density，无法推进组分")

    Y = zone.Y
    rho = zone.density
    yk_old = Y[:, tracked].copy()
    yk_new = np.clip(yk_old + S * dt / rho, 0.0, 1.0)

    # 其余组分按比例缩放到 1 - Y_k
    rest = np.delete(Y, tracked, axis=1)
    rest_sum = rest.sum(axis=1)
    scale = np.divide(
        1.0 - yk_new, rest_sum, out=np.zeros_like(rest_sum), where=rest_sum > 0.0
    )
    rest *= scale[:, None]

    Y[:, tracked] = yk_new
    others = [i for i in range(Y.shape[1]) if i != tracked]
    Y[:, others] = rest
    return float(np.sum((yk_new - yk_old) * rho * zone.volume))
