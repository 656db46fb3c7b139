# -*- coding: utf-8 -*-
"""
示踪组分分压
  x_k = (Y_k / Mw_k) / Σ_i (Y_i / Mw_i)
  p_k = (p + p_op) * x_k
纯函数，按单元向量化；两侧各调用一次。
"""
from __future__ import annotations
from typing import Optional
import numpy as np

from ..core.errors import DegenerateMixtureError
from ..core.material import Mixture

__all__ = ["partial_pressure", "mole_fraction"]


def mole_fraction(
    mixture: Mixture,
    Y: np.ndarray,
    tracked: int,
    *,
    zone: str = "?",
    cells: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    【功能】由质量分数计算示踪组分摩尔分数。

    【输入】
    - mixture: Mixture   该区混合物（决定各列分子量）
    - Y: (n, n_species)  质量分数
    - tracked: int       示踪组分下标
    - zone, cells        仅用于报错定位

    【输出】
    - x: (n,) 摩尔分数

    【异常】
    - ConfigurationError      示踪组分不在混合物中
    - DegenerateMixtureError  Σ(Y_i/Mw_i) <= 0
    """
    Mw_k = mixture.tracked_mw(tracked)
    Y = np.atleast_2d(np.asarray(Y, dtype=np.float64))
    sum_mole = Y @ (1.0 / mixture.mw)

    bad = ~(sum_mole > 0.0)  # 同时拦住 NaN
    if np.any(bad):
        where = np.flatnonzero(bad)
        ids = where if cells is None else np.asarray(cells)[where]
        raise DegenerateMixtureError(
            f"单元区 '{zone}' 单元 {ids[:10].tolist()} 的 Σ(Y/Mw) 非正，摩尔分数无定义"
        )
    return (Y[:, tracked] / Mw_k) / sum_mole


def partial_pressure(
    mixture: Mixture,
    Y: np.ndarray,
    tracked: int,
    p: np.ndarray,
    p_op: float,
    *,
    zone: str = "?",
    cells: Optional[np.ndarray] = None,
) -> np.ndarray:
    """示踪组分分压 [Pa]；p 为表压，p_op 为操作压力。"""
    x = mole_fraction(mixture, Y, tracked, zone=zone, cells=cells)
    return (np.asarray(p, dtype=np.float64) + float(p_op)) * x
