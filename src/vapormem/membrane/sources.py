# -*- coding: utf-8 -*-
"""
体积源项
  反应侧： S = -loss / V
  渗透侧： S = +gain / V
  dS/dφ = 0（累计速率不依赖本地求解变量）

统一接口：term(zone, cell) -> (S, dS)；term.evaluate(zone) -> (S[], dS[])
"""
from __future__ import annotations
from typing import Tuple
import numpy as np

from ..core.errors import ConfigurationError, DegenerateGeometryError
from .accumulator import FluxAccumulator, SLOT_GAIN, SLOT_LOSS

__all__ = ["SourceTerm", "ReactantSinkTerm", "PermeateSourceTerm"]


class SourceTerm:
    """
    【功能】由累加器某个槽位生成体积源项的通用实现。

    【成员】
    - acc: FluxAccumulator  已封存的累加器
    - slot: int             读取的槽位
    - sign: float           -1 为汇，+1 为源
    """

    slot: int = SLOT_LOSS
    sign: float = 1.0

    def __init__(self, mesh, acc: FluxAccumulator):
        self.mesh = mesh
        self.acc = acc

    def _rate(self, zone: str) -> np.ndarray:
        if self.slot == SLOT_LOSS:
            return self.acc.loss(zone)
        return self.acc.gain(zone)

    @staticmethod
    def _check_volume(zone: str, vol: np.ndarray, cells: np.ndarray) -> None:
        bad = ~(vol > 0.0)
        if np.any(bad):
            raise DegenerateGeometryError(
                f"单元区 '{zone}' 单元 {np.asarray(cells)[bad][:10].tolist()} 的体积非正"
            )

    def evaluate(self, zone: str) -> Tuple[np.ndarray, np.ndarray]:
        """整区向量化求值 [kg/(m^3·s)]。"""
        z = self.mesh.cell_zone(zone)
        self._check_volume(zone, z.volume, np.arange(z.n_cells))
        S = self.sign * self._rate(zone) / z.volume
        return S, np.zeros_like(S)

    def __call__(self, zone: str, cell: int) -> Tuple[float, float]:
        z = self.mesh.cell_zone(zone)
        if not 0 <= cell < z.n_cells:
            raise ConfigurationError(
                f"单元区 '{zone}' 没有单元 {cell}（共 {z.n_cells} 个）"
            )
        vol = z.volume[cell : cell + 1]
        self._check_volume(zone, vol, np.array([cell]))
        return float(self.sign * self._rate(zone)[cell] / vol[0]), 0.0


class ReactantSinkTerm(SourceTerm):
    """反应侧质量移除（恒 <= 0）。"""

    slot = SLOT_LOSS
    sign = -1.0


class PermeateSourceTerm(SourceTerm):
    """渗透侧质量增加（恒 >= 0）。"""

    slot = SLOT_GAIN
    sign = 1.0
