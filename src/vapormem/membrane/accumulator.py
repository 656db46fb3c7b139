# -*- coding: utf-8 -*-
"""
FluxAccumulator — 单次迭代内的逐单元质量流量累加缓冲。

每个单元区一块 (n_cells, n_slots) 数组：
  slot 0 = 反应侧累计质量损失率 [kg/s]
  slot 1 = 渗透侧累计质量增加率 [kg/s]
存储是按区"选配"的；没有存储的区在 reset 时跳过。

阶段协议（每次迭代一轮）：
  reset()  -> 累加阶段，允许 add()
  seal()   -> 封存阶段，允许 loss()/gain() 读取
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple
import numpy as np

from ..core.errors import AccumulatorStateError, ConfigurationError

__all__ = ["FluxAccumulator", "SLOT_LOSS", "SLOT_GAIN", "transfer_balance"]

SLOT_LOSS = 0
SLOT_GAIN = 1

_STALE = "stale"
_OPEN = "accumulating"
_SEALED = "sealed"


@dataclass
class FluxAccumulator:
    """
    【功能】显式持有的累加缓冲，按单元区名索引，替代宿主的全局逐单元存储。
    【形状】storage[zone] 为 (n_cells, n_slots) 或 None（该区未分配存储）。
    """

    storage: Dict[str, Optional[np.ndarray]]
    iteration: int = 0
    state: str = field(default=_STALE)

    # —— 工厂与维护 —— #
    @staticmethod
    def like(
        mesh,
        zones: Optional[Iterable[str]] = None,
        n_slots: int = 2,
    ) -> "FluxAccumulator":
        """
        为 mesh 的单元区分配存储；zones 为 None 时全部分配。
        初始内容为 NaN：未 reset 就读取会被立刻暴露。
        """
        if n_slots < 2:
            raise ConfigurationError(f"累加器至少需要 2 个槽位，得到 {n_slots}")
        wanted = set(mesh.cell_zones) if zones is None else set(zones)
        unknown = wanted - set(mesh.cell_zones)
        if unknown:
            raise ConfigurationError(f"udm_zones 中有不存在的单元区：{sorted(unknown)}")
        storage = {
            name: (
                np.full((z.n_cells, n_slots), np.nan, dtype=np.float64)
                if name in wanted
                else None
            )
            for name, z in mesh.cell_zones.items()
        }
        return FluxAccumulator(storage=storage)

    def has_storage(self, zone: str) -> bool:
        return self.storage.get(zone) is not None

    def reset(self) -> None:
        """
        清零所有已分配区的两个槽位，开启新一轮累加。
        每次迭代只能在任何通量计算之前调用一次。
        """
        for arr in self.storage.values():
            if arr is None:
                continue
            arr[:, SLOT_LOSS] = 0.0
            arr[:, SLOT_GAIN] = 0.0
        self.iteration += 1
        self.state = _OPEN

    def seal(self) -> None:
        """结束本轮累加；之后只读。"""
        if self.state != _OPEN:
            raise AccumulatorStateError(
                f"第 {self.iteration} 次迭代：只有累加阶段才能封存（当前 {self.state}）"
            )
        self.state = _SEALED

    @property
    def is_open(self) -> bool:
        return self.state == _OPEN

    @property
    def is_sealed(self) -> bool:
        return self.state == _SEALED

    # —— 写入 —— #
    def _slots(self, zone: str) -> np.ndarray:
        arr = self.storage.get(zone)
        if arr is None:
            raise ConfigurationError(f"单元区 '{zone}' 没有分配累加存储")
        return arr

    def add(self, zone: str, slot: int, cells: np.ndarray, values: np.ndarray) -> None:
        """
        把 values 逐个累加到 zone 的 cells 单元的 slot 槽位。
        同一单元出现多次时全部累加（无缓冲归约，顺序无关）。
        """
        if not self.is_open:
            raise AccumulatorStateError(
                f"第 {self.iteration} 次迭代：累加前必须先 reset（当前 {self.state}）"
            )
        arr = self._slots(zone)
        np.add.at(arr[:, slot], cells, values)

    # —— 读取 —— #
    def _read(self, zone: str, slot: int) -> np.ndarray:
        if not self.is_sealed:
            raise AccumulatorStateError(
                f"第 {self.iteration} 次迭代：源项读取前必须封存累加器（当前 {self.state}）"
            )
        return self._slots(zone)[:, slot]

    def loss(self, zone: str) -> np.ndarray:
        """反应侧累计损失率 [kg/s]，返回视图。"""
        return self._read(zone, SLOT_LOSS)

    def gain(self, zone: str) -> np.ndarray:
        """渗透侧累计增加率 [kg/s]，返回视图。"""
        return self._read(zone, SLOT_GAIN)


def transfer_balance(acc: FluxAccumulator) -> Tuple[float, float]:
    """诊断用：全域损失总量与增加总量 [kg/s]，两者应相等。"""
    loss = 0.0
    gain = 0.0
    for arr in acc.storage.values():
        if arr is None:
            continue
        loss += float(np.sum(arr[:, SLOT_LOSS]))
        gain += float(np.sum(arr[:, SLOT_GAIN]))
    return loss, gain
