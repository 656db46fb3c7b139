# -*- coding: utf-8 -*-
"""
物性目录（底层通用）
- 组分只暴露分子量 [g/mol]
- 混合物是有序组分表，组分下标即 Y 数组的列号
- 纯数据、无副作用；可被 membrane / engine 共同调用
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Sequence, Tuple
import numpy as np

from .errors import ConfigurationError

__all__ = ["Species", "Mixture", "mixture_from_cfg", "mixtures_from_cfg", "G_PER_KG"]

G_PER_KG = 1000.0  # 分子量单位 g/mol -> kg/mol


@dataclass(frozen=True)
class Species:
    name: str
    mw: float  # 分子量 [g/mol]


@dataclass(frozen=True)
class Mixture:
    name: str
    species: Tuple[Species, ...]

    def __post_init__(self):
        if not self.species:
            raise ConfigurationError(f"混合物 '{self.name}' 没有任何组分")
        for i, sp in enumerate(self.species):
            if not np.isfinite(sp.mw) or sp.mw <= 0.0:
                raise ConfigurationError(
                    f"混合物 '{self.name}' 第 {i} 个组分 '{sp.name}' 的分子量非正：{sp.mw}"
                )

    @property
    def n_species(self) -> int:
        return len(self.species)

    @property
    def mw(self) -> np.ndarray:
        """各组分分子量数组 [g/mol]，顺序与 Y 的列一致。"""
        return np.array([sp.mw for sp in self.species], dtype=np.float64)

    def tracked_mw(self, index: int) -> float:
        """
        【功能】按下标取示踪组分的分子量。
        【异常】下标越界视为"示踪组分不在该混合物中"，抛 ConfigurationError。
        """
        if not 0 <= index < self.n_species:
            raise ConfigurationError(
                f"示踪组分下标 {index} 不在混合物 '{self.name}' 中"
                f"（共 {self.n_species} 个组分）"
            )
        return float(self.species[index].mw)


def mixture_from_cfg(name: str, entries: Iterable[Sequence]) -> Mixture:
    """由 [[name, mw], ...] 形式的配置项构造混合物。"""
    species = tuple(Species(str(n), float(mw)) for n, mw in entries)
    return Mixture(name=name, species=species)


def mixtures_from_cfg(materials_cfg: Dict[str, list]) -> Dict[str, Mixture]:
    return {name: mixture_from_cfg(name, ent) for name, ent in materials_cfg.items()}
