# -*- coding: utf-8 -*-
"""
异常体系
- 所有致命错误都在使用点检测并立即抛出，禁止把 NaN/Inf 写进累加器
- 基类继承 ValueError，调用方可以按输入错误统一捕获
"""
from __future__ import annotations

__all__ = [
    "MembraneError",
    "ConfigurationError",
    "DegenerateGeometryError",
    "DegenerateMixtureError",
    "AccumulatorStateError",
]


class MembraneError(ValueError):
    """膜传质计算中的致命错误基类。"""


class ConfigurationError(MembraneError):
    """配置错误：示踪组分缺失、分子量非正、标量未定义、区域无累加存储等。"""


class DegenerateGeometryError(MembraneError):
    """几何退化：单元体积非正。"""


class DegenerateMixtureError(MembraneError):
    """混合物退化：Σ(Y_i / Mw_i) 非正，摩尔分数无定义。"""


class AccumulatorStateError(MembraneError):
    """累加器阶段协议被破坏（未清零就累加、未封存就读取）。"""
