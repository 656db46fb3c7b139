"""
膜面通量
========

【通量律】（单向，硬截断）
  Δp = p_k,up - p_k,down
  J_mol = A * Δp   (Δp > 0)
        = 0        (Δp <= 0，不允许反渗)
  J_kg  = J_mol * Mw_k / 1000
  ṁ     = J_kg * |S_f|

【副作用】
  - face_zone.profile[f] = J_kg（两侧单元都存在的面）
  - 累加器：上游 slot 0 += ṁ，下游 slot 1 += ṁ

【接口】
  - molar_flux(dp, permeance)
  - evaluate_membrane_flux(mesh, face_zone, acc, permeance, p_op, tracked, faces=None)
  - evaluate_partitioned(...)   # 按面分块计算，结果与单次相同
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Optional
import numpy as np

from ..core.errors import AccumulatorStateError, ConfigurationError, MembraneError
from ..core.material import G_PER_KG
from .accumulator import FluxAccumulator, SLOT_GAIN, SLOT_LOSS
from .partial_pressure import partial_pressure

__all__ = [
    "FluxReport",
    "molar_flux",
    "evaluate_membrane_flux",
    "evaluate_partitioned",
]

logger = logging.getLogger(__name__)


@dataclass
class FluxReport:
    """单个面区一次计算的统计量。"""

    face_zone: str
    n_faces: int
    n_skipped: int
    n_active: int  # Δp > 0 的面数
    mass_flow: float  # Σṁ [kg/s]

    def merge(self, other: "FluxReport") -> "FluxReport":
        return FluxReport(
            face_zone=self.face_zone,
            n_faces=self.n_faces + other.n_faces,
            n_skipped=self.n_skipped + other.n_skipped,
            n_active=self.n_active + other.n_active,
            mass_flow=self.mass_flow + other.mass_flow,
        )


def molar_flux(dp, permeance: float) -> np.ndarray:
    """J_mol = permeance * Δp，Δp <= 0 时严格为 0。"""
    dp = np.asarray(dp, dtype=np.float64)
    return np.where(dp > 0.0, float(permeance) * dp, 0.0)


@dataclass
class _FacePlan:
    """一块面的计算结果；全部校验通过后才提交。"""

    f_all: np.ndarray
    f: np.ndarray
    c0: np.ndarray
    c1: np.ndarray
    dp: np.ndarray
    J_kg: np.ndarray
    mass_flow: np.ndarray


def _check_finite(fz, f: np.ndarray, values: np.ndarray, what: str) -> None:
    bad = ~np.isfinite(values)
    if np.any(bad):
        raise MembraneError(f"面区 '{fz.name}' 面 {f[bad][:10].tolist()} 的{what}非有限值")


def _plan(mesh, fz, permeance, p_op, tracked, faces) -> _FacePlan:
    """只计算、不写入：分压、通量、质量流量，并做全部有限性检查。"""
    z0 = mesh.cell_zone(fz.zone0)
    z1 = mesh.cell_zone(fz.zone1)

    f_all = np.arange(fz.n_faces) if faces is None else np.asarray(faces, dtype=np.int64)
    f = f_all[fz.interior[f_all]]
    c0 = fz.c0[f]
    c1 = fz.c1[f]
    empty = np.zeros(0, dtype=np.float64)
    if f.size == 0:
        return _FacePlan(f_all, f, c0, c1, empty, empty, empty)

    # 两侧分压（各自的混合物，各自解析示踪组分分子量）
    p_up = partial_pressure(
        z0.mixture, z0.Y[c0], tracked, z0.pressure[c0], p_op, zone=z0.name, cells=c0
    )
    p_dn = partial_pressure(
        z1.mixture, z1.Y[c1], tracked, z1.pressure[c1], p_op, zone=z1.name, cells=c1
    )
    # 截断会把 NaN/-inf 的 Δp 变成 0，必须在截断前拦住
    _check_finite(fz, f, p_up, f"上游 '{z0.name}' 分压")
    _check_finite(fz, f, p_dn, f"下游 '{z1.name}' 分压")

    # 按上游分子量换算（原宿主实现取渗透侧的值；两侧一致时结果相同）
    Mw_up = z0.mixture.tracked_mw(tracked)
    Mw_dn = z1.mixture.tracked_mw(tracked)
    if not np.isclose(Mw_up, Mw_dn, rtol=1e-9, atol=0.0):
        logger.warning(
            "面区 %s：两侧示踪组分分子量不一致（%s=%g, %s=%g），按上游换算",
            fz.name,
            z0.name,
            Mw_up,
            z1.name,
            Mw_dn,
        )

    dp = p_up - p_dn
    J_mol = molar_flux(dp, permeance)
    J_kg = J_mol * (Mw_up / G_PER_KG)
    mass_flow = J_kg * fz.area_mag[f]
    _check_finite(fz, f, mass_flow, "质量流量")
    return _FacePlan(f_all, f, c0, c1, dp, J_kg, mass_flow)


def _commit(fz, acc: FluxAccumulator, plan: _FacePlan) -> FluxReport:
    n_skipped = int(plan.f_all.size - plan.f.size)
    if n_skipped:
        logger.debug("面区 %s：跳过 %d 个缺相邻单元的面", fz.name, n_skipped)
    if plan.f.size:
        fz.profile[plan.f] = plan.J_kg
        acc.add(fz.zone0, SLOT_LOSS, plan.c0, plan.mass_flow)
        acc.add(fz.zone1, SLOT_GAIN, plan.c1, plan.mass_flow)
    return FluxReport(
        face_zone=fz.name,
        n_faces=int(plan.f_all.size),
        n_skipped=n_skipped,
        n_active=int(np.count_nonzero(plan.dp > 0.0)),
        mass_flow=float(np.sum(plan.mass_flow)),
    )


def _check_acc(fz, acc: FluxAccumulator) -> None:
    # 写入前确认累加器可用，避免只写了一侧
    if not acc.is_open:
        raise AccumulatorStateError(
            f"面区 '{fz.name}'：累加器未 reset（迭代 {acc.iteration}，状态 {acc.state}）"
        )
    for zname in (fz.zone0, fz.zone1):
        if not acc.has_storage(zname):
            raise ConfigurationError(f"面区 '{fz.name}' 的相邻单元区 '{zname}' 没有累加存储")


def evaluate_membrane_flux(
    mesh,
    face_zone: str,
    acc: FluxAccumulator,
    permeance: float,
    p_op: float,
    tracked: int,
    faces: Optional[np.ndarray] = None,
) -> FluxReport:
    """
    计算面区（或其中 faces 子集）的示踪组分质量通量并累加到两侧单元。
    任一面出错时不写 profile、不动累加器。

    输入
    ----
    mesh      : Mesh
    face_zone : 面区名
    acc       : 处于累加阶段的 FluxAccumulator
    permeance : 膜渗透率 [mol/(m^2·s·Pa)]
    p_op      : 操作压力 [Pa]
    tracked   : 示踪组分下标
    faces     : 可选的面下标子集（分块并行时使用）
    """
    fz = mesh.face_zone(face_zone)
    _check_acc(fz, acc)
    plan = _plan(mesh, fz, permeance, p_op, tracked, faces)
    return _commit(fz, acc, plan)


def evaluate_partitioned(
    mesh,
    face_zone: str,
    acc: FluxAccumulator,
    permeance: float,
    p_op: float,
    tracked: int,
    n_parts: int = 1,
) -> FluxReport:
    """
    把面区切成 n_parts 块分别计算，全部块通过校验后再统一提交；
    任一块失败时累加器与 profile 保持原样。
    """
    fz = mesh.face_zone(face_zone)
    _check_acc(fz, acc)
    parts = np.array_split(np.arange(fz.n_faces), max(1, int(n_parts)))
    plans = [_plan(mesh, fz, permeance, p_op, tracked, part) for part in parts]

    report = None
    for plan in plans:
        r = _commit(fz, acc, plan)
        report = r if report is None else report.merge(r)
    return report
