from __future__ import annotations
import os
import numpy as np

__all__ = ["dump_profile"]


def dump_profile(face_zone, out_csv, *, float_fmt: str = "%.8e") -> None:
    """
    将面区逐面结果导出为 CSV
    列：face, c0, c1, area, J_kg, mass_flow
    缺相邻单元的面 c0/c1 记为 -1

    参数
    face_zone : FaceZone
    out_csv : 输出文件路径
    float_fmt : 浮点数格式 默认 %.8e
    """
    area = face_zone.area_mag
    table = np.column_stack(
        [
            np.arange(face_zone.n_faces),
            face_zone.c0,
            face_zone.c1,
            area,
            face_zone.profile,
            face_zone.profile * area,
        ]
    )

    os.makedirs(os.path.dirname(os.path.abspath(out_csv)), exist_ok=True)

    fmt = ["%d", "%d", "%d", float_fmt, float_fmt, float_fmt]
    np.savetxt(
        out_csv,
        table,
        fmt=fmt,
        delimiter=",",
        header="face,c0,c1,area,J_kg,mass_flow",
        comments="",
    )
