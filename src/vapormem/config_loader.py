from pathlib import Path
from typing import Mapping
import json

from .core.errors import ConfigurationError


class ScalarRegistry:
    """
    只读命名标量表（如 "operating-pressure"）。
    未定义的名字直接报错，不做默认值替代。
    """

    def __init__(self, scalars: Mapping[str, float]):
        self._data = {str(k): float(v) for k, v in scalars.items()}

    def get_real(self, name: str) -> float:
        try:
            return self._data[name]
        except KeyError:
            raise ConfigurationError(
                f"未定义的标量 '{name}'，已有：{sorted(self._data)}"
            ) from None

    def __contains__(self, name) -> bool:
        return name in self._data


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigurationError(msg)


def load_cfg(path="config.json") -> dict:
    # 读取并解析 JSON 配置文件
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return check_cfg(data)


def check_cfg(data: dict) -> dict:
    """基本结构校验 + 安全默认；原地修改并返回 data。"""
    for sec in ("mesh", "materials", "zones", "run"):
        _require(
            sec in data and isinstance(data[sec], dict), f"缺少配置节 [{sec}]"
        )

    m, r = data["mesh"], data["run"]
    s = data.setdefault("scalars", {})
    mem = data.setdefault("membrane", {})
    it = data.setdefault("iterate", {})

    # 最小校验
    missing = [k for k in ("nx", "ny", "dx", "dy") if k not in m]
    _require(not missing, f"mesh 缺少字段：{missing}")
    _require(
        m["nx"] > 0 and m["ny"] > 0 and m["dx"] > 0 and m["dy"] > 0,
        f"网格尺寸必须为正：{m}",
    )
    m.setdefault("depth", 1.0)
    m.setdefault("exterior_faces", 0)
    _require(m["depth"] > 0, "mesh.depth 必须为正")

    for zname in ("reactant", "permeate"):
        _require(zname in data["zones"], f"zones 中缺少 '{zname}'")
        _require("Y" in data["zones"][zname], f"zones.{zname} 缺少 Y")

    # 安全默认
    s.setdefault("operating-pressure", 101325.0)
    mem.setdefault("permeance", 1e-5)  # [mol/(m^2·s·Pa)]
    mem.setdefault("tracked_species_index", 0)
    mem.setdefault("partitions", 1)
    mem.setdefault("udm_zones", ["reactant", "permeate"])
    _require(mem["permeance"] > 0, f"membrane.permeance 必须为正：{mem['permeance']}")
    _require(mem["partitions"] >= 1, "membrane.partitions 至少为 1")

    it.setdefault("n_iter", 50)
    it.setdefault("dt", 0.01)
    it.setdefault("save_every", 10)
    _require(it["n_iter"] > 0 and it["dt"] > 0, f"iterate 参数非法：{it}")
    _require(it["save_every"] >= 1, f"iterate.save_every 至少为 1：{it['save_every']}")

    r.setdefault("output_dir", "data/output/run-minimal")
    return data
