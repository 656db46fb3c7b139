from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional
import numpy as np

from .errors import ConfigurationError
from .material import Mixture, mixtures_from_cfg


@dataclass
class CellZone:
    # ——身份——
    name: str
    mixture: Mixture

    # ——逐单元字段——
    volume: np.ndarray  # 单元体积 [m^3]，float64，(n_cells,)
    pressure: np.ndarray  # 表压 [Pa]，float64，(n_cells,)
    Y: np.ndarray  # 质量分数，float64，(n_cells, n_species)
    density: Optional[np.ndarray] = None  # 密度 [kg/m^3]，仅独立宿主使用

    @property
    def n_cells(self) -> int:
        return int(self.volume.shape[0])


@dataclass
class FaceZone:
    name: str
    zone0: str  # 上游（反应侧）单元区名
    zone1: str  # 下游（渗透侧）单元区名
    c0: np.ndarray  # 上游相邻单元下标，int64，-1 表示缺失
    c1: np.ndarray  # 下游相邻单元下标，int64，-1 表示缺失
    area: np.ndarray  # 面积向量 [m^2]，float64，(n_faces, 3)
    profile: Optional[np.ndarray] = None  # 面上传输量，float64，(n_faces,)

    def __post_init__(self):
        if self.profile is None:
            self.profile = np.zeros(self.n_faces, dtype=np.float64)

    @property
    def n_faces(self) -> int:
        return int(self.c0.shape[0])

    @property
    def area_mag(self) -> np.ndarray:
        """面积向量模长 |A|。"""
        return np.linalg.norm(self.area, axis=1)

    @property
    def interior(self) -> np.ndarray:
        """两侧单元都存在的面（外边界/退化面为 False）。"""
        return (self.c0 >= 0) & (self.c1 >= 0)


@dataclass
class Mesh:
    cell_zones: Dict[str, CellZone]
    face_zones: Dict[str, FaceZone]

    # —— 生成网格时的几何（仅供输出/绘图）——
    nx: int = 0
    ny: int = 0
    dx: float = 0.0
    dy: float = 0.0

    def cell_zone(self, name: str) -> CellZone:
        try:
            return self.cell_zones[name]
        except KeyError:
            raise ConfigurationError(
                f"单元区 '{name}' 不存在，已有：{sorted(self.cell_zones)}"
            ) from None

    def face_zone(self, name: str) -> FaceZone:
        try:
            return self.face_zones[name]
        except KeyError:
            raise ConfigurationError(
                f"面区 '{name}' 不存在，已有：{sorted(self.face_zones)}"
            ) from None


# —— 工具：统一分配逐单元数组 ——
def _alloc(n: int, *, dtype=np.float64, fill=0.0, width: Optional[int] = None):
    shape = (n,) if width is None else (n, width)
    return np.full(shape, fill_value=fill, dtype=dtype)


def _zone_from_cfg(name: str, mixture: Mixture, zcfg: dict, n: int, vol: float):
    Y0 = np.asarray(zcfg["Y"], dtype=np.float64)
    if Y0.shape != (mixture.n_species,):
        raise ConfigurationError(
            f"单元区 '{name}' 的 Y 长度 {Y0.shape} 与混合物组分数 {mixture.n_species} 不符"
        )
    Y = _alloc(n, width=mixture.n_species)
    Y[:] = Y0
    density = None
    if "density" in zcfg:
        density = _alloc(n, fill=float(zcfg["density"]))
    return CellZone(
        name=name,
        mixture=mixture,
        volume=_alloc(n, fill=vol),
        pressure=_alloc(n, fill=float(zcfg.get("pressure", 0.0))),
        Y=Y,
        density=density,
    )


def create_mesh(cfg: dict) -> Mesh:
    """
    【功能】构造双通道网格：反应侧在下、渗透侧在上，各 ny 行 × nx 列矩形单元；
          两者之间的一层膜面组成面区 "membrane"。

    【输入】
    - cfg: dict，需包含 mesh / materials / zones 三段（见 config_loader）

    【输出】
    - Mesh，单元编号为 j*nx + i；反应侧 j=ny-1 行、渗透侧 j=0 行与膜相邻
    """
    m = cfg["mesh"]
    nx, ny = int(m["nx"]), int(m["ny"])
    dx, dy = float(m["dx"]), float(m["dy"])
    depth = float(m.get("depth", 1.0))
    n_ext = int(m.get("exterior_faces", 0))

    mixtures = mixtures_from_cfg(cfg["materials"])
    n = nx * ny
    vol = dx * dy * depth

    zones = {}
    for zname in ("reactant", "permeate"):
        if zname not in mixtures:
            raise ConfigurationError(f"materials 中缺少 '{zname}' 的混合物定义")
        zones[zname] = _zone_from_cfg(
            zname, mixtures[zname], cfg["zones"][zname], n, vol
        )

    # 膜面：反应侧顶行 <-> 渗透侧底行
    i = np.arange(nx, dtype=np.int64)
    c0 = (ny - 1) * nx + i
    c1 = i.copy()

    # 可选：附加缺一侧单元的外边界面（应被跳过）
    if n_ext > 0:
        c0 = np.concatenate([c0, np.arange(n_ext, dtype=np.int64) % nx + (ny - 1) * nx])
        c1 = np.concatenate([c1, np.full(n_ext, -1, dtype=np.int64)])

    nf = c0.shape[0]
    area = _alloc(nf, width=3)
    area[:, 1] = dx * depth  # 法向 +y，从反应侧指向渗透侧

    membrane = FaceZone(
        name="membrane",
        zone0="reactant",
        zone1="permeate",
        c0=c0,
        c1=c1,
        area=area,
    )
    return Mesh(
        cell_zones=zones,
        face_zones={"membrane": membrane},
        nx=nx,
        ny=ny,
        dx=dx,
        dy=dy,
    )
