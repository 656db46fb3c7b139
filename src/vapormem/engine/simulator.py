"""
求解器（Simulator）
===================

【功能】
本模块实现"编排器"角色，按固定阶段顺序调用膜传质过程，
自身不复写具体数值细节。

【输入】
- cfg: dict
  运行配置字典（经 config_loader.check_cfg 补全默认值）。

配置示例（JSON 语义）
--------------------
{
  "mesh": {"nx": 20, "ny": 4, "dx": 0.01, "dy": 0.005, "depth": 1.0},
  "materials": {
    "reactant": [["h2o", 18.01528], ["co2", 44.0095]],
    "permeate": [["h2o", 18.01528], ["n2", 28.0134]]
  },
  "zones": {
    "reactant": {"pressure": 0.0, "Y": [0.3, 0.7], "density": 1.2},
    "permeate": {"pressure": 0.0, "Y": [0.01, 0.99], "density": 1.1}
  },
  "scalars": {"operating-pressure": 101325.0},
  "membrane": {"permeance": 1e-5, "tracked_species_index": 0, "partitions": 1},
  "iterate": {"n_iter": 50, "dt": 0.01, "save_every": 10},
  "run": {"output_dir": "data/output/run-minimal"}
}

【流程】
每次迭代五个阶段（顺序即协议）：
  1. 累加器清零（reset）
  2. 每个膜面区计算通量并累加（profile）
  3. 封存累加器（seal）
  4. 两侧源项（reactant_source / permeate_source）
  5. 宿主推进示踪组分，写日志与快照
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple
import numpy as np

from ..config_loader import ScalarRegistry
from ..core.errors import MembraneError
from ..core.mesh import Mesh, create_mesh
from ..membrane.accumulator import FluxAccumulator, transfer_balance
from ..membrane.flux import FluxReport
from ..membrane.process import MembraneProcess
from ..io.writer import prepare_out, write_meta, snapshot
from ..io.csv_matrix import dump_profile
from .host import advance_species

logger = logging.getLogger(__name__)


class IterationPipeline:
    """
    单次迭代的阶段管线：reset -> profile -> seal -> sources。

    【成员】
    - proc: MembraneProcess
    - face_zones: 参与计算的膜面区名列表
    """

    def __init__(self, proc: MembraneProcess, face_zones: List[str]):
        self.proc = proc
        self.face_zones = list(face_zones)

    def run_once(
        self,
    ) -> Tuple[List[FluxReport], Dict[str, Tuple[np.ndarray, np.ndarray]]]:
        """
        【输出】
        - reports: 每个面区的 FluxReport
        - sources: {单元区名: (S, dS)}，反应侧为汇、渗透侧为源
        """
        self.proc.reset()
        reports = [self.proc.profile(name) for name in self.face_zones]
        self.proc.seal()

        sources = {}
        mesh = self.proc.mesh
        for name in self.face_zones:
            fz = mesh.face_zone(name)
            if fz.zone0 not in sources:
                sources[fz.zone0] = self.proc.reactant_source(fz.zone0)
            if fz.zone1 not in sources:
                sources[fz.zone1] = self.proc.permeate_source(fz.zone1)
        return reports, sources


class Simulator:
    """
    高层编排器

    【成员】
    - cfg: dict      原始配置
    - mesh: Mesh     网格与场
    - acc: FluxAccumulator
    - out: Path      输出目录
    - pipe: IterationPipeline
    """

    def __init__(self, cfg: Dict[str, Any]):
        self.cfg = cfg

        # 1) 网格、累加器、输出目录与元数据
        self.mesh: Mesh = create_mesh(cfg)
        mem = cfg["membrane"]
        self.acc = FluxAccumulator.like(self.mesh, zones=mem.get("udm_zones"))
        self.out = prepare_out(cfg["run"]["output_dir"])
        write_meta(cfg, self.out)

        # 2) 过程对象
        scalars = ScalarRegistry(cfg.get("scalars", {}))
        self.proc = MembraneProcess(self.mesh, self.acc, scalars, mem)
        self.tracked = self.proc.tracked
        self.pipe = IterationPipeline(self.proc, list(self.mesh.face_zones))

    def run(self) -> None:
        it_cfg = self.cfg["iterate"]
        n_iter = int(it_cfg["n_iter"])
        dt = float(it_cfg["dt"])
        save_every = int(it_cfg["save_every"])

        sources = {}
        for it in range(1, n_iter + 1):
            try:
                reports, sources = self.pipe.run_once()
            except MembraneError:
                logger.error("第 %d 次迭代失败，停止计算", it, exc_info=True)
                raise

            loss, gain = transfer_balance(self.acc)
            for r in reports:
                logger.debug(
                    "it=%d 面区 %s：%d 面，跳过 %d，有效 %d，Σṁ=%.6e kg/s",
                    it,
                    r.face_zone,
                    r.n_faces,
                    r.n_skipped,
                    r.n_active,
                    r.mass_flow,
                )

            # 宿主推进
            dm = {
                zone: advance_species(self.mesh.cell_zone(zone), S, dt, self.tracked)
                for zone, (S, _dS) in sources.items()
            }
            logger.info(
                "it=%d 损失 %.6e kg/s 增加 %.6e kg/s 组分变化 %s",
                it,
                loss,
                gain,
                {k: f"{v:.3e}" for k, v in dm.items()},
            )

            if it % save_every == 0:
                snapshot(self.mesh, self.acc, sources, self.tracked, it, self.out)

        # 循环结束后保存一次
        snapshot(self.mesh, self.acc, sources, self.tracked, n_iter, self.out)
        for name, fz in self.mesh.face_zones.items():
            dump_profile(fz, self.out / f"profile_{name}.csv")
