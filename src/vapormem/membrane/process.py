from typing import Dict, Any, Tuple
import numpy as np

from .accumulator import FluxAccumulator
from .flux import FluxReport, evaluate_partitioned
from .sources import PermeateSourceTerm, ReactantSinkTerm


class MembraneProcess:
    """宿主回调门面：reset / profile / 两侧源项。"""

    def __init__(self, mesh, acc: FluxAccumulator, scalars, cfg: Dict[str, Any]):
        self.mesh = mesh
        self.acc = acc
        self.p_op = scalars.get_real("operating-pressure")
        self.permeance = float(cfg["permeance"])
        self.tracked = int(cfg["tracked_species_index"])
        self.n_parts = int(cfg.get("partitions", 1))
        self.sink = ReactantSinkTerm(mesh, acc)
        self.source = PermeateSourceTerm(mesh, acc)

    def reset(self) -> None:
        self.acc.reset()

    def profile(self, face_zone: str) -> FluxReport:
        return evaluate_partitioned(
            self.mesh,
            face_zone,
            self.acc,
            self.permeance,
            self.p_op,
            self.tracked,
            self.n_parts,
        )

    def seal(self) -> None:
        self.acc.seal()

    def reactant_source(self, zone: str) -> Tuple[np.ndarray, np.ndarray]:
        return self.sink.evaluate(zone)

    def permeate_source(self, zone: str) -> Tuple[np.ndarray, np.ndarray]:
        return self.source.evaluate(zone)
