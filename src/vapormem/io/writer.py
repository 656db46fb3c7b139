from pathlib import Path
import json
import numpy as np
from typing import Dict, Tuple

from ..core.mesh import Mesh
from ..membrane.accumulator import FluxAccumulator


def prepare_out(output_dir: str) -> Path:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    return out


def write_meta(cfg: dict, out: Path):
    (out / "meta_config.json").write_text(json.dumps(cfg, indent=2), encoding="utf-8")


def snapshot(
    mesh: Mesh,
    acc: FluxAccumulator,
    sources: Dict[str, Tuple[np.ndarray, np.ndarray]],
    tracked: int,
    it: int,
    out: Path,
):
    payload = {"it": it, "nx": mesh.nx, "dx": mesh.dx, "iteration": acc.iteration}
    for name, fz in mesh.face_zones.items():
        payload[f"profile_{name}"] = fz.profile
    for name, z in mesh.cell_zones.items():
        payload[f"Y_{name}"] = z.Y[:, tracked]
        arr = acc.storage.get(name)
        if arr is not None:
            payload[f"udm_{name}"] = arr
    for name, (S, _dS) in sources.items():
        payload[f"S_{name}"] = S
    np.savez_compressed(out / f"iter_{it:06d}.npz", **payload)
