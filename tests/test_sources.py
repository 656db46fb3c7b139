# tests/test_sources.py
import numpy as np
import pytest

from vapormem.config_loader import check_cfg
from vapormem.core.errors import (
    AccumulatorStateError,
    ConfigurationError,
    DegenerateGeometryError,
)
from vapormem.core.mesh import create_mesh
from vapormem.membrane.accumulator import SLOT_GAIN, SLOT_LOSS, FluxAccumulator
from vapormem.membrane.sources import PermeateSourceTerm, ReactantSinkTerm


def _mk_mesh(nx=1, ny=1, dx=2.0, dy=1.0):
    cfg = check_cfg(
        {
            "mesh": {"nx": nx, "ny": ny, "dx": dx, "dy": dy, "depth": 1.0},
            "materials": {"reactant": [["h2o", 18.0]], "permeate": [["h2o", 18.0]]},
            "zones": {"reactant": {"Y": [1.0]}, "permeate": {"Y": [1.0]}},
            "run": {},
        }
    )
    return create_mesh(cfg)


def _filled(mesh, loss, gain):
    acc = FluxAccumulator.like(mesh)
    acc.reset()
    n = len(loss)
    acc.add("reactant", SLOT_LOSS, np.arange(n), np.asarray(loss, dtype=float))
    acc.add("permeate", SLOT_GAIN, np.arange(n), np.asarray(gain, dtype=float))
    acc.seal()
    return acc


def test_reactant_sink_concrete_value():
    mesh = _mk_mesh()  # 体积 2 m^3
    acc = _filled(mesh, [4e-6], [0.0])
    S, dS = ReactantSinkTerm(mesh, acc)("reactant", 0)
    assert S == pytest.approx(-2e-6)
    assert dS == 0.0


def test_permeate_source_concrete_value():
    mesh = _mk_mesh()
    mesh.cell_zones["permeate"].volume[:] = 1.0
    acc = _filled(mesh, [0.0], [4e-6])
    S, dS = PermeateSourceTerm(mesh, acc)("permeate", 0)
    assert S == pytest.approx(4e-6)
    assert dS == 0.0


def test_sign_convention_over_zone():
    mesh = _mk_mesh(nx=5, dx=0.1, dy=0.1)
    rates = [0.0, 1e-9, 3e-7, 0.0, 2e-5]
    acc = _filled(mesh, rates, rates)

    S_r, dS_r = ReactantSinkTerm(mesh, acc).evaluate("reactant")
    S_p, dS_p = PermeateSourceTerm(mesh, acc).evaluate("permeate")
    assert np.all(S_r <= 0.0)
    assert np.all(S_p >= 0.0)
    np.testing.assert_allclose(S_r, -S_p)
    assert np.all(dS_r == 0.0) and np.all(dS_p == 0.0)


def test_non_positive_volume_is_fatal():
    mesh = _mk_mesh(nx=3, dx=0.1, dy=0.1)
    mesh.cell_zones["reactant"].volume[1] = 0.0
    acc = _filled(mesh, [1e-7, 1e-7, 1e-7], [0.0, 0.0, 0.0])
    sink = ReactantSinkTerm(mesh, acc)

    with pytest.raises(DegenerateGeometryError) as ei:
        sink.evaluate("reactant")
    assert "reactant" in str(ei.value)
    with pytest.raises(DegenerateGeometryError):
        sink("reactant", 1)
    S, _ = sink("reactant", 0)
    assert np.isfinite(S)


def test_source_requires_sealed_accumulator():
    mesh = _mk_mesh()
    acc = FluxAccumulator.like(mesh)
    acc.reset()
    with pytest.raises(AccumulatorStateError):
        PermeateSourceTerm(mesh, acc)("permeate", 0)


def test_out_of_range_cell_is_configuration_error():
    mesh = _mk_mesh(nx=2, dx=0.1, dy=0.1)
    acc = _filled(mesh, [1e-7, 1e-7], [0.0, 0.0])
    sink = ReactantSinkTerm(mesh, acc)
    with pytest.raises(ConfigurationError) as ei:
        sink("reactant", 2)
    assert "reactant" in str(ei.value)
    with pytest.raises(ConfigurationError):
        sink("reactant", -1)
