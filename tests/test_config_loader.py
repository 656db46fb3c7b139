# tests/test_config_loader.py
import json

import pytest

from vapormem.config_loader import ScalarRegistry, check_cfg, load_cfg
from vapormem.core.errors import ConfigurationError


def _minimal():
    return {
        "mesh": {"nx": 2, "ny": 1, "dx": 0.01, "dy": 0.01},
        "materials": {"reactant": [["h2o", 18.0]], "permeate": [["h2o", 18.0]]},
        "zones": {"reactant": {"Y": [1.0]}, "permeate": {"Y": [1.0]}},
        "run": {},
    }


def test_defaults_filled(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps(_minimal()), encoding="utf-8")
    cfg = load_cfg(p)

    assert cfg["scalars"]["operating-pressure"] == 101325.0
    assert cfg["membrane"]["permeance"] == 1e-5
    assert cfg["membrane"]["tracked_species_index"] == 0
    assert cfg["membrane"]["udm_zones"] == ["reactant", "permeate"]
    assert cfg["iterate"]["n_iter"] > 0
    assert cfg["run"]["output_dir"]


@pytest.mark.parametrize("section", ["mesh", "materials", "zones", "run"])
def test_missing_section_rejected(section):
    data = _minimal()
    del data[section]
    with pytest.raises(ConfigurationError):
        check_cfg(data)


def test_bad_values_rejected():
    data = _minimal()
    data["membrane"] = {"permeance": 0.0}
    with pytest.raises(ConfigurationError):
        check_cfg(data)

    data = _minimal()
    data["mesh"]["dx"] = -1.0
    with pytest.raises(ConfigurationError):
        check_cfg(data)


def test_scalar_registry_read_only_lookup():
    reg = ScalarRegistry({"operating-pressure": 101325})
    assert reg.get_real("operating-pressure") == 101325.0
    assert "operating-pressure" in reg
    with pytest.raises(ConfigurationError):
        reg.get_real("reference-temperature")


def test_save_every_must_be_positive():
    data = _minimal()
    data["iterate"] = {"save_every": 0}
    with pytest.raises(ConfigurationError):
        check_cfg(data)


@pytest.mark.parametrize("key", ["nx", "ny", "dx", "dy"])
def test_missing_mesh_key_is_configuration_error(key):
    data = _minimal()
    del data["mesh"][key]
    with pytest.raises(ConfigurationError) as ei:
        check_cfg(data)
    assert key in str(ei.value)
