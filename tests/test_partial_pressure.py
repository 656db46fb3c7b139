# tests/test_partial_pressure.py
import numpy as np
import pytest

from vapormem.core.errors import ConfigurationError, DegenerateMixtureError
from vapormem.core.material import Mixture, Species, mixture_from_cfg
from vapormem.membrane.partial_pressure import mole_fraction, partial_pressure

H2O_CO2 = mixture_from_cfg("reactant", [["h2o", 18.0], ["co2", 44.0]])


def test_single_species_partial_pressure_is_absolute_pressure():
    mix = mixture_from_cfg("pure", [["h2o", 18.0]])
    Y = np.ones((3, 1))
    p = np.array([0.0, 100.0, -50.0])
    pk = partial_pressure(mix, Y, 0, p, 101325.0)
    np.testing.assert_allclose(pk, p + 101325.0)


def test_binary_mole_fraction_matches_hand_value():
    Y = np.array([[0.3, 0.7]])
    n_h2o = 0.3 / 18.0
    n_co2 = 0.7 / 44.0
    x = mole_fraction(H2O_CO2, Y, 0)
    assert x[0] == pytest.approx(n_h2o / (n_h2o + n_co2))

    pk = partial_pressure(H2O_CO2, Y, 0, np.array([1000.0]), 100000.0)
    assert pk[0] == pytest.approx(101000.0 * n_h2o / (n_h2o + n_co2))


def test_partial_pressure_increases_with_tracked_fraction():
    Y = np.array([[0.1, 0.9], [0.2, 0.8], [0.4, 0.6]])
    pk = partial_pressure(H2O_CO2, Y, 0, np.zeros(3), 101325.0)
    assert np.all(np.diff(pk) > 0.0)


def test_all_zero_mass_fractions_fail_loudly():
    Y = np.array([[0.3, 0.7], [0.0, 0.0]])
    with pytest.raises(DegenerateMixtureError) as ei:
        mole_fraction(H2O_CO2, Y, 0, zone="reactant", cells=np.array([7, 9]))
    assert "reactant" in str(ei.value)
    assert "9" in str(ei.value)


def test_tracked_species_missing_is_configuration_error():
    with pytest.raises(ConfigurationError):
        mole_fraction(H2O_CO2, np.array([[0.3, 0.7]]), 2)


def test_non_positive_molecular_weight_rejected():
    with pytest.raises(ConfigurationError):
        Mixture("bad", (Species("h2o", 0.0), Species("n2", 28.0)))
    with pytest.raises(ConfigurationError):
        mixture_from_cfg("bad", [["h2o", -18.0]])
