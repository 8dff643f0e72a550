"""Tests for the sizing constants table."""

import pytest

from medgas.gases.constants import (
    DEFAULT_CONSTANTS,
    STANDARD_PIPES,
    constants_with_overrides,
    load_constants,
)


def test_cylinder_volumes():
    assert DEFAULT_CONSTANTS.cylinder_volume("oxygen") == 6000
    assert DEFAULT_CONSTANTS.cylinder_volume("co2") == 6000
    assert DEFAULT_CONSTANTS.cylinder_volume("n2o") == 3000


def test_no_cylinder_for_air():
    with pytest.raises(ValueError):
        DEFAULT_CONSTANTS.cylinder_volume("air5")


def test_standard_pipes_ordered():
    bounds = [p.max_inner for p in STANDARD_PIPES]
    assert bounds == sorted(bounds)
    assert len(STANDARD_PIPES) == 8


def test_overrides_replace_values():
    constants = constants_with_overrides({"n2o_cylinder_volume_l": 2500})
    assert constants.n2o_cylinder_volume_l == 2500
    assert constants.oxygen_cylinder_volume_l == 6000


def test_empty_overrides_return_defaults():
    assert constants_with_overrides({}) is DEFAULT_CONSTANTS
    assert constants_with_overrides(None) is DEFAULT_CONSTANTS


def test_unknown_constant():
    with pytest.raises(ValueError, match="Unknown sizing constant"):
        constants_with_overrides({"helium_cylinder_volume_l": 1})


def test_non_positive_constant():
    with pytest.raises(ValueError):
        constants_with_overrides({"pipe_coefficient": 0})


def test_load_constants_from_shipped_config():
    assert load_constants() == DEFAULT_CONSTANTS


def test_to_dict():
    d = DEFAULT_CONSTANTS.to_dict()
    assert d["air8_lpm_per_point"] == 350
    assert d["agss_m3h_per_point"] == 3
