"""
Shared test fixtures for medgas.

Provides a small self-contained room catalog, the shipped default catalog,
selection files on disk and a CLI runner.
"""

import pytest
import yaml

from medgas.gases.registry import catalog_from_dicts, default_catalog


SAMPLE_ROOMS = [
    {
        "key": "operating",
        "name": "Operating rooms",
        "gases": {
            "oxygen": {"flow_rate": 20, "hours_per_day": 5, "usage_factor": 0.7},
            "n2o": {"flow_rate": 6, "hours_per_day": 5, "usage_factor": 0.7},
            "co2": {"flow_rate": 13, "hours_per_day": 1},
            "air5": {"flow_rate": 60, "usage_factor": 0.7},
            "air8": {"flow_rate": 60, "usage_factor": 0.7},
            "agss": {},
            "vacuum": {"flow_rate": 40, "usage_factor": 0.7},
        },
    },
    {
        "key": "ward",
        "name": "General wards",
        "gases": {
            "oxygen": {"flow_rate": 8, "hours_per_day": 24, "usage_factor": 0.5},
            "vacuum": {"flow_rate": 20, "usage_factor": 0.3},
        },
    },
]


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def catalog():
    """Two-room catalog: a critical operating room and a non-critical ward."""
    return catalog_from_dicts(SAMPLE_ROOMS)


@pytest.fixture
def rooms_default():
    """The catalog shipped in medgas/data/rooms.yaml."""
    return default_catalog(reload=True)


@pytest.fixture
def operating_selection():
    """Ten oxygen points in the operating room: 42000 l/day."""
    return {"operating": {"oxygen": 10}}


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "rooms.yaml"
    path.write_text(yaml.safe_dump({"rooms": SAMPLE_ROOMS}), encoding="utf-8")
    return path


@pytest.fixture
def write_selection(tmp_path):
    """Write a selection mapping to a YAML file and return its path."""

    def _write(selection, name="selection.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(selection), encoding="utf-8")
        return path

    return _write
