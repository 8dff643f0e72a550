"""Tests for config.yaml loading and path resolution."""

import pytest

from medgas.core import config
from medgas.core.config import (
    MEDGAS_PATHS,
    MedgasPaths,
    get_config,
    get_config_value,
    load_yaml_file,
)


def test_get_config_reads_shipped_file():
    cfg = get_config(reload=True)
    assert "logging" in cfg
    assert cfg["output"]["format"] == "human"


def test_get_config_is_cached():
    assert get_config() is get_config()


def test_get_config_value_nested():
    assert get_config_value("catalog", "path") == "data/rooms.yaml"


def test_get_config_value_missing_returns_default():
    assert get_config_value("nope", "missing", default=42) == 42


def test_get_config_missing_file(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "absent.yaml")
    monkeypatch.setattr(config, "_config_cache", None)
    with pytest.raises(FileNotFoundError):
        get_config()


def test_load_yaml_file_reads_json(tmp_path):
    path = tmp_path / "selection.json"
    path.write_text('{"operating": {"oxygen": 2}}', encoding="utf-8")
    assert load_yaml_file(path) == {"operating": {"oxygen": 2}}


def test_load_yaml_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_file(tmp_path / "nothing.yaml")


class TestPaths:
    def test_catalog_resolves_under_package(self):
        path = MEDGAS_PATHS.catalog
        assert path.is_absolute()
        assert path.name == "rooms.yaml"
        assert path.exists()

    def test_absolute_catalog_path_kept(self, tmp_path):
        paths = MedgasPaths()
        paths._config = {"catalog": {"path": str(tmp_path / "custom.yaml")}}
        assert paths.catalog == tmp_path / "custom.yaml"
