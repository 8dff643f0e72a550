"""
Configuration management for medgas.

Loads config.yaml and provides type-safe access to settings.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional

# Config file lives alongside the medgas package
_PACKAGE_DIR = Path(__file__).parent.parent.resolve()
CONFIG_PATH = _PACKAGE_DIR / "config.yaml"

# Cache for loaded config
_config_cache: Optional[Dict[str, Any]] = None


def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Load configuration from config.yaml.

    Args:
        reload: Force reload even if cached

    Returns:
        Configuration dictionary
    """
    global _config_cache

    if _config_cache is not None and not reload:
        return _config_cache

    if not CONFIG_PATH.exists():
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        _config_cache = yaml.safe_load(f) or {}

    return _config_cache


def get_config_value(*keys: str, default: Any = None) -> Any:
    """
    Get a nested config value safely.

    Args:
        *keys: Path of keys to traverse (e.g., 'catalog', 'path')
        default: Value to return if key not found

    Example:
        level = get_config_value('logging', 'level', default='INFO')
    """
    config = get_config()

    for key in keys:
        if isinstance(config, dict) and key in config:
            config = config[key]
        else:
            return default

    return config


def load_yaml_file(path: Path) -> Any:
    """Read a YAML (or JSON, which is valid YAML) document from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class MedgasPaths:
    """
    Centralized path access for medgas.

    Relative paths in config.yaml resolve under the package directory.

    Usage:
        from medgas.core.config import MEDGAS_PATHS
        catalog = MEDGAS_PATHS.catalog
    """

    def __init__(self):
        self._config = None

    def _ensure_config(self):
        if self._config is None:
            self._config = get_config()

    @staticmethod
    def _resolve(raw: str) -> Path:
        path = Path(raw)
        if not path.is_absolute():
            path = _PACKAGE_DIR / path
        return path

    @property
    def catalog(self) -> Path:
        self._ensure_config()
        raw = (self._config.get("catalog") or {}).get("path") or "data/rooms.yaml"
        return self._resolve(raw)

    @property
    def config_dir(self) -> Path:
        return _PACKAGE_DIR


# Singleton instance
MEDGAS_PATHS = MedgasPaths()
