"""
medgas Core - Shared services for all modules.

Usage:
    from medgas.core import get_config, get_logger, MEDGAS_PATHS
"""

from medgas.core.config import get_config, get_config_value, MEDGAS_PATHS
from medgas.core.logging import get_logger

__all__ = [
    "get_config",
    "get_config_value",
    "MEDGAS_PATHS",
    "get_logger",
]
