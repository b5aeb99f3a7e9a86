"""Core utilities and configuration exports."""

from .config import HoistConfig, HoistConfigError, load_hoist_config
from .constants import CONFIG_FILE, DEPENDENCY_DIR, MANIFEST_FILE, STORE_DIR

__all__ = [
    "CONFIG_FILE",
    "DEPENDENCY_DIR",
    "MANIFEST_FILE",
    "STORE_DIR",
    "HoistConfig",
    "HoistConfigError",
    "load_hoist_config",
]
