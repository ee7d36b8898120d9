from pathlib import Path

from grocer.utilities.config import STORAGE_DIR as _CONFIGURED_STORAGE_DIR

# Centralized path for device-local data (single source of truth)
STORAGE_DIR = Path(_CONFIGURED_STORAGE_DIR).resolve()

__all__ = ['STORAGE_DIR']
