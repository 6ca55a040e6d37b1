"""Core module - configuration and logging."""

from mantras.core.config import Settings, clear_settings_cache, get_settings
from mantras.core.logging import configure_logging

__all__ = [
    "Settings",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
]
