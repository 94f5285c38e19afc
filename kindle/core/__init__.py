"""Core module - configuration, logging and errors."""

from kindle.core.config import Settings, clear_settings_cache, get_settings
from kindle.core.errors import (
    CompileError,
    DiscoveryError,
    KindleError,
    ScanCancelledError,
    SetupFailedError,
    Throw,
    UnknownTaskError,
)
from kindle.core.logging import configure_logging

__all__ = [
    "CompileError",
    "DiscoveryError",
    "KindleError",
    "ScanCancelledError",
    "Settings",
    "SetupFailedError",
    "Throw",
    "UnknownTaskError",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
]
