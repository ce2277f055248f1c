"""Config module exports."""

from goxref.config.loader import GoXrefSettings, load_config
from goxref.config.models import (
    GoXrefConfig,
    ImportConfig,
    LoggingConfig,
    XrefConfig,
)

__all__ = [
    "load_config",
    "GoXrefConfig",
    "GoXrefSettings",
    "ImportConfig",
    "LoggingConfig",
    "XrefConfig",
]
