"""Core module exports."""

from goxref.core.errors import (
    ConfigError,
    ErrorCode,
    GoXrefError,
    ImportFailure,
    InternalError,
    ParseError,
)
from goxref.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "GoXrefError",
    "ImportFailure",
    "InternalError",
    "ParseError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
