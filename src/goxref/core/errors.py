"""goxref error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Parse
- 4xxx: Check / import
- 9xxx: Internal

Only conditions that stop a whole operation are raised. Problems with single
identifiers during cross-referencing are diagnostics, not exceptions.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Parse (3xxx)
    PARSE_SYNTAX_ERROR = 3001
    PARSE_UNREADABLE_FILE = 3002
    PARSE_GRAMMAR_UNAVAILABLE = 3003

    # Check / import (4xxx)
    IMPORT_NOT_FOUND = 4001
    IMPORT_CYCLE = 4002
    IMPORT_NO_PACKAGE = 4003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class GoXrefError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'IMPORT_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(GoXrefError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class ParseError(GoXrefError):
    """Source could not be turned into a syntax tree."""

    @classmethod
    def syntax_error(cls, filename: str, line: int, column: int) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_SYNTAX_ERROR,
            message=f"{filename}:{line}:{column}: syntax error",
            details={"filename": filename, "line": line, "column": column},
        )

    @classmethod
    def unreadable(cls, filename: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_UNREADABLE_FILE,
            message=f"Cannot read {filename}: {reason}",
            details={"filename": filename, "reason": reason},
        )

    @classmethod
    def grammar_unavailable(cls, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_GRAMMAR_UNAVAILABLE,
            message=f"Go grammar not available: {reason}",
            details={"reason": reason},
        )


class ImportFailure(GoXrefError):
    """An imported package could not be located, parsed or checked."""

    @classmethod
    def not_found(cls, path: str, searched: list[str]) -> "ImportFailure":
        return cls(
            code=ErrorCode.IMPORT_NOT_FOUND,
            message=f"cannot find package {path!r}",
            details={"path": path, "searched": searched},
        )

    @classmethod
    def cycle(cls, path: str) -> "ImportFailure":
        return cls(
            code=ErrorCode.IMPORT_CYCLE,
            message=f"import cycle not allowed: {path!r}",
            details={"path": path},
        )

    @classmethod
    def no_package(cls, path: str, directory: str) -> "ImportFailure":
        return cls(
            code=ErrorCode.IMPORT_NO_PACKAGE,
            message=f"no Go files for package {path!r} in {directory}",
            details={"path": path, "directory": directory},
        )


class InternalError(GoXrefError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
