"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (GOXREF__SECTION__KEY)
3. Project YAML (.goxref.yaml)
4. Global YAML (~/.config/goxref/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    GOXREF__<SECTION>__<KEY>=<VALUE>

Examples:
    GOXREF__LOGGING__LEVEL=DEBUG
    GOXREF__XREF__CONSTANT_POSITIONS=skip
    GOXREF__IMPORTS__USE_GO_ENV=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        GOXREF__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG includes one event per skipped identifier.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class XrefConfig(BaseModel):
    """Cross-reference engine configuration.

    Env vars:
        GOXREF__XREF__CONSTANT_POSITIONS: "oracle" or "skip"
        GOXREF__XREF__INCLUDE_TEST_FILES: Include *_test.go files of a directory
    """

    constant_positions: Literal["oracle", "skip"] = Field(
        default="oracle",
        description="How constant declarations are treated. 'oracle' trusts the "
        "checker's positions; 'skip' drops every non-universe constant, matching "
        "checkers known to under-report constant positions.",
    )
    include_test_files: bool = Field(
        default=False,
        description="Include *_test.go files when loading a directory.",
    )


class ImportConfig(BaseModel):
    """Package loading configuration.

    Env vars:
        GOXREF__IMPORTS__SEARCH_PATHS: JSON list of GOPATH-style roots
        GOXREF__IMPORTS__USE_GO_ENV: Also search $GOPATH and $GOROOT
    """

    search_paths: list[str] = Field(
        default_factory=list,
        description="Roots searched for imported packages, as <root>/src/<path> "
        "or <root>/<path>.",
    )
    use_go_env: bool = Field(
        default=True,
        description="Append $GOPATH entries and $GOROOT to the search paths.",
    )


class GoXrefConfig(BaseModel):
    """Root configuration for goxref.

    All settings can be configured via:
    1. Environment variables: GOXREF__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    xref: XrefConfig = Field(default_factory=XrefConfig)
    imports: ImportConfig = Field(default_factory=ImportConfig)
