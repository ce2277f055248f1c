"""CLI utilities."""

from collections.abc import Sequence
from pathlib import Path

import click

from goxref.config.loader import load_config
from goxref.config.models import GoXrefConfig
from goxref.core.errors import ConfigError


def load_cli_config(
    *,
    search_paths: Sequence[Path] = (),
    constant_positions: str | None = None,
    include_tests: bool | None = None,
) -> GoXrefConfig:
    """Load configuration for the current directory and apply CLI overrides.

    Search paths given on the command line are tried before configured ones.

    Raises:
        click.ClickException: If the configuration is invalid
    """
    try:
        config = load_config(Path.cwd())
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if search_paths:
        config.imports.search_paths = [
            *(str(p.resolve()) for p in search_paths),
            *config.imports.search_paths,
        ]
    if constant_positions is not None:
        config.xref.constant_positions = constant_positions  # type: ignore[assignment]
    if include_tests is not None:
        config.xref.include_test_files = include_tests
    return config
