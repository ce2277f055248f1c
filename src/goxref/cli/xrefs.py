"""goxref xrefs command - print cross-references of a package."""

from pathlib import Path

import click

from goxref.cli.output import xref_lines, xrefs_document
from goxref.cli.utils import load_cli_config
from goxref.core.errors import GoXrefError
from goxref.xref.driver import XrefRunner


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output one JSON document")
@click.option("--indent", type=int, default=None, help="Indentation for --json output")
@click.option("--import-path", default=None, help="Import path of the package")
@click.option(
    "--search-path",
    "search_paths",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="GOPATH-style root for imports (repeatable)",
)
@click.option(
    "--constant-positions",
    type=click.Choice(["oracle", "skip"]),
    default=None,
    help="Trust checker positions for constants, or skip constants",
)
@click.option("--include-tests", is_flag=True, help="Include *_test.go files")
def xrefs_command(
    paths: tuple[Path, ...],
    as_json: bool,
    indent: int | None,
    import_path: str | None,
    search_paths: tuple[Path, ...],
    constant_positions: str | None,
    include_tests: bool,
) -> None:
    """Print the cross-references of one Go package.

    PATHS is a package directory or the .go files of one package.
    """
    config = load_cli_config(
        search_paths=search_paths,
        constant_positions=constant_positions,
        include_tests=include_tests or None,
    )

    def sink(pos: object, msg: str) -> None:
        click.echo(f"{pos or '-'}: {msg}", err=True)

    runner = XrefRunner(config, sink=sink)
    try:
        if len(paths) == 1 and paths[0].is_dir():
            records, errors = runner.run_directory(paths[0], import_path)
        else:
            dirs = [p for p in paths if p.is_dir()]
            if dirs:
                raise click.UsageError(f"'{dirs[0]}' is a directory; pass one directory or files")
            records, errors = runner.run_files(list(paths), import_path or "")
    except GoXrefError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(xrefs_document(records, errors, indent=indent))
        return
    for line in xref_lines(records):
        click.echo(line)
    for err in errors:
        click.echo(f"{err}", err=True)
