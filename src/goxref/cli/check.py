"""goxref check command - type-check a package and list its errors."""

import json
from pathlib import Path

import click

from goxref.check.checker import Checker
from goxref.check.importer import SourceImporter
from goxref.cli.output import check_error_dict
from goxref.cli.utils import load_cli_config
from goxref.core.errors import GoXrefError
from goxref.syntax.parser import GoParser


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--import-path", default=None, help="Import path of the package")
@click.option(
    "--search-path",
    "search_paths",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="GOPATH-style root for imports (repeatable)",
)
def check_command(
    path: Path, as_json: bool, import_path: str | None, search_paths: tuple[Path, ...]
) -> None:
    """Type-check the Go package in PATH.

    Exits with status 1 when the checker reports errors.
    """
    config = load_cli_config(search_paths=search_paths)
    parser = GoParser()
    importer = SourceImporter(
        config.imports.search_paths, use_go_env=config.imports.use_go_env, parser=parser
    )
    directory = path.resolve()
    try:
        parsed = parser.parse_dir(directory, include_tests=config.xref.include_test_files)
        if not parsed:
            raise click.ClickException(f"no Go files in {directory}")
        name = next((n for n in sorted(parsed) if not n.endswith("_test")), sorted(parsed)[0])
        pkg_path = import_path or importer.import_path_for(directory) or name
        pkg, errors = Checker(importer).check(pkg_path, parsed[name], src_dir=str(directory))
    except GoXrefError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(
            json.dumps(
                {
                    "package": pkg.path,
                    "errors": [check_error_dict(e) for e in errors],
                }
            )
        )
    else:
        for err in errors:
            click.echo(str(err))
        if not errors:
            click.echo(f"{pkg.path}: ok")
    if errors:
        raise SystemExit(1)
