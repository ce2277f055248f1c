"""Run driver: check a package, then walk it.

Usage::

    errors = iterate_xrefs("example.com/p", files, lambda x: print(x) or True)

    runner = XrefRunner(config)
    records, errors = runner.run_directory("src/example.com/p")
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from pathlib import Path

import structlog

from goxref.check.checker import Checker, CheckError, Importer
from goxref.check.importer import SourceImporter
from goxref.config.models import GoXrefConfig
from goxref.core.errors import ImportFailure
from goxref.core.logging import set_run_id
from goxref.syntax import ast
from goxref.syntax.parser import GoParser
from goxref.xref.context import ResolutionContext
from goxref.xref.models import CrossReference
from goxref.xref.resolver import ConstantPositions, DiagnosticSink, Resolver, Visit
from goxref.xref.walker import Walker

log = structlog.get_logger(__name__)


def iterate_xrefs(
    import_path: str,
    files: Sequence[ast.File],
    visit: Visit,
    *,
    importer: Importer | None = None,
    sink: DiagnosticSink | None = None,
    constant_positions: ConstantPositions = "oracle",
    src_dir: str | None = None,
) -> list[CheckError]:
    """Stream the cross-references of one package to ``visit``.

    Files are sorted by filename, checked together, then walked in that
    order. Iteration stops early when ``visit`` returns False.

    Returns:
        The checker's soft errors, possibly empty.
    """
    ordered = sorted(files, key=lambda f: f.filename)
    context = ResolutionContext()
    pkg, errors = Checker(importer).check(import_path, ordered, context, src_dir=src_dir)
    context.package = pkg
    resolver = Resolver(context, visit, sink=sink, constant_positions=constant_positions)
    Walker(resolver).walk_files(ordered)
    return errors


def collect_xrefs(
    import_path: str,
    files: Sequence[ast.File],
    **kwargs: object,
) -> tuple[list[CrossReference], list[CheckError]]:
    """Like ``iterate_xrefs`` but gathers every record into a list."""
    records: list[CrossReference] = []

    def visit(xref: CrossReference) -> bool:
        records.append(xref)
        return True

    errors = iterate_xrefs(import_path, files, visit, **kwargs)  # type: ignore[arg-type]
    return records, errors


class XrefRunner:
    """Runs cross-referencing over files on disk with shared configuration.

    One runner keeps one ``SourceImporter``, so packages imported by several
    runs are loaded once.
    """

    def __init__(
        self,
        config: GoXrefConfig | None = None,
        *,
        importer: SourceImporter | None = None,
        parser: GoParser | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.config = config or GoXrefConfig()
        self.parser = parser or GoParser()
        self.importer = importer or SourceImporter(
            self.config.imports.search_paths,
            use_go_env=self.config.imports.use_go_env,
            parser=self.parser,
        )
        self.sink = sink

    def run(
        self,
        import_path: str,
        files: Sequence[ast.File],
        visit: Visit | None = None,
        *,
        src_dir: str | None = None,
    ) -> tuple[list[CrossReference], list[CheckError]]:
        """Cross-reference parsed files.

        With ``visit`` given, records are streamed to it and the returned
        list is empty.
        """
        run_id = set_run_id()
        records: list[CrossReference] = []
        count = 0

        def consume(xref: CrossReference) -> bool:
            nonlocal count
            count += 1
            if visit is not None:
                return visit(xref)
            records.append(xref)
            return True

        log.info("xref_run_started", run_id=run_id, import_path=import_path, files=len(files))
        start = time.perf_counter()
        errors = iterate_xrefs(
            import_path,
            files,
            consume,
            importer=self.importer,
            sink=self.sink,
            constant_positions=self.config.xref.constant_positions,
            src_dir=src_dir,
        )
        log.info(
            "xref_run_finished",
            run_id=run_id,
            import_path=import_path,
            files=len(files),
            records=count,
            errors=len(errors),
            elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return records, errors

    def run_files(
        self,
        paths: Sequence[str | Path],
        import_path: str = "",
        visit: Visit | None = None,
    ) -> tuple[list[CrossReference], list[CheckError]]:
        """Parse ``paths`` from disk and cross-reference them as one package."""
        files = [self.parser.parse_file(p) for p in paths]
        src_dir = str(Path(paths[0]).resolve().parent) if paths else None
        return self.run(import_path, files, visit, src_dir=src_dir)

    def run_directory(
        self,
        directory: str | Path,
        import_path: str | None = None,
        visit: Visit | None = None,
    ) -> tuple[list[CrossReference], list[CheckError]]:
        """Cross-reference the package in ``directory``.

        When ``import_path`` is omitted it is derived from the directory's
        location under a search root, or falls back to the package name.

        Raises:
            ImportFailure: The directory holds no Go files.
        """
        directory = Path(directory).resolve()
        parsed = self.parser.parse_dir(
            directory, include_tests=self.config.xref.include_test_files
        )
        if not parsed:
            raise ImportFailure.no_package(import_path or directory.name, str(directory))
        # A directory may hold pkg and pkg_test; cross-reference the first
        # non-test package.
        names = sorted(parsed)
        name = next((n for n in names if not n.endswith("_test")), names[0])
        if import_path is None:
            import_path = self.importer.import_path_for(directory) or name
        return self.run(import_path, parsed[name], visit, src_dir=str(directory))
