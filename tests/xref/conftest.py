"""Shared helpers for cross-reference tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from goxref.check.importer import SourceImporter
from goxref.syntax.parser import GoParser
from goxref.xref.driver import collect_xrefs
from goxref.xref.models import CrossReference

_parser = GoParser()

XrefsFn = Callable[..., tuple[list[CrossReference], list[tuple[object, str]]]]


@pytest.fixture
def importer(testdata: Path) -> SourceImporter:
    return SourceImporter([testdata], use_go_env=False)


@pytest.fixture
def xrefs(importer: SourceImporter) -> XrefsFn:
    """Cross-reference in-memory sources.

    Call with one source, or with ``(filename, source)`` pairs for several
    files. Returns the records and the diagnostics sent to the sink.
    """

    def run(*sources: str | tuple[str, str], **kwargs: object):
        files = []
        for i, src in enumerate(sources):
            name, text = src if isinstance(src, tuple) else (f"p{i}.go", src)
            files.append(_parser.parse_file(name, text))
        diagnostics: list[tuple[object, str]] = []
        records, _ = collect_xrefs(
            "p",
            files,
            importer=importer,
            sink=lambda pos, msg: diagnostics.append((pos, msg)),
            **kwargs,
        )
        return records, diagnostics

    return run
