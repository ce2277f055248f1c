"""Tests for the run driver and XrefRunner."""

from __future__ import annotations

from pathlib import Path

import pytest

from goxref.config.models import GoXrefConfig, ImportConfig, XrefConfig
from goxref.core.errors import ErrorCode, ImportFailure
from goxref.core.logging import clear_run_id, get_run_id
from goxref.syntax.parser import GoParser
from goxref.syntax.printer import pretty
from goxref.xref.driver import XrefRunner, collect_xrefs, iterate_xrefs
from goxref.xref.models import CrossReference


def _config(testdata: Path, **xref: object) -> GoXrefConfig:
    return GoXrefConfig(
        imports=ImportConfig(search_paths=[str(testdata)], use_go_env=False),
        xref=XrefConfig(**xref),
    )


def _summary(records: list[CrossReference]) -> list[tuple[str, str]]:
    return [(pretty(x.expr), str(x.pos)) for x in records]


class TestIterateXrefs:
    """Streaming over parsed files."""

    def test_given_unsorted_files_when_iterated_then_walked_in_name_order(self) -> None:
        """Files are processed sorted by filename."""
        # Given
        parser = GoParser()
        b = parser.parse_file("b.go", "package p\nvar B = 1\n")
        a = parser.parse_file("a.go", "package p\nvar A = B\n")

        # When
        records, errors = collect_xrefs("p", [b, a])

        # Then
        assert errors == []
        assert [x.file.filename for x in records] == ["a.go"] * 3 + ["b.go"] * 2
        use_of_b = records[2]
        assert use_of_b.name == "B"
        assert use_of_b.refer_pos.filename == "b.go"
        assert not use_of_b.is_decl

    def test_given_same_input_when_run_twice_then_identical_sequences(self) -> None:
        """Output order is deterministic."""
        # Given
        parser = GoParser()
        files = [
            parser.parse_file("z.go", "package p\nfunc Z() int { return Y }\n"),
            parser.parse_file("y.go", "package p\nvar Y = 2\ntype T struct{ Y int }\n"),
        ]

        # When
        first, _ = collect_xrefs("p", files)
        second, _ = collect_xrefs("p", list(reversed(files)))

        # Then
        assert _summary(first) == _summary(second)

    def test_given_consumer_declines_when_iterated_then_stops_immediately(self) -> None:
        """Returning False from the consumer ends the run."""
        # Given
        parser = GoParser()
        f = parser.parse_file("p.go", "package p\nvar A, B, C int\n")
        seen: list[str] = []

        def visit(xref: CrossReference) -> bool:
            seen.append(xref.name)
            return len(seen) < 2

        # When
        iterate_xrefs("p", [f], visit)

        # Then
        assert seen == ["p", "A"]

    def test_given_skip_mode_when_iterated_then_constants_dropped(self) -> None:
        """Skip mode reproduces the constant workaround."""
        parser = GoParser()
        f = parser.parse_file("p.go", "package p\nconst C = 1\nconst Zero = 0\nvar A = C + Zero\n")

        oracle, _ = collect_xrefs("p", [f])
        skipped, _ = collect_xrefs("p", [f], constant_positions="skip")

        assert [x.name for x in oracle].count("C") == 2
        assert "C" not in [x.name for x in skipped]
        assert "Zero" not in [x.name for x in skipped]

    def test_given_check_errors_when_iterated_then_returned_and_walk_continues(self) -> None:
        """Soft checker errors do not prevent cross-referencing."""
        parser = GoParser()
        f = parser.parse_file("p.go", "package p\nvar A int = \"s\"\nvar B = Undefined\n")

        records, errors = collect_xrefs("p", [f])

        assert any("undefined: Undefined" in e.msg for e in errors)
        assert [x.name for x in records][:3] == ["p", "A", "int"]


class TestXrefRunner:
    """Runs over files on disk."""

    def test_given_package_directory_when_run_then_imports_resolved(self, testdata: Path) -> None:
        """A directory under a search root is checked under its import path."""
        # Given
        runner = XrefRunner(_config(testdata))

        # When
        records, _ = runner.run_directory(testdata / "src" / "foo")

        # Then
        assert {x.package.path for x in records} == {"foo"}
        names = [pretty(x.expr) for x in records]
        assert "bar.Origin" in names
        assert "bar.Point" in names
        assert "p.Scale" in names
        assert "bar.Answer" in names
        scale = records[names.index("p.Scale")]
        assert scale.refer_obj.pkg.path == "bar"
        assert scale.refer_pos.filename.endswith("bar.go")

    def test_given_test_files_excluded_when_run_then_only_regular_files(self, testdata: Path) -> None:
        runner = XrefRunner(_config(testdata))

        records, _ = runner.run_directory(testdata / "src" / "foo")

        files = {Path(x.file.filename).name for x in records}
        assert files == {"foo.go", "util.go"}

    def test_given_test_files_included_when_run_then_test_file_walked(self, testdata: Path) -> None:
        """include_test_files pulls in *_test.go of the same package."""
        runner = XrefRunner(_config(testdata, include_test_files=True))

        records, _ = runner.run_directory(testdata / "src" / "foo")

        files = [Path(x.file.filename).name for x in records]
        assert "foo_test.go" in files
        assert files == sorted(files)

    def test_given_directory_without_go_files_when_run_then_raises(self, testdata: Path) -> None:
        # Given
        runner = XrefRunner(_config(testdata))

        # When / Then
        with pytest.raises(ImportFailure) as exc_info:
            runner.run_directory(testdata / "src" / "empty")
        assert exc_info.value.code == ErrorCode.IMPORT_NO_PACKAGE

    def test_given_files_when_run_files_then_uses_given_import_path(self, testdata: Path) -> None:
        """run_files treats the listed files as one package."""
        runner = XrefRunner(_config(testdata))

        records, _ = runner.run_files([testdata / "src" / "foo" / "util.go"], import_path="example/foo")

        assert [pretty(x.expr) for x in records] == ["foo", "helper", "int", "n", "n"]
        assert records[0].package.path == "example/foo"

    def test_given_visit_callback_when_run_then_records_streamed(self, testdata: Path) -> None:
        """With a callback, records are not collected."""
        runner = XrefRunner(_config(testdata))
        streamed: list[CrossReference] = []

        records, _ = runner.run_files(
            [testdata / "src" / "bar" / "bar.go"],
            import_path="bar",
            visit=lambda x: streamed.append(x) is None,
        )

        assert records == []
        assert streamed
        assert streamed[0].name == "bar"

    def test_given_run_when_finished_then_run_id_is_set(self, testdata: Path) -> None:
        runner = XrefRunner(_config(testdata))
        clear_run_id()

        runner.run_files([testdata / "src" / "bar" / "bar.go"], import_path="bar")

        assert get_run_id() is not None

    def test_given_shared_runner_when_run_twice_then_imports_loaded_once(self, testdata: Path) -> None:
        """Imported packages are cached by the runner's importer."""
        # Given
        runner = XrefRunner(_config(testdata))
        runner.run_directory(testdata / "src" / "foo")
        bar = runner.importer.cached()["bar"]

        # When
        records, _ = runner.run_directory(testdata / "src" / "foo")

        # Then
        scale = next(x for x in records if x.name == "Scale")
        assert scale.refer_obj.pkg is bar
