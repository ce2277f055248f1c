"""Tests for the tree-sitter based Go parser."""

from __future__ import annotations

from pathlib import Path

import pytest

from goxref.core.errors import ErrorCode, ParseError
from goxref.syntax import ast
from goxref.syntax.parser import GoParser, parse_dir, parse_file


@pytest.fixture
def parser() -> GoParser:
    return GoParser()


class TestParseFile:
    """Parsing single files."""

    def test_given_source_when_parsed_then_package_name_and_decls(self, parser: GoParser) -> None:
        # Given
        src = "package p\n\nvar A string\n\nfunc F() {}\n"

        # When
        f = parser.parse_file("p.go", src)

        # Then
        assert f.filename == "p.go"
        assert f.name.name == "p"
        assert [type(d).__name__ for d in f.decls] == ["GenDecl", "FuncDecl"]
        spec = f.decls[0].specs[0]
        assert isinstance(spec, ast.ValueSpec)
        assert [n.name for n in spec.names] == ["A"]
        assert isinstance(spec.type, ast.Ident) and spec.type.name == "string"

    def test_given_identifier_when_parsed_then_position_is_one_based(self, parser: GoParser) -> None:
        """Lines and columns count from 1; offsets from 0."""
        f = parser.parse_file("p.go", "package p\nvar A int\n")

        name = f.decls[0].specs[0].names[0]

        assert (name.pos.line, name.pos.column) == (2, 5)
        assert name.pos.offset == len("package p\nvar ")
        assert name.pos.filename == "p.go"

    def test_given_imports_when_parsed_then_specs_collected(self, parser: GoParser) -> None:
        """Grouped and named imports are both recorded."""
        # Given
        src = 'package p\nimport (\n\t"fmt"\n\tf "flag"\n\t. "errors"\n)\n'

        # When
        f = parser.parse_file("p.go", src)

        # Then
        assert [s.import_path for s in f.imports] == ["fmt", "flag", "errors"]
        assert [s.name.name if s.name else None for s in f.imports] == [None, "f", "."]

    def test_given_method_when_parsed_then_receiver_kept(self, parser: GoParser) -> None:
        f = parser.parse_file("p.go", "package p\ntype T int\nfunc (t *T) M(x int) {}\n")

        decl = f.decls[1]

        assert isinstance(decl, ast.FuncDecl)
        assert decl.name.name == "M"
        [recv] = decl.recv.list
        assert [n.name for n in recv.names] == ["t"]
        assert isinstance(recv.type, ast.StarExpr)

    def test_given_bytes_when_parsed_then_same_as_text(self, parser: GoParser) -> None:
        text = parser.parse_file("p.go", "package p\nvar A = 1\n")
        raw = parser.parse_file("p.go", b"package p\nvar A = 1\n")

        assert text.name.name == raw.name.name
        assert len(text.decls) == len(raw.decls)

    def test_given_syntax_error_when_strict_then_raises(self, parser: GoParser) -> None:
        """Strict mode refuses damaged input."""
        # Given
        src = "package p\nfunc F( {\n"

        # When / Then
        with pytest.raises(ParseError) as exc_info:
            parser.parse_file("bad.go", src, strict=True)
        assert exc_info.value.code == ErrorCode.PARSE_SYNTAX_ERROR
        assert exc_info.value.details["filename"] == "bad.go"

    def test_given_syntax_error_when_tolerant_then_file_returned(self, parser: GoParser) -> None:
        """Tolerant mode keeps what it can."""
        f = parser.parse_file("bad.go", "package p\nvar A = \nvar B int\n")

        assert f.name.name == "p"

    def test_given_no_package_clause_when_parsed_then_raises(self, parser: GoParser) -> None:
        with pytest.raises(ParseError):
            parser.parse_file("empty.go", "")

    def test_given_missing_file_when_parsed_then_unreadable(self, parser: GoParser, tmp_path: Path) -> None:
        with pytest.raises(ParseError) as exc_info:
            parser.parse_file(tmp_path / "missing.go")
        assert exc_info.value.code == ErrorCode.PARSE_UNREADABLE_FILE

    def test_given_file_on_disk_when_parsed_then_read(self, tmp_path: Path) -> None:
        """The module-level helper reads from disk."""
        path = tmp_path / "a.go"
        path.write_text("package a\n")

        f = parse_file(path)

        assert f.name.name == "a"
        assert f.filename == str(path)


class TestParseDir:
    """Parsing package directories."""

    def test_given_directory_when_parsed_then_grouped_by_package(self, tmp_path: Path) -> None:
        # Given
        (tmp_path / "b.go").write_text("package p\n")
        (tmp_path / "a.go").write_text("package p\n")
        (tmp_path / "x_test.go").write_text("package p_test\n")
        (tmp_path / "notes.txt").write_text("package q\n")

        # When
        pkgs = parse_dir(tmp_path)

        # Then
        assert list(pkgs) == ["p"]
        assert [Path(f.filename).name for f in pkgs["p"]] == ["a.go", "b.go"]

    def test_given_include_tests_when_parsed_then_test_package_present(self, tmp_path: Path) -> None:
        (tmp_path / "a.go").write_text("package p\n")
        (tmp_path / "x_test.go").write_text("package p_test\n")

        pkgs = parse_dir(tmp_path, include_tests=True)

        assert sorted(pkgs) == ["p", "p_test"]

    def test_given_empty_directory_when_parsed_then_empty(self, tmp_path: Path) -> None:
        assert parse_dir(tmp_path) == {}
