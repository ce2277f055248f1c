"""Tests for the goxref CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from goxref import __version__
from goxref.cli.main import cli

runner = CliRunner()


@pytest.fixture
def package_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A one-file package; the working directory has no config file."""
    monkeypatch.chdir(tmp_path)
    pkg = tmp_path / "p"
    pkg.mkdir()
    (pkg / "p.go").write_text("package p\n\nconst C = 1\n\nvar A string\n")
    return pkg


class TestGroup:
    """Top-level group behavior."""

    def test_given_version_flag_when_invoked_then_prints_version(self) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"goxref, version {__version__}" in result.output

    def test_given_no_command_when_invoked_then_lists_commands(self) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "xrefs" in result.output
        assert "check" in result.output


class TestXrefsCommand:
    """goxref xrefs."""

    def test_given_package_dir_when_xrefs_then_json_line_per_record(self, package_dir: Path) -> None:
        # Given
        args = ["xrefs", str(package_dir)]

        # When
        result = runner.invoke(cli, args)

        # Then
        assert result.exit_code == 0, result.output
        records = [json.loads(line) for line in result.stdout.splitlines()]
        assert [r["expr"] for r in records] == ["p", "C", "A", "string"]
        assert records[2]["decl"] is True
        assert records[3]["universe"] is True
        assert records[3]["refer_pos"] is None

    def test_given_json_flag_when_xrefs_then_single_document(self, package_dir: Path) -> None:
        result = runner.invoke(cli, ["xrefs", "--json", "--indent", "2", str(package_dir)])

        assert result.exit_code == 0, result.output
        doc = json.loads(result.stdout)
        assert set(doc) == {"xrefs", "errors"}
        assert len(doc["xrefs"]) == 4
        assert doc["errors"] == []

    def test_given_skip_constants_when_xrefs_then_constants_omitted(self, package_dir: Path) -> None:
        """--constant-positions skip drops constants and reports them."""
        result = runner.invoke(cli, ["xrefs", "--constant-positions", "skip", str(package_dir)])

        assert result.exit_code == 0, result.output
        exprs = [json.loads(line)["expr"] for line in result.stdout.splitlines()]
        assert exprs == ["p", "A", "string"]
        assert "skipping constant C" in result.stderr

    def test_given_files_when_xrefs_then_import_path_applied(self, package_dir: Path) -> None:
        result = runner.invoke(
            cli, ["xrefs", "--import-path", "example.com/p", str(package_dir / "p.go")]
        )

        assert result.exit_code == 0, result.output
        first = json.loads(result.stdout.splitlines()[0])
        assert first["package"] == "example.com/p"

    def test_given_search_path_when_xrefs_then_imports_resolved(self, testdata: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Imported members resolve into the search root."""
        # Given
        monkeypatch.chdir(tmp_path)
        args = ["xrefs", "--search-path", str(testdata), str(testdata / "src" / "foo")]

        # When
        result = runner.invoke(cli, args)

        # Then
        assert result.exit_code == 0, result.output
        records = [json.loads(line) for line in result.stdout.splitlines()]
        origin = next(r for r in records if r["expr"] == "bar.Origin")
        assert origin["refer_package"] == "bar"
        assert origin["package"] == "foo"

    def test_given_dot_import_when_xrefs_then_diagnostic_on_stderr(self, package_dir: Path) -> None:
        (package_dir / "p.go").write_text('package p\n\nimport . "strings"\n\nvar A = 1\n')

        result = runner.invoke(cli, ["xrefs", str(package_dir)])

        assert result.exit_code == 0
        assert len(result.stdout.splitlines()) == 1
        assert "import to . not supported" in result.stderr

    def test_given_directory_and_file_when_xrefs_then_usage_error(self, package_dir: Path) -> None:
        result = runner.invoke(cli, ["xrefs", str(package_dir), str(package_dir / "p.go")])

        assert result.exit_code == 2
        assert "is a directory" in result.output

    def test_given_empty_directory_when_xrefs_then_error(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, ["xrefs", str(tmp_path)])

        assert result.exit_code == 1
        assert "IMPORT_NO_PACKAGE" in result.output

    def test_given_missing_path_when_xrefs_then_usage_error(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["xrefs", str(tmp_path / "nope")])

        assert result.exit_code == 2


class TestCheckCommand:
    """goxref check."""

    def test_given_valid_package_when_check_then_ok(self, package_dir: Path) -> None:
        result = runner.invoke(cli, ["check", str(package_dir)])

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "p: ok"

    def test_given_type_errors_when_check_then_listed_and_exit_one(self, package_dir: Path) -> None:
        # Given
        (package_dir / "p.go").write_text("package p\n\nvar A = Missing\n")

        # When
        result = runner.invoke(cli, ["check", str(package_dir)])

        # Then
        assert result.exit_code == 1
        assert "undefined: Missing" in result.stdout
        assert "p.go:3:9" in result.stdout

    def test_given_json_flag_when_check_then_document(self, package_dir: Path) -> None:
        (package_dir / "p.go").write_text("package p\n\nvar A = Missing\n")

        result = runner.invoke(cli, ["check", "--json", "--import-path", "example/p", str(package_dir)])

        assert result.exit_code == 1
        doc = json.loads(result.stdout)
        assert doc["package"] == "example/p"
        [err] = doc["errors"]
        assert err["message"] == "undefined: Missing"
        assert err["pos"]["line"] == 3

    def test_given_empty_directory_when_check_then_error(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, ["check", str(tmp_path)])

        assert result.exit_code == 1
        assert "no Go files" in result.output

    def test_given_invalid_project_config_when_invoked_then_error(self, package_dir: Path) -> None:
        """A broken .goxref.yaml is reported, not raised."""
        Path(".goxref.yaml").write_text("xref:\n  constant_positions: sometimes\n")

        result = runner.invoke(cli, ["check", str(package_dir)])

        assert result.exit_code == 1
        assert "CONFIG_INVALID_VALUE" in result.output
