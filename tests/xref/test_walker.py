"""Tests for the traversal rules of the walker.

Each test cross-references a small in-memory package through the
``xrefs`` fixture, which parses with tree-sitter and checks against the
fixture packages under tests/testdata.
"""

from __future__ import annotations

from collections import defaultdict

import pytest

from goxref.check.objects import Func, PkgName
from goxref.check.typesys import Signature
from goxref.core.errors import ErrorCode, InternalError
from goxref.syntax.printer import pretty
from goxref.xref.context import ResolutionContext
from goxref.xref.models import CrossReference
from goxref.xref.resolver import Resolver
from goxref.xref.walker import Walker


def _exprs(records: list[CrossReference]) -> list[str]:
    return [pretty(x.expr) for x in records]


class TestPackageLevel:
    """Package clauses and package-level declarations."""

    def test_given_package_clause_only_when_walked_then_single_self_reference(self, xrefs) -> None:
        """The package name refers to the package itself."""
        # Given
        src = "package p\n"

        # When
        records, _ = xrefs(src)

        # Then
        [xref] = records
        assert xref.name == "p"
        assert not xref.universe
        assert xref.refer_pos is None
        assert xref.refer_obj is xref.package

    def test_given_typed_var_when_walked_then_package_name_var_and_type(self, xrefs) -> None:
        """var A string yields p, A and string in that order."""
        # Given
        src = "package p\nvar A string\n"

        # When
        records, _ = xrefs(src)

        # Then
        assert _exprs(records) == ["p", "A", "string"]
        p, a, string = records
        assert a.is_decl and not a.universe and not a.local
        assert string.universe and not string.is_decl
        assert string.refer_pos is None

    def test_given_untyped_var_when_walked_then_inferred_type_attached(self, xrefs) -> None:
        """The initializer's type is reported for the declared name."""
        # Given
        src = 'package p\nvar A = "a"\n'

        # When
        records, _ = xrefs(src)

        # Then
        assert _exprs(records) == ["p", "A"]
        assert str(records[1].expr_type) == "string"

    def test_given_imported_member_when_walked_then_selector_refers_to_import(self, xrefs) -> None:
        """flag.ErrHelp resolves into the imported package."""
        # Given
        src = 'package p\nimport "flag"\nvar A = flag.ErrHelp\n'

        # When
        records, _ = xrefs(src)

        # Then
        assert _exprs(records) == ["p", "A", "flag", "flag.ErrHelp"]
        flag, err_help = records[2], records[3]
        assert isinstance(flag.refer_obj, PkgName)
        assert err_help.name == "ErrHelp"
        assert err_help.refer_obj.pkg.name == "flag"
        assert err_help.refer_obj.pkg.path == "flag"
        assert err_help.refer_pos.filename.endswith("flag.go")

    def test_given_key_value_literal_when_walked_then_keys_are_not_resolved(self, xrefs) -> None:
        """Only the value of a key-value pair is visited."""
        # Given
        src = (
            "package p\n"
            "type S struct{ F int }\n"
            "const K = 1\n"
            "var v = S{F: K}\n"
            'var m = map[string]int{"k": K}\n'
        )

        # When
        records, _ = xrefs(src)

        # Then
        names = [x.name for x in records]
        assert names.count("F") == 1
        assert names.count("K") == 3

    def test_given_selector_chain_when_walked_then_bases_resolve_first(self, xrefs) -> None:
        """a.B.C resolves a, then a.B, then a.B.C."""
        # Given
        src = (
            "package p\n"
            "type In struct{ C int }\n"
            "type Out struct{ B In }\n"
            "var a Out\n"
            "var x = a.B.C\n"
        )

        # When
        records, _ = xrefs(src)

        # Then
        assert _exprs(records)[-3:] == ["a", "a.B", "a.B.C"]


class TestFunctions:
    """Function and method declarations."""

    def test_given_function_with_params_when_walked_then_every_name_resolved(self, xrefs) -> None:
        """Names, parameter types and the body are all visited."""
        # Given
        src = "package p\nfunc A(b, c string, d bool) (e, f int, g uint) { panic() }\n"

        # When
        records, _ = xrefs(src)

        # Then
        assert _exprs(records) == [
            "p", "A", "b", "c", "string", "d", "bool", "e", "f", "int", "g", "uint", "panic",
        ]
        by_name = {x.name: x for x in records}
        assert not by_name["A"].local
        assert all(by_name[n].local and by_name[n].is_decl for n in "bcdefg")
        assert by_name["panic"].universe

    def test_given_method_when_walked_then_name_is_qualified_by_receiver(self, xrefs) -> None:
        """Methods are recorded as Type.Method."""
        # Given
        src = "package p\ntype T struct{}\nfunc (r T) M() {}\n"

        # When
        records, _ = xrefs(src)

        # Then
        assert _exprs(records) == ["p", "T", "r", "T", "T.M"]
        method = records[-1]
        assert method.name == "M"
        assert method.is_decl
        assert not method.local
        assert records[2].local

    def test_given_two_receivers_when_walked_then_name_skipped_body_walked(self, xrefs) -> None:
        """A malformed receiver list skips the name only."""
        # Given
        src = "package p\ntype T struct{}\nfunc (a T, b T) M() { println(a) }\n"

        # When
        records, diagnostics = xrefs(src)

        # Then
        assert "expected one receiver only!" in [msg for _, msg in diagnostics]
        assert "M" not in [x.name for x in records]
        assert _exprs(records)[-2:] == ["println", "a"]

    def test_given_several_init_functions_when_walked_then_each_is_a_declaration(
        self, xrefs
    ) -> None:
        """init functions get distinct declaration objects."""
        # Given
        src = "package p\nfunc init() {}\nfunc init() {}\n"

        # When
        records, diagnostics = xrefs(src)

        # Then
        assert _exprs(records) == ["p", "init", "init"]
        first, second = records[1], records[2]
        assert isinstance(first.refer_obj, Func)
        assert first.refer_obj is not second.refer_obj
        assert first.is_decl and second.is_decl
        assert isinstance(first.expr_type, Signature)
        assert diagnostics == []

    def test_given_package_level_func_literal_when_walked_then_params_local(self, xrefs) -> None:
        """Function literals open a local scope of their own."""
        src = "package p\nvar F = func(x int) int { return x }\n"

        records, _ = xrefs(src)

        xs = [x for x in records if x.name == "x"]
        assert len(xs) == 2
        assert all(x.local for x in xs)
        assert not next(x for x in records if x.name == "F").local


class TestLocality:
    """Local-ness is a property of the declared object."""

    def test_given_locals_and_globals_when_walked_then_flag_consistent_per_object(
        self, xrefs
    ) -> None:
        """Every record of one object agrees on local-ness."""
        # Given
        src = (
            "package p\n"
            "var G int\n"
            "func F(x int) int {\n"
            "\ty := x + G\n"
            "\treturn y\n"
            "}\n"
        )

        # When
        records, _ = xrefs(src)

        # Then
        flags: dict[int, set[bool]] = defaultdict(set)
        for x in records:
            flags[id(x.refer_obj)].add(x.local)
        assert all(len(v) == 1 for v in flags.values())
        assert {x.name: x.local for x in records if x.name in ("G", "x", "y")} == {
            "G": False,
            "x": True,
            "y": True,
        }

    def test_given_type_switch_when_walked_then_clause_uses_typed_and_local(self, xrefs) -> None:
        """Each clause sees the guard variable at its case type, declared at the guard."""
        # Given
        src = (
            "package p\n"
            "func F(x interface{}) int {\n"
            "\tswitch v := x.(type) {\n"
            "\tcase int:\n"
            "\t\treturn v\n"
            "\tcase string:\n"
            "\t\treturn len(v)\n"
            "\t}\n"
            "\treturn 0\n"
            "}\n"
        )

        # When
        records, diagnostics = xrefs(src)

        # Then
        assert diagnostics == []
        guard, in_int, in_string = [x for x in records if x.name == "v"]
        assert guard.is_decl
        assert str(guard.expr_type) == "interface{}"
        assert [str(in_int.expr_type), str(in_string.expr_type)] == ["int", "string"]
        assert in_int.refer_pos == in_string.refer_pos == guard.pos
        assert not in_int.is_decl and not in_string.is_decl
        assert guard.local and in_int.local and in_string.local

    def test_given_any_source_when_walked_then_universe_and_position_exclusive(
        self, xrefs
    ) -> None:
        """Universe records never carry a declaration position."""
        src = "package p\nvar A, B = len(\"ab\"), true\nfunc F() error { return nil }\n"

        records, _ = xrefs(src)

        assert any(x.universe for x in records)
        for x in records:
            if x.universe:
                assert x.refer_pos is None
                assert not x.is_decl

    def test_given_decl_flag_when_walked_then_matches_position_equality(self, xrefs) -> None:
        src = "package p\ntype T struct{ N int }\nfunc (t *T) Inc() { t.N++ }\n"

        records, _ = xrefs(src)

        for x in records:
            assert x.is_decl == (x.refer_pos is not None and x.refer_pos == x.pos)


class TestBlankAndAbort:
    """Blank identifiers and early termination."""

    def test_given_blank_identifiers_when_walked_then_never_emitted(self, xrefs) -> None:
        # Given
        src = (
            "package p\n"
            "var _ = 1\n"
            "func F() {\n"
            "\tfor _, v := range []int{1} {\n"
            "\t\t_ = v\n"
            "\t}\n"
            "}\n"
        )

        # When
        records, diagnostics = xrefs(src)

        # Then
        assert "_" not in [x.name for x in records]
        assert diagnostics == []

    def test_given_dot_import_when_walked_then_traversal_stops(self, xrefs) -> None:
        """A namespace-merging import ends the walk with fewer records."""
        # Given
        dotted = 'package p\nimport . "flag"\nvar A = ErrHelp\n'
        plain = 'package p\nimport "flag"\nvar A = flag.ErrHelp\n'

        # When
        dotted_records, diagnostics = xrefs(dotted)
        plain_records, _ = xrefs(plain)

        # Then
        assert _exprs(dotted_records) == ["p"]
        assert len(dotted_records) < len(plain_records)
        assert [msg for _, msg in diagnostics] == ["import to . not supported"]

    def test_given_dot_import_when_several_files_then_later_files_skipped(self, xrefs) -> None:
        """Stopping is not undone by the next file."""
        records, _ = xrefs(
            ("a.go", 'package p\nimport . "flag"\nvar A = ErrHelp\n'),
            ("b.go", "package p\nvar B = 1\n"),
        )

        assert [x.file.filename for x in records] == ["a.go"]

    def test_given_undefined_name_when_walked_then_diagnosed_and_continued(self, xrefs) -> None:
        """Unbound identifiers are reported and skipped."""
        records, diagnostics = xrefs("package p\nvar A = Missing\nvar B int\n")

        assert ("no object for Missing") in [msg for _, msg in diagnostics]
        assert _exprs(records) == ["p", "A", "B", "int"]


class TestPreconditions:
    def test_given_unchecked_context_when_walked_then_internal_error(self) -> None:
        """Walking requires a context the checker has filled."""
        resolver = Resolver(ResolutionContext(), lambda _x: True)

        with pytest.raises(InternalError) as exc_info:
            Walker(resolver).walk_files([])

        assert exc_info.value.code == ErrorCode.INTERNAL_ERROR
