"""Tests for turning occurrences into cross-references."""

from __future__ import annotations

from goxref.check.objects import Const, Func, Package, Var
from goxref.check.typesys import TYP, BasicKind, Signature
from goxref.check.universe import UNIVERSE
from goxref.syntax import ast
from goxref.syntax.token import Position
from goxref.xref.context import ResolutionContext
from goxref.xref.models import CrossReference
from goxref.xref.resolver import Resolver

STRING = TYP[BasicKind.STRING]


def _pos(offset: int) -> Position:
    return Position("p.go", offset, 1, offset + 1)


class _Harness:
    def __init__(self, *, stop: bool = False, constant_positions: str = "oracle") -> None:
        self.records: list[CrossReference] = []
        self.diagnostics: list[tuple[Position | None, str]] = []
        self.stop = stop
        self.context = ResolutionContext()
        self.context.package = Package("p", path="p")
        self.resolver = Resolver(
            self.context,
            self.visit,
            sink=lambda pos, msg: self.diagnostics.append((pos, msg)),
            constant_positions=constant_positions,  # type: ignore[arg-type]
        )

    def visit(self, xref: CrossReference) -> bool:
        self.records.append(xref)
        return not self.stop

    def bind(self, name: str, offset: int, obj) -> ast.Ident:
        ident = ast.Ident(name=name, pos=_pos(offset))
        self.context.record_ident(ident, obj)
        return ident


class TestResolve:
    """Resolver.resolve emits zero or one record per occurrence."""

    def test_given_blank_identifier_when_resolved_then_nothing_emitted(self) -> None:
        """The blank identifier is never looked up."""
        # Given
        h = _Harness()
        blank = h.bind("_", 0, Var("_", pos=_pos(0)))

        # When
        ok = h.resolver.resolve(blank, True)

        # Then
        assert ok is True
        assert h.records == []
        assert h.diagnostics == []

    def test_given_declaring_occurrence_when_resolved_then_decl_record(self) -> None:
        """The declaring occurrence refers to its own position."""
        # Given
        h = _Harness()
        obj = Var("a", pos=_pos(4), type=STRING)
        ident = h.bind("a", 4, obj)

        # When
        h.resolver.resolve(ident, False)

        # Then
        [xref] = h.records
        assert xref.refer_obj is obj
        assert xref.refer_pos == _pos(4)
        assert xref.is_decl
        assert not xref.universe
        assert not xref.local
        assert xref.expr_type is STRING
        assert xref.package is h.context.package

    def test_given_universe_object_when_resolved_then_no_position(self) -> None:
        """Predeclared names carry the universe flag instead of a position."""
        # Given
        h = _Harness()
        ident = h.bind("string", 10, UNIVERSE.lookup("string"))

        # When
        h.resolver.resolve(ident, True)

        # Then
        [xref] = h.records
        assert xref.universe
        assert xref.refer_pos is None
        assert not xref.is_decl
        assert not xref.local

    def test_given_selector_when_resolved_then_member_is_the_identifier(self) -> None:
        """Selectors resolve through their member name."""
        # Given
        h = _Harness()
        member = Var("X", pos=_pos(50), type=STRING, is_field=True)
        sel = ast.SelectorExpr(x=ast.Ident(name="v", pos=_pos(20)), sel=ast.Ident(name="X", pos=_pos(22)))
        h.context.record_ident(sel.sel, member)

        # When
        h.resolver.resolve(sel, False)

        # Then
        [xref] = h.records
        assert xref.expr is sel
        assert xref.ident is sel.sel
        assert xref.name == "X"
        assert str(xref).startswith("p.go:1:23: v.X -> p.go:1:51")

    def test_given_unbound_identifier_when_resolved_then_diagnosed_and_skipped(self) -> None:
        """Missing objects are reported but do not stop the walk."""
        # Given
        h = _Harness()
        ident = ast.Ident(name="missing", pos=_pos(3))

        # When
        ok = h.resolver.resolve(ident, False)

        # Then
        assert ok is True
        assert h.records == []
        assert h.diagnostics == [(_pos(3), "no object for missing")]

    def test_given_object_without_position_when_resolved_then_diagnosed(self) -> None:
        """Non-package objects need a declaration position."""
        h = _Harness()
        ident = h.bind("a", 3, Var("a"))

        h.resolver.resolve(ident, False)

        assert h.records == []
        assert h.diagnostics == [(_pos(3), "no declaration for a")]

    def test_given_package_clause_when_resolved_then_emitted_without_position(self) -> None:
        """The package clause refers to the package itself."""
        h = _Harness()
        ident = h.bind("p", 8, h.context.package)

        h.resolver.resolve(ident, False)

        [xref] = h.records
        assert xref.refer_pos is None
        assert not xref.universe
        assert xref.expr_type is None

    def test_given_consumer_stops_when_resolved_then_false(self) -> None:
        """The consumer's stop signal is returned to the caller."""
        h = _Harness(stop=True)
        ident = h.bind("a", 0, Var("a", pos=_pos(0)))

        assert h.resolver.resolve(ident, False) is False
        assert len(h.records) == 1


class TestLocality:
    """Local-ness is decided at the declaration and reused afterwards."""

    def test_given_local_declaration_when_used_later_then_use_is_local(self) -> None:
        # Given
        h = _Harness()
        obj = Var("x", pos=_pos(30))
        decl = h.bind("x", 30, obj)
        use = h.bind("x", 40, obj)

        # When
        h.resolver.resolve(decl, True)
        h.resolver.resolve(use, True)

        # Then
        assert [x.local for x in h.records] == [True, True]
        assert h.context.is_local(obj)

    def test_given_package_object_when_used_in_body_then_not_local(self) -> None:
        """Being inside a function body is not enough to be local."""
        h = _Harness()
        obj = Var("G", pos=_pos(0))
        use = h.bind("G", 40, obj)

        h.resolver.resolve(use, True)

        [xref] = h.records
        assert not xref.local

    def test_given_non_local_context_when_resolved_then_never_local(self) -> None:
        """Outside function bodies records are not local."""
        h = _Harness()
        obj = Var("x", pos=_pos(30))
        h.context.mark_local(obj)
        use = h.bind("x", 40, obj)

        h.resolver.resolve(use, False)

        assert not h.records[0].local


class TestConstants:
    """Constant handling follows the configured mode."""

    def test_given_oracle_mode_when_constant_resolved_then_emitted(self) -> None:
        h = _Harness()
        ident = h.bind("C", 5, Const("C", pos=_pos(5), val=1))

        h.resolver.resolve(ident, False)

        assert len(h.records) == 1

    def test_given_skip_mode_when_constant_resolved_then_skipped(self) -> None:
        """Skip mode drops user constants with a diagnostic."""
        # Given
        h = _Harness(constant_positions="skip")
        ident = h.bind("C", 5, Const("C", pos=_pos(5), val=1))

        # When
        h.resolver.resolve(ident, False)

        # Then
        assert h.records == []
        assert h.diagnostics == [(_pos(5), "skipping constant C")]

    def test_given_skip_mode_when_universe_constant_resolved_then_emitted(self) -> None:
        """Predeclared constants such as true are kept."""
        h = _Harness(constant_positions="skip")
        ident = h.bind("true", 5, UNIVERSE.lookup("true"))

        h.resolver.resolve(ident, False)

        [xref] = h.records
        assert xref.universe


class TestInit:
    """Receiverless init functions get a declaration object of their own."""

    def test_given_unbound_init_when_declared_then_object_synthesized(self) -> None:
        # Given
        h = _Harness()
        ident = ast.Ident(name="init", pos=_pos(12))
        sig = Signature()
        h.context.record_expr(ident, sig, None)

        # When
        h.resolver.resolve(ident, False, declares_init=True)

        # Then
        [xref] = h.records
        assert isinstance(xref.refer_obj, Func)
        assert xref.refer_obj.name == "init"
        assert xref.refer_obj.pkg is h.context.package
        assert xref.is_decl
        assert xref.expr_type is sig

    def test_given_two_inits_when_declared_then_distinct_objects(self) -> None:
        """Every init declaration is its own object."""
        h = _Harness()
        first = ast.Ident(name="init", pos=_pos(12))
        second = ast.Ident(name="init", pos=_pos(40))

        h.resolver.resolve(first, False, declares_init=True)
        h.resolver.resolve(second, False, declares_init=True)

        assert h.records[0].refer_obj is not h.records[1].refer_obj
        assert all(x.is_decl for x in h.records)
