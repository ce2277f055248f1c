"""Tests for the per-run resolution context."""

from goxref.check.objects import Var
from goxref.check.typesys import INVALID, TYP, BasicKind, Pointer, Slice
from goxref.syntax import ast
from goxref.xref.context import ResolutionContext

STRING = TYP[BasicKind.STRING]


class TestRecording:
    """The context acts as the checker's recorder."""

    def test_given_ident_when_recorded_then_object_is_returned(self) -> None:
        """record_ident binds the node to its object."""
        # Given
        ctx = ResolutionContext()
        ident = ast.Ident(name="a")
        obj = Var("a", type=STRING)

        # When
        ctx.record_ident(ident, obj)

        # Then
        assert ctx.expr_info(ident) == (obj, STRING)

    def test_given_container_type_when_recorded_then_stored_reduced(self) -> None:
        """Expression types are stored as base types."""
        # Given
        ctx = ResolutionContext()
        ident = ast.Ident(name="a")

        # When
        ctx.record_expr(ident, Slice(Pointer(STRING)), None)

        # Then
        assert ctx.expr_types[ident] is STRING

    def test_given_type_expression_when_recorded_then_keyed_by_base_node(self) -> None:
        """A type expression's type lands on its innermost node."""
        # Given
        ctx = ResolutionContext()
        elt = ast.Ident(name="string")
        expr = ast.ArrayType(len=None, elt=ast.StarExpr(x=elt))

        # When
        ctx.record_expr(expr, Slice(Pointer(STRING)), None)

        # Then
        assert expr not in ctx.expr_types
        assert ctx.expr_types[elt] is STRING


class TestExprInfo:
    """Lookup with fallback to the object's own type."""

    def test_given_recorded_type_when_looked_up_then_preferred_over_object_type(self) -> None:
        ctx = ResolutionContext()
        ident = ast.Ident(name="a")
        obj = Var("a", type=Slice(STRING))
        ctx.record_ident(ident, obj)
        ctx.record_expr(ident, Slice(STRING), None)

        assert ctx.expr_info(ident) == (obj, STRING)

    def test_given_no_recorded_type_when_looked_up_then_object_type_unreduced(self) -> None:
        """The fallback is the object's type as declared."""
        # Given
        ctx = ResolutionContext()
        ident = ast.Ident(name="a")
        declared = Slice(STRING)
        obj = Var("a", type=declared)
        ctx.record_ident(ident, obj)

        # When
        _, typ = ctx.expr_info(ident)

        # Then
        assert typ is declared

    def test_given_invalid_object_type_when_looked_up_then_no_type(self) -> None:
        """The invalid type is never reported."""
        ctx = ResolutionContext()
        ident = ast.Ident(name="a")
        obj = Var("a", type=INVALID)
        ctx.record_ident(ident, obj)

        assert ctx.expr_info(ident) == (obj, None)

    def test_given_unknown_ident_when_looked_up_then_nothing(self) -> None:
        ctx = ResolutionContext()

        assert ctx.expr_info(ast.Ident(name="x")) == (None, None)


class TestLocals:
    """Local-ness is remembered per object."""

    def test_given_marked_object_when_queried_then_local(self) -> None:
        # Given
        ctx = ResolutionContext()
        obj = Var("a")
        other = Var("a")

        # When
        ctx.mark_local(obj)

        # Then
        assert ctx.is_local(obj)
        assert not ctx.is_local(other)

    def test_given_derived_object_when_origin_marked_then_local(self) -> None:
        """Clause copies of a type switch variable follow the guard's local-ness."""
        ctx = ResolutionContext()
        guard = Var("v")
        clause_var = Var("v", type=STRING, origin=guard)

        ctx.mark_local(guard)

        assert ctx.is_local(clause_var)
        assert not ctx.is_local(Var("v", origin=Var("v")))
