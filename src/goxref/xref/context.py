"""Per-run resolution state.

A ``ResolutionContext`` is handed to the checker as its recorder and then to
the walker, so the tables the checker fills are exactly the ones the
resolver reads. One context serves one run over one package.
"""

from __future__ import annotations

from typing import Any

from goxref.check.objects import Object, Package
from goxref.check.typesys import INVALID, Type
from goxref.syntax import ast
from goxref.xref.reduce import ast_base_type, type_base_type


class ResolutionContext:
    """Checker results plus the set of objects known to be function-local."""

    def __init__(self) -> None:
        self.id_objs: dict[ast.Ident, Object] = {}
        self.expr_types: dict[ast.Expr, Type | None] = {}
        self.locals: set[Object] = set()
        self.package: Package | None = None
        self.file: ast.File | None = None

    # Recorder protocol

    def record_ident(self, ident: ast.Ident, obj: Object) -> None:
        self.id_objs[ident] = obj

    def record_expr(self, expr: ast.Expr, typ: Type, value: Any) -> None:  # noqa: ARG002
        self.expr_types[ast_base_type(expr)] = type_base_type(typ)

    def expr_info(self, ident: ast.Ident) -> tuple[Object | None, Type | None]:
        """Object bound to ``ident`` and the base type recorded for it.

        Falls back to the object's own, unreduced type when no expression
        type was recorded, unless that type is invalid.
        """
        obj = self.id_objs.get(ident)
        typ = self.expr_types.get(ident)
        if typ is None and obj is not None and obj.type is not None and obj.type is not INVALID:
            typ = obj.type
        return obj, typ

    # Copies (type switch clause variables, instantiated members) share the
    # locality of the object they were derived from.

    def mark_local(self, obj: Object) -> None:
        self.locals.add(obj.origin or obj)

    def is_local(self, obj: Object) -> bool:
        return (obj.origin or obj) in self.locals
