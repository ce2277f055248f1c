"""Cross-reference records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from goxref.syntax import ast
from goxref.syntax.printer import pretty
from goxref.syntax.token import Position, format_position

if TYPE_CHECKING:
    from goxref.check.objects import Object, Package
    from goxref.check.typesys import Type


@dataclass(eq=False, slots=True)
class CrossReference:
    """One resolved occurrence of an identifier or selector.

    Attributes:
        expr: The resolved node, an ``Ident`` or a ``SelectorExpr``.
        ident: The name being resolved; the member for a selector.
        expr_type: Base type of the expression, or None when untyped.
        package: Package being traversed.
        file: File being traversed.
        refer_pos: Declaration position of the referenced object. None for
            universe names and for the package clause self-reference.
        refer_obj: The referenced declaration object.
        local: The declaration lives in function-local scope.
        universe: The declaration is a predeclared name.
    """

    expr: ast.Expr
    ident: ast.Ident
    expr_type: Type | None
    package: Package | None
    file: ast.File | None
    refer_pos: Position | None
    refer_obj: Object
    local: bool = False
    universe: bool = False

    @property
    def pos(self) -> Position | None:
        """Position of this occurrence."""
        return self.ident.pos

    @property
    def name(self) -> str:
        return self.ident.name

    @property
    def is_decl(self) -> bool:
        """This occurrence is the declaration itself."""
        return self.refer_pos is not None and self.refer_pos == self.ident.pos

    def __str__(self) -> str:
        marks = (("decl", self.is_decl), ("local", self.local), ("universe", self.universe))
        flags = [flag for flag, on in marks if on]
        out = f"{format_position(self.pos)}: {pretty(self.expr)} -> {format_position(self.refer_pos)}"
        if self.expr_type is not None:
            out += f" ({self.expr_type})"
        if flags:
            out += " [" + ",".join(flags) + "]"
        return out

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        obj = self.refer_obj
        obj_pkg = getattr(obj, "pkg", None)
        return {
            "expr": pretty(self.expr),
            "name": self.name,
            "pos": self.pos.to_dict() if self.pos is not None else None,
            "type": str(self.expr_type) if self.expr_type is not None else None,
            "package": self.package.path if self.package is not None else None,
            "file": self.file.filename if self.file is not None else None,
            "refer_pos": self.refer_pos.to_dict() if self.refer_pos is not None else None,
            "refer_kind": obj.kind,
            "refer_package": obj_pkg.path if obj_pkg is not None else None,
            "local": self.local,
            "universe": self.universe,
            "decl": self.is_decl,
        }
