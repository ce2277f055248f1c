"""Render expressions and type expressions back to Go source text.

Used for diagnostics ("no object for flag.Foo") and for serialized output,
so the rendering is single-line and canonical rather than faithful to the
original formatting.
"""

from __future__ import annotations

from goxref.syntax import ast


def pretty(node: ast.Node | None) -> str:
    if node is None:
        return ""
    method = getattr(_Printer, "_" + type(node).__name__, None)
    if method is None:
        return f"<{type(node).__name__}>"
    return method(node)


def _join(nodes: list[ast.Expr]) -> str:
    return ", ".join(pretty(n) for n in nodes)


def _field_list(fl: ast.FieldList | None, sep: str = ", ") -> str:
    if fl is None:
        return ""
    return sep.join(pretty(f) for f in fl.list)


def _signature(ft: ast.FuncType) -> str:
    out = ""
    if ft.type_params is not None and ft.type_params.list:
        out += "[" + _field_list(ft.type_params) + "]"
    out += "(" + _field_list(ft.params) + ")"
    results = ft.results
    if results is not None and results.list:
        if len(results.list) == 1 and not results.list[0].names:
            out += " " + pretty(results.list[0].type)
        else:
            out += " (" + _field_list(results) + ")"
    return out


class _Printer:
    """Namespace of per-node renderers, looked up by class name."""

    @staticmethod
    def _BadExpr(_n: ast.BadExpr) -> str:
        return "BadExpr"

    @staticmethod
    def _Ident(n: ast.Ident) -> str:
        return n.name

    @staticmethod
    def _BasicLit(n: ast.BasicLit) -> str:
        return n.value

    @staticmethod
    def _Ellipsis(n: ast.Ellipsis) -> str:
        return "..." + pretty(n.elt)

    @staticmethod
    def _CompositeLit(n: ast.CompositeLit) -> str:
        return pretty(n.type) + "{" + _join(n.elts) + "}"

    @staticmethod
    def _FuncLit(n: ast.FuncLit) -> str:
        return "func" + _signature(n.type) + " {...}"

    @staticmethod
    def _ParenExpr(n: ast.ParenExpr) -> str:
        return "(" + pretty(n.x) + ")"

    @staticmethod
    def _SelectorExpr(n: ast.SelectorExpr) -> str:
        return pretty(n.x) + "." + n.sel.name

    @staticmethod
    def _IndexExpr(n: ast.IndexExpr) -> str:
        return pretty(n.x) + "[" + _join(n.indices) + "]"

    @staticmethod
    def _SliceExpr(n: ast.SliceExpr) -> str:
        parts = [pretty(n.low), pretty(n.high)]
        if n.max is not None:
            parts.append(pretty(n.max))
        return pretty(n.x) + "[" + ":".join(parts) + "]"

    @staticmethod
    def _TypeAssertExpr(n: ast.TypeAssertExpr) -> str:
        typ = "type" if n.type is None else pretty(n.type)
        return pretty(n.x) + ".(" + typ + ")"

    @staticmethod
    def _CallExpr(n: ast.CallExpr) -> str:
        return pretty(n.fun) + "(" + _join(n.args) + ("..." if n.has_ellipsis else "") + ")"

    @staticmethod
    def _StarExpr(n: ast.StarExpr) -> str:
        return "*" + pretty(n.x)

    @staticmethod
    def _UnaryExpr(n: ast.UnaryExpr) -> str:
        return n.op + pretty(n.x)

    @staticmethod
    def _BinaryExpr(n: ast.BinaryExpr) -> str:
        return f"{pretty(n.x)} {n.op} {pretty(n.y)}"

    @staticmethod
    def _KeyValueExpr(n: ast.KeyValueExpr) -> str:
        return f"{pretty(n.key)}: {pretty(n.value)}"

    @staticmethod
    def _ArrayType(n: ast.ArrayType) -> str:
        return "[" + pretty(n.len) + "]" + pretty(n.elt)

    @staticmethod
    def _StructType(n: ast.StructType) -> str:
        return "struct{" + _field_list(n.fields, "; ") + "}"

    @staticmethod
    def _FuncType(n: ast.FuncType) -> str:
        return "func" + _signature(n)

    @staticmethod
    def _InterfaceType(n: ast.InterfaceType) -> str:
        elems = []
        for f in n.methods.list:
            if f.names and isinstance(f.type, ast.FuncType):
                elems.append(f.names[0].name + _signature(f.type))
            else:
                elems.append(pretty(f.type))
        return "interface{" + "; ".join(elems) + "}"

    @staticmethod
    def _MapType(n: ast.MapType) -> str:
        return "map[" + pretty(n.key) + "]" + pretty(n.value)

    @staticmethod
    def _ChanType(n: ast.ChanType) -> str:
        prefix = {"send": "chan<- ", "recv": "<-chan "}.get(n.dir, "chan ")
        return prefix + pretty(n.value)

    @staticmethod
    def _Field(n: ast.Field) -> str:
        names = ", ".join(i.name for i in n.names)
        typ = pretty(n.type)
        return f"{names} {typ}" if names else typ

    @staticmethod
    def _FieldList(n: ast.FieldList) -> str:
        return "(" + _field_list(n) + ")"
