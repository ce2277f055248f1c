"""Go syntax tree.

Node classes follow the shape of Go's own ``go/ast`` package closely enough
that a reader familiar with one can read the other. Nodes hash and compare by
identity, which lets the checker key its side tables by node.

``_fields`` lists child-bearing attributes in the order ``walk`` visits them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import ClassVar

from goxref.syntax.token import Position


@dataclass(eq=False)
class Node:
    """Base class for every syntax tree node."""

    _fields: ClassVar[tuple[str, ...]] = ()


class Expr(Node):
    pass


class Stmt(Node):
    pass


class Decl(Node):
    pass


class Spec(Node):
    pass


# ---------------------------------------------------------------------------
# Expressions and types
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class BadExpr(Expr):
    pos: Position | None = None


@dataclass(eq=False)
class Ident(Expr):
    name: str = ""
    pos: Position | None = None

    def __repr__(self) -> str:
        return f"Ident({self.name!r})"


@dataclass(eq=False)
class BasicLit(Expr):
    kind: str = "INT"  # INT, FLOAT, IMAG, CHAR, STRING
    value: str = ""
    pos: Position | None = None


@dataclass(eq=False)
class Ellipsis(Expr):
    elt: Expr | None = None
    pos: Position | None = None

    _fields = ("elt",)


@dataclass(eq=False)
class CompositeLit(Expr):
    type: Expr | None = None
    elts: list[Expr] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("type", "elts")


@dataclass(eq=False)
class FuncLit(Expr):
    type: FuncType
    body: BlockStmt
    pos: Position | None = None

    _fields = ("type", "body")


@dataclass(eq=False)
class ParenExpr(Expr):
    x: Expr
    pos: Position | None = None

    _fields = ("x",)


@dataclass(eq=False)
class SelectorExpr(Expr):
    x: Expr
    sel: Ident
    pos: Position | None = None

    _fields = ("x", "sel")

    def __post_init__(self) -> None:
        if self.pos is None:
            self.pos = getattr(self.x, "pos", None)


@dataclass(eq=False)
class IndexExpr(Expr):
    """``x[i]`` or, for generic instantiation, ``x[A, B]``."""

    x: Expr
    indices: list[Expr] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("x", "indices")


@dataclass(eq=False)
class SliceExpr(Expr):
    x: Expr
    low: Expr | None = None
    high: Expr | None = None
    max: Expr | None = None
    pos: Position | None = None

    _fields = ("x", "low", "high", "max")


@dataclass(eq=False)
class TypeAssertExpr(Expr):
    x: Expr
    type: Expr | None = None  # None for x.(type) in a type switch
    pos: Position | None = None

    _fields = ("x", "type")


@dataclass(eq=False)
class CallExpr(Expr):
    fun: Expr
    args: list[Expr] = field(default_factory=list)
    has_ellipsis: bool = False
    pos: Position | None = None

    _fields = ("fun", "args")


@dataclass(eq=False)
class StarExpr(Expr):
    """Pointer type ``*T`` or dereference ``*p``."""

    x: Expr
    pos: Position | None = None

    _fields = ("x",)


@dataclass(eq=False)
class UnaryExpr(Expr):
    op: str
    x: Expr
    pos: Position | None = None

    _fields = ("x",)


@dataclass(eq=False)
class BinaryExpr(Expr):
    x: Expr
    op: str
    y: Expr
    pos: Position | None = None

    _fields = ("x", "y")


@dataclass(eq=False)
class KeyValueExpr(Expr):
    key: Expr
    value: Expr
    pos: Position | None = None

    _fields = ("key", "value")


@dataclass(eq=False)
class ArrayType(Expr):
    """``[N]T``, ``[...]T`` (len is an Ellipsis) or, with no len, ``[]T``."""

    len: Expr | None
    elt: Expr
    pos: Position | None = None

    _fields = ("len", "elt")


@dataclass(eq=False)
class StructType(Expr):
    fields: FieldList
    pos: Position | None = None

    _fields = ("fields",)


@dataclass(eq=False)
class FuncType(Expr):
    params: FieldList
    results: FieldList | None = None
    type_params: FieldList | None = None
    pos: Position | None = None

    _fields = ("type_params", "params", "results")


@dataclass(eq=False)
class InterfaceType(Expr):
    methods: FieldList
    pos: Position | None = None

    _fields = ("methods",)


@dataclass(eq=False)
class MapType(Expr):
    key: Expr
    value: Expr
    pos: Position | None = None

    _fields = ("key", "value")


@dataclass(eq=False)
class ChanType(Expr):
    value: Expr
    dir: str = "both"  # both, send, recv
    pos: Position | None = None

    _fields = ("value",)


@dataclass(eq=False)
class Field(Node):
    """A parameter, result, struct field, interface method or embedded type."""

    names: list[Ident] = field(default_factory=list)
    type: Expr | None = None
    tag: BasicLit | None = None
    pos: Position | None = None

    _fields = ("names", "type", "tag")


@dataclass(eq=False)
class FieldList(Node):
    list: list[Field] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("list",)

    def num_fields(self) -> int:
        return sum(len(f.names) or 1 for f in self.list)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class BadStmt(Stmt):
    pos: Position | None = None


@dataclass(eq=False)
class DeclStmt(Stmt):
    decl: GenDecl
    pos: Position | None = None

    _fields = ("decl",)


@dataclass(eq=False)
class EmptyStmt(Stmt):
    pos: Position | None = None


@dataclass(eq=False)
class LabeledStmt(Stmt):
    label: Ident
    stmt: Stmt | None = None
    pos: Position | None = None

    _fields = ("label", "stmt")


@dataclass(eq=False)
class ExprStmt(Stmt):
    x: Expr
    pos: Position | None = None

    _fields = ("x",)


@dataclass(eq=False)
class SendStmt(Stmt):
    chan: Expr
    value: Expr
    pos: Position | None = None

    _fields = ("chan", "value")


@dataclass(eq=False)
class IncDecStmt(Stmt):
    x: Expr
    tok: str = "++"
    pos: Position | None = None

    _fields = ("x",)


@dataclass(eq=False)
class AssignStmt(Stmt):
    """Assignment; ``tok`` is ``:=`` for short variable declarations."""

    lhs: list[Expr]
    tok: str
    rhs: list[Expr]
    pos: Position | None = None

    _fields = ("lhs", "rhs")


@dataclass(eq=False)
class GoStmt(Stmt):
    call: Expr
    pos: Position | None = None

    _fields = ("call",)


@dataclass(eq=False)
class DeferStmt(Stmt):
    call: Expr
    pos: Position | None = None

    _fields = ("call",)


@dataclass(eq=False)
class ReturnStmt(Stmt):
    results: list[Expr] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("results",)


@dataclass(eq=False)
class BranchStmt(Stmt):
    tok: str  # break, continue, goto, fallthrough
    label: Ident | None = None
    pos: Position | None = None

    _fields = ("label",)


@dataclass(eq=False)
class BlockStmt(Stmt):
    list: list[Stmt] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("list",)


@dataclass(eq=False)
class IfStmt(Stmt):
    cond: Expr
    body: BlockStmt
    init: Stmt | None = None
    else_: Stmt | None = None
    pos: Position | None = None

    _fields = ("init", "cond", "body", "else_")


@dataclass(eq=False)
class CaseClause(Stmt):
    """A switch case; ``list`` is None for ``default``."""

    body: list[Stmt] = field(default_factory=list)
    list: list[Expr] | None = None
    pos: Position | None = None

    _fields = ("list", "body")


@dataclass(eq=False)
class SwitchStmt(Stmt):
    body: BlockStmt
    init: Stmt | None = None
    tag: Expr | None = None
    pos: Position | None = None

    _fields = ("init", "tag", "body")


@dataclass(eq=False)
class TypeSwitchStmt(Stmt):
    """``switch x := y.(type)``; ``assign`` is an AssignStmt or ExprStmt."""

    assign: Stmt
    body: BlockStmt
    init: Stmt | None = None
    pos: Position | None = None

    _fields = ("init", "assign", "body")


@dataclass(eq=False)
class CommClause(Stmt):
    """A select case; ``comm`` is None for ``default``."""

    comm: Stmt | None = None
    body: list[Stmt] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("comm", "body")


@dataclass(eq=False)
class SelectStmt(Stmt):
    body: BlockStmt
    pos: Position | None = None

    _fields = ("body",)


@dataclass(eq=False)
class ForStmt(Stmt):
    body: BlockStmt
    init: Stmt | None = None
    cond: Expr | None = None
    post: Stmt | None = None
    pos: Position | None = None

    _fields = ("init", "cond", "post", "body")


@dataclass(eq=False)
class RangeStmt(Stmt):
    x: Expr
    body: BlockStmt
    key: Expr | None = None
    value: Expr | None = None
    tok: str | None = None  # ":=", "=" or None
    pos: Position | None = None

    _fields = ("key", "value", "x", "body")


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class ImportSpec(Spec):
    path: BasicLit
    name: Ident | None = None
    pos: Position | None = None

    _fields = ("name", "path")

    @property
    def import_path(self) -> str:
        return unquote(self.path.value)


@dataclass(eq=False)
class ValueSpec(Spec):
    names: list[Ident] = field(default_factory=list)
    type: Expr | None = None
    values: list[Expr] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("names", "type", "values")


@dataclass(eq=False)
class TypeSpec(Spec):
    name: Ident
    type: Expr
    type_params: FieldList | None = None
    assign: bool = False  # alias declaration: type A = B
    pos: Position | None = None

    _fields = ("name", "type_params", "type")


@dataclass(eq=False)
class GenDecl(Decl):
    tok: str  # import, const, type, var
    specs: list[Spec] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("specs",)


@dataclass(eq=False)
class FuncDecl(Decl):
    name: Ident
    type: FuncType
    recv: FieldList | None = None
    body: BlockStmt | None = None
    pos: Position | None = None

    _fields = ("recv", "name", "type", "body")


@dataclass(eq=False)
class BadDecl(Decl):
    pos: Position | None = None


@dataclass(eq=False)
class File(Node):
    name: Ident
    filename: str
    decls: list[Decl] = field(default_factory=list)
    imports: list[ImportSpec] = field(default_factory=list)
    pos: Position | None = None

    _fields = ("name", "decls")


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in source order."""
    for name in node._fields:
        value = getattr(node, name)
        if value is None:
            continue
        if isinstance(value, list):
            for item in value:
                if item is not None:
                    yield item
        else:
            yield value


def walk(visit: Callable[[Node], bool], node: Node) -> None:
    """Depth-first traversal; children are visited only if ``visit`` returns True."""
    if visit(node):
        for child in iter_child_nodes(node):
            walk(visit, child)


def inspect(node: Node) -> Iterator[Node]:
    """Yield ``node`` and every descendant in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


def unparen(e: Expr) -> Expr:
    while isinstance(e, ParenExpr):
        e = e.x
    return e


def unquote(literal: str) -> str:
    """Strip the quotes from a Go string literal, decoding simple escapes."""
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1]
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        body = literal[1:-1]
        if "\\" not in body:
            return body
        try:
            return (
                body.encode("utf-8").decode("unicode_escape").encode("latin-1").decode("utf-8")
            )
        except UnicodeError:
            return body
    return literal
