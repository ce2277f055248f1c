"""Go types.

The representation mirrors ``go/types``: every type answers ``underlying()``
and renders itself the way ``types.TypeString`` does with a nil qualifier
(package-qualified by import path).
"""

from __future__ import annotations

import dataclasses
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from goxref.check.objects import Func, TypeName, Var


class BasicKind(IntEnum):
    INVALID = 0
    BOOL = 1
    INT = 2
    INT8 = 3
    INT16 = 4
    INT32 = 5
    INT64 = 6
    UINT = 7
    UINT8 = 8
    UINT16 = 9
    UINT32 = 10
    UINT64 = 11
    UINTPTR = 12
    FLOAT32 = 13
    FLOAT64 = 14
    COMPLEX64 = 15
    COMPLEX128 = 16
    STRING = 17
    UNSAFE_POINTER = 18
    UNTYPED_BOOL = 19
    UNTYPED_INT = 20
    UNTYPED_RUNE = 21
    UNTYPED_FLOAT = 22
    UNTYPED_COMPLEX = 23
    UNTYPED_STRING = 24
    UNTYPED_NIL = 25


_INTEGER_KINDS = frozenset(range(BasicKind.INT, BasicKind.UINTPTR + 1)) | {
    BasicKind.UNTYPED_INT,
    BasicKind.UNTYPED_RUNE,
}
_FLOAT_KINDS = frozenset({BasicKind.FLOAT32, BasicKind.FLOAT64, BasicKind.UNTYPED_FLOAT})
_COMPLEX_KINDS = frozenset(
    {BasicKind.COMPLEX64, BasicKind.COMPLEX128, BasicKind.UNTYPED_COMPLEX}
)


class Type:
    """Base class of all types."""

    def underlying(self) -> Type:
        return self


@dataclasses.dataclass(eq=False)
class Basic(Type):
    kind: BasicKind
    name: str

    def __str__(self) -> str:
        return self.name

    @property
    def is_untyped(self) -> bool:
        return self.kind >= BasicKind.UNTYPED_BOOL

    @property
    def is_boolean(self) -> bool:
        return self.kind in (BasicKind.BOOL, BasicKind.UNTYPED_BOOL)

    @property
    def is_integer(self) -> bool:
        return self.kind in _INTEGER_KINDS

    @property
    def is_float(self) -> bool:
        return self.kind in _FLOAT_KINDS

    @property
    def is_complex(self) -> bool:
        return self.kind in _COMPLEX_KINDS

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_float or self.is_complex

    @property
    def is_string(self) -> bool:
        return self.kind in (BasicKind.STRING, BasicKind.UNTYPED_STRING)


TYP: dict[BasicKind, Basic] = {
    BasicKind.INVALID: Basic(BasicKind.INVALID, "invalid type"),
    BasicKind.BOOL: Basic(BasicKind.BOOL, "bool"),
    BasicKind.INT: Basic(BasicKind.INT, "int"),
    BasicKind.INT8: Basic(BasicKind.INT8, "int8"),
    BasicKind.INT16: Basic(BasicKind.INT16, "int16"),
    BasicKind.INT32: Basic(BasicKind.INT32, "int32"),
    BasicKind.INT64: Basic(BasicKind.INT64, "int64"),
    BasicKind.UINT: Basic(BasicKind.UINT, "uint"),
    BasicKind.UINT8: Basic(BasicKind.UINT8, "uint8"),
    BasicKind.UINT16: Basic(BasicKind.UINT16, "uint16"),
    BasicKind.UINT32: Basic(BasicKind.UINT32, "uint32"),
    BasicKind.UINT64: Basic(BasicKind.UINT64, "uint64"),
    BasicKind.UINTPTR: Basic(BasicKind.UINTPTR, "uintptr"),
    BasicKind.FLOAT32: Basic(BasicKind.FLOAT32, "float32"),
    BasicKind.FLOAT64: Basic(BasicKind.FLOAT64, "float64"),
    BasicKind.COMPLEX64: Basic(BasicKind.COMPLEX64, "complex64"),
    BasicKind.COMPLEX128: Basic(BasicKind.COMPLEX128, "complex128"),
    BasicKind.STRING: Basic(BasicKind.STRING, "string"),
    BasicKind.UNSAFE_POINTER: Basic(BasicKind.UNSAFE_POINTER, "unsafe.Pointer"),
    BasicKind.UNTYPED_BOOL: Basic(BasicKind.UNTYPED_BOOL, "untyped bool"),
    BasicKind.UNTYPED_INT: Basic(BasicKind.UNTYPED_INT, "untyped int"),
    BasicKind.UNTYPED_RUNE: Basic(BasicKind.UNTYPED_RUNE, "untyped rune"),
    BasicKind.UNTYPED_FLOAT: Basic(BasicKind.UNTYPED_FLOAT, "untyped float"),
    BasicKind.UNTYPED_COMPLEX: Basic(BasicKind.UNTYPED_COMPLEX, "untyped complex"),
    BasicKind.UNTYPED_STRING: Basic(BasicKind.UNTYPED_STRING, "untyped string"),
    BasicKind.UNTYPED_NIL: Basic(BasicKind.UNTYPED_NIL, "untyped nil"),
}

# byte and rune are aliases: same kind, their own spelling.
BYTE = Basic(BasicKind.UINT8, "byte")
RUNE = Basic(BasicKind.INT32, "rune")

INVALID = TYP[BasicKind.INVALID]


@dataclasses.dataclass(eq=False)
class Pointer(Type):
    elem: Type

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclasses.dataclass(eq=False)
class Slice(Type):
    elem: Type

    def __str__(self) -> str:
        return f"[]{self.elem}"


@dataclasses.dataclass(eq=False)
class Array(Type):
    elem: Type
    length: int | None  # None when the length expression could not be evaluated

    def __str__(self) -> str:
        n = "?" if self.length is None else str(self.length)
        return f"[{n}]{self.elem}"


@dataclasses.dataclass(eq=False)
class Map(Type):
    key: Type
    elem: Type

    def __str__(self) -> str:
        return f"map[{self.key}]{self.elem}"


@dataclasses.dataclass(eq=False)
class Chan(Type):
    elem: Type
    dir: str = "both"  # both, send, recv

    def __str__(self) -> str:
        prefix = {"send": "chan<- ", "recv": "<-chan "}.get(self.dir, "chan ")
        return f"{prefix}{self.elem}"


@dataclasses.dataclass(eq=False)
class Tuple(Type):
    vars: list[Var] = dataclasses.field(default_factory=list)

    def __len__(self) -> int:
        return len(self.vars)

    def types(self) -> list[Type]:
        return [v.type or INVALID for v in self.vars]

    def render(self, variadic: bool = False) -> str:
        parts = []
        for i, v in enumerate(self.vars):
            typ = v.type or INVALID
            if variadic and i == len(self.vars) - 1 and isinstance(typ, Slice):
                typ_str = f"...{typ.elem}"
            else:
                typ_str = str(typ)
            parts.append(f"{v.name} {typ_str}" if v.name else typ_str)
        return "(" + ", ".join(parts) + ")"

    def __str__(self) -> str:
        return self.render()


@dataclasses.dataclass(eq=False)
class Signature(Type):
    params: Tuple = dataclasses.field(default_factory=Tuple)
    results: Tuple = dataclasses.field(default_factory=Tuple)
    variadic: bool = False
    recv: Var | None = None
    type_params: list[TypeParam] = dataclasses.field(default_factory=list)

    def __str__(self) -> str:
        out = "func"
        if self.type_params:
            out += "[" + ", ".join(f"{tp} {tp.constraint}" for tp in self.type_params) + "]"
        out += self.params.render(self.variadic)
        n = len(self.results)
        if n == 1 and not self.results.vars[0].name:
            out += f" {self.results.vars[0].type}"
        elif n:
            out += " " + self.results.render()
        return out


@dataclasses.dataclass(eq=False)
class Struct(Type):
    fields: list[Var] = dataclasses.field(default_factory=list)
    tags: list[str] = dataclasses.field(default_factory=list)

    def __str__(self) -> str:
        parts = []
        for f in self.fields:
            parts.append(str(f.type) if f.embedded else f"{f.name} {f.type}")
        return "struct{" + "; ".join(parts) + "}"


@dataclasses.dataclass(eq=False)
class Interface(Type):
    methods: list[Func] = dataclasses.field(default_factory=list)
    embeddeds: list[Type] = dataclasses.field(default_factory=list)

    def all_methods(self) -> list[Func]:
        """Explicit methods followed by those of embedded interfaces."""
        seen: set[str] = set()
        out: list[Func] = []
        stack: list[Interface] = [self]
        visited: set[int] = set()
        while stack:
            iface = stack.pop(0)
            if id(iface) in visited:
                continue
            visited.add(id(iface))
            for m in iface.methods:
                if m.name not in seen:
                    seen.add(m.name)
                    out.append(m)
            for e in iface.embeddeds:
                under = e.underlying()
                if isinstance(under, Interface):
                    stack.append(under)
        return out

    @property
    def is_empty(self) -> bool:
        return not self.methods and not self.embeddeds

    def __str__(self) -> str:
        parts = [f"{m.name}{str(m.type)[4:]}" for m in self.methods]
        parts.extend(str(e) for e in self.embeddeds)
        return "interface{" + "; ".join(parts) + "}"


@dataclasses.dataclass(eq=False)
class Union(Type):
    """A constraint type set ``~int | string``."""

    terms: list[tuple[bool, Type]] = dataclasses.field(default_factory=list)

    def __str__(self) -> str:
        return " | ".join(("~" if tilde else "") + str(t) for tilde, t in self.terms)


@dataclasses.dataclass(eq=False)
class TypeParam(Type):
    obj: TypeName
    index: int = 0
    constraint: Type | None = None

    def __str__(self) -> str:
        return self.obj.name

    def underlying(self) -> Type:
        return self

    def core(self) -> Type | None:
        """The single underlying type of the constraint's type set, if any."""
        if self.constraint is None:
            return None
        under = self.constraint.underlying()
        if isinstance(under, Interface):
            for e in under.embeddeds:
                if isinstance(e, Union) and len(e.terms) == 1:
                    return e.terms[0][1].underlying()
                if not isinstance(e.underlying(), Interface | Union):
                    return e.underlying()
        return None


@dataclasses.dataclass(eq=False)
class Named(Type):
    obj: TypeName
    _underlying: Type | None = None
    methods: list[Func] = dataclasses.field(default_factory=list)
    type_params: list[TypeParam] = dataclasses.field(default_factory=list)
    type_args: list[Type] = dataclasses.field(default_factory=list)
    orig: Named | None = None

    def underlying(self) -> Type:
        if self._underlying is None and self.orig is not None:
            base = self.orig._underlying
            if base is None:
                return INVALID
            self._underlying = subst(base, dict(zip(self.orig.type_params, self.type_args)))
        return self._underlying if self._underlying is not None else INVALID

    def set_underlying(self, t: Type) -> None:
        self._underlying = t.underlying() if t is not self else INVALID

    def origin(self) -> Named:
        return self.orig or self

    def all_methods(self) -> list[Func]:
        return self.origin().methods

    def __str__(self) -> str:
        obj = self.obj
        name = f"{obj.pkg.path}.{obj.name}" if obj.pkg is not None else obj.name
        if self.type_args:
            name += "[" + ", ".join(str(a) for a in self.type_args) + "]"
        return name


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_basic(t: Type | None, pred: str) -> bool:
    """``is_basic(t, "is_integer")`` tests the underlying basic type."""
    if t is None:
        return False
    u = t.underlying()
    return isinstance(u, Basic) and bool(getattr(u, pred))


def is_untyped(t: Type | None) -> bool:
    return isinstance(t, Basic) and t.is_untyped


def is_interface(t: Type | None) -> bool:
    return t is not None and isinstance(t.underlying(), Interface)


def is_invalid(t: Type | None) -> bool:
    return t is None or t is INVALID


def deref(t: Type) -> Type:
    if isinstance(t, Pointer):
        return t.elem
    return t


def default_type(t: Type) -> Type:
    """The type an untyped constant takes when no other type is implied."""
    if isinstance(t, Basic):
        return {
            BasicKind.UNTYPED_BOOL: TYP[BasicKind.BOOL],
            BasicKind.UNTYPED_INT: TYP[BasicKind.INT],
            BasicKind.UNTYPED_RUNE: RUNE,
            BasicKind.UNTYPED_FLOAT: TYP[BasicKind.FLOAT64],
            BasicKind.UNTYPED_COMPLEX: TYP[BasicKind.COMPLEX128],
            BasicKind.UNTYPED_STRING: TYP[BasicKind.STRING],
        }.get(t.kind, t)
    return t


def identical(x: Type | None, y: Type | None) -> bool:
    if x is y:
        return True
    if x is None or y is None:
        return False
    if isinstance(x, Basic) and isinstance(y, Basic):
        return x.kind == y.kind
    if type(x) is not type(y):
        return False
    if isinstance(x, Pointer | Slice):
        return identical(x.elem, y.elem)  # type: ignore[union-attr]
    if isinstance(x, Array):
        return x.length == y.length and identical(x.elem, y.elem)  # type: ignore[attr-defined]
    if isinstance(x, Map):
        return identical(x.key, y.key) and identical(x.elem, y.elem)  # type: ignore[attr-defined]
    if isinstance(x, Chan):
        return x.dir == y.dir and identical(x.elem, y.elem)  # type: ignore[attr-defined]
    if isinstance(x, Named):
        assert isinstance(y, Named)
        return (
            x.origin() is y.origin()
            and len(x.type_args) == len(y.type_args)
            and all(identical(a, b) for a, b in zip(x.type_args, y.type_args))
        )
    if isinstance(x, Signature):
        assert isinstance(y, Signature)
        return (
            x.variadic == y.variadic
            and _identical_tuples(x.params, y.params)
            and _identical_tuples(x.results, y.results)
        )
    if isinstance(x, Tuple):
        return _identical_tuples(x, y)  # type: ignore[arg-type]
    if isinstance(x, Struct):
        assert isinstance(y, Struct)
        return len(x.fields) == len(y.fields) and all(
            a.name == b.name and a.embedded == b.embedded and identical(a.type, b.type)
            for a, b in zip(x.fields, y.fields)
        )
    if isinstance(x, Interface):
        assert isinstance(y, Interface)
        xm = sorted(x.all_methods(), key=lambda m: m.name)
        ym = sorted(y.all_methods(), key=lambda m: m.name)
        return len(xm) == len(ym) and all(
            a.name == b.name and identical(a.type, b.type) for a, b in zip(xm, ym)
        )
    return False


def _identical_tuples(x: Tuple, y: Tuple) -> bool:
    return len(x) == len(y) and all(identical(a, b) for a, b in zip(x.types(), y.types()))


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def lookup_field_or_method(t: Type, name: str) -> tuple[Any | None, bool]:
    """Find the field or method ``name`` of ``t``.

    Searches breadth-first through embedded fields, so the shallowest
    match wins. Returns ``(object, indirect)`` where ``indirect`` tells
    whether a pointer was followed on the way; ``(None, False)`` if absent.
    """
    start = t
    indirect = False
    if isinstance(start, Pointer):
        start = start.elem
        indirect = True
    current: list[tuple[Type, bool]] = [(start, indirect)]
    seen: set[int] = set()
    while current:
        following: list[tuple[Type, bool]] = []
        for typ, ind in current:
            if isinstance(typ, Named):
                key = id(typ.origin())
                if key in seen:
                    continue
                seen.add(key)
                for m in typ.all_methods():
                    if m.name == name:
                        return m, ind
            under = typ.underlying()
            if isinstance(under, TypeParam):
                under = (under.constraint or INVALID).underlying()
            if isinstance(under, Struct):
                for f in under.fields:
                    if f.name == name:
                        return f, ind
                    if f.embedded and f.type is not None:
                        ft = f.type
                        if isinstance(ft, Pointer):
                            following.append((ft.elem, True))
                        else:
                            following.append((ft, ind))
            elif isinstance(under, Interface):
                for m in under.all_methods():
                    if m.name == name:
                        return m, ind
        current = following
    return None, False


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------


def subst(t: Type, mapping: dict[TypeParam, Type]) -> Type:
    """Replace type parameters in ``t`` according to ``mapping``."""
    if not mapping:
        return t
    if isinstance(t, TypeParam):
        return mapping.get(t, t)
    if isinstance(t, Pointer):
        return Pointer(subst(t.elem, mapping))
    if isinstance(t, Slice):
        return Slice(subst(t.elem, mapping))
    if isinstance(t, Array):
        return Array(subst(t.elem, mapping), t.length)
    if isinstance(t, Map):
        return Map(subst(t.key, mapping), subst(t.elem, mapping))
    if isinstance(t, Chan):
        return Chan(subst(t.elem, mapping), t.dir)
    if isinstance(t, Tuple):
        return Tuple([_subst_var(v, mapping) for v in t.vars])
    if isinstance(t, Signature):
        return Signature(
            params=subst(t.params, mapping),  # type: ignore[arg-type]
            results=subst(t.results, mapping),  # type: ignore[arg-type]
            variadic=t.variadic,
            recv=t.recv,
        )
    if isinstance(t, Struct):
        return Struct([_subst_var(f, mapping) for f in t.fields], list(t.tags))
    if isinstance(t, Named) and t.type_args:
        return instantiate(t.origin(), [subst(a, mapping) for a in t.type_args])
    return t


def _subst_var(v: Var, mapping: dict[TypeParam, Type]) -> Var:
    if v.type is None:
        return v
    new_type = subst(v.type, mapping)
    if new_type is v.type:
        return v
    return dataclasses.replace(v, type=new_type, origin=v.origin or v)


def instantiate(generic: Named, args: list[Type]) -> Named:
    """An instance of ``generic`` with the given type arguments."""
    return Named(obj=generic.obj, type_args=list(args), orig=generic)


def unify(param: Type, arg: Type, mapping: dict[TypeParam, Type]) -> None:
    """Bind type parameters in ``param`` by structural match against ``arg``."""
    if isinstance(param, TypeParam):
        if param not in mapping and not is_invalid(arg):
            mapping[param] = default_type(arg)
        return
    if isinstance(param, Pointer | Slice) and type(arg.underlying()) is type(param):
        unify(param.elem, arg.underlying().elem, mapping)  # type: ignore[attr-defined]
    elif isinstance(param, Array) and isinstance(arg.underlying(), Array):
        unify(param.elem, arg.underlying().elem, mapping)  # type: ignore[attr-defined]
    elif isinstance(param, Map) and isinstance(arg.underlying(), Map):
        am = arg.underlying()
        unify(param.key, am.key, mapping)  # type: ignore[attr-defined]
        unify(param.elem, am.elem, mapping)  # type: ignore[attr-defined]
    elif isinstance(param, Chan) and isinstance(arg.underlying(), Chan):
        unify(param.elem, arg.underlying().elem, mapping)  # type: ignore[attr-defined]
    elif isinstance(param, Signature) and isinstance(arg.underlying(), Signature):
        asig = arg.underlying()
        for p, a in zip(param.params.types(), asig.params.types()):  # type: ignore[attr-defined]
            unify(p, a, mapping)
        for p, a in zip(param.results.types(), asig.results.types()):  # type: ignore[attr-defined]
            unify(p, a, mapping)
    elif isinstance(param, Named) and isinstance(arg, Named):
        for p, a in zip(param.type_args, arg.type_args):
            unify(p, a, mapping)
