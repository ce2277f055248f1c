"""The universe scope and the built-in ``unsafe`` package.

``UNIVERSE.lookup(name) is obj`` is how callers tell a predeclared object
from a user declaration that happens to share its name.
"""

from __future__ import annotations

from goxref.check.objects import Builtin, Const, Func, Nil, Package, TypeName, Var
from goxref.check.scope import Scope
from goxref.check.typesys import (
    BYTE,
    RUNE,
    TYP,
    BasicKind,
    Interface,
    Named,
    Signature,
    Tuple,
)

UNIVERSE = Scope(None, "universe")

BUILTIN_FUNCS = (
    "append",
    "cap",
    "clear",
    "close",
    "complex",
    "copy",
    "delete",
    "imag",
    "len",
    "make",
    "max",
    "min",
    "new",
    "panic",
    "print",
    "println",
    "real",
    "recover",
)

UNSAFE_FUNCS = ("Alignof", "Offsetof", "Sizeof", "Add", "Slice", "String", "StringData", "SliceData")

_BASIC_NAMES = (
    BasicKind.BOOL,
    BasicKind.INT,
    BasicKind.INT8,
    BasicKind.INT16,
    BasicKind.INT32,
    BasicKind.INT64,
    BasicKind.UINT,
    BasicKind.UINT8,
    BasicKind.UINT16,
    BasicKind.UINT32,
    BasicKind.UINT64,
    BasicKind.UINTPTR,
    BasicKind.FLOAT32,
    BasicKind.FLOAT64,
    BasicKind.COMPLEX64,
    BasicKind.COMPLEX128,
    BasicKind.STRING,
)


def _define_types() -> tuple[Named, Interface]:
    for kind in _BASIC_NAMES:
        typ = TYP[kind]
        UNIVERSE.insert(TypeName(typ.name, type=typ))
    UNIVERSE.insert(TypeName("byte", type=BYTE))
    UNIVERSE.insert(TypeName("rune", type=RUNE))

    # type error interface { Error() string }
    error_obj = TypeName("error")
    error_type = Named(obj=error_obj)
    error_obj.type = error_type
    result = Var("", type=TYP[BasicKind.STRING])
    sig = Signature(results=Tuple([result]), recv=Var("", type=error_type))
    method = Func("Error", type=sig)
    error_type.set_underlying(Interface(methods=[method]))
    UNIVERSE.insert(error_obj)

    any_type = Interface()
    UNIVERSE.insert(TypeName("any", type=any_type))
    comparable_obj = TypeName("comparable")
    comparable_obj.type = Named(obj=comparable_obj, _underlying=Interface())
    UNIVERSE.insert(comparable_obj)
    return error_type, any_type


ERROR_TYPE, ANY_TYPE = _define_types()

UNIVERSE.insert(Const("true", type=TYP[BasicKind.UNTYPED_BOOL], val=True))
UNIVERSE.insert(Const("false", type=TYP[BasicKind.UNTYPED_BOOL], val=False))
UNIVERSE.insert(Const("iota", type=TYP[BasicKind.UNTYPED_INT], val=0))
UNIVERSE.insert(Nil("nil", type=TYP[BasicKind.UNTYPED_NIL]))
for _name in BUILTIN_FUNCS:
    UNIVERSE.insert(Builtin(_name))

UNSAFE = Package("unsafe", path="unsafe", scope=Scope(UNIVERSE, "package unsafe"))
UNSAFE.scope.insert(TypeName("Pointer", pkg=UNSAFE, type=TYP[BasicKind.UNSAFE_POINTER]))
for _name in UNSAFE_FUNCS:
    UNSAFE.scope.insert(Builtin(_name, pkg=UNSAFE))


def lookup(name: str):
    """Look up a predeclared name."""
    return UNIVERSE.lookup(name)


def is_universe(obj: object) -> bool:
    """True when ``obj`` is the predeclared object of its name."""
    name = getattr(obj, "name", None)
    return name is not None and UNIVERSE.lookup(name) is obj
