"""Reduce types and type expressions to their base type.

The base type of a container is the type of what it ultimately holds:
array and slice elements, pointer targets and map values are unwrapped
until a non-container type is reached. Map keys are not followed by
``type_base_type``; ``type_component_types`` reports them too.
"""

from __future__ import annotations

from goxref.check.typesys import Array, Map, Pointer, Slice, Type
from goxref.syntax import ast


def type_base_type(t: Type | None) -> Type | None:
    """Strip array, slice, pointer and map wrappers from ``t``."""
    while True:
        if isinstance(t, Array | Slice):
            t = t.elem
        elif isinstance(t, Pointer):
            t = t.elem
        elif isinstance(t, Map):
            t = t.elem
        else:
            return t


def ast_base_type(e: ast.Expr) -> ast.Expr:
    """Syntactic counterpart of ``type_base_type`` for type expressions."""
    while True:
        if isinstance(e, ast.ArrayType):
            e = e.elt
        elif isinstance(e, ast.MapType):
            e = e.value
        elif isinstance(e, ast.StarExpr):
            e = e.x
        else:
            return e


def type_component_types(t: Type | None) -> tuple[Type, ...]:
    """Every non-container component of ``t``, map keys included.

    ``map[K][]*V`` yields ``(K, V)``; a non-container type yields itself.
    """
    if t is None:
        return ()
    if isinstance(t, Array | Slice | Pointer):
        return type_component_types(t.elem)
    if isinstance(t, Map):
        return type_component_types(t.key) + type_component_types(t.elem)
    return (t,)
