"""Declared objects.

An object is what an identifier is bound to: a package, constant, type name,
variable, function, label, builtin or nil. Objects compare by identity, so
they can be used as dictionary keys for per-run bookkeeping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from goxref.syntax.token import Position

if TYPE_CHECKING:
    from goxref.check.scope import Scope
    from goxref.check.typesys import Type, TypeParam


@dataclass(eq=False, repr=False)
class Object:
    """Base of every declared entity."""

    name: str
    pos: Position | None = None
    pkg: Package | None = None
    type: Type | None = None
    parent: Scope | None = None
    # Original declaration when this object is an instantiated copy or a
    # type switch clause variable.
    origin: Object | None = None

    @property
    def exported(self) -> bool:
        return bool(self.name) and self.name[0].isupper()

    @property
    def kind(self) -> str:
        return type(self).__name__.lower()

    def qualified_name(self) -> str:
        if self.pkg is None or isinstance(self, Package):
            return self.name
        return f"{self.pkg.path}.{self.name}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.qualified_name()}>"

    def __str__(self) -> str:
        if self.type is None:
            return f"{self.kind} {self.qualified_name()}"
        return f"{self.kind} {self.qualified_name()} {self.type}"


@dataclass(eq=False, repr=False)
class Package(Object):
    """A checked package. Its own package clause binds to it."""

    path: str = ""
    scope: Scope | None = None
    imports: list[Package] = field(default_factory=list)
    # Set for placeholders created when an import could not be loaded.
    fake: bool = False

    def __post_init__(self) -> None:
        if self.pkg is None:
            self.pkg = self

    def __str__(self) -> str:
        return f"package {self.name} ({self.path!r})"


@dataclass(eq=False, repr=False)
class PkgName(Object):
    """The name an import declares in its file scope."""

    imported: Package | None = None

    @property
    def kind(self) -> str:
        return "pkgname"


@dataclass(eq=False, repr=False)
class Const(Object):
    val: Any = None


@dataclass(eq=False, repr=False)
class TypeName(Object):
    @property
    def kind(self) -> str:
        return "type"

    @property
    def is_alias(self) -> bool:
        from goxref.check.typesys import Named, TypeParam

        t = self.type
        if isinstance(t, Named):
            return t.obj is not self
        if isinstance(t, TypeParam):
            return t.obj is not self
        return t is not None


@dataclass(eq=False, repr=False)
class Var(Object):
    is_field: bool = False
    embedded: bool = False
    is_param: bool = False

    @property
    def kind(self) -> str:
        return "field" if self.is_field else "var"


@dataclass(eq=False, repr=False)
class Func(Object):
    # Type parameters declared by a generic method's receiver.
    recv_type_params: list[TypeParam] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "func"

    @property
    def is_method(self) -> bool:
        from goxref.check.typesys import Signature

        return isinstance(self.type, Signature) and self.type.recv is not None


@dataclass(eq=False, repr=False)
class Label(Object):
    pass


@dataclass(eq=False, repr=False)
class Builtin(Object):
    """A predeclared function such as ``len`` or ``panic``."""


@dataclass(eq=False, repr=False)
class Nil(Object):
    pass
