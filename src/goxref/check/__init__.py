"""Type checker that binds identifiers to objects and expressions to types."""

from goxref.check.checker import Checker, CheckError, Recorder
from goxref.check.importer import SourceImporter
from goxref.check.objects import (
    Builtin,
    Const,
    Func,
    Label,
    Nil,
    Object,
    Package,
    PkgName,
    TypeName,
    Var,
)
from goxref.check.scope import Scope
from goxref.check.universe import UNIVERSE, UNSAFE, is_universe

__all__ = [
    # Checking
    "CheckError",
    "Checker",
    "Recorder",
    "SourceImporter",
    # Objects
    "Builtin",
    "Const",
    "Func",
    "Label",
    "Nil",
    "Object",
    "Package",
    "PkgName",
    "TypeName",
    "Var",
    # Scopes
    "Scope",
    "UNIVERSE",
    "UNSAFE",
    "is_universe",
]
