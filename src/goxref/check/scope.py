"""Lexical scopes."""

from __future__ import annotations

from goxref.check.objects import Object


class Scope:
    """A block of declarations, linked to its enclosing scope."""

    def __init__(self, parent: Scope | None = None, comment: str = "", *, func: bool = False):
        self.parent = parent
        self.comment = comment
        self.func = func
        self.elems: dict[str, Object] = {}
        self.children: list[Scope] = []
        if parent is not None:
            parent.children.append(self)

    def __len__(self) -> int:
        return len(self.elems)

    def __contains__(self, name: str) -> bool:
        return name in self.elems

    def __repr__(self) -> str:
        return f"<Scope {self.comment} ({len(self.elems)} names)>"

    def names(self) -> list[str]:
        return sorted(self.elems)

    def lookup(self, name: str) -> Object | None:
        """Look up ``name`` in this scope only."""
        return self.elems.get(name)

    def lookup_parent(self, name: str) -> tuple[Scope | None, Object | None]:
        """Look up ``name`` here and in enclosing scopes."""
        s: Scope | None = self
        while s is not None:
            obj = s.elems.get(name)
            if obj is not None:
                return s, obj
            s = s.parent
        return None, None

    def insert(self, obj: Object) -> Object | None:
        """Insert ``obj``; returns the existing object on a name clash."""
        existing = self.elems.get(obj.name)
        if existing is not None:
            return existing
        self.elems[obj.name] = obj
        if obj.parent is None:
            obj.parent = self
        return None

    def innermost_func(self) -> Scope | None:
        """The closest enclosing function scope, or None at package level."""
        s: Scope | None = self
        while s is not None:
            if s.func:
                return s
            s = s.parent
        return None
