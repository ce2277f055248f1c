"""Deterministic traversal of a package's syntax trees.

The walker decides, node by node, whether an occurrence names something
and hands it to the ``Resolver``. It tracks whether the traversal is inside
a function body and stops for good once the consumer declines a record or
an unsupported import is met; records already emitted stand.
"""

from __future__ import annotations

from collections.abc import Iterable

from goxref.core.errors import InternalError
from goxref.syntax import ast
from goxref.xref.resolver import Resolver


class Walker:
    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver
        self.ok = True
        self.local = False

    def walk_files(self, files: Iterable[ast.File]) -> bool:
        """Walk ``files`` in the order given. False if the walk was stopped.

        Raises:
            InternalError: The context was never filled by a checker run.
        """
        if self.resolver.context.package is None:
            raise InternalError.unexpected("walk started before the package was checked")
        for f in files:
            if not self.ok:
                break
            self.walk(f)
        return self.ok

    def walk(self, node: ast.Node) -> None:
        ast.walk(self.visit, node)

    def _resolve(self, expr: ast.Expr, local: bool, *, declares_init: bool = False) -> None:
        if not self.resolver.resolve(expr, local, declares_init=declares_init):
            self.ok = False

    def visit(self, n: ast.Node) -> bool:
        """Handle ``n``; True asks for generic recursion into its children."""
        if not self.ok:
            return False

        if isinstance(n, ast.ImportSpec):
            if n.name is not None and n.name.name == ".":
                self.resolver.diagnose(n.pos, "import to . not supported")
                self.ok = False
                return False
            return True

        if isinstance(n, ast.FuncDecl):
            self.func_decl(n)
            return False

        if isinstance(n, ast.FuncLit):
            saved = self.local
            self.local = True
            self.walk(n.type)
            self.walk(n.body)
            self.local = saved
            return False

        if isinstance(n, ast.Ident):
            self._resolve(n, self.local)
            return False

        if isinstance(n, ast.KeyValueExpr):
            # The key may be a map key or a struct field name; only the
            # value is resolved.
            self.walk(n.value)
            return False

        if isinstance(n, ast.SelectorExpr):
            self.walk(n.x)
            if self.ok:
                self._resolve(n, self.local)
            return False

        if isinstance(n, ast.File):
            ctx = self.resolver.context
            ctx.file = n
            self._resolve(n.name, False)
            for d in n.decls:
                if not self.ok:
                    break
                self.walk(d)
            ctx.file = None
            return False

        return True

    def func_decl(self, n: ast.FuncDecl) -> None:
        self.local = True
        if n.recv is not None:
            self.walk(n.recv)
        expr: ast.Expr | None = n.name
        if n.recv is not None:
            if len(n.recv.list) != 1 or n.recv.list[0].type is None:
                self.resolver.diagnose(n.pos, "expected one receiver only!")
                expr = None
            else:
                expr = ast.SelectorExpr(x=n.recv.list[0].type, sel=n.name)
        if expr is not None and self.ok:
            init = n.recv is None and n.name.name == "init"
            self._resolve(expr, False, declares_init=init)
        if self.ok:
            self.walk(n.type)
        if n.body is not None and self.ok:
            self.walk(n.body)
        self.local = False
