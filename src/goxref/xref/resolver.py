"""Turn one identifier or selector occurrence into a cross-reference."""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal

import structlog

from goxref.check.objects import Const, Func, Package
from goxref.check.universe import is_universe
from goxref.syntax import ast
from goxref.syntax.printer import pretty
from goxref.syntax.token import Position
from goxref.xref.context import ResolutionContext
from goxref.xref.models import CrossReference

log = structlog.get_logger(__name__)

Visit = Callable[[CrossReference], bool]
DiagnosticSink = Callable[[Position | None, str], None]
ConstantPositions = Literal["oracle", "skip"]


class Resolver:
    """Resolves occurrences against a ``ResolutionContext``.

    Args:
        context: Checker results for the package being traversed.
        visit: Receives each record; returning False stops the traversal.
        sink: Optional receiver of diagnostics.
        constant_positions: ``"oracle"`` trusts the checker's positions for
            constants; ``"skip"`` drops every non-universe constant.
    """

    def __init__(
        self,
        context: ResolutionContext,
        visit: Visit,
        *,
        sink: DiagnosticSink | None = None,
        constant_positions: ConstantPositions = "oracle",
    ) -> None:
        self.context = context
        self.visit = visit
        self.sink = sink
        self.constant_positions = constant_positions

    def diagnose(self, pos: Position | None, msg: str) -> None:
        log.debug("xref_diagnostic", pos=str(pos) if pos is not None else None, msg=msg)
        if self.sink is not None:
            self.sink(pos, msg)

    def resolve(self, expr: ast.Expr, local: bool, *, declares_init: bool = False) -> bool:
        """Resolve ``expr`` and hand the record to the consumer.

        Args:
            expr: An ``Ident``, or a ``SelectorExpr`` resolved by its member.
            local: The occurrence is inside a function body.
            declares_init: ``expr`` names a receiverless ``init`` function,
                which gets a declaration object of its own.

        Returns:
            False when the consumer asked to stop, True otherwise.
        """
        if isinstance(expr, ast.Ident):
            if expr.name == "_":
                return True
            ident = expr
        elif isinstance(expr, ast.SelectorExpr):
            ident = expr.sel
        else:
            self.diagnose(getattr(expr, "pos", None), f"cannot resolve {pretty(expr)}")
            return True

        ctx = self.context
        obj, typ = ctx.expr_info(ident)
        if obj is None and declares_init:
            obj = Func("init", pos=ident.pos, pkg=ctx.package, type=typ)
        if obj is None:
            self.diagnose(ident.pos, f"no object for {pretty(expr)}")
            return True

        universe = is_universe(obj)
        refer_pos: Position | None = None
        if not universe:
            if isinstance(obj, Const) and self.constant_positions == "skip":
                self.diagnose(ident.pos, f"skipping constant {pretty(expr)}")
                return True
            refer_pos = obj.pos
            if refer_pos is None and not isinstance(obj, Package):
                if not (declares_init or obj.name == "init"):
                    self.diagnose(ident.pos, f"no declaration for {pretty(expr)}")
                return True

        xref = CrossReference(
            expr=expr,
            ident=ident,
            expr_type=typ,
            package=ctx.package,
            file=ctx.file,
            refer_pos=refer_pos,
            refer_obj=obj,
            universe=universe,
        )
        if local:
            if xref.is_decl:
                xref.local = True
                ctx.mark_local(obj)
            else:
                xref.local = ctx.is_local(obj)
        return self.visit(xref)

