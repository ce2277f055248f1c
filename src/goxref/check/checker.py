"""Scope-based Go type checker.

The checker binds every identifier of a package to the object it denotes and
computes a type for every expression, reporting both through a ``Recorder``.
It is deliberately forgiving: problems become ``CheckError`` values in the
returned list and checking carries on, so a partially broken package still
yields as much binding information as possible.

Checking runs in three phases:

1. collect: declare every package-level object and import;
2. resolve: compute the types of package-level objects on demand, type
   declarations first so that methods are attached before any value is
   checked;
3. bodies: check function bodies in declaration order.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog

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
from goxref.check.typesys import (
    BYTE,
    INVALID,
    RUNE,
    TYP,
    Array,
    Basic,
    BasicKind,
    Chan,
    Interface,
    Map,
    Named,
    Pointer,
    Signature,
    Slice,
    Struct,
    Tuple,
    Type,
    TypeParam,
    Union,
    default_type,
    deref,
    identical,
    instantiate,
    is_basic,
    is_interface,
    is_untyped,
    lookup_field_or_method,
    subst,
    unify,
)
from goxref.check.universe import ANY_TYPE, UNIVERSE, UNSAFE
from goxref.core.errors import ImportFailure
from goxref.syntax import ast
from goxref.syntax.printer import pretty
from goxref.syntax.token import Position, format_position

log = structlog.get_logger(__name__)

# Operand modes
INVALID_MODE = "invalid"
NOVALUE = "novalue"
BUILTIN = "builtin"
TYPEXPR = "typexpr"
CONSTANT = "constant"
VARIABLE = "variable"
MAPINDEX = "mapindex"
VALUE = "value"
COMMAOK = "commaok"

_COMPARISONS = frozenset({"==", "!=", "<", "<=", ">", ">="})
_INTEGER_OPS = frozenset({"%", "&", "|", "^", "&^"})
_UNTYPED_RANK = {
    BasicKind.UNTYPED_INT: 0,
    BasicKind.UNTYPED_RUNE: 1,
    BasicKind.UNTYPED_FLOAT: 2,
    BasicKind.UNTYPED_COMPLEX: 3,
}
_MAX_SHIFT = 10_000


class Recorder(Protocol):
    """Receives the checker's results."""

    def record_ident(self, ident: ast.Ident, obj: Object) -> None: ...

    def record_expr(self, expr: ast.Expr, typ: Type, value: Any) -> None: ...


class Importer(Protocol):
    def import_package(self, path: str, src_dir: str | None = None) -> Package: ...


@dataclass(frozen=True)
class CheckError:
    """A soft type error. Checking continues past it."""

    pos: Position | None
    msg: str

    def __str__(self) -> str:
        return f"{format_position(self.pos)}: {self.msg}"


class _NullRecorder:
    def record_ident(self, ident: ast.Ident, obj: Object) -> None:
        pass

    def record_expr(self, expr: ast.Expr, typ: Type, value: Any) -> None:
        pass


@dataclass
class Operand:
    mode: str
    type: Type = INVALID
    val: Any = None
    obj: Object | None = None

    @property
    def invalid(self) -> bool:
        return self.mode == INVALID_MODE


def _invalid() -> Operand:
    return Operand(INVALID_MODE)


@dataclass
class _DeclInfo:
    scope: Scope
    spec: ast.TypeSpec | None = None
    type_expr: ast.Expr | None = None
    init: ast.Expr | None = None
    lhs: list[Var] | None = None
    iota: int = 0
    fdecl: ast.FuncDecl | None = None
    name: ast.Ident | None = None


@dataclass
class _FuncContext:
    sig: Signature
    labels: dict[str, Label] = field(default_factory=dict)


class Checker:
    """Type-checks packages, loading imports through ``importer``."""

    def __init__(self, importer: Importer | None = None) -> None:
        self.importer = importer

    def check(
        self,
        import_path: str,
        files: Sequence[ast.File],
        recorder: Recorder | None = None,
        *,
        src_dir: str | None = None,
    ) -> tuple[Package, list[CheckError]]:
        """Check one package.

        Args:
            import_path: Path the package is known by; defaults to its name.
            files: Parsed files of the package, in the order to check them.
            recorder: Receives identifier bindings and expression types.
            src_dir: Directory relative imports are resolved against.

        Returns:
            The checked package and the soft errors found.
        """
        run = _Check(self.importer, import_path, recorder or _NullRecorder(), src_dir)
        pkg = run.check_files(list(files))
        log.debug("check.done", path=pkg.path, files=len(files), errors=len(run.errors))
        return pkg, run.errors


class _Check:
    """State of one package check."""

    def __init__(
        self, importer: Importer | None, import_path: str, recorder: Recorder, src_dir: str | None
    ) -> None:
        self.importer = importer
        self.import_path = import_path
        self.recorder = recorder
        self.src_dir = src_dir
        self.errors: list[CheckError] = []
        self.pkg: Package = Package("")
        self.decl_info: dict[Object, _DeclInfo] = {}
        self.order: list[Object] = []
        self.resolving: set[Object] = set()
        self.methods: dict[str, list[Func]] = {}
        self.attached: set[str] = set()
        self.bodies: list[tuple[ast.BlockStmt, Scope, Signature]] = []
        self.fake_pkgs: dict[str, Package] = {}
        self.iota: int | None = None
        self.func_ctx: _FuncContext | None = None

    def error(self, pos: Position | None, msg: str) -> None:
        self.errors.append(CheckError(pos, msg))

    # -- phases -------------------------------------------------------------

    def check_files(self, files: list[ast.File]) -> Package:
        name = files[0].name.name if files else ""
        path = self.import_path or name
        self.pkg = Package(name, path=path, scope=Scope(UNIVERSE, f"package {path}"))
        for f in files:
            self.collect_objects(f)
        for obj in self.order:
            if isinstance(obj, TypeName):
                self.obj_decl(obj)
        for obj in self.order:
            self.obj_decl(obj)
        for base, funcs in self.methods.items():
            if base in self.attached:
                continue
            obj = self.pkg.scope.lookup(base)  # type: ignore[union-attr]
            if obj is None:
                self.error(funcs[0].pos, f"undefined: {base}")
            else:
                self.error(funcs[0].pos, f"cannot define new methods on non-local type {base}")
        while self.bodies:
            body, scope, sig = self.bodies.pop(0)
            self.func_body(body, scope, sig)
        return self.pkg

    def collect_objects(self, f: ast.File) -> None:
        if f.name.name != self.pkg.name:
            self.error(f.name.pos, f"package {f.name.name}; expected package {self.pkg.name}")
        self.recorder.record_ident(f.name, self.pkg)
        fscope = Scope(self.pkg.scope, f"file {f.filename}")
        pkg_scope = self.pkg.scope
        assert pkg_scope is not None
        for decl in f.decls:
            if isinstance(decl, ast.GenDecl):
                if decl.tok == "import":
                    for spec in decl.specs:
                        if isinstance(spec, ast.ImportSpec):
                            self.import_spec(spec, fscope)
                elif decl.tok == "const":
                    for obj, info in self.const_objects(decl, fscope):
                        self.decl_info[obj] = info
                        self.order.append(obj)
                        self.declare(pkg_scope, info.name, obj)
                elif decl.tok == "var":
                    for name, obj, info in self.var_objects(decl, fscope):
                        self.decl_info[obj] = info
                        self.order.append(obj)
                        self.declare(pkg_scope, name, obj)
                elif decl.tok == "type":
                    for spec in decl.specs:
                        if not isinstance(spec, ast.TypeSpec):
                            continue
                        obj = TypeName(spec.name.name, pos=spec.name.pos, pkg=self.pkg)
                        self.decl_info[obj] = _DeclInfo(fscope, spec=spec)
                        self.order.append(obj)
                        self.declare(pkg_scope, spec.name, obj)
            elif isinstance(decl, ast.FuncDecl):
                self.collect_func(decl, fscope)

    def collect_func(self, decl: ast.FuncDecl, fscope: Scope) -> None:
        name = decl.name
        obj = Func(name.name, pos=name.pos, pkg=self.pkg)
        self.decl_info[obj] = _DeclInfo(fscope, fdecl=decl)
        self.order.append(obj)
        if decl.recv is None:
            if name.name == "init":
                # init functions are not declared; any number may exist.
                return
            if name.name == "_":
                self.recorder.record_ident(name, obj)
                return
            self.declare(self.pkg.scope, name, obj)  # type: ignore[arg-type]
            return
        self.recorder.record_ident(name, obj)
        base = _receiver_base_name(decl.recv)
        if base is not None:
            self.methods.setdefault(base, []).append(obj)

    def import_spec(self, spec: ast.ImportSpec, fscope: Scope) -> None:
        path = spec.import_path
        if not path:
            self.error(spec.path.pos, "invalid import path: (empty string)")
            return
        imported = self.import_package(path, spec)
        name = spec.name.name if spec.name is not None else imported.name
        if name == "_":
            return
        if name == ".":
            assert imported.scope is not None
            for obj in imported.scope.elems.values():
                if obj.exported:
                    fscope.insert(obj)
            return
        pos = spec.name.pos if spec.name is not None else spec.path.pos
        pkgname = PkgName(name, pos=pos, pkg=self.pkg, imported=imported)
        self.declare(fscope, spec.name, pkgname)
        if imported not in self.pkg.imports:
            self.pkg.imports.append(imported)

    def import_package(self, path: str, spec: ast.ImportSpec) -> Package:
        if path == "unsafe":
            return UNSAFE
        if path != "C":
            if self.importer is None:
                self.error(spec.path.pos, f"could not import {path} (no importer)")
            else:
                try:
                    return self.importer.import_package(path, self.src_dir)
                except ImportFailure as e:
                    self.error(spec.path.pos, f"could not import {path} ({e.message})")
        fake = self.fake_pkgs.get(path)
        if fake is None:
            name = path.rstrip("/").rsplit("/", 1)[-1]
            fake = Package(name, path=path, scope=Scope(UNIVERSE, f"package {path}"), fake=True)
            self.fake_pkgs[path] = fake
        return fake

    def declare(self, scope: Scope, ident: ast.Ident | None, obj: Object) -> None:
        if ident is not None:
            self.recorder.record_ident(ident, obj)
        if obj.name == "_":
            return
        existing = scope.insert(obj)
        if existing is not None:
            self.error(obj.pos, f"{obj.name} redeclared in this block")

    def const_objects(self, decl: ast.GenDecl, scope: Scope) -> list[tuple[Const, _DeclInfo]]:
        out: list[tuple[Const, _DeclInfo]] = []
        last: ast.ValueSpec | None = None
        for iota, spec in enumerate(decl.specs):
            if not isinstance(spec, ast.ValueSpec):
                continue
            if spec.type is not None or spec.values:
                last = spec
            for j, name in enumerate(spec.names):
                obj = Const(name.name, pos=name.pos, pkg=self.pkg)
                init = last.values[j] if last is not None and j < len(last.values) else None
                info = _DeclInfo(
                    scope,
                    type_expr=last.type if last is not None else None,
                    init=init,
                    iota=iota,
                    name=name,
                )
                out.append((obj, info))
        return out

    def var_objects(
        self, decl: ast.GenDecl, scope: Scope
    ) -> list[tuple[ast.Ident, Var, _DeclInfo]]:
        out: list[tuple[ast.Ident, Var, _DeclInfo]] = []
        for spec in decl.specs:
            if not isinstance(spec, ast.ValueSpec):
                continue
            objs = [Var(n.name, pos=n.pos, pkg=self.pkg) for n in spec.names]
            if len(spec.values) == 1 and len(objs) > 1:
                shared = _DeclInfo(scope, type_expr=spec.type, init=spec.values[0], lhs=objs)
                out.extend((n, o, shared) for n, o in zip(spec.names, objs))
                continue
            if spec.values and len(spec.values) != len(objs):
                self.error(
                    spec.pos,
                    f"assignment mismatch: {len(objs)} variables but {len(spec.values)} values",
                )
            for j, (name, obj) in enumerate(zip(spec.names, objs)):
                init = spec.values[j] if j < len(spec.values) else None
                out.append((name, obj, _DeclInfo(scope, type_expr=spec.type, init=init)))
        return out

    # -- package-level objects ------------------------------------------------

    def obj_decl(self, obj: Object) -> None:
        if obj.type is not None:
            return
        info = self.decl_info.get(obj)
        if info is None:
            return
        if obj in self.resolving:
            self.error(obj.pos, f"invalid recursive reference to {obj.name}")
            obj.type = INVALID
            return
        self.resolving.add(obj)
        try:
            if isinstance(obj, TypeName):
                self.type_decl(obj, info)
            elif isinstance(obj, Const):
                self.const_decl(obj, info)
            elif isinstance(obj, Var):
                self.var_decl(obj, info)
            elif isinstance(obj, Func):
                self.func_decl(obj, info)
        finally:
            self.resolving.discard(obj)

    def type_decl(self, obj: TypeName, info: _DeclInfo) -> None:
        spec = info.spec
        assert spec is not None
        if spec.assign and spec.type_params is None:
            obj.type = self.typ_expr(spec.type, info.scope)
            return
        named = Named(obj=obj)
        obj.type = named
        scope = info.scope
        if spec.type_params is not None:
            scope = Scope(info.scope, f"type {obj.name}")
            named.type_params = self.declare_type_params(spec.type_params, scope)
        if obj.parent is self.pkg.scope:
            named.methods = self.methods.get(obj.name, [])
            self.attached.add(obj.name)
        named.set_underlying(self.typ_expr(spec.type, scope))

    def const_decl(self, obj: Const, info: _DeclInfo) -> None:
        saved = self.iota
        self.iota = info.iota
        try:
            typ = self.typ_expr(info.type_expr, info.scope) if info.type_expr is not None else None
            if info.init is None:
                self.error(obj.pos, "missing init expr for const declaration")
                obj.type = typ or INVALID
                return
            x = self.expr(info.init, info.scope)
            if x.invalid:
                obj.type = typ or INVALID
                return
            if x.mode != CONSTANT:
                self.error(info.init.pos, f"{pretty(info.init)} is not constant")
            if typ is not None:
                self.assign_to(x, typ, info.init, "constant declaration")
                obj.type = typ
            else:
                obj.type = x.type
            obj.val = x.val
        finally:
            self.iota = saved

    def var_decl(self, obj: Var, info: _DeclInfo) -> None:
        typ = self.typ_expr(info.type_expr, info.scope) if info.type_expr is not None else None
        if info.lhs is not None:
            assert info.init is not None
            types = self.multi_value(info.init, info.scope, len(info.lhs))
            for v, t in zip(info.lhs, types):
                v.type = typ or default_type(t)
            return
        if info.init is None:
            if typ is None:
                self.error(obj.pos, f"missing type or init expr for {obj.name}")
            obj.type = typ or INVALID
            return
        x = self.expr(info.init, info.scope, hint=typ)
        if typ is not None:
            self.assign_to(x, typ, info.init, "variable declaration")
            obj.type = typ
        else:
            obj.type = self.infer_var_type(x, info.init)

    def func_decl(self, obj: Func, info: _DeclInfo) -> None:
        decl = info.fdecl
        assert decl is not None
        fscope = Scope(info.scope, f"func {obj.name}", func=True)
        sig = self.func_type(decl.type, fscope, recv=decl.recv, func_obj=obj)
        obj.type = sig
        if decl.recv is None and decl.name.name == "init":
            if len(sig.params) or len(sig.results):
                self.error(decl.name.pos, "func init must have no arguments and no return values")
            self.recorder.record_expr(decl.name, sig, None)
        if decl.body is not None:
            self.bodies.append((decl.body, fscope, sig))

    # -- signatures -----------------------------------------------------------

    def func_type(
        self,
        ft: ast.FuncType,
        scope: Scope,
        *,
        recv: ast.FieldList | None = None,
        func_obj: Func | None = None,
    ) -> Signature:
        sig = Signature()
        if recv is not None:
            sig.recv = self.receiver(recv, scope, func_obj)
        if ft.type_params is not None:
            sig.type_params = self.declare_type_params(ft.type_params, scope)
        sig.params, sig.variadic = self.collect_params(ft.params, scope, variadic_ok=True)
        sig.results, _ = self.collect_params(ft.results, scope, variadic_ok=False)
        self.recorder.record_expr(ft, sig, None)
        return sig

    def collect_params(
        self, fl: ast.FieldList | None, scope: Scope, *, variadic_ok: bool
    ) -> tuple[Tuple, bool]:
        if fl is None:
            return Tuple(), False
        out: list[Var] = []
        variadic = False
        for i, f in enumerate(fl.list):
            texpr = f.type
            if isinstance(texpr, ast.Ellipsis):
                if not variadic_ok or i != len(fl.list) - 1 or len(f.names) > 1:
                    self.error(texpr.pos, "can only use ... with final parameter in list")
                elt = self.typ_expr(texpr.elt, scope) if texpr.elt is not None else INVALID
                typ: Type = Slice(elt)
                variadic = True
            else:
                typ = self.typ_expr(texpr, scope) if texpr is not None else INVALID
            if f.names:
                for name in f.names:
                    v = Var(name.name, pos=name.pos, pkg=self.pkg, type=typ, is_param=True)
                    self.declare(scope, name, v)
                    out.append(v)
            else:
                out.append(Var("", pos=f.pos, pkg=self.pkg, type=typ, is_param=True))
        return Tuple(out), variadic

    def receiver(self, recv: ast.FieldList, scope: Scope, func_obj: Func | None) -> Var | None:
        if not recv.list:
            self.error(recv.pos, "method has no receiver")
            return None
        if recv.num_fields() > 1:
            self.error(recv.pos, "method has multiple receivers")
        fld = recv.list[0]
        texpr = fld.type
        if texpr is None:
            return None
        outer = ast.unparen(texpr)
        star = isinstance(outer, ast.StarExpr)
        inner = ast.unparen(outer.x) if isinstance(outer, ast.StarExpr) else outer
        if isinstance(inner, ast.IndexExpr):
            generic = self.typ_expr(inner.x, scope)
            tparams: list[TypeParam] = []
            for i, idx in enumerate(inner.indices):
                if not isinstance(idx, ast.Ident):
                    self.error(idx.pos, f"receiver type parameter {pretty(idx)} must be an identifier")
                    continue
                tn = TypeName(idx.name, pos=idx.pos, pkg=self.pkg)
                constraint = None
                if isinstance(generic, Named) and i < len(generic.type_params):
                    constraint = generic.type_params[i].constraint
                tp = TypeParam(obj=tn, index=i, constraint=constraint)
                tn.type = tp
                self.declare(scope, idx, tn)
                self.recorder.record_expr(idx, tp, None)
                tparams.append(tp)
            rtype: Type = instantiate(generic, list(tparams)) if isinstance(generic, Named) else INVALID
            self.recorder.record_expr(inner, rtype, None)
            if star:
                rtype = Pointer(rtype)
                self.recorder.record_expr(outer, rtype, None)
            if func_obj is not None:
                func_obj.recv_type_params = tparams
        else:
            rtype = self.typ_expr(texpr, scope)
        name = fld.names[0] if fld.names else None
        v = Var(
            name.name if name is not None else "",
            pos=name.pos if name is not None else fld.pos,
            pkg=self.pkg,
            type=rtype,
            is_param=True,
        )
        if name is not None:
            self.declare(scope, name, v)
        return v

    def declare_type_params(self, fl: ast.FieldList, scope: Scope) -> list[TypeParam]:
        groups: list[tuple[ast.Field, list[TypeParam]]] = []
        tparams: list[TypeParam] = []
        for f in fl.list:
            group: list[TypeParam] = []
            for name in f.names:
                tn = TypeName(name.name, pos=name.pos, pkg=self.pkg)
                tp = TypeParam(obj=tn, index=len(tparams))
                tn.type = tp
                self.declare(scope, name, tn)
                tparams.append(tp)
                group.append(tp)
            groups.append((f, group))
        # Constraints may refer to any parameter of the list.
        for f, group in groups:
            constraint = self.constraint_type(f.type, scope) if f.type is not None else ANY_TYPE
            for tp in group:
                tp.constraint = constraint
        return tparams

    def constraint_type(self, e: ast.Expr, scope: Scope) -> Type:
        t = self.typ_expr(e, scope)
        if isinstance(t, Union) or not is_interface(t):
            return Interface(embeddeds=[t])
        return t

    # -- type expressions -------------------------------------------------------

    def typ_expr(self, e: ast.Expr, scope: Scope) -> Type:
        t = self._typ_internal(e, scope)
        self.recorder.record_expr(e, t, None)
        return t

    def _typ_internal(self, e: ast.Expr, scope: Scope) -> Type:
        if isinstance(e, ast.Ident):
            if e.name == "_":
                self.error(e.pos, "cannot use _ as type")
                return INVALID
            _, obj = scope.lookup_parent(e.name)
            if obj is None:
                self.error(e.pos, f"undefined: {e.name}")
                return INVALID
            self.recorder.record_ident(e, obj)
            if not isinstance(obj, TypeName):
                self.error(e.pos, f"{e.name} is not a type")
                return INVALID
            self.obj_decl(obj)
            return obj.type or INVALID
        if isinstance(e, ast.SelectorExpr):
            x = e.x
            if isinstance(x, ast.Ident):
                _, obj = scope.lookup_parent(x.name)
                if isinstance(obj, PkgName):
                    self.recorder.record_ident(x, obj)
                    imported = obj.imported
                    member = None
                    if imported is not None and imported.scope is not None:
                        member = imported.scope.lookup(e.sel.name)
                    if member is None or not member.exported:
                        if imported is None or not imported.fake:
                            self.error(e.sel.pos, f"undefined: {pretty(e)}")
                        return INVALID
                    self.recorder.record_ident(e.sel, member)
                    if not isinstance(member, TypeName):
                        self.error(e.sel.pos, f"{pretty(e)} is not a type")
                        return INVALID
                    return member.type or INVALID
            self.error(e.pos, f"{pretty(e)} is not a type")
            return INVALID
        if isinstance(e, ast.ParenExpr):
            return self.typ_expr(e.x, scope)
        if isinstance(e, ast.StarExpr):
            return Pointer(self.typ_expr(e.x, scope))
        if isinstance(e, ast.ArrayType):
            elt = self.typ_expr(e.elt, scope)
            if e.len is None:
                return Slice(elt)
            if isinstance(e.len, ast.Ellipsis):
                self.error(e.pos, "invalid use of [...] array (outside a composite literal)")
                return Array(elt, None)
            return Array(elt, self.array_length(e.len, scope))
        if isinstance(e, ast.MapType):
            return Map(self.typ_expr(e.key, scope), self.typ_expr(e.value, scope))
        if isinstance(e, ast.ChanType):
            return Chan(self.typ_expr(e.value, scope), e.dir)
        if isinstance(e, ast.FuncType):
            return self.func_type(e, Scope(scope, "func type", func=True))
        if isinstance(e, ast.StructType):
            return self.struct_type(e, scope)
        if isinstance(e, ast.InterfaceType):
            return self.interface_type(e, scope)
        if isinstance(e, ast.IndexExpr):
            base = self.typ_expr(e.x, scope)
            args = [self.typ_expr(i, scope) for i in e.indices]
            return self.instantiate_type(base, args, e)
        if isinstance(e, ast.UnaryExpr) and e.op == "~":
            return Union([(True, self.typ_expr(e.x, scope))])
        if isinstance(e, ast.BinaryExpr) and e.op == "|":
            terms: list[tuple[bool, Type]] = []
            for side in (e.x, e.y):
                t = self.typ_expr(side, scope)
                terms.extend(t.terms if isinstance(t, Union) else [(False, t)])
            return Union(terms)
        if isinstance(e, ast.BadExpr):
            return INVALID
        self.error(e.pos, f"{pretty(e)} is not a type")
        return INVALID

    def instantiate_type(self, base: Type, args: list[Type], e: ast.Expr) -> Type:
        if isinstance(base, Named) and base.type_params:
            if len(args) != len(base.type_params):
                self.error(
                    e.pos,
                    f"got {len(args)} type arguments but {base} has "
                    f"{len(base.type_params)} type parameters",
                )
                return INVALID
            return instantiate(base, args)
        if base is not INVALID:
            self.error(e.pos, f"{base} is not a generic type")
        return INVALID

    def array_length(self, e: ast.Expr, scope: Scope) -> int | None:
        x = self.expr(e, scope)
        if x.mode == CONSTANT and isinstance(x.val, int) and not isinstance(x.val, bool):
            if x.val < 0:
                self.error(e.pos, f"invalid array length {pretty(e)}")
                return None
            return x.val
        if not x.invalid:
            self.error(e.pos, f"array length {pretty(e)} must be constant")
        return None

    def struct_type(self, e: ast.StructType, scope: Scope) -> Struct:
        fields: list[Var] = []
        tags: list[str] = []
        seen: set[str] = set()
        for f in e.fields.list:
            t = self.typ_expr(f.type, scope) if f.type is not None else INVALID
            tag = ast.unquote(f.tag.value) if f.tag is not None else ""
            if f.names:
                entries = [(n.name, n.pos, n, False) for n in f.names]
            else:
                ident = _embedded_name(f.type)
                if ident is None:
                    self.error(f.pos, f"invalid embedded field type {pretty(f.type)}")
                    continue
                entries = [(ident.name, ident.pos, None, True)]
            for name, pos, ident_node, embedded in entries:
                v = Var(name, pos=pos, pkg=self.pkg, type=t, is_field=True, embedded=embedded)
                if ident_node is not None:
                    self.recorder.record_ident(ident_node, v)
                if name != "_" and name in seen:
                    self.error(pos, f"{name} redeclared")
                seen.add(name)
                fields.append(v)
                tags.append(tag)
        return Struct(fields, tags)

    def interface_type(self, e: ast.InterfaceType, scope: Scope) -> Interface:
        iface = Interface()
        for f in e.methods.list:
            if f.names and isinstance(f.type, ast.FuncType):
                name = f.names[0]
                sig = self.func_type(f.type, Scope(scope, "interface method", func=True))
                sig.recv = Var("", pkg=self.pkg, type=iface)
                m = Func(name.name, pos=name.pos, pkg=self.pkg, type=sig)
                self.recorder.record_ident(name, m)
                iface.methods.append(m)
            elif f.type is not None:
                iface.embeddeds.append(self.typ_expr(f.type, scope))
        return iface

    # -- function bodies and statements ------------------------------------------

    def func_body(self, body: ast.BlockStmt, scope: Scope, sig: Signature) -> None:
        saved = self.func_ctx
        self.func_ctx = _FuncContext(sig=sig, labels=self.collect_labels(body))
        try:
            self.stmt_list(body.list, scope)
        finally:
            self.func_ctx = saved

    def collect_labels(self, body: ast.BlockStmt) -> dict[str, Label]:
        labels: dict[str, Label] = {}

        def visit(n: ast.Node) -> bool:
            if isinstance(n, ast.FuncLit):
                return False
            if isinstance(n, ast.LabeledStmt):
                name = n.label.name
                if name in labels:
                    self.error(n.label.pos, f"label {name} already defined")
                elif name != "_":
                    labels[name] = Label(name, pos=n.label.pos, pkg=self.pkg)
            return True

        ast.walk(visit, body)
        return labels

    def stmt_list(self, stmts: list[ast.Stmt], scope: Scope) -> None:
        for s in stmts:
            self.stmt(s, scope)

    def stmt(self, s: ast.Stmt, scope: Scope) -> None:
        if isinstance(s, ast.DeclStmt):
            self.local_decl(s.decl, scope)
        elif isinstance(s, ast.LabeledStmt):
            if self.func_ctx is not None and s.label.name in self.func_ctx.labels:
                self.recorder.record_ident(s.label, self.func_ctx.labels[s.label.name])
            if s.stmt is not None:
                self.stmt(s.stmt, scope)
        elif isinstance(s, ast.ExprStmt):
            self.raw_expr(s.x, scope)
        elif isinstance(s, ast.SendStmt):
            ch = self.expr(s.chan, scope)
            hint = None
            if not ch.invalid:
                u = ch.type.underlying()
                if isinstance(u, Chan):
                    hint = u.elem
                    if u.dir == "recv":
                        self.error(s.pos, f"invalid operation: cannot send to receive-only channel {pretty(s.chan)}")
                else:
                    self.error(s.pos, f"invalid operation: cannot send to non-channel {pretty(s.chan)}")
            x = self.expr(s.value, scope, hint=hint)
            if hint is not None:
                self.assign_to(x, hint, s.value, "send")
        elif isinstance(s, ast.IncDecStmt):
            x = self.expr(s.x, scope)
            if not x.invalid and not is_basic(x.type, "is_numeric"):
                self.error(s.pos, f"invalid operation: {pretty(s.x)}{s.tok} (non-numeric type {x.type})")
        elif isinstance(s, ast.AssignStmt):
            self.assign_stmt(s, scope)
        elif isinstance(s, ast.GoStmt | ast.DeferStmt):
            keyword = "go" if isinstance(s, ast.GoStmt) else "defer"
            if not isinstance(ast.unparen(s.call), ast.CallExpr):
                self.error(s.pos, f"expression in {keyword} must be function call")
            self.raw_expr(s.call, scope)
        elif isinstance(s, ast.ReturnStmt):
            self.return_stmt(s, scope)
        elif isinstance(s, ast.BranchStmt):
            if s.label is not None:
                labels = self.func_ctx.labels if self.func_ctx is not None else {}
                lab = labels.get(s.label.name)
                if lab is None:
                    self.error(s.label.pos, f"label {s.label.name} not defined")
                else:
                    self.recorder.record_ident(s.label, lab)
        elif isinstance(s, ast.BlockStmt):
            self.stmt_list(s.list, Scope(scope, "block"))
        elif isinstance(s, ast.IfStmt):
            inner = Scope(scope, "if")
            if s.init is not None:
                self.stmt(s.init, inner)
            self.condition(s.cond, inner, "if")
            self.stmt(s.body, inner)
            if s.else_ is not None:
                self.stmt(s.else_, inner)
        elif isinstance(s, ast.SwitchStmt):
            self.switch_stmt(s, scope)
        elif isinstance(s, ast.TypeSwitchStmt):
            self.type_switch_stmt(s, scope)
        elif isinstance(s, ast.SelectStmt):
            for clause in s.body.list:
                if not isinstance(clause, ast.CommClause):
                    continue
                inner = Scope(scope, "select case")
                if clause.comm is not None:
                    self.stmt(clause.comm, inner)
                self.stmt_list(clause.body, inner)
        elif isinstance(s, ast.ForStmt):
            inner = Scope(scope, "for")
            if s.init is not None:
                self.stmt(s.init, inner)
            if s.cond is not None:
                self.condition(s.cond, inner, "for")
            if s.post is not None:
                self.stmt(s.post, inner)
            self.stmt(s.body, inner)
        elif isinstance(s, ast.RangeStmt):
            self.range_stmt(s, scope)

    def condition(self, e: ast.Expr, scope: Scope, what: str) -> None:
        x = self.expr(e, scope)
        if not x.invalid and not is_basic(x.type, "is_boolean"):
            self.error(e.pos, f"non-boolean condition in {what} statement")

    def local_decl(self, decl: ast.GenDecl, scope: Scope) -> None:
        if decl.tok == "const":
            for obj, info in self.const_objects(decl, scope):
                self.const_decl(obj, info)
                self.declare(scope, info.name, obj)
        elif decl.tok == "var":
            entries = self.var_objects(decl, scope)
            for _, obj, info in entries:
                if obj.type is None:
                    self.var_decl(obj, info)
            for name, obj, _ in entries:
                self.declare(scope, name, obj)
        elif decl.tok == "type":
            for spec in decl.specs:
                if not isinstance(spec, ast.TypeSpec):
                    continue
                obj = TypeName(spec.name.name, pos=spec.name.pos, pkg=self.pkg)
                self.declare(scope, spec.name, obj)
                self.type_decl(obj, _DeclInfo(scope, spec=spec))

    def assign_stmt(self, s: ast.AssignStmt, scope: Scope) -> None:
        if s.tok == ":=":
            self.short_var_decl(s, scope)
            return
        if s.tok != "=":
            if len(s.lhs) != 1 or len(s.rhs) != 1:
                self.error(s.pos, f"assignment operation {s.tok} requires single-valued expressions")
                return
            x = self.expr(s.lhs[0], scope)
            y = self.expr(s.rhs[0], scope, hint=x.type)
            if not x.invalid and not y.invalid:
                self.match_types(x, y, s.lhs[0], s.rhs[0], s)
            return
        lhs_types: list[Type | None] = []
        for e in s.lhs:
            if _is_blank(e):
                lhs_types.append(None)
                continue
            x = self.expr(e, scope)
            lhs_types.append(None if x.invalid else x.type)
        if len(s.lhs) == len(s.rhs):
            for e, t in zip(s.rhs, lhs_types):
                x = self.expr(e, scope, hint=t)
                if t is not None:
                    self.assign_to(x, t, e, "assignment")
                elif not x.invalid:
                    self.infer_var_type(x, e)
        elif len(s.rhs) == 1:
            self.multi_value(s.rhs[0], scope, len(s.lhs))
        else:
            self.error(
                s.pos,
                f"assignment mismatch: {len(s.lhs)} variables but {len(s.rhs)} values",
            )
            for e in s.rhs:
                self.raw_expr(e, scope)

    def short_var_decl(self, s: ast.AssignStmt, scope: Scope) -> None:
        n = len(s.lhs)
        if len(s.rhs) == n:
            types = [self.infer_var_type(self.expr(r, scope), r) for r in s.rhs]
        elif len(s.rhs) == 1:
            types = [default_type(t) for t in self.multi_value(s.rhs[0], scope, n)]
        else:
            self.error(s.pos, f"assignment mismatch: {n} variables but {len(s.rhs)} values")
            for r in s.rhs:
                self.raw_expr(r, scope)
            types = [INVALID] * n
        pending: list[tuple[ast.Ident, Var]] = []
        for e, t in zip(s.lhs, types):
            if not isinstance(e, ast.Ident):
                self.error(e.pos, f"non-name {pretty(e)} on left side of :=")
                self.raw_expr(e, scope)
                continue
            if e.name == "_":
                continue
            existing = scope.lookup(e.name)
            if existing is not None:
                self.recorder.record_ident(e, existing)
                continue
            pending.append((e, Var(e.name, pos=e.pos, pkg=self.pkg, type=t)))
        if not pending:
            self.error(s.pos, "no new variables on left side of :=")
        for ident, v in pending:
            self.declare(scope, ident, v)

    def return_stmt(self, s: ast.ReturnStmt, scope: Scope) -> None:
        results = self.func_ctx.sig.results if self.func_ctx is not None else Tuple()
        want = results.types()
        if not s.results:
            if want and not results.vars[0].name:
                self.error(s.pos, "not enough return values")
            return
        if len(s.results) == 1 and len(want) > 1:
            self.multi_value(s.results[0], scope, len(want))
            return
        for i, e in enumerate(s.results):
            t = want[i] if i < len(want) else None
            x = self.expr(e, scope, hint=t)
            if t is not None:
                self.assign_to(x, t, e, "return statement")
        if len(s.results) != len(want):
            what = "too many" if len(s.results) > len(want) else "not enough"
            self.error(s.pos, f"{what} return values")

    def switch_stmt(self, s: ast.SwitchStmt, scope: Scope) -> None:
        inner = Scope(scope, "switch")
        if s.init is not None:
            self.stmt(s.init, inner)
        tag_type: Type | None = None
        if s.tag is not None:
            x = self.expr(s.tag, inner)
            if not x.invalid:
                tag_type = default_type(x.type)
                self.update_expr_type(s.tag, tag_type, x)
        for clause in s.body.list:
            if not isinstance(clause, ast.CaseClause):
                continue
            for e in clause.list or []:
                x = self.expr(e, inner, hint=tag_type)
                if tag_type is not None and is_untyped(x.type):
                    self.convert_untyped(x, tag_type, e)
            self.stmt_list(clause.body, Scope(inner, "case"))

    def type_switch_stmt(self, s: ast.TypeSwitchStmt, scope: Scope) -> None:
        inner = Scope(scope, "type switch")
        if s.init is not None:
            self.stmt(s.init, inner)
        lhs: ast.Ident | None = None
        guard: ast.Expr | None = None
        if isinstance(s.assign, ast.AssignStmt) and len(s.assign.lhs) == 1 and s.assign.rhs:
            if isinstance(s.assign.lhs[0], ast.Ident):
                lhs = s.assign.lhs[0]
            guard = s.assign.rhs[0]
        elif isinstance(s.assign, ast.ExprStmt):
            guard = s.assign.x
        if not isinstance(guard, ast.TypeAssertExpr) or guard.type is not None:
            self.error(s.pos, "invalid type switch guard")
            return
        x = self.expr(guard.x, inner)
        if not x.invalid:
            self.recorder.record_expr(guard, x.type, None)
            if not is_interface(x.type):
                self.error(guard.x.pos, f"{pretty(guard.x)} (variable of type {x.type}) is not an interface")
        guard_var: Var | None = None
        if lhs is not None and lhs.name != "_":
            # The guard name itself binds a symbolic variable; each clause
            # declares its own implicit copy pointing back at it.
            guard_var = Var(lhs.name, pos=lhs.pos, pkg=self.pkg, type=x.type if not x.invalid else INVALID)
            self.recorder.record_ident(lhs, guard_var)
        for clause in s.body.list:
            if not isinstance(clause, ast.CaseClause):
                continue
            case_type: Type | None = None
            for e in clause.list or []:
                if isinstance(e, ast.Ident) and isinstance(nil_obj := inner.lookup_parent(e.name)[1], Nil):
                    self.recorder.record_ident(e, nil_obj)
                    self.recorder.record_expr(e, TYP[BasicKind.UNTYPED_NIL], None)
                    case_type = None
                else:
                    case_type = self.typ_expr(e, inner)
            clause_scope = Scope(inner, "case")
            if guard_var is not None:
                typ = case_type if case_type is not None and len(clause.list or []) == 1 else guard_var.type
                clause_scope.insert(
                    Var(guard_var.name, pos=guard_var.pos, pkg=self.pkg, type=typ, origin=guard_var)
                )
            self.stmt_list(clause.body, clause_scope)

    def range_stmt(self, s: ast.RangeStmt, scope: Scope) -> None:
        inner = Scope(scope, "range")
        x = self.expr(s.x, scope)
        key_t, val_t = self.range_types(x, s.x)
        if s.tok == ":=":
            for e, t in ((s.key, key_t), (s.value, val_t)):
                if e is None:
                    continue
                if not isinstance(e, ast.Ident):
                    self.error(e.pos, f"non-name {pretty(e)} on left side of :=")
                    continue
                if e.name == "_":
                    continue
                if t is None:
                    self.error(e.pos, f"range over {pretty(s.x)} permits only one iteration variable")
                self.declare(inner, e, Var(e.name, pos=e.pos, pkg=self.pkg, type=t or INVALID))
        elif s.tok == "=":
            for e in (s.key, s.value):
                if e is not None and not _is_blank(e):
                    self.expr(e, scope)
        self.stmt(s.body, inner)

    def range_types(self, x: Operand, e: ast.Expr) -> tuple[Type | None, Type | None]:
        if x.invalid:
            return INVALID, INVALID
        u = x.type.underlying()
        if isinstance(u, TypeParam):
            u = u.core() or u
        if isinstance(u, Pointer) and isinstance(u.elem.underlying(), Array):
            u = u.elem.underlying()
        if isinstance(u, Basic):
            if u.is_string:
                return TYP[BasicKind.INT], RUNE
            if u.is_integer:
                return default_type(x.type), None
        elif isinstance(u, Array | Slice):
            return TYP[BasicKind.INT], u.elem
        elif isinstance(u, Map):
            return u.key, u.elem
        elif isinstance(u, Chan):
            return u.elem, None
        elif isinstance(u, Signature) and len(u.params) == 1:
            yield_t = u.params.vars[0].type
            if yield_t is not None and isinstance(yield_t.underlying(), Signature):
                ys = yield_t.underlying().params.types()  # type: ignore[attr-defined]
                return (ys[0] if ys else None), (ys[1] if len(ys) > 1 else None)
        self.error(e.pos, f"cannot range over {pretty(e)} (variable of type {x.type})")
        return INVALID, INVALID

    # -- expressions -----------------------------------------------------------

    def expr(self, e: ast.Expr, scope: Scope, hint: Type | None = None) -> Operand:
        """Evaluate ``e`` as a single value."""
        x = self.raw_expr(e, scope, hint)
        if x.mode == TYPEXPR:
            self.error(e.pos, f"{pretty(e)} (type) is not an expression")
            return _invalid()
        if x.mode == NOVALUE:
            self.error(e.pos, f"{pretty(e)} (no value) used as value")
            return _invalid()
        if x.mode == BUILTIN:
            self.error(e.pos, f"{pretty(e)} (built-in) must be called")
            return _invalid()
        if isinstance(x.type, Tuple):
            self.error(e.pos, f"multiple-value {pretty(e)} in single-value context")
            return _invalid()
        if x.mode in (COMMAOK, MAPINDEX):
            return Operand(VALUE, x.type, x.val)
        return x

    def raw_expr(self, e: ast.Expr, scope: Scope, hint: Type | None = None) -> Operand:
        """Evaluate ``e`` in any mode and record its type."""
        x = self._expr_internal(e, scope, hint)
        if x.mode not in (INVALID_MODE, NOVALUE, BUILTIN):
            self.recorder.record_expr(e, x.type, x.val)
        return x

    def multi_value(self, e: ast.Expr, scope: Scope, n: int) -> list[Type]:
        """Types of a single expression assigned to ``n`` variables."""
        x = self.raw_expr(e, scope)
        if x.invalid:
            return [INVALID] * n
        if isinstance(x.type, Tuple):
            if len(x.type) == n:
                return x.type.types()
            self.error(
                e.pos,
                f"assignment mismatch: {n} variables but {pretty(e)} returns {len(x.type)} values",
            )
            return [INVALID] * n
        if n == 2 and x.mode in (COMMAOK, MAPINDEX):
            return [x.type, TYP[BasicKind.UNTYPED_BOOL]]
        if n != 1:
            self.error(e.pos, f"assignment mismatch: {n} variables but 1 value")
            return [INVALID] * n
        return [x.type]

    def infer_var_type(self, x: Operand, e: ast.Expr) -> Type:
        if x.invalid:
            return INVALID
        if isinstance(x.type, Basic) and x.type.kind == BasicKind.UNTYPED_NIL:
            self.error(e.pos, "use of untyped nil in assignment")
            return INVALID
        t = default_type(x.type)
        if t is not x.type:
            self.update_expr_type(e, t, x)
        return t

    def _expr_internal(self, e: ast.Expr, scope: Scope, hint: Type | None) -> Operand:
        if isinstance(e, ast.Ident):
            return self.ident(e, scope)
        if isinstance(e, ast.BasicLit):
            return self.basic_lit(e)
        if isinstance(e, ast.CompositeLit):
            return self.composite_lit(e, scope, hint)
        if isinstance(e, ast.FuncLit):
            fscope = Scope(scope, "func literal", func=True)
            sig = self.func_type(e.type, fscope)
            self.func_body(e.body, fscope, sig)
            return Operand(VALUE, sig)
        if isinstance(e, ast.ParenExpr):
            return self.raw_expr(e.x, scope, hint)
        if isinstance(e, ast.SelectorExpr):
            return self.selector(e, scope)
        if isinstance(e, ast.IndexExpr):
            return self.index_expr(e, scope)
        if isinstance(e, ast.SliceExpr):
            return self.slice_expr(e, scope)
        if isinstance(e, ast.TypeAssertExpr):
            x = self.expr(e.x, scope)
            if e.type is None:
                self.error(e.pos, "use of .(type) outside type switch")
                return _invalid()
            t = self.typ_expr(e.type, scope)
            if not x.invalid and not is_interface(x.type):
                self.error(e.x.pos, f"invalid operation: {pretty(e.x)} (variable of type {x.type}) is not an interface")
            return Operand(COMMAOK, t)
        if isinstance(e, ast.CallExpr):
            return self.call(e, scope)
        if isinstance(e, ast.StarExpr):
            x = self.expr_or_type(e.x, scope)
            if x.invalid:
                return x
            if x.mode == TYPEXPR:
                return Operand(TYPEXPR, Pointer(x.type))
            u = x.type.underlying()
            if isinstance(u, Pointer):
                return Operand(VARIABLE, u.elem)
            self.error(e.pos, f"invalid operation: cannot indirect {pretty(e.x)}")
            return _invalid()
        if isinstance(e, ast.UnaryExpr):
            return self.unary(e, scope, hint)
        if isinstance(e, ast.BinaryExpr):
            return self.binary(e, scope, hint)
        if isinstance(e, ast.KeyValueExpr):
            self.error(e.pos, "unexpected key:value expression")
            self.raw_expr(e.value, scope)
            return _invalid()
        if isinstance(
            e,
            ast.ArrayType | ast.StructType | ast.FuncType | ast.InterfaceType | ast.MapType | ast.ChanType,
        ):
            return Operand(TYPEXPR, self.typ_expr(e, scope))
        if isinstance(e, ast.Ellipsis):
            self.error(e.pos, "invalid use of '...'")
            return _invalid()
        return _invalid()

    def expr_or_type(self, e: ast.Expr, scope: Scope) -> Operand:
        x = self.raw_expr(e, scope)
        if x.mode == NOVALUE:
            self.error(e.pos, f"{pretty(e)} (no value) used as value")
            return _invalid()
        return x

    def ident(self, e: ast.Ident, scope: Scope) -> Operand:
        if e.name == "_":
            self.error(e.pos, "cannot use _ as value")
            return _invalid()
        _, obj = scope.lookup_parent(e.name)
        if obj is None:
            self.error(e.pos, f"undefined: {e.name}")
            return _invalid()
        self.recorder.record_ident(e, obj)
        return self.object_operand(obj, e)

    def object_operand(self, obj: Object, e: ast.Ident) -> Operand:
        if isinstance(obj, PkgName):
            self.error(e.pos, f"use of package {obj.name} without selector")
            return _invalid()
        self.obj_decl(obj)
        typ = obj.type or INVALID
        if isinstance(obj, Const):
            if obj is UNIVERSE.lookup("iota"):
                if self.iota is None:
                    self.error(e.pos, "cannot use iota outside constant declaration")
                    return _invalid()
                return Operand(CONSTANT, typ, self.iota)
            if typ is INVALID:
                return _invalid()
            return Operand(CONSTANT, typ, obj.val)
        if isinstance(obj, TypeName):
            return Operand(TYPEXPR, typ)
        if isinstance(obj, Var):
            if typ is INVALID:
                return _invalid()
            return Operand(VARIABLE, typ)
        if isinstance(obj, Builtin):
            return Operand(BUILTIN, obj=obj)
        if isinstance(obj, Func | Nil):
            return Operand(VALUE, typ)
        return _invalid()

    def basic_lit(self, e: ast.BasicLit) -> Operand:
        kinds = {
            "INT": BasicKind.UNTYPED_INT,
            "FLOAT": BasicKind.UNTYPED_FLOAT,
            "IMAG": BasicKind.UNTYPED_COMPLEX,
            "CHAR": BasicKind.UNTYPED_RUNE,
            "STRING": BasicKind.UNTYPED_STRING,
        }
        typ = TYP[kinds.get(e.kind, BasicKind.INVALID)]
        try:
            if e.kind == "INT":
                val: Any = _parse_int(e.value)
            elif e.kind == "FLOAT":
                val = _parse_float(e.value)
            elif e.kind == "IMAG":
                val = complex(0, _parse_float(e.value[:-1]))
            elif e.kind == "CHAR":
                val = _parse_rune(e.value)
            else:
                val = ast.unquote(e.value)
        except ValueError:
            self.error(e.pos, f"malformed constant: {e.value}")
            val = None
        return Operand(CONSTANT, typ, val)

    def composite_lit(self, e: ast.CompositeLit, scope: Scope, hint: Type | None) -> Operand:
        open_array: Array | None = None
        if e.type is not None:
            if isinstance(e.type, ast.ArrayType) and isinstance(e.type.len, ast.Ellipsis):
                open_array = Array(self.typ_expr(e.type.elt, scope), None)
                typ: Type = open_array
            else:
                typ = self.typ_expr(e.type, scope)
        elif hint is not None:
            typ = hint
        else:
            self.error(e.pos, "invalid composite literal type: missing type")
            for el in e.elts:
                self.raw_expr(el.value if isinstance(el, ast.KeyValueExpr) else el, scope)
            return _invalid()
        base = typ
        if e.type is None and isinstance(base.underlying(), Pointer):
            base = base.underlying().elem  # type: ignore[attr-defined]
        u = base.underlying()
        if isinstance(u, TypeParam):
            u = u.core() or u
        if isinstance(u, Struct):
            self.struct_lit(e, u, scope)
        elif isinstance(u, Array | Slice):
            idx = 0
            length = 0
            for el in e.elts:
                value = el
                if isinstance(el, ast.KeyValueExpr):
                    k = self.expr(el.key, scope)
                    if k.mode == CONSTANT and isinstance(k.val, int):
                        idx = k.val
                    value = el.value
                x = self.expr(value, scope, hint=u.elem)
                self.assign_to(x, u.elem, value, "array or slice literal")
                idx += 1
                length = max(length, idx)
            if open_array is not None:
                open_array.length = length
                self.recorder.record_expr(e.type, open_array, None)  # type: ignore[arg-type]
        elif isinstance(u, Map):
            for el in e.elts:
                if not isinstance(el, ast.KeyValueExpr):
                    self.error(el.pos, "missing key in map literal")
                    self.raw_expr(el, scope)
                    continue
                k = self.expr(el.key, scope, hint=u.key)
                self.assign_to(k, u.key, el.key, "map literal")
                v = self.expr(el.value, scope, hint=u.elem)
                self.assign_to(v, u.elem, el.value, "map literal")
        else:
            if typ is not INVALID:
                self.error(e.pos, f"invalid composite literal type {typ}")
            for el in e.elts:
                self.raw_expr(el.value if isinstance(el, ast.KeyValueExpr) else el, scope)
            if typ is INVALID:
                return _invalid()
        return Operand(VALUE, typ)

    def struct_lit(self, e: ast.CompositeLit, u: Struct, scope: Scope) -> None:
        if e.elts and all(isinstance(el, ast.KeyValueExpr) for el in e.elts):
            by_name = {f.name: f for f in u.fields}
            for el in e.elts:
                assert isinstance(el, ast.KeyValueExpr)
                ft: Type | None = None
                if isinstance(el.key, ast.Ident):
                    fld = by_name.get(el.key.name)
                    if fld is None:
                        self.error(el.key.pos, f"unknown field {el.key.name} in struct literal")
                    else:
                        self.recorder.record_ident(el.key, fld.origin or fld)
                        ft = fld.type
                else:
                    self.error(el.key.pos, f"invalid field name {pretty(el.key)} in struct literal")
                x = self.expr(el.value, scope, hint=ft)
                if ft is not None:
                    self.assign_to(x, ft, el.value, "struct literal")
            return
        for i, el in enumerate(e.elts):
            if isinstance(el, ast.KeyValueExpr):
                self.error(el.pos, "mixture of field:value and value elements in struct literal")
                self.raw_expr(el.value, scope)
                continue
            ft = u.fields[i].type if i < len(u.fields) else None
            if ft is None and i >= len(u.fields):
                self.error(el.pos, "too many values in struct literal")
            x = self.expr(el, scope, hint=ft)
            if ft is not None:
                self.assign_to(x, ft, el, "struct literal")
        if e.elts and len(e.elts) < len(u.fields):
            self.error(e.pos, "too few values in struct literal")

    def selector(self, e: ast.SelectorExpr, scope: Scope) -> Operand:
        sel = e.sel.name
        if isinstance(e.x, ast.Ident):
            _, obj = scope.lookup_parent(e.x.name)
            if isinstance(obj, PkgName):
                self.recorder.record_ident(e.x, obj)
                imported = obj.imported
                member = None
                if imported is not None and imported.scope is not None:
                    member = imported.scope.lookup(sel)
                if member is None or not member.exported:
                    if imported is None or not imported.fake:
                        self.error(e.sel.pos, f"undefined: {e.x.name}.{sel}")
                    return _invalid()
                self.recorder.record_ident(e.sel, member)
                return self.object_operand(member, e.sel)
        x = self.expr_or_type(e.x, scope)
        if x.invalid:
            return x
        if x.mode == BUILTIN:
            self.error(e.pos, f"{pretty(e.x)} (built-in) must be called")
            return _invalid()
        if x.mode == TYPEXPR:
            obj, _ = lookup_field_or_method(x.type, sel)
            if not isinstance(obj, Func):
                self.error(e.sel.pos, f"{x.type}.{sel} undefined (type {x.type} has no method {sel})")
                return _invalid()
            self.obj_decl(obj)
            self.recorder.record_ident(e.sel, obj)
            sig = obj.type
            if not isinstance(sig, Signature):
                return _invalid()
            # A method expression takes the receiver as its first parameter.
            params = Tuple([Var("", pkg=self.pkg, type=x.type), *sig.params.vars])
            method_expr = Signature(params=params, results=sig.results, variadic=sig.variadic)
            self.recorder.record_expr(e.sel, method_expr, None)
            return Operand(VALUE, method_expr)
        obj, indirect = lookup_field_or_method(x.type, sel)
        if obj is None:
            self.error(
                e.sel.pos,
                f"{pretty(e)} undefined (type {x.type} has no field or method {sel})",
            )
            return _invalid()
        self.obj_decl(obj)
        self.recorder.record_ident(e.sel, obj.origin or obj)
        typ = obj.type or INVALID
        mapping = _receiver_mapping(x.type, obj)
        if mapping:
            typ = subst(typ, mapping)
        if isinstance(obj, Var):
            addressable = x.mode == VARIABLE or indirect or isinstance(x.type.underlying(), Pointer)
            return Operand(VARIABLE if addressable else VALUE, typ)
        if isinstance(typ, Signature) and typ.recv is not None:
            typ = Signature(params=typ.params, results=typ.results, variadic=typ.variadic)
        return Operand(VALUE, typ)

    def index_expr(self, e: ast.IndexExpr, scope: Scope) -> Operand:
        x = self.expr_or_type(e.x, scope)
        if x.invalid:
            for i in e.indices:
                self.raw_expr(i, scope)
            return x
        if x.mode == TYPEXPR:
            args = [self.typ_expr(i, scope) for i in e.indices]
            return Operand(TYPEXPR, self.instantiate_type(x.type, args, e))
        if isinstance(x.type, Signature) and x.type.type_params:
            args = [self.typ_expr(i, scope) for i in e.indices]
            mapping = dict(zip(x.type.type_params, args))
            return Operand(VALUE, subst(x.type, mapping))
        if len(e.indices) != 1:
            self.error(e.pos, f"unexpected comma; expecting ] in {pretty(e)}")
            return _invalid()
        u = x.type.underlying()
        if isinstance(u, TypeParam):
            u = u.core() or u
        index = e.indices[0]
        if isinstance(u, Map):
            k = self.expr(index, scope, hint=u.key)
            self.assign_to(k, u.key, index, "map index")
            return Operand(MAPINDEX, u.elem)
        self.expr(index, scope)
        if isinstance(u, Basic) and u.is_string:
            return Operand(VALUE, BYTE)
        if isinstance(u, Pointer) and isinstance(u.elem.underlying(), Array):
            return Operand(VARIABLE, u.elem.underlying().elem)  # type: ignore[attr-defined]
        if isinstance(u, Array):
            return Operand(VARIABLE if x.mode == VARIABLE else VALUE, u.elem)
        if isinstance(u, Slice):
            return Operand(VARIABLE, u.elem)
        self.error(e.pos, f"invalid operation: cannot index {pretty(e.x)} (variable of type {x.type})")
        return _invalid()

    def slice_expr(self, e: ast.SliceExpr, scope: Scope) -> Operand:
        x = self.expr(e.x, scope)
        for part in (e.low, e.high, e.max):
            if part is not None:
                self.expr(part, scope)
        if x.invalid:
            return x
        u = x.type.underlying()
        if isinstance(u, Basic) and u.is_string:
            return Operand(VALUE, default_type(x.type))
        if isinstance(u, Pointer) and isinstance(u.elem.underlying(), Array):
            return Operand(VALUE, Slice(u.elem.underlying().elem))  # type: ignore[attr-defined]
        if isinstance(u, Array):
            return Operand(VALUE, Slice(u.elem))
        if isinstance(u, Slice):
            return Operand(VALUE, x.type)
        self.error(e.pos, f"cannot slice {pretty(e.x)} (variable of type {x.type})")
        return _invalid()

    def call(self, e: ast.CallExpr, scope: Scope) -> Operand:
        fun = self.expr_or_type(e.fun, scope)
        if fun.invalid:
            for a in e.args:
                self.raw_expr(a, scope)
            return _invalid()
        if fun.mode == TYPEXPR:
            return self.conversion(e, fun.type, scope)
        if fun.mode == BUILTIN:
            assert fun.obj is not None
            return self.builtin(e, fun.obj, scope)
        u = fun.type.underlying()
        if isinstance(u, TypeParam):
            u = u.core() or u
        if not isinstance(u, Signature):
            self.error(e.pos, f"invalid operation: cannot call non-function {pretty(e.fun)}")
            for a in e.args:
                self.raw_expr(a, scope)
            return _invalid()
        sig = u
        arg_types = self.call_args(e, sig, scope)
        if sig.type_params:
            mapping: dict[TypeParam, Type] = {}
            params = sig.params.types()
            for i, at in enumerate(arg_types):
                p = _param_type(params, i, sig.variadic, e.has_ellipsis)
                if p is not None:
                    unify(p, at, mapping)
            sig = subst(sig, mapping)  # type: ignore[assignment]
            self.recorder.record_expr(e.fun, sig, None)
        results = sig.results
        if len(results) == 0:
            return Operand(NOVALUE)
        if len(results) == 1:
            return Operand(VALUE, results.vars[0].type or INVALID)
        return Operand(VALUE, results)

    def call_args(self, e: ast.CallExpr, sig: Signature, scope: Scope) -> list[Type]:
        params = sig.params.types()
        arg_types: list[Type] = []
        for i, a in enumerate(e.args):
            hint = _param_type(params, i, sig.variadic, e.has_ellipsis)
            if isinstance(hint, TypeParam):
                hint = None
            x = self.raw_expr(a, scope, hint)
            if x.mode == TYPEXPR:
                self.error(a.pos, f"{pretty(a)} (type) is not an expression")
                arg_types.append(INVALID)
                continue
            if x.mode in (NOVALUE, BUILTIN):
                self.error(a.pos, f"{pretty(a)} used as value")
                arg_types.append(INVALID)
                continue
            if isinstance(x.type, Tuple) and len(e.args) == 1:
                arg_types.extend(x.type.types())
                continue
            if hint is not None:
                self.assign_to(x, hint, a, "argument")
            arg_types.append(x.type)
        n, np = len(arg_types), len(params)
        ok = n == np if not sig.variadic or e.has_ellipsis else n >= np - 1
        if not ok:
            what = "not enough" if n < np else "too many"
            self.error(e.pos, f"{what} arguments in call to {pretty(e.fun)}")
        return arg_types

    def conversion(self, e: ast.CallExpr, target: Type, scope: Scope) -> Operand:
        if len(e.args) != 1:
            self.error(e.pos, f"wrong argument count in conversion to {target}")
            for a in e.args:
                self.raw_expr(a, scope)
            return Operand(VALUE, target)
        arg = e.args[0]
        x = self.expr(arg, scope, hint=target)
        if x.invalid:
            return Operand(VALUE, target)
        u = target.underlying()
        if x.mode == CONSTANT and isinstance(u, Basic) and not is_untyped(target):
            val = x.val
            if u.is_string and isinstance(val, int) and not isinstance(val, bool):
                val = chr(val) if 0 <= val <= 0x10FFFF else "�"
            elif u.is_integer and isinstance(val, float) and val.is_integer():
                val = int(val)
            elif u.is_float and isinstance(val, int) and not isinstance(val, bool):
                val = float(val)
            if is_untyped(x.type):
                self.update_expr_type(arg, default_type(x.type) if not _representable(x.type, u) else target, x)
            return Operand(CONSTANT, target, val)
        if is_untyped(x.type):
            self.update_expr_type(arg, target if isinstance(u, Basic) else default_type(x.type), x)
        return Operand(VALUE, target)

    def builtin(self, e: ast.CallExpr, obj: Object, scope: Scope) -> Operand:
        name = obj.name
        args = e.args

        def eval_all(start: int = 0, hint: Type | None = None) -> list[Operand]:
            return [self.expr(a, scope, hint=hint) for a in args[start:]]

        def need(n: int) -> bool:
            if len(args) < n:
                self.error(e.pos, f"not enough arguments for {pretty(e)} (expected {n}, found {len(args)})")
                return False
            return True

        if obj.pkg is UNSAFE:
            xs = eval_all()
            if name in ("Sizeof", "Alignof", "Offsetof"):
                return Operand(VALUE, TYP[BasicKind.UINTPTR])
            if name == "Add":
                return Operand(VALUE, TYP[BasicKind.UNSAFE_POINTER])
            if name == "String":
                return Operand(VALUE, TYP[BasicKind.STRING])
            if name == "StringData":
                return Operand(VALUE, Pointer(BYTE))
            if xs and not xs[0].invalid:
                u = xs[0].type.underlying()
                if name == "Slice" and isinstance(u, Pointer):
                    return Operand(VALUE, Slice(u.elem))
                if name == "SliceData" and isinstance(u, Slice):
                    return Operand(VALUE, Pointer(u.elem))
            return _invalid()

        if name in ("len", "cap"):
            xs = eval_all()
            if len(xs) != 1:
                self.error(e.pos, f"wrong number of arguments for {name}")
            elif xs[0].mode == CONSTANT and isinstance(xs[0].val, str) and name == "len":
                return Operand(CONSTANT, TYP[BasicKind.INT], len(xs[0].val.encode("utf-8")))
            return Operand(VALUE, TYP[BasicKind.INT])
        if name == "new":
            if not need(1):
                return _invalid()
            return Operand(VALUE, Pointer(self.typ_expr(args[0], scope)))
        if name == "make":
            if not need(1):
                return _invalid()
            t = self.typ_expr(args[0], scope)
            eval_all(1)
            return Operand(VALUE, t)
        if name == "append":
            if not need(1):
                return _invalid()
            first = self.expr(args[0], scope)
            elem: Type | None = None
            if not first.invalid and isinstance(first.type.underlying(), Slice):
                elem = first.type.underlying().elem  # type: ignore[attr-defined]
            eval_all(1, hint=None if e.has_ellipsis else elem)
            return Operand(VALUE, first.type) if not first.invalid else _invalid()
        if name in ("panic", "print", "println", "close", "delete", "clear"):
            eval_all(hint=ANY_TYPE if name == "panic" else None)
            if name == "panic" and len(args) != 1:
                what = "not enough" if not args else "too many"
                self.error(e.pos, f"{what} arguments for {pretty(e)}")
            return Operand(NOVALUE)
        if name == "recover":
            eval_all()
            return Operand(VALUE, ANY_TYPE)
        if name == "copy":
            eval_all()
            return Operand(VALUE, TYP[BasicKind.INT])
        if name == "complex":
            xs = eval_all()
            if len(xs) == 2 and all(x.mode == CONSTANT for x in xs):
                try:
                    return Operand(
                        CONSTANT, TYP[BasicKind.UNTYPED_COMPLEX], complex(xs[0].val, xs[1].val)
                    )
                except TypeError:
                    return Operand(CONSTANT, TYP[BasicKind.UNTYPED_COMPLEX])
            if xs and is_basic(xs[0].type, "is_float") and xs[0].type.underlying().kind == BasicKind.FLOAT32:  # type: ignore[attr-defined]
                return Operand(VALUE, TYP[BasicKind.COMPLEX64])
            return Operand(VALUE, TYP[BasicKind.COMPLEX128])
        if name in ("real", "imag"):
            xs = eval_all()
            if len(xs) == 1 and xs[0].mode == CONSTANT and xs[0].val is not None:
                c = complex(xs[0].val)
                return Operand(CONSTANT, TYP[BasicKind.UNTYPED_FLOAT], c.real if name == "real" else c.imag)
            if xs and not xs[0].invalid and xs[0].type.underlying() is TYP[BasicKind.COMPLEX64]:
                return Operand(VALUE, TYP[BasicKind.FLOAT32])
            return Operand(VALUE, TYP[BasicKind.FLOAT64])
        if name in ("min", "max"):
            xs = eval_all()
            if not xs or any(x.invalid for x in xs):
                if not xs:
                    self.error(e.pos, f"not enough arguments for {pretty(e)}")
                return _invalid()
            typed = [x.type for x in xs if not is_untyped(x.type)]
            typ = typed[0] if typed else max((x.type for x in xs), key=_untyped_rank)
            if all(x.mode == CONSTANT and x.val is not None for x in xs):
                try:
                    vals = [x.val for x in xs]
                    return Operand(CONSTANT, typ, min(vals) if name == "min" else max(vals))
                except TypeError:
                    pass
            return Operand(VALUE, typ)
        eval_all()
        return _invalid()

    def unary(self, e: ast.UnaryExpr, scope: Scope, hint: Type | None) -> Operand:
        op = e.op
        if op == "&":
            elem_hint = None
            if hint is not None and isinstance(hint.underlying(), Pointer):
                elem_hint = hint.underlying().elem  # type: ignore[attr-defined]
            x = self.expr(e.x, scope, hint=elem_hint)
            if x.invalid:
                return x
            if x.mode != VARIABLE and not isinstance(ast.unparen(e.x), ast.CompositeLit):
                self.error(e.pos, f"invalid operation: cannot take address of {pretty(e.x)}")
            return Operand(VALUE, Pointer(x.type))
        if op == "<-":
            x = self.expr(e.x, scope)
            if x.invalid:
                return x
            u = x.type.underlying()
            if isinstance(u, Chan):
                if u.dir == "send":
                    self.error(e.pos, f"invalid operation: cannot receive from send-only channel {pretty(e.x)}")
                return Operand(COMMAOK, u.elem)
            self.error(e.pos, f"invalid operation: cannot receive from non-channel {pretty(e.x)}")
            return _invalid()
        x = self.expr(e.x, scope, hint=hint)
        if x.invalid:
            return x
        pred = {"!": "is_boolean", "^": "is_integer"}.get(op, "is_numeric")
        if not is_basic(x.type, pred):
            self.error(e.pos, f"invalid operation: operator {op} not defined on {pretty(e.x)} (variable of type {x.type})")
            return _invalid()
        if x.mode == CONSTANT and x.val is not None:
            val = {"-": lambda v: -v, "+": lambda v: v, "!": lambda v: not v, "^": lambda v: ~v}[op](x.val)
            return Operand(CONSTANT, x.type, val)
        return Operand(VALUE, x.type)

    def binary(self, e: ast.BinaryExpr, scope: Scope, hint: Type | None) -> Operand:
        op = e.op
        arith_hint = hint if op not in _COMPARISONS and op not in ("&&", "||") else None
        x = self.expr(e.x, scope, hint=arith_hint)
        y = self.expr(e.y, scope, hint=None if op in ("<<", ">>") else arith_hint)
        if x.invalid or y.invalid:
            return _invalid()
        if op in ("<<", ">>"):
            if not is_basic(y.type, "is_integer") and not (y.mode == CONSTANT and _is_integral(y.val)):
                self.error(e.y.pos, f"invalid operation: shift count {pretty(e.y)} must be integer")
                return _invalid()
            typ = x.type
            if is_untyped(typ) and y.mode != CONSTANT:
                typ = hint if hint is not None and is_basic(hint, "is_integer") else TYP[BasicKind.INT]
                self.update_expr_type(e.x, typ, x)
            if x.mode == CONSTANT and y.mode == CONSTANT:
                return Operand(CONSTANT, typ, self.fold_binary(op, x.val, y.val, True, e))
            return Operand(VALUE, typ)
        if op in _COMPARISONS:
            self.match_types(x, y, e.x, e.y, e)
            if x.mode == CONSTANT and y.mode == CONSTANT:
                return Operand(
                    CONSTANT,
                    TYP[BasicKind.UNTYPED_BOOL],
                    self.fold_binary(op, x.val, y.val, False, e),
                )
            return Operand(VALUE, TYP[BasicKind.UNTYPED_BOOL])
        typ = self.match_types(x, y, e.x, e.y, e)
        if typ is INVALID:
            return _invalid()
        if op in ("&&", "||"):
            pred = "is_boolean"
        elif op in _INTEGER_OPS:
            pred = "is_integer"
        elif op == "+":
            pred = ""
        else:
            pred = "is_numeric"
        if pred:
            ok = is_basic(typ, pred)
        else:
            ok = is_basic(typ, "is_numeric") or is_basic(typ, "is_string")
        if not ok and not isinstance(typ, TypeParam):
            self.error(
                e.pos,
                f"invalid operation: operator {op} not defined on {pretty(e.x)} (variable of type {typ})",
            )
            return _invalid()
        if x.mode == CONSTANT and y.mode == CONSTANT:
            return Operand(
                CONSTANT, typ, self.fold_binary(op, x.val, y.val, is_basic(typ, "is_integer"), e)
            )
        return Operand(VALUE, typ)

    def match_types(
        self, x: Operand, y: Operand, ex: ast.Expr, ey: ast.Expr, e: ast.Node
    ) -> Type:
        xu, yu = is_untyped(x.type), is_untyped(y.type)
        if xu and yu:
            xb, yb = x.type, y.type
            assert isinstance(xb, Basic) and isinstance(yb, Basic)
            if xb.kind == yb.kind:
                return xb
            if xb.kind in _UNTYPED_RANK and yb.kind in _UNTYPED_RANK:
                return xb if _UNTYPED_RANK[xb.kind] >= _UNTYPED_RANK[yb.kind] else yb
            self.error(getattr(e, "pos", None), f"invalid operation: {pretty(ex)} and {pretty(ey)} (mismatched types {xb} and {yb})")
            return INVALID
        if xu:
            return y.type if self.convert_untyped(x, y.type, ex) else INVALID
        if yu:
            return x.type if self.convert_untyped(y, x.type, ey) else INVALID
        if _simple_mismatch(x.type, y.type):
            self.error(
                getattr(e, "pos", None),
                f"invalid operation: mismatched types {x.type} and {y.type}",
            )
            return INVALID
        return x.type

    def convert_untyped(self, x: Operand, target: Type, e: ast.Expr) -> bool:
        src = x.type
        assert isinstance(src, Basic)
        tu = target.underlying()
        if src.kind == BasicKind.UNTYPED_NIL:
            if isinstance(tu, Basic) and tu.kind != BasicKind.UNSAFE_POINTER:
                self.error(e.pos, f"cannot convert nil to type {target}")
                return False
            return True
        if isinstance(tu, Basic):
            compatible = (
                (src.is_boolean and tu.is_boolean)
                or (src.is_string and tu.is_string)
                or (src.is_numeric and tu.is_numeric)
            )
            if not compatible:
                self.error(e.pos, f"cannot convert {pretty(e)} (untyped {src.name[8:]} constant) to type {target}")
                return False
            self.update_expr_type(e, target, x)
            x.type = target
            return True
        if isinstance(tu, Interface | TypeParam):
            self.update_expr_type(e, default_type(src), x)
        return True

    def assign_to(self, x: Operand, target: Type, e: ast.Expr, context: str) -> None:
        if x.invalid or target is INVALID:
            return
        if is_untyped(x.type):
            tu = target.underlying()
            if isinstance(tu, Basic) or (
                isinstance(x.type, Basic) and x.type.kind == BasicKind.UNTYPED_NIL
            ):
                self.convert_untyped(x, target, e)
            elif not isinstance(tu, TypeParam):
                self.update_expr_type(e, default_type(x.type), x)
            return
        if _simple_mismatch(x.type, target):
            self.error(
                e.pos,
                f"cannot use {pretty(e)} (value of type {x.type}) as {target} value in {context}",
            )

    def update_expr_type(self, e: ast.Expr, t: Type, x: Operand) -> None:
        """Re-record the type of an untyped expression once it is known."""
        self.recorder.record_expr(e, t, x.val)
        if isinstance(e, ast.ParenExpr):
            self.update_expr_type(e.x, t, x)
        elif isinstance(e, ast.UnaryExpr) and e.op in ("-", "+", "^", "!"):
            self.update_expr_type(e.x, t, Operand(x.mode, t))
        elif isinstance(e, ast.BinaryExpr) and e.op not in _COMPARISONS:
            self.update_expr_type(e.x, t, Operand(x.mode, t))
            if e.op not in ("<<", ">>"):
                self.update_expr_type(e.y, t, Operand(x.mode, t))

    def fold_binary(self, op: str, a: Any, b: Any, integer: bool, e: ast.Node) -> Any:
        if a is None or b is None:
            return None
        try:
            if op == "+":
                return a + b
            if op == "-":
                return a - b
            if op == "*":
                return a * b
            if op == "/":
                if b == 0:
                    raise ZeroDivisionError
                if integer and isinstance(a, int) and isinstance(b, int):
                    return _trunc_div(a, b)
                return a / b
            if op == "%":
                if b == 0:
                    raise ZeroDivisionError
                return a - b * _trunc_div(a, b)
            if op == "&":
                return a & b
            if op == "|":
                return a | b
            if op == "^":
                return a ^ b
            if op == "&^":
                return a & ~b
            if op in ("<<", ">>"):
                if b > _MAX_SHIFT:
                    return None
                return int(a) << int(b) if op == "<<" else int(a) >> int(b)
            if op == "&&":
                return a and b
            if op == "||":
                return a or b
            if op == "==":
                return a == b
            if op == "!=":
                return a != b
            if op == "<":
                return a < b
            if op == "<=":
                return a <= b
            if op == ">":
                return a > b
            if op == ">=":
                return a >= b
        except ZeroDivisionError:
            self.error(getattr(e, "pos", None), "invalid operation: division by zero")
        except (TypeError, ValueError, OverflowError):
            pass
        return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _receiver_base_name(recv: ast.FieldList) -> str | None:
    if not recv.list or recv.list[0].type is None:
        return None
    t = ast.unparen(recv.list[0].type)
    if isinstance(t, ast.StarExpr):
        t = ast.unparen(t.x)
    if isinstance(t, ast.IndexExpr):
        t = t.x
    return t.name if isinstance(t, ast.Ident) else None


def _embedded_name(t: ast.Expr | None) -> ast.Ident | None:
    if t is None:
        return None
    t = ast.unparen(t)
    if isinstance(t, ast.StarExpr):
        t = ast.unparen(t.x)
    if isinstance(t, ast.IndexExpr):
        t = t.x
    if isinstance(t, ast.SelectorExpr):
        return t.sel
    return t if isinstance(t, ast.Ident) else None


def _receiver_mapping(t: Type, obj: Object) -> dict[TypeParam, Type]:
    if not isinstance(obj, Func) or not obj.recv_type_params:
        return {}
    base = deref(t)
    if isinstance(base, Named) and base.type_args:
        return dict(zip(obj.recv_type_params, base.type_args))
    return {}


def _param_type(params: list[Type], i: int, variadic: bool, spread: bool) -> Type | None:
    if variadic and params and i >= len(params) - 1:
        last = params[-1]
        if spread:
            return last
        return last.elem if isinstance(last, Slice) else last
    return params[i] if i < len(params) else None


def _is_blank(e: ast.Expr) -> bool:
    return isinstance(e, ast.Ident) and e.name == "_"


def _is_integral(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, int):
        return True
    return isinstance(v, float) and v.is_integer()


def _simple_mismatch(x: Type, y: Type) -> bool:
    """A mismatch the checker is certain about: distinct typed basics or named types."""
    xu, yu = x.underlying(), y.underlying()
    if isinstance(x, Named) and isinstance(y, Named):
        return not identical(x, y) and not is_interface(x) and not is_interface(y)
    if isinstance(x, Basic) and isinstance(y, Basic):
        return not x.is_untyped and not y.is_untyped and x.kind != y.kind
    if isinstance(xu, Basic) and isinstance(yu, Basic) and isinstance(x, Named) != isinstance(y, Named):
        return xu.kind != yu.kind
    return False


def _representable(src: Type, target: Basic) -> bool:
    return isinstance(src, Basic) and (
        (src.is_numeric and target.is_numeric)
        or (src.is_string and target.is_string)
        or (src.is_boolean and target.is_boolean)
    )


def _untyped_rank(t: Type) -> int:
    return _UNTYPED_RANK.get(t.kind, -1) if isinstance(t, Basic) else -1


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _parse_int(text: str) -> int:
    t = text.replace("_", "")
    if len(t) > 1 and t[0] == "0" and t[1].isdigit():
        return int(t, 8)
    return int(t, 0)


def _parse_float(text: str) -> float:
    t = text.replace("_", "")
    if t[:2].lower() == "0x":
        if "p" not in t.lower():
            t += "p0"
        return float.fromhex(t)
    value = float(t)
    if math.isinf(value):
        raise ValueError(text)
    return value


def _parse_rune(text: str) -> int:
    body = text[1:-1]
    if not body:
        raise ValueError(text)
    if body.startswith("\\"):
        if body == "\\'":
            return ord("'")
        decoded = ast.unquote('"' + body + '"')
        if not decoded or decoded.startswith("\\"):
            raise ValueError(text)
        return ord(decoded[0])
    return ord(body[0])
