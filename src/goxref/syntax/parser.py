"""Tree-sitter based Go parser.

Parses Go source with the ``tree-sitter-go`` grammar and converts the
concrete syntax tree into ``goxref.syntax.ast`` nodes. The conversion is
tolerant: ERROR regions become ``BadExpr``/``BadStmt`` nodes and are logged,
unless ``strict=True`` asks for a ``ParseError`` instead.

Usage::

    parser = GoParser()
    f = parser.parse_file("p.go", b"package p; var A string")
    pkgs = parser.parse_dir(Path("src/foo"))
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import tree_sitter

from goxref.core.errors import ParseError
from goxref.syntax import ast
from goxref.syntax.token import Position

log = structlog.get_logger(__name__)

GRAMMAR_MODULE = "tree_sitter_go"

_TYPE_NODES = frozenset(
    {
        "type_identifier",
        "qualified_type",
        "pointer_type",
        "array_type",
        "implicit_length_array_type",
        "slice_type",
        "map_type",
        "channel_type",
        "function_type",
        "struct_type",
        "interface_type",
        "generic_type",
        "parenthesized_type",
        "negated_type",
    }
)

_IDENT_NODES = frozenset(
    {
        "identifier",
        "field_identifier",
        "package_identifier",
        "type_identifier",
        "label_name",
        "blank_identifier",
    }
)

_LITERAL_KINDS = {
    "int_literal": "INT",
    "float_literal": "FLOAT",
    "imaginary_literal": "IMAG",
    "rune_literal": "CHAR",
    "interpreted_string_literal": "STRING",
    "raw_string_literal": "STRING",
}

_BRANCH_TOKENS = {
    "break_statement": "break",
    "continue_statement": "continue",
    "goto_statement": "goto",
    "fallthrough_statement": "fallthrough",
}


@dataclass
class GoParser:
    """Go parser over tree-sitter.

    The grammar is loaded lazily on first use so that importing goxref does
    not require the grammar package.
    """

    _parser: Any = field(default=None, repr=False)

    def _ensure_parser(self) -> Any:
        if self._parser is None:
            try:
                grammar = importlib.import_module(GRAMMAR_MODULE)
            except ImportError as err:
                raise ParseError.grammar_unavailable(str(err)) from err
            parser = tree_sitter.Parser()
            parser.language = tree_sitter.Language(grammar.language())
            self._parser = parser
        return self._parser

    def parse_file(
        self, filename: str | Path, src: bytes | str | None = None, *, strict: bool = False
    ) -> ast.File:
        """Parse one Go file.

        Args:
            filename: Name recorded in every position. Read from disk when
                ``src`` is None.
            src: Source text.
            strict: Raise ParseError on the first syntax error instead of
                converting the damaged region to Bad* nodes.

        Returns:
            The converted file node.
        """
        name = str(filename)
        if src is None:
            try:
                src = Path(name).read_bytes()
            except OSError as e:
                raise ParseError.unreadable(name, str(e)) from e
        if isinstance(src, str):
            src = src.encode("utf-8")

        tree = self._ensure_parser().parse(src)
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root)
            row, col = bad.start_point if bad is not None else root.start_point
            if strict:
                raise ParseError.syntax_error(name, row + 1, col + 1)
            log.warning("parse.syntax_error", filename=name, line=row + 1, column=col + 1)
        return _Converter(name, src).file(root)

    def parse_dir(
        self, directory: str | Path, *, include_tests: bool = False, strict: bool = False
    ) -> dict[str, list[ast.File]]:
        """Parse every ``.go`` file of a directory, grouped by package name.

        Files are parsed in name order, so each list is sorted by filename.
        """
        directory = Path(directory)
        pkgs: dict[str, list[ast.File]] = {}
        for path in sorted(directory.glob("*.go")):
            if not path.is_file():
                continue
            if path.name.endswith("_test.go") and not include_tests:
                continue
            f = self.parse_file(path, strict=strict)
            pkgs.setdefault(f.name.name, []).append(f)
        return pkgs


_default_parser = GoParser()


def parse_file(
    filename: str | Path, src: bytes | str | None = None, *, strict: bool = False
) -> ast.File:
    """Parse one Go file with the shared default parser."""
    return _default_parser.parse_file(filename, src, strict=strict)


def parse_dir(
    directory: str | Path, *, include_tests: bool = False, strict: bool = False
) -> dict[str, list[ast.File]]:
    """Parse a package directory with the shared default parser."""
    return _default_parser.parse_dir(directory, include_tests=include_tests, strict=strict)


def _first_error(node: Any) -> Any | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _kids(node: Any) -> list[Any]:
    return [c for c in node.named_children if c.type != "comment"]


def _has_token(node: Any, token: str) -> bool:
    return any(not c.is_named and c.type == token for c in node.children)


class _Converter:
    """Converts one tree-sitter tree into goxref AST nodes."""

    def __init__(self, filename: str, src: bytes) -> None:
        self.filename = filename
        self.src = src

    # -- helpers ----------------------------------------------------------

    def pos(self, node: Any) -> Position:
        row, col = node.start_point
        return Position(self.filename, node.start_byte, row + 1, col + 1)

    def text(self, node: Any) -> str:
        return self.src[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def ident(self, node: Any) -> ast.Ident:
        return ast.Ident(name=self.text(node), pos=self.pos(node))

    def bad(self, node: Any) -> ast.BadExpr:
        log.debug("parse.unconverted_node", filename=self.filename, node_type=node.type)
        return ast.BadExpr(pos=self.pos(node))

    # -- file and declarations --------------------------------------------

    def file(self, root: Any) -> ast.File:
        name: ast.Ident | None = None
        decls: list[ast.Decl] = []
        imports: list[ast.ImportSpec] = []
        package_pos: Position | None = None
        for child in _kids(root):
            kind = child.type
            if kind == "package_clause":
                ids = _kids(child)
                if ids:
                    name = self.ident(ids[0])
                    package_pos = self.pos(child)
            elif kind == "import_declaration":
                decl = self.import_decl(child)
                imports.extend(s for s in decl.specs if isinstance(s, ast.ImportSpec))
                decls.append(decl)
            elif kind == "function_declaration":
                decls.append(self.func_decl(child, recv=None))
            elif kind == "method_declaration":
                decls.append(self.func_decl(child, recv=child.child_by_field_name("receiver")))
            elif kind in ("var_declaration", "const_declaration", "type_declaration"):
                decls.append(self.gen_decl(child))
            else:
                log.debug("parse.unexpected_top_level", filename=self.filename, node_type=kind)
                decls.append(ast.BadDecl(pos=self.pos(child)))
        if name is None:
            row, col = root.start_point
            raise ParseError.syntax_error(self.filename, row + 1, col + 1)
        return ast.File(
            name=name, filename=self.filename, decls=decls, imports=imports, pos=package_pos
        )

    def import_decl(self, node: Any) -> ast.GenDecl:
        specs: list[ast.Spec] = []
        for child in _kids(node):
            if child.type == "import_spec":
                specs.append(self.import_spec(child))
            elif child.type == "import_spec_list":
                specs.extend(self.import_spec(s) for s in _kids(child) if s.type == "import_spec")
        return ast.GenDecl(tok="import", specs=specs, pos=self.pos(node))

    def import_spec(self, node: Any) -> ast.ImportSpec:
        name_node = node.child_by_field_name("name")
        path_node = node.child_by_field_name("path")
        name = self.ident(name_node) if name_node is not None else None
        if path_node is None:
            path = ast.BasicLit(kind="STRING", value='""', pos=self.pos(node))
        else:
            path = ast.BasicLit(kind="STRING", value=self.text(path_node), pos=self.pos(path_node))
        return ast.ImportSpec(path=path, name=name, pos=self.pos(node))

    def gen_decl(self, node: Any) -> ast.GenDecl:
        tok = node.type.split("_", 1)[0]  # var, const, type
        specs: list[ast.Spec] = []
        for child in _kids(node):
            kind = child.type
            if kind in ("var_spec_list", "const_spec_list", "type_spec_list"):
                specs.extend(self.spec(s) for s in _kids(child))
            else:
                specs.append(self.spec(child))
        return ast.GenDecl(tok=tok, specs=specs, pos=self.pos(node))

    def spec(self, node: Any) -> ast.Spec:
        kind = node.type
        if kind in ("var_spec", "const_spec"):
            type_node = node.child_by_field_name("type")
            value_node = node.child_by_field_name("value")
            return ast.ValueSpec(
                names=[self.ident(n) for n in node.children_by_field_name("name")],
                type=self.type_(type_node) if type_node is not None else None,
                values=self.expr_list(value_node) if value_node is not None else [],
                pos=self.pos(node),
            )
        if kind in ("type_spec", "type_alias"):
            params = node.child_by_field_name("type_parameters")
            return ast.TypeSpec(
                name=self.ident(node.child_by_field_name("name")),
                type=self.type_(node.child_by_field_name("type")),
                type_params=self.type_params(params) if params is not None else None,
                assign=kind == "type_alias",
                pos=self.pos(node),
            )
        log.debug("parse.unexpected_spec", filename=self.filename, node_type=kind)
        return ast.ValueSpec(pos=self.pos(node))

    def func_decl(self, node: Any, recv: Any | None) -> ast.FuncDecl:
        params = node.child_by_field_name("type_parameters")
        ftype = ast.FuncType(
            params=self.params(node.child_by_field_name("parameters")),
            results=self.results(node.child_by_field_name("result")),
            type_params=self.type_params(params) if params is not None else None,
            pos=self.pos(node),
        )
        body = node.child_by_field_name("body")
        return ast.FuncDecl(
            name=self.ident(node.child_by_field_name("name")),
            type=ftype,
            recv=self.params(recv) if recv is not None else None,
            body=self.block(body) if body is not None else None,
            pos=self.pos(node),
        )

    def params(self, node: Any | None) -> ast.FieldList:
        if node is None:
            return ast.FieldList()
        fields: list[ast.Field] = []
        for child in _kids(node):
            type_node = child.child_by_field_name("type")
            typ = self.type_(type_node) if type_node is not None else None
            names = [self.ident(n) for n in child.children_by_field_name("name")]
            if child.type == "variadic_parameter_declaration":
                typ = ast.Ellipsis(elt=typ, pos=self.pos(child))
            elif child.type != "parameter_declaration":
                continue
            fields.append(ast.Field(names=names, type=typ, pos=self.pos(child)))
        return ast.FieldList(list=fields, pos=self.pos(node))

    def results(self, node: Any | None) -> ast.FieldList | None:
        if node is None:
            return None
        if node.type == "parameter_list":
            return self.params(node)
        return ast.FieldList(list=[ast.Field(type=self.type_(node), pos=self.pos(node))])

    def type_params(self, node: Any) -> ast.FieldList:
        fields: list[ast.Field] = []
        for child in _kids(node):
            type_node = child.child_by_field_name("type")
            constraint = self.constraint(type_node) if type_node is not None else None
            names = [self.ident(n) for n in child.children_by_field_name("name")]
            fields.append(ast.Field(names=names, type=constraint, pos=self.pos(child)))
        return ast.FieldList(list=fields, pos=self.pos(node))

    def constraint(self, node: Any) -> ast.Expr:
        if node.type in ("type_constraint", "type_elem", "constraint_elem", "constraint_term"):
            terms = [self.constraint(k) for k in _kids(node)]
            if not terms:
                return self.bad(node)
            result = terms[0]
            for term in terms[1:]:
                result = ast.BinaryExpr(x=result, op="|", y=term, pos=result.pos)
            return result
        return self.type_(node)

    # -- types --------------------------------------------------------------

    def type_(self, node: Any) -> ast.Expr:
        kind = node.type
        if kind in _IDENT_NODES:
            return self.ident(node)
        if kind == "qualified_type":
            return ast.SelectorExpr(
                x=self.ident(node.child_by_field_name("package")),
                sel=self.ident(node.child_by_field_name("name")),
                pos=self.pos(node),
            )
        if kind == "pointer_type":
            return ast.StarExpr(x=self.type_(_kids(node)[0]), pos=self.pos(node))
        if kind == "array_type":
            return ast.ArrayType(
                len=self.expr(node.child_by_field_name("length")),
                elt=self.type_(node.child_by_field_name("element")),
                pos=self.pos(node),
            )
        if kind == "implicit_length_array_type":
            return ast.ArrayType(
                len=ast.Ellipsis(pos=self.pos(node)),
                elt=self.type_(node.child_by_field_name("element")),
                pos=self.pos(node),
            )
        if kind == "slice_type":
            return ast.ArrayType(
                len=None, elt=self.type_(node.child_by_field_name("element")), pos=self.pos(node)
            )
        if kind == "map_type":
            return ast.MapType(
                key=self.type_(node.child_by_field_name("key")),
                value=self.type_(node.child_by_field_name("value")),
                pos=self.pos(node),
            )
        if kind == "channel_type":
            tokens = [c.type for c in node.children if not c.is_named]
            if tokens and tokens[0] == "<-":
                direction = "recv"
            elif "<-" in tokens:
                direction = "send"
            else:
                direction = "both"
            return ast.ChanType(
                value=self.type_(node.child_by_field_name("value")),
                dir=direction,
                pos=self.pos(node),
            )
        if kind == "function_type":
            return ast.FuncType(
                params=self.params(node.child_by_field_name("parameters")),
                results=self.results(node.child_by_field_name("result")),
                pos=self.pos(node),
            )
        if kind == "struct_type":
            return ast.StructType(fields=self.struct_fields(node), pos=self.pos(node))
        if kind == "interface_type":
            return ast.InterfaceType(methods=self.interface_elems(node), pos=self.pos(node))
        if kind == "generic_type":
            args = node.child_by_field_name("type_arguments")
            return ast.IndexExpr(
                x=self.type_(node.child_by_field_name("type")),
                indices=self.type_args(args) if args is not None else [],
                pos=self.pos(node),
            )
        if kind == "parenthesized_type":
            return ast.ParenExpr(x=self.type_(_kids(node)[0]), pos=self.pos(node))
        if kind == "negated_type":
            return ast.UnaryExpr(op="~", x=self.type_(_kids(node)[0]), pos=self.pos(node))
        if kind in ("type_elem", "type_constraint"):
            return self.constraint(node)
        return self.expr(node)

    def type_args(self, node: Any) -> list[ast.Expr]:
        return [self.type_(k) for k in _kids(node)]

    def struct_fields(self, node: Any) -> ast.FieldList:
        fields: list[ast.Field] = []
        for decl_list in _kids(node):
            if decl_list.type != "field_declaration_list":
                continue
            for child in _kids(decl_list):
                if child.type != "field_declaration":
                    continue
                names = [self.ident(n) for n in child.children_by_field_name("name")]
                typ = self.type_(child.child_by_field_name("type"))
                if not names and _has_token(child, "*"):
                    typ = ast.StarExpr(x=typ, pos=self.pos(child))
                tag_node = child.child_by_field_name("tag")
                tag = (
                    ast.BasicLit(kind="STRING", value=self.text(tag_node), pos=self.pos(tag_node))
                    if tag_node is not None
                    else None
                )
                fields.append(ast.Field(names=names, type=typ, tag=tag, pos=self.pos(child)))
        return ast.FieldList(list=fields, pos=self.pos(node))

    def interface_elems(self, node: Any) -> ast.FieldList:
        fields: list[ast.Field] = []
        for child in _kids(node):
            if child.type in ("method_elem", "method_spec"):
                ftype = ast.FuncType(
                    params=self.params(child.child_by_field_name("parameters")),
                    results=self.results(child.child_by_field_name("result")),
                )
                name = self.ident(child.child_by_field_name("name"))
                fields.append(ast.Field(names=[name], type=ftype, pos=self.pos(child)))
            elif child.type == "interface_type_name":
                fields.append(ast.Field(type=self.type_(_kids(child)[0]), pos=self.pos(child)))
            else:
                fields.append(ast.Field(type=self.constraint(child), pos=self.pos(child)))
        return ast.FieldList(list=fields, pos=self.pos(node))

    # -- statements ---------------------------------------------------------

    def block(self, node: Any) -> ast.BlockStmt:
        return ast.BlockStmt(list=self.stmt_list(_kids(node)), pos=self.pos(node))

    def stmt_list(self, nodes: list[Any]) -> list[ast.Stmt]:
        stmts: list[ast.Stmt] = []
        for child in nodes:
            if child.type == "statement_list":
                stmts.extend(self.stmt_list(_kids(child)))
            else:
                stmts.append(self.stmt(child))
        return stmts

    def stmt(self, node: Any) -> ast.Stmt:
        kind = node.type
        p = self.pos(node)
        if kind == "expression_statement":
            return ast.ExprStmt(x=self.expr(_kids(node)[0]), pos=p)
        if kind == "send_statement":
            return ast.SendStmt(
                chan=self.expr(node.child_by_field_name("channel")),
                value=self.expr(node.child_by_field_name("value")),
                pos=p,
            )
        if kind in ("inc_statement", "dec_statement"):
            tok = "++" if kind == "inc_statement" else "--"
            return ast.IncDecStmt(x=self.expr(_kids(node)[0]), tok=tok, pos=p)
        if kind == "assignment_statement":
            return ast.AssignStmt(
                lhs=self.expr_list(node.child_by_field_name("left")),
                tok=self.text(node.child_by_field_name("operator")),
                rhs=self.expr_list(node.child_by_field_name("right")),
                pos=p,
            )
        if kind == "short_var_declaration":
            return ast.AssignStmt(
                lhs=self.expr_list(node.child_by_field_name("left")),
                tok=":=",
                rhs=self.expr_list(node.child_by_field_name("right")),
                pos=p,
            )
        if kind in ("var_declaration", "const_declaration", "type_declaration"):
            return ast.DeclStmt(decl=self.gen_decl(node), pos=p)
        if kind == "return_statement":
            kids = _kids(node)
            return ast.ReturnStmt(results=self.expr_list(kids[0]) if kids else [], pos=p)
        if kind == "go_statement":
            return ast.GoStmt(call=self.expr(_kids(node)[0]), pos=p)
        if kind == "defer_statement":
            return ast.DeferStmt(call=self.expr(_kids(node)[0]), pos=p)
        if kind == "if_statement":
            return self.if_stmt(node)
        if kind == "for_statement":
            return self.for_stmt(node)
        if kind == "expression_switch_statement":
            return self.switch_stmt(node)
        if kind == "type_switch_statement":
            return self.type_switch_stmt(node)
        if kind == "select_statement":
            return self.select_stmt(node)
        if kind in ("labeled_statement", "empty_labeled_statement"):
            label = node.child_by_field_name("label")
            rest = [k for k in _kids(node) if k.type != "label_name"]
            inner = self.stmt_list(rest)
            return ast.LabeledStmt(
                label=self.ident(label), stmt=inner[0] if inner else None, pos=p
            )
        if kind in _BRANCH_TOKENS:
            labels = [k for k in _kids(node) if k.type == "label_name"]
            return ast.BranchStmt(
                tok=_BRANCH_TOKENS[kind],
                label=self.ident(labels[0]) if labels else None,
                pos=p,
            )
        if kind == "block":
            return self.block(node)
        if kind == "empty_statement":
            return ast.EmptyStmt(pos=p)
        if kind == "ERROR":
            log.debug("parse.bad_statement", filename=self.filename, line=p.line)
            return ast.BadStmt(pos=p)
        return ast.ExprStmt(x=self.expr(node), pos=p)

    def simple_stmt(self, node: Any | None) -> ast.Stmt | None:
        return self.stmt(node) if node is not None else None

    def opt_expr(self, node: Any | None) -> ast.Expr | None:
        return self.expr(node) if node is not None else None

    def if_stmt(self, node: Any) -> ast.IfStmt:
        alt = node.child_by_field_name("alternative")
        else_: ast.Stmt | None = None
        if alt is not None:
            else_ = self.if_stmt(alt) if alt.type == "if_statement" else self.block(alt)
        return ast.IfStmt(
            init=self.simple_stmt(node.child_by_field_name("initializer")),
            cond=self.expr(node.child_by_field_name("condition")),
            body=self.block(node.child_by_field_name("consequence")),
            else_=else_,
            pos=self.pos(node),
        )

    def for_stmt(self, node: Any) -> ast.Stmt:
        body = self.block(node.child_by_field_name("body"))
        p = self.pos(node)
        header = [k for k in _kids(node) if k.type != "block"]
        if not header:
            return ast.ForStmt(body=body, pos=p)
        clause = header[0]
        if clause.type == "for_clause":
            return ast.ForStmt(
                init=self.simple_stmt(clause.child_by_field_name("initializer")),
                cond=self.opt_expr(clause.child_by_field_name("condition")),
                post=self.simple_stmt(clause.child_by_field_name("update")),
                body=body,
                pos=p,
            )
        if clause.type == "range_clause":
            left = clause.child_by_field_name("left")
            lhs = self.expr_list(left) if left is not None else []
            tok = None
            if lhs:
                tok = ":=" if _has_token(clause, ":=") else "="
            return ast.RangeStmt(
                key=lhs[0] if lhs else None,
                value=lhs[1] if len(lhs) > 1 else None,
                tok=tok,
                x=self.expr(clause.child_by_field_name("right")),
                body=body,
                pos=p,
            )
        return ast.ForStmt(cond=self.expr(clause), body=body, pos=p)

    def case_body(self, node: Any, skip: list[Any]) -> list[ast.Stmt]:
        skip_ids = {(k.start_byte, k.end_byte, k.type) for k in skip}
        rest = [k for k in _kids(node) if (k.start_byte, k.end_byte, k.type) not in skip_ids]
        return self.stmt_list(rest)

    def switch_stmt(self, node: Any) -> ast.SwitchStmt:
        clauses: list[ast.Stmt] = []
        for child in _kids(node):
            if child.type == "expression_case":
                value = child.child_by_field_name("value")
                clauses.append(
                    ast.CaseClause(
                        list=self.expr_list(value),
                        body=self.case_body(child, [value]),
                        pos=self.pos(child),
                    )
                )
            elif child.type == "default_case":
                clauses.append(
                    ast.CaseClause(list=None, body=self.case_body(child, []), pos=self.pos(child))
                )
        return ast.SwitchStmt(
            init=self.simple_stmt(node.child_by_field_name("initializer")),
            tag=self.opt_expr(node.child_by_field_name("value")),
            body=ast.BlockStmt(list=clauses, pos=self.pos(node)),
            pos=self.pos(node),
        )

    def type_switch_stmt(self, node: Any) -> ast.TypeSwitchStmt:
        p = self.pos(node)
        value = node.child_by_field_name("value")
        guard = ast.TypeAssertExpr(x=self.expr(value), type=None, pos=self.pos(value))
        alias = node.child_by_field_name("alias")
        assign: ast.Stmt
        if alias is not None:
            assign = ast.AssignStmt(
                lhs=self.expr_list(alias), tok=":=", rhs=[guard], pos=self.pos(alias)
            )
        else:
            assign = ast.ExprStmt(x=guard, pos=guard.pos)
        clauses: list[ast.Stmt] = []
        for child in _kids(node):
            if child.type == "type_case":
                types = child.children_by_field_name("type")
                clauses.append(
                    ast.CaseClause(
                        list=[self.type_(t) for t in types],
                        body=self.case_body(child, types),
                        pos=self.pos(child),
                    )
                )
            elif child.type == "default_case":
                clauses.append(
                    ast.CaseClause(list=None, body=self.case_body(child, []), pos=self.pos(child))
                )
        return ast.TypeSwitchStmt(
            init=self.simple_stmt(node.child_by_field_name("initializer")),
            assign=assign,
            body=ast.BlockStmt(list=clauses, pos=p),
            pos=p,
        )

    def select_stmt(self, node: Any) -> ast.SelectStmt:
        clauses: list[ast.Stmt] = []
        for child in _kids(node):
            if child.type == "communication_case":
                comm = child.child_by_field_name("communication")
                clauses.append(
                    ast.CommClause(
                        comm=self.comm(comm),
                        body=self.case_body(child, [comm]),
                        pos=self.pos(child),
                    )
                )
            elif child.type == "default_case":
                clauses.append(
                    ast.CommClause(comm=None, body=self.case_body(child, []), pos=self.pos(child))
                )
        p = self.pos(node)
        return ast.SelectStmt(body=ast.BlockStmt(list=clauses, pos=p), pos=p)

    def comm(self, node: Any) -> ast.Stmt:
        if node.type != "receive_statement":
            return self.stmt(node)
        right = self.expr(node.child_by_field_name("right"))
        left = node.child_by_field_name("left")
        if left is None:
            return ast.ExprStmt(x=right, pos=self.pos(node))
        tok = ":=" if _has_token(node, ":=") else "="
        return ast.AssignStmt(lhs=self.expr_list(left), tok=tok, rhs=[right], pos=self.pos(node))

    # -- expressions --------------------------------------------------------

    def expr_list(self, node: Any | None) -> list[ast.Expr]:
        if node is None:
            return []
        if node.type == "expression_list":
            return [self.expr(k) for k in _kids(node)]
        return [self.expr(node)]

    def expr(self, node: Any) -> ast.Expr:
        kind = node.type
        p = self.pos(node)
        if kind in _IDENT_NODES:
            return self.ident(node)
        if kind in _LITERAL_KINDS:
            return ast.BasicLit(kind=_LITERAL_KINDS[kind], value=self.text(node), pos=p)
        if kind in ("true", "false", "nil", "iota"):
            return ast.Ident(name=kind, pos=p)
        if kind == "parenthesized_expression":
            return ast.ParenExpr(x=self.type_(_kids(node)[0]), pos=p)
        if kind == "selector_expression":
            return ast.SelectorExpr(
                x=self.expr(node.child_by_field_name("operand")),
                sel=self.ident(node.child_by_field_name("field")),
                pos=p,
            )
        if kind == "index_expression":
            return ast.IndexExpr(
                x=self.expr(node.child_by_field_name("operand")),
                indices=[self.type_(k) for k in node.children_by_field_name("index")],
                pos=p,
            )
        if kind == "slice_expression":
            return ast.SliceExpr(
                x=self.expr(node.child_by_field_name("operand")),
                low=self.opt_expr(node.child_by_field_name("start")),
                high=self.opt_expr(node.child_by_field_name("end")),
                max=self.opt_expr(node.child_by_field_name("capacity")),
                pos=p,
            )
        if kind == "call_expression":
            return self.call(node)
        if kind == "type_assertion_expression":
            return ast.TypeAssertExpr(
                x=self.expr(node.child_by_field_name("operand")),
                type=self.type_(node.child_by_field_name("type")),
                pos=p,
            )
        if kind == "type_conversion_expression":
            return ast.CallExpr(
                fun=self.type_(node.child_by_field_name("type")),
                args=[self.expr(node.child_by_field_name("operand"))],
                pos=p,
            )
        if kind == "type_instantiation_expression":
            kids = _kids(node)
            return ast.IndexExpr(
                x=self.type_(kids[0]), indices=[self.type_(k) for k in kids[1:]], pos=p
            )
        if kind == "unary_expression":
            op = self.text(node.child_by_field_name("operator"))
            operand = self.expr(node.child_by_field_name("operand"))
            if op == "*":
                return ast.StarExpr(x=operand, pos=p)
            return ast.UnaryExpr(op=op, x=operand, pos=p)
        if kind == "binary_expression":
            return ast.BinaryExpr(
                x=self.expr(node.child_by_field_name("left")),
                op=self.text(node.child_by_field_name("operator")),
                y=self.expr(node.child_by_field_name("right")),
                pos=p,
            )
        if kind == "composite_literal":
            body = node.child_by_field_name("body")
            return ast.CompositeLit(
                type=self.type_(node.child_by_field_name("type")),
                elts=self.elements(body) if body is not None else [],
                pos=p,
            )
        if kind == "literal_value":
            return ast.CompositeLit(type=None, elts=self.elements(node), pos=p)
        if kind == "func_literal":
            return ast.FuncLit(
                type=ast.FuncType(
                    params=self.params(node.child_by_field_name("parameters")),
                    results=self.results(node.child_by_field_name("result")),
                    pos=p,
                ),
                body=self.block(node.child_by_field_name("body")),
                pos=p,
            )
        if kind in _TYPE_NODES:
            return self.type_(node)
        return self.bad(node)

    def call(self, node: Any) -> ast.CallExpr:
        fun = self.expr(node.child_by_field_name("function"))
        type_args = node.child_by_field_name("type_arguments")
        if type_args is not None:
            fun = ast.IndexExpr(x=fun, indices=self.type_args(type_args), pos=fun.pos)
        args: list[ast.Expr] = []
        has_ellipsis = False
        arg_list = node.child_by_field_name("arguments")
        if arg_list is not None:
            has_ellipsis = _has_token(arg_list, "...")
            for k in _kids(arg_list):
                if k.type == "variadic_argument":
                    has_ellipsis = True
                    k = _kids(k)[0]
                args.append(self.type_(k))
        return ast.CallExpr(fun=fun, args=args, has_ellipsis=has_ellipsis, pos=self.pos(node))

    def elements(self, node: Any) -> list[ast.Expr]:
        elts: list[ast.Expr] = []
        for child in _kids(node):
            if child.type == "keyed_element":
                key = child.child_by_field_name("key")
                value = child.child_by_field_name("value")
                if key is None or value is None:
                    kids = _kids(child)
                    key, value = kids[0], kids[-1]
                elts.append(
                    ast.KeyValueExpr(
                        key=self.element(key), value=self.element(value), pos=self.pos(child)
                    )
                )
            else:
                elts.append(self.element(child))
        return elts

    def element(self, node: Any) -> ast.Expr:
        if node.type in ("literal_element", "element"):
            kids = _kids(node)
            if not kids:
                return self.bad(node)
            node = kids[0]
        return self.expr(node)
