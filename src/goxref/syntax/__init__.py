"""Go syntax: positions, tree nodes, the tree-sitter parser and a printer."""

from goxref.syntax.parser import GoParser, parse_dir, parse_file
from goxref.syntax.printer import pretty
from goxref.syntax.token import Position, format_position

__all__ = [
    "GoParser",
    "Position",
    "format_position",
    "parse_dir",
    "parse_file",
    "pretty",
]
