"""Cross-reference engine: resolve every identifier to its declaration."""

from goxref.xref.context import ResolutionContext
from goxref.xref.driver import XrefRunner, collect_xrefs, iterate_xrefs
from goxref.xref.models import CrossReference
from goxref.xref.reduce import ast_base_type, type_base_type, type_component_types
from goxref.xref.resolver import Resolver
from goxref.xref.walker import Walker

__all__ = [
    "CrossReference",
    "ResolutionContext",
    "Resolver",
    "Walker",
    "XrefRunner",
    "ast_base_type",
    "collect_xrefs",
    "iterate_xrefs",
    "type_base_type",
    "type_component_types",
]
