"""Robust String Parser.

A grammar-agnostic string parsing engine: it scans raw text for the needles a
grammar publishes, builds a tree of typed nodes under grammar control and
recovers from unterminated constructs by reinterpreting their opening marker
as literal text.

Layers:
- tree: Node, RootNode and TextNode with invariant-preserving edits
- engine: ParseEngine, the Grammar hook contract and the filter pipeline
- shared: configuration, error taxonomy, diagnostics and logging
"""

__version__ = "0.1.0"
__author__ = "Robust String Parser Team"

from .engine import FilterType, Grammar, ParseEngine, ParseResult
from .shared import (
    HookFailure,
    MalformedTreeOperation,
    ParserConfig,
    RecoveryImpossible,
    ReentrancyError,
    StrictModeViolation,
    StringParserError,
)
from .tree import CUSTOM_KIND_MIN, Node, NodeKind, RootNode, TextNode

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Engine
    "FilterType",
    "Grammar",
    "ParseEngine",
    "ParseResult",
    "ParserConfig",

    # Tree
    "CUSTOM_KIND_MIN",
    "Node",
    "NodeKind",
    "RootNode",
    "TextNode",

    # Errors
    "HookFailure",
    "MalformedTreeOperation",
    "RecoveryImpossible",
    "ReentrancyError",
    "StrictModeViolation",
    "StringParserError",
]
