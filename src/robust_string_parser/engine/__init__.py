"""Parse engine for the string parsing engine.

Key Components:
    ParseEngine: Search-mode scanner with lenient recovery
    ParseResult: Never-fail result object carrying tree, output and diagnostics
    Grammar: Hook contract a concrete grammar implements
    FilterPipeline: Ordered pre- and post-filter lists
"""

from .filters import FilterPipeline, FilterType
from .grammar import Grammar
from .parser import ParseEngine, ParseResult

__all__ = [
    "FilterPipeline",
    "FilterType",
    "Grammar",
    "ParseEngine",
    "ParseResult",
]
