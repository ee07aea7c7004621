"""Shared utilities for the string parsing engine.

This module provides configuration, the error taxonomy, diagnostic result
types and logging helpers used by the tree and engine layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)
from .errors import (
    HookFailure,
    InputDecodeError,
    MalformedTreeOperation,
    RecoveryImpossible,
    ReentrancyError,
    StrictModeViolation,
    StringParserError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseMetrics,
    filter_by_severity,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "HookFailure",
    "InputDecodeError",
    "MalformedTreeOperation",
    "RecoveryImpossible",
    "ReentrancyError",
    "StrictModeViolation",
    "StringParserError",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ParseMetrics",
    "filter_by_severity",
]
