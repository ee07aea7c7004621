"""Error taxonomy for the string parsing engine.

Tree operations raise these directly. ``ParseEngine.parse`` catches them and
reports them through a failed ``ParseResult`` instead of propagating.
"""

from typing import Any, Dict, Optional


class StringParserError(Exception):
    """Base exception for all parser engine failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ReentrancyError(StringParserError):
    """Raised when ``parse`` is invoked while the same engine is parsing."""


class StrictModeViolation(StringParserError):
    """Raised when a recoverable condition occurs while strict mode is on."""


class MalformedTreeOperation(StringParserError):
    """Raised for structural edits that would break the tree invariants."""


class RecoveryImpossible(StringParserError):
    """Raised when an unmatched construct cannot be reparsed as text."""


class HookFailure(StringParserError):
    """Raised when a grammar hook reports failure or raises unexpectedly."""

    def __init__(
        self,
        message: str,
        hook: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.hook = hook


class InputDecodeError(StringParserError):
    """Raised when bytes input cannot be decoded with the configured codec."""
