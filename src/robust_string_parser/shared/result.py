"""Diagnostic and metric types for the string parsing engine.

These objects are attached to every ``ParseResult`` so that callers can see
which lenient recoveries were applied without enabling logging.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Lenient recovery applied
    ERROR = auto()      # Parse aborted


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with its source offset, if known."""

    severity: DiagnosticSeverity
    message: str
    component: str
    offset: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")
        if self.offset is not None and self.offset < 0:
            raise ValueError("Diagnostic offset must be >= 0")


@dataclass
class ParseMetrics:
    """Counters collected during one call to ``ParseEngine.parse``."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    needles_matched: int = 0
    recoveries: int = 0
    downgrades: int = 0
    blocks_force_closed: int = 0
    nodes_pushed: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def lenient_repairs(self) -> int:
        return self.recoveries + self.downgrades + self.blocks_force_closed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processing_time_ms": self.processing_time_ms,
            "characters_processed": self.characters_processed,
            "needles_matched": self.needles_matched,
            "recoveries": self.recoveries,
            "downgrades": self.downgrades,
            "blocks_force_closed": self.blocks_force_closed,
            "nodes_pushed": self.nodes_pushed,
        }


def filter_by_severity(
    diagnostics: List[DiagnosticEntry], severity: DiagnosticSeverity
) -> List[DiagnosticEntry]:
    """Return the diagnostics of one severity, preserving order."""
    return [diag for diag in diagnostics if diag.severity == severity]
