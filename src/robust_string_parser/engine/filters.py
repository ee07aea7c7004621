"""Text filter pipeline.

Prefilters rewrite the raw input once before scanning. Postfilters are kept
for the grammar's ``output_tree`` hook; the engine never runs them itself.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from robust_string_parser.shared import get_logger

TextFilter = Callable[[str], Any]


class FilterType(Enum):
    """Pipeline a filter belongs to."""

    PRE = "pre"
    POST = "post"


class FilterPipeline:
    """Ordered pre- and post-filter lists."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.logger = get_logger(__name__, correlation_id, "filter_pipeline")
        self._filters: Dict[FilterType, List[TextFilter]] = {
            FilterType.PRE: [],
            FilterType.POST: [],
        }

    def add(self, kind: FilterType, callback: TextFilter) -> None:
        """Register ``callback`` at the end of the ``kind`` pipeline.

        Raises:
            TypeError: If callback is not callable
            ValueError: If kind is not a FilterType
        """
        if not callable(callback):
            raise TypeError("Filter callback must be callable")
        if not isinstance(kind, FilterType):
            raise ValueError(f"Unknown filter type: {kind!r}")
        self._filters[kind].append(callback)

    def clear(self, kind: Optional[FilterType] = None) -> None:
        """Remove the filters of one pipeline, or of both when kind is None."""
        if kind is None:
            for filters in self._filters.values():
                filters.clear()
            return
        if not isinstance(kind, FilterType):
            raise ValueError(f"Unknown filter type: {kind!r}")
        self._filters[kind].clear()

    def filters(self, kind: FilterType) -> List[TextFilter]:
        return list(self._filters[kind])

    def apply(self, kind: FilterType, text: str) -> str:
        """Run the filters of ``kind`` in registration order.

        A filter that returns something other than a string is skipped and
        the previous text is kept.
        """
        for callback in self._filters[kind]:
            candidate = callback(text)
            if isinstance(candidate, str):
                text = candidate
            else:
                self.logger.debug(
                    "Filter returned non-string value; keeping previous text",
                    extra={"filter": getattr(callback, "__name__", repr(callback)),
                           "returned_type": type(candidate).__name__},
                )
        return text
