"""Search-mode parse engine.

The engine scans the working text for the needles published by the grammar
for the current status, hands every match to the grammar and appends the text
in between to the innermost open node. When a construct never closes, lenient
mode detaches its node and rescans from one character past the opening
marker, so the marker ends up as literal text.

Offsets are Python string indices (code points). Bytes input is decoded with
the configured codec before the prefilters run.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from robust_string_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    HookFailure,
    InputDecodeError,
    MalformedTreeOperation,
    ParseMetrics,
    ParserConfig,
    RecoveryImpossible,
    ReentrancyError,
    StrictModeViolation,
    StringParserError,
    filter_by_severity,
    get_logger,
)
from robust_string_parser.tree import Node, RootNode

from .filters import FilterPipeline, FilterType, TextFilter
from .grammar import Grammar

MS_PER_SECOND = 1000
COMPONENT = "parse_engine"

InputType = Union[str, bytes, bytearray]


@dataclass
class ParseResult:
    """Outcome of one ``ParseEngine.parse`` call.

    Exactly one of ``tree`` and ``output`` is set on success: ``output`` when
    the grammar materialised a value, ``tree`` otherwise. On failure both are
    None and ``error`` holds the reason.
    """

    success: bool = True
    tree: Optional[RootNode] = None
    output: Any = None
    error: Optional[StringParserError] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    metrics: ParseMetrics = field(default_factory=ParseMetrics)
    correlation_id: Optional[str] = None

    @property
    def value(self) -> Any:
        """The materialised output if any, else the tree."""
        return self.output if self.output is not None else self.tree

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        return filter_by_severity(self.diagnostics, DiagnosticSeverity.WARNING)

    def raise_for_error(self) -> None:
        """Re-raise the stored error of a failed parse."""
        if self.error is not None:
            raise self.error

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        offset: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            offset=offset,
            details=details,
            correlation_id=self.correlation_id,
        ))


class ParseEngine:
    """Stack-based scanner that builds a node tree under grammar control.

    One engine may run many parses sequentially but never two at once; a
    reentrant call fails immediately. Independent engines share nothing but
    the node id counter.

    Attributes read and written by grammar hooks:
        text: Working text after prefiltering
        cursor: Current scan offset
        stack: Open nodes from the root (stack[0]) to the innermost node
        status: Grammar-defined context; 0 means no construct is open
        search_set: Needles for the current status; earlier entries win ties
        strict: Fail instead of recovering
        output: Materialised output set by the grammar's output hook
        root: Root of the tree being built
    """

    def __init__(
        self,
        grammar: Optional[Grammar] = None,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize parse engine.

        Args:
            grammar: Hook object driving the scan; defaults to a grammar that
                treats all input as text
            config: Engine configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self.grammar = grammar if grammar is not None else Grammar()
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self._base_logger = get_logger(__name__, correlation_id, COMPONENT)
        self.logger = self._base_logger
        self.filters = FilterPipeline(correlation_id)
        self.strict = self.config.strict

        self.text = ""
        self.cursor = 0
        self.stack: List[Node] = []
        self.status = 0
        self.search_set: List[str] = []
        self.output: Any = None
        self.root: Optional[RootNode] = None
        self.parsing = False

        self._detached: List[Node] = []
        self._recently_reparsed = False
        self._metrics = ParseMetrics()
        self._result: Optional[ParseResult] = None

    # Filters

    def add_filter(self, kind: FilterType, callback: TextFilter) -> None:
        self.filters.add(kind, callback)

    def clear_filters(self, kind: Optional[FilterType] = None) -> None:
        self.filters.clear(kind)

    def apply_prefilters(self, text: str) -> str:
        return self.filters.apply(FilterType.PRE, text)

    def apply_postfilters(self, text: str) -> str:
        """Run the postfilters; intended for the grammar's output hook."""
        return self.filters.apply(FilterType.POST, text)

    # Parsing

    def parse(
        self,
        raw_text: InputType,
        correlation_id_override: Optional[str] = None,
    ) -> ParseResult:
        """Parse ``raw_text`` into a tree or a grammar-materialised value.

        Never raises for parse failures: the returned result carries
        ``success=False`` and the error instead. Whatever happens, the
        engine's own tree and stack are torn down before returning.

        Args:
            raw_text: Text to parse; bytes are decoded first
            correlation_id_override: Correlation ID for this parse only

        Raises:
            TypeError: If raw_text is neither str nor bytes
        """
        if self.parsing:
            error = ReentrancyError("parse() called while this engine is already parsing")
            self.logger.warning("Rejected reentrant parse call")
            result = ParseResult(success=False, error=error, correlation_id=self.correlation_id)
            if self.config.enable_diagnostics:
                result.add_diagnostic(DiagnosticSeverity.ERROR, error.message, COMPONENT)
            return result

        if not isinstance(raw_text, (str, bytes, bytearray)):
            raise TypeError(f"parse() expects str or bytes, got {type(raw_text).__name__}")

        self.parsing = True
        start_time = time.time()
        effective_correlation_id = correlation_id_override or self.correlation_id
        self.logger = self._base_logger.bind(effective_correlation_id)
        result = ParseResult(correlation_id=effective_correlation_id)
        self._result = result
        self._metrics = ParseMetrics()

        try:
            self._run(raw_text, result)
            self.logger.info(
                "Parse completed",
                extra={
                    "returned_output": result.output is not None,
                    "recoveries": self._metrics.recoveries,
                    "downgrades": self._metrics.downgrades,
                },
            )
        except StringParserError as e:
            self._fail(result, e)
        except Exception as e:
            self.logger.exception(
                "Parse aborted by unexpected exception",
                extra={"exception_type": type(e).__name__},
            )
            error = HookFailure(
                f"Unexpected error during parse: {e}",
                details={"exception_type": type(e).__name__},
            )
            error.__cause__ = e
            self._fail(result, error)
        finally:
            try:
                self._teardown(result)
            finally:
                self._result = None
                self.logger = self._base_logger
                self.parsing = False

        if self.config.collect_metrics:
            self._metrics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
            result.metrics = self._metrics
        return result

    def _run(self, raw_text: InputType, result: ParseResult) -> None:
        self.text = self.apply_prefilters(self._decode(raw_text))
        self.cursor = 0
        self.stack = []
        self.status = 0
        self.search_set = []
        self.output = None
        self._discard_detached()
        if self.root is not None:
            self.root.destroy()
        self.root = RootNode()
        self.stack.append(self.root)
        self._metrics.characters_processed = len(self.text)

        self.logger.info(
            "Starting parse",
            extra={
                "parser_name": self.config.name,
                "text_length": len(self.text),
                "strict": self.strict,
            },
        )

        self._call_hook("init")
        self._search_loop()

        if not self.grammar.close_remaining_blocks(self):
            if self.strict:
                raise StrictModeViolation(
                    "Constructs left open at end of input",
                    details={"open_nodes": len(self.stack) - 1},
                )
            raise HookFailure("Grammar hook close_remaining_blocks reported failure",
                              hook="close_remaining_blocks")

        self._call_hook("modify_tree")
        self._call_hook("output_tree")

        if self.output is not None:
            result.output = self.output
            self.root.destroy()
        else:
            result.tree = self.root
        self.root = None
        self.stack = []

    def _search_loop(self) -> None:
        while True:
            self._recently_reparsed = False
            needle, offset = self._find_next_needle(self.cursor)

            if needle is None:
                if self.status == 0:
                    break
                if self.strict:
                    raise StrictModeViolation(
                        "Input ended inside an unterminated construct",
                        details={"status": self.status, "open_nodes": len(self.stack) - 1},
                    )
                self.reparse_after_current_block()
                continue

            self.append_text(self.text[self.cursor:offset])
            self.cursor = offset
            self._metrics.needles_matched += 1

            if not self.grammar.handle_status(self, self.status, needle):
                if self.strict:
                    raise StrictModeViolation(
                        f"Construct {needle!r} at offset {offset} was rejected by the grammar",
                        details={"status": self.status, "offset": offset},
                    )
                self._downgrade_to_text(needle)
                continue

            if self._recently_reparsed:
                continue

            self.cursor += len(needle)

        if self.cursor < len(self.text):
            self.append_text(self.text[self.cursor:])
            self.cursor = len(self.text)

    def _find_next_needle(self, offset: int) -> Tuple[Optional[str], int]:
        """Earliest needle occurrence at or after ``offset``.

        Ties go to the needle listed first in ``search_set``.
        """
        best_needle: Optional[str] = None
        best_offset = -1
        if offset < len(self.text):
            for needle in self.search_set:
                if not needle:
                    continue
                found = self.text.find(needle, offset)
                if found != -1 and (best_offset < 0 or found < best_offset):
                    best_needle = needle
                    best_offset = found
        return best_needle, best_offset

    def _downgrade_to_text(self, needle: str) -> None:
        self.logger.debug(
            "Grammar rejected construct; treating first character as text",
            extra={"needle": needle, "offset": self.cursor},
        )
        self._metrics.downgrades += 1
        self._diagnose(
            DiagnosticSeverity.WARNING,
            f"Construct {needle!r} not recognised; kept as literal text",
            offset=self.cursor,
        )
        self.append_text(self.text[self.cursor])
        self.cursor += 1

    # Recovery

    def reparse_after_current_block(self) -> None:
        """Reinterpret the innermost open construct's marker as literal text.

        The construct's node is detached from the tree (it stays available in
        ``detached_nodes`` until the parse ends), the stack is popped, status
        resets to 0, the first character of the marker is appended as text
        and scanning resumes right after it.

        Raises:
            RecoveryImpossible: No construct is open, the node's origin is
                unknown, or the configured recovery limit is reached
        """
        if len(self.stack) < 2:
            raise RecoveryImpossible(
                "No open construct to reparse",
                details={"stack_depth": len(self.stack)},
            )
        limit = self.config.max_recoveries
        if limit is not None and self._metrics.recoveries >= limit:
            raise RecoveryImpossible(
                f"Recovery limit of {limit} reached",
                details={"max_recoveries": limit},
            )

        top = self.stack[-1]
        parent = top.parent
        if parent is None:
            raise RecoveryImpossible(
                f"Open node {top.id} is not attached to the tree",
                details={"node_id": top.id},
            )
        parent.remove_child(top)
        self._detached.append(top)
        self.stack.pop()

        origin = top.occurred_at
        if origin is None or origin >= len(self.text):
            raise RecoveryImpossible(
                f"Origin of open node {top.id} is unknown",
                details={"node_id": top.id, "occurred_at": origin},
            )

        self.set_status(0)
        self.append_text(self.text[origin], offset=origin)
        self.cursor = origin + 1
        self._recently_reparsed = True

        self._metrics.recoveries += 1
        self.logger.debug(
            "Reparsing after unterminated construct",
            extra={"node_id": top.id, "offset": origin},
        )
        self._diagnose(
            DiagnosticSeverity.WARNING,
            "Unterminated construct reinterpreted as literal text",
            offset=origin,
            details={"node_id": top.id},
        )

    def close_remaining_blocks(self) -> bool:
        """Default policy for constructs still open at end of input.

        Lenient mode pops them off the stack, leaving their nodes in the
        tree; strict mode reports failure.
        """
        open_nodes = len(self.stack) - 1
        if open_nodes <= 0:
            return True
        if self.strict:
            return False
        del self.stack[1:]
        self._metrics.blocks_force_closed += open_nodes
        self._diagnose(
            DiagnosticSeverity.INFO,
            f"Closed {open_nodes} construct(s) left open at end of input",
            details={"open_nodes": open_nodes},
        )
        return True

    # Helpers for grammar hooks

    @property
    def top_node(self) -> Optional[Node]:
        return self.stack[-1] if self.stack else None

    @property
    def detached_nodes(self) -> Tuple[Node, ...]:
        """Nodes removed by recovery during the current parse."""
        return tuple(self._detached)

    def set_status(self, status: int) -> None:
        """Switch status through the grammar.

        Raises:
            HookFailure: If the grammar rejects the status
        """
        if not self.grammar.set_status(self, status):
            raise HookFailure(f"Grammar rejected status {status}", hook="set_status",
                              details={"status": status})

    def push_node(self, node: Node) -> Node:
        """Attach ``node`` to the innermost open node and open it."""
        if not self.stack:
            raise MalformedTreeOperation("No open node to attach to")
        self.stack[-1].append_child(node)
        self.stack.append(node)
        self._metrics.nodes_pushed += 1
        return node

    def pop_node(self) -> Node:
        """Close the innermost open node. The root can never be popped."""
        if len(self.stack) < 2:
            raise MalformedTreeOperation("Cannot pop the root node off the stack")
        return self.stack.pop()

    def append_text(self, text: str, offset: Optional[int] = None) -> None:
        """Append literal text to the innermost open node."""
        if not text:
            return
        if not self.stack:
            raise MalformedTreeOperation("No open node to receive text")
        self.stack[-1].append_to_last_text_child(
            text, self.cursor if offset is None else offset
        )

    # Internal helpers

    def _call_hook(self, name: str) -> None:
        hook = getattr(self.grammar, name)
        if not hook(self):
            raise HookFailure(f"Grammar hook {name} reported failure", hook=name)

    def _decode(self, raw_text: InputType) -> str:
        if isinstance(raw_text, str):
            return raw_text
        try:
            return bytes(raw_text).decode(
                self.config.input_encoding, self.config.encoding_errors
            )
        except (LookupError, UnicodeDecodeError) as e:
            raise InputDecodeError(
                f"Cannot decode input as {self.config.input_encoding}: {e}",
                details={"encoding": self.config.input_encoding},
            ) from e

    def _diagnose(
        self,
        severity: DiagnosticSeverity,
        message: str,
        offset: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self._result is not None and self.config.enable_diagnostics:
            self._result.add_diagnostic(severity, message, COMPONENT, offset, details)

    def _fail(self, result: ParseResult, error: StringParserError) -> None:
        self.logger.warning(
            "Parse failed",
            extra={
                "parser_name": self.config.name,
                "error_type": type(error).__name__,
                "error": error.message,
            },
        )
        result.success = False
        result.error = error
        result.tree = None
        result.output = None
        self._diagnose(
            DiagnosticSeverity.ERROR,
            error.message,
            details={"error_type": type(error).__name__, **error.details},
        )

    def _discard_detached(self) -> None:
        for node in self._detached:
            # a grammar may have re-attached a node; it is then owned by the tree
            if node.parent is None and not node.destroyed:
                node.destroy()
        self._detached = []

    def _teardown(self, result: ParseResult) -> None:
        try:
            self._discard_detached()
            if self.root is not None:
                self.root.destroy()
        except Exception as e:
            self.logger.exception(
                "Tree teardown failed",
                extra={"exception_type": type(e).__name__},
            )
            # the first failure of the parse stays the reported one
            if result.success:
                error = HookFailure(
                    f"Node teardown failed: {e}",
                    hook="_teardown",
                    details={"exception_type": type(e).__name__},
                )
                error.__cause__ = e
                self._fail(result, error)
        finally:
            self._detached = []
            self.root = None
        self.stack = []
        self.output = None
        self._recently_reparsed = False
