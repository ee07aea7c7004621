"""Tests for lenient recovery of unterminated constructs."""

import pytest

from robust_string_parser.engine import Grammar, ParseEngine
from robust_string_parser.shared import (
    ParserConfig,
    RecoveryImpossible,
    StrictModeViolation,
)
from robust_string_parser.tree import CUSTOM_KIND_MIN, Node, TextNode, check_tree_invariants


class TagNode(Node):
    kind = CUSTOM_KIND_MIN


class TagGrammar(Grammar):
    """``<b>``/``</b>`` where a second ``<b>`` inside a block aborts it."""

    def __init__(self, record_offsets: bool = True) -> None:
        self.record_offsets = record_offsets
        self.opened = []

    def set_status(self, engine, status):
        if status == 0:
            engine.search_set = ["<b>"]
        elif status == 1:
            engine.search_set = ["</b>", "<b>"]
        else:
            return False
        engine.status = status
        return True

    def handle_status(self, engine, status, needle):
        if needle == "<b>" and status == 1:
            engine.reparse_after_current_block()
            return True
        if needle == "<b>":
            node = TagNode(occurred_at=engine.cursor if self.record_offsets else None)
            self.opened.append(node)
            engine.push_node(node)
            engine.set_status(1)
            return True
        engine.pop_node()
        engine.set_status(0)
        return True


class TestEndOfInputRecovery:
    """Test recovery when input ends inside a construct."""

    def test_unterminated_opener_becomes_literal_text(self) -> None:
        """Test that an unmatched opener and its content end up as one text node."""
        grammar = TagGrammar()
        result = ParseEngine(grammar).parse("<b>hello")
        root = result.tree

        assert result.success
        assert len(root.children) == 1
        assert isinstance(root.first_child(), TextNode)
        assert root.first_child().content == "<b>hello"
        assert result.metrics.recoveries == 1
        assert len(result.warnings) == 1
        assert result.warnings[0].offset == 0

    def test_recovery_merges_with_preceding_text(self) -> None:
        """Test that the reinterpreted marker joins the preceding text."""
        result = ParseEngine(TagGrammar()).parse("x<b>y")

        assert [child.content for child in result.tree.children] == ["x<b>y"]

    def test_detached_construct_is_destroyed_after_parse(self) -> None:
        """Test that the abandoned node is disposed of at the end of the parse."""
        grammar = TagGrammar()
        engine = ParseEngine(grammar)

        result = engine.parse("a<b>b")

        abandoned = grammar.opened[0]
        assert abandoned.parent is None
        assert abandoned.destroyed
        assert engine.detached_nodes == ()
        assert check_tree_invariants(result.tree) == []

    def test_detached_nodes_visible_during_parse(self) -> None:
        """Test that grammars can interrogate abandoned nodes before disposal."""
        class Inspecting(TagGrammar):
            def modify_tree(self, engine):
                self.seen = engine.detached_nodes
                return True

        grammar = Inspecting()
        ParseEngine(grammar).parse("<b>x")

        assert grammar.seen == (grammar.opened[0],)

    def test_strict_mode_fails_instead_of_recovering(self) -> None:
        """Test the same input under strict mode."""
        result = ParseEngine(TagGrammar(), ParserConfig(strict=True)).parse("<b>hello")

        assert not result.success
        assert isinstance(result.error, StrictModeViolation)
        assert result.tree is None
        assert result.value is None

    def test_balanced_construct_after_recovered_text(self) -> None:
        """Test that scanning resumes correctly after a recovery."""
        result = ParseEngine(TagGrammar()).parse("<b><b>x</b>")
        root = result.tree

        assert root.children[0].content == "<b>"
        assert isinstance(root.children[1], TagNode)
        assert root.children[1].first_child().content == "x"


class TestRecoveryFromHandler:
    """Test recovery requested by a status handler."""

    def test_handler_triggered_recovery_does_not_advance_cursor(self) -> None:
        """Test that a nested opener aborts the outer block and is rescanned."""
        result = ParseEngine(TagGrammar()).parse("<b>a<b>c</b>")
        root = result.tree

        assert root.children[0].content == "<b>a"
        assert isinstance(root.children[1], TagNode)
        assert root.children[1].occurred_at == 4
        assert root.children[1].first_child().content == "c"
        assert result.metrics.recoveries == 1
        assert check_tree_invariants(root) == []

    def test_recovery_without_open_construct_is_impossible(self) -> None:
        """Test calling recovery with only the root on the stack."""
        class Premature(Grammar):
            def set_status(self, engine, status):
                engine.search_set = ["!"]
                engine.status = 0
                return True

            def handle_status(self, engine, status, needle):
                engine.reparse_after_current_block()
                return True

        engine = ParseEngine(Premature())
        result = engine.parse("a!b")

        assert isinstance(result.error, RecoveryImpossible)
        assert result.error.details["stack_depth"] == 1
        assert not engine.parsing

    def test_recovery_then_rejection_downgrades_next_character(self) -> None:
        """Test a handler that recovers and then reports failure.

        Recovery leaves the cursor one past the abandoned opener, and the
        downgrade that follows in the same step consumes one more character.
        """
        class RecoverThenReject(TagGrammar):
            def __init__(self) -> None:
                super().__init__()
                self.cursors = []

            def handle_status(self, engine, status, needle):
                self.cursors.append(engine.cursor)
                if needle == "<b>" and status == 1:
                    engine.reparse_after_current_block()
                    return False
                return super().handle_status(engine, status, needle)

        grammar = RecoverThenReject()
        engine = ParseEngine(grammar)

        result = engine.parse("<b>a<b>c")
        root = result.tree

        assert grammar.cursors == [0, 4, 4]
        assert [child.content for child in root.children] == ["<b>a<b>c"]
        assert result.metrics.recoveries == 2
        assert result.metrics.downgrades == 1
        assert [w.offset for w in result.warnings] == [0, 1, 4]
        assert engine.cursor == len("<b>a<b>c")
        assert check_tree_invariants(root) == []


class TestRecoveryLimits:
    """Test conditions under which recovery gives up."""

    def test_unknown_origin_is_impossible(self) -> None:
        """Test that nodes without an offset cannot be reparsed."""
        grammar = TagGrammar(record_offsets=False)
        engine = ParseEngine(grammar)

        result = engine.parse("<b>x")

        assert isinstance(result.error, RecoveryImpossible)
        assert result.tree is None
        assert grammar.opened[0].destroyed
        assert engine.root is None

    @pytest.mark.parametrize("limit, succeeds", [(0, False), (1, True)])
    def test_max_recoveries(self, limit, succeeds) -> None:
        """Test the configured bound on recoveries per parse."""
        engine = ParseEngine(TagGrammar(), ParserConfig(max_recoveries=limit))

        result = engine.parse("<b>x")

        assert result.success is succeeds
        if not succeeds:
            assert isinstance(result.error, RecoveryImpossible)
