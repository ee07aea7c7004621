"""Tests for TextNode content and flags."""

import pytest

from robust_string_parser.shared import MalformedTreeOperation
from robust_string_parser.tree import NodeKind, RootNode, TextNode


class TestTextNode:
    """Test TextNode behaviour."""

    def test_append_text_accumulates(self) -> None:
        """Test appending to content."""
        node = TextNode("ab", occurred_at=3)
        node.append_text("cd")

        assert node.content == "abcd"
        assert node.occurred_at == 3
        assert node.kind == NodeKind.TEXT

    def test_content_can_be_replaced(self) -> None:
        """Test whole-content replacement by grammar code."""
        node = TextNode("old")
        node.content = "new"
        assert node.content == "new"

    def test_flags(self) -> None:
        """Test setting, reading and listing flags."""
        node = TextNode()
        node.set_flag("newlines", "2")
        node.set_flag("bold", True)

        assert node.get_flag("bold") is True
        assert node.get_flag("newlines", cast=int) == 2
        assert node.get_flag("missing", default="x") == "x"
        assert node.get_flag("missing", cast=int) is None
        assert node.has_flag("bold")
        assert not node.has_flag("missing")
        assert node.flag_names == ["bold", "newlines"]

    def test_description_truncates_to_forty_characters(self) -> None:
        """Test the dump description preview length."""
        node = TextNode("x" * 60)
        assert node.dump("") == f'{node.id}: text "{"x" * 40}" [f:]\n'

    def test_text_nodes_are_leaves_in_practice_but_accept_children(self) -> None:
        """Test that the core does not restrict text node children."""
        node = TextNode("a")
        child = node.append_child(TextNode("b"))
        assert child.parent is node

    def test_text_node_cannot_adopt_root(self) -> None:
        """Test root rejection applies to text nodes too."""
        with pytest.raises(MalformedTreeOperation):
            TextNode("a").append_child(RootNode())
