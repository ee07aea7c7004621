#!/usr/bin/env python3
"""
Bold Markup Demo for the Robust String Parser.

Builds a tiny grammar on top of ParseEngine that understands [b]...[/b]
blocks, renders them as HTML and shows lenient recovery of an unclosed tag.
"""

import html
import logging
import sys
from pathlib import Path

# Add src to path for running examples directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from robust_string_parser import (
    CUSTOM_KIND_MIN,
    FilterType,
    Grammar,
    Node,
    ParseEngine,
    ParserConfig,
    TextNode,
)

STATUS_TEXT = 0
STATUS_BOLD = 1


class BoldNode(Node):
    kind = CUSTOM_KIND_MIN

    def _describe(self) -> str:
        return "bold"


class BoldMarkupGrammar(Grammar):
    """[b]...[/b] rendered as <strong>; everything else is escaped text."""

    def set_status(self, engine, status):
        if status == STATUS_TEXT:
            engine.search_set = ["[b]"]
        elif status == STATUS_BOLD:
            engine.search_set = ["[/b]"]
        else:
            return False
        engine.status = status
        return True

    def handle_status(self, engine, status, needle):
        if needle == "[b]":
            engine.push_node(BoldNode(occurred_at=engine.cursor))
            engine.set_status(STATUS_BOLD)
        else:
            engine.pop_node()
            engine.set_status(STATUS_TEXT)
        return True

    def output_tree(self, engine):
        engine.output = engine.apply_postfilters(self._render(engine.root))
        return True

    def _render(self, node):
        parts = []
        for child in node.children:
            if isinstance(child, TextNode):
                parts.append(html.escape(child.content))
            else:
                parts.append(f"<strong>{self._render(child)}</strong>")
        return "".join(parts)


def render_example(engine):
    """Example 1: Render balanced and unbalanced markup."""
    print("=== Example 1: Rendering ===")

    for text in ["Hello [b]world[/b]!", "Unclosed [b]tag & more"]:
        result = engine.parse(text)
        print(f"{text!r} -> {result.output!r}")
        for diagnostic in result.diagnostics:
            print(f"  {diagnostic.severity.name}: {diagnostic.message} (offset {diagnostic.offset})")
    print()


def tree_example():
    """Example 2: Keep the tree instead of rendering."""
    print("=== Example 2: Tree Dump ===")

    class TreeOnly(BoldMarkupGrammar):
        def output_tree(self, engine):
            return True

    result = ParseEngine(TreeOnly()).parse("a [b]bold[/b] word")
    print(result.tree.dump("  "))


def strict_example():
    """Example 3: Strict mode turns recovery into failure."""
    print("=== Example 3: Strict Mode ===")

    engine = ParseEngine(BoldMarkupGrammar(), ParserConfig.strict_mode())
    result = engine.parse("Unclosed [b]tag")
    print(f"success={result.success} error={type(result.error).__name__}: {result.error}")
    print()


def main():
    """Main function."""
    logging.basicConfig(level=logging.WARNING)

    engine = ParseEngine(BoldMarkupGrammar())
    engine.add_filter(FilterType.PRE, lambda text: text.replace("\r\n", "\n"))
    engine.add_filter(FilterType.POST, lambda text: text.replace("\n", "<br>\n"))

    render_example(engine)
    tree_example()
    strict_example()
    return 0


if __name__ == "__main__":
    sys.exit(main())
