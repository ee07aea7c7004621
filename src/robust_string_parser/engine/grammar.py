"""Hook contract between the parse engine and a concrete grammar.

A grammar is injected into ``ParseEngine``; the engine calls these hooks and
passes itself so the grammar can inspect and drive the scan state. Every hook
reports success with a truthy return value. A falsy value is a failure report
which the engine handles according to the step it happened in.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .parser import ParseEngine


class Grammar:
    """Default grammar: recognises nothing, so every input becomes plain text.

    Subclasses usually override ``set_status`` to publish the needles of each
    status and ``handle_status`` to open and close constructs. A typical
    ``handle_status`` for an opening marker pushes a node created with
    ``occurred_at=engine.cursor`` so that an unterminated construct can later
    be reinterpreted as literal text.
    """

    def init(self, engine: "ParseEngine") -> bool:
        """Establish status 0 and the initial needles for a new parse."""
        engine.set_status(0)
        return True

    def set_status(self, engine: "ParseEngine", status: int) -> bool:
        """Switch to ``status`` and publish its needles in ``engine.search_set``.

        The base contract only knows status 0, which clears the needles.
        """
        if status != 0:
            return False
        engine.search_set = []
        engine.status = 0
        return True

    def handle_status(self, engine: "ParseEngine", status: int, needle: str) -> bool:
        """React to ``needle`` found at ``engine.cursor`` while in ``status``.

        The engine advances the cursor past the needle after a successful
        call unless the hook triggered a recovery.
        """
        engine.append_text(needle)
        return True

    def modify_tree(self, engine: "ParseEngine") -> bool:
        """Post-process the finished tree rooted at ``engine.root``."""
        return True

    def output_tree(self, engine: "ParseEngine") -> bool:
        """Optionally materialise output by assigning ``engine.output``.

        When ``engine.output`` stays None the caller receives the tree.
        """
        return True

    def close_remaining_blocks(self, engine: "ParseEngine") -> bool:
        """Decide what happens to constructs still open at end of input."""
        return engine.close_remaining_blocks()
