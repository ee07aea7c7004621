"""Literal text leaf node."""

import re
from typing import Any, Callable, Dict, List, Optional

from .node import Node, NodeKind

DESCRIPTION_PREVIEW_LENGTH = 40

_WHITESPACE_RUN = re.compile(r"\s+")


class TextNode(Node):
    """Leaf node accumulating literal text plus grammar-owned flags.

    The core only appends to ``content``; grammar hooks may also replace it
    wholesale. Flags are opaque to the core and only their names show up in
    ``dump`` output.
    """

    kind = NodeKind.TEXT
    _core_kind = True

    def __init__(self, content: str = "", occurred_at: Optional[int] = None) -> None:
        super().__init__(occurred_at)
        self.content = content
        self._flags: Dict[str, Any] = {}

    def append_text(self, text: str) -> None:
        self.content += text

    def set_flag(self, name: str, value: Any) -> None:
        self._flags[name] = value

    def get_flag(
        self,
        name: str,
        cast: Optional[Callable[[Any], Any]] = None,
        default: Any = None,
    ) -> Any:
        """Read a flag, optionally converting it (e.g. ``cast=int``).

        Missing flags return ``default`` unconverted.
        """
        if name not in self._flags:
            return default
        value = self._flags[name]
        if cast is not None:
            return cast(value)
        return value

    def has_flag(self, name: str) -> bool:
        return name in self._flags

    @property
    def flag_names(self) -> List[str]:
        return sorted(self._flags)

    def _describe(self) -> str:
        preview = _WHITESPACE_RUN.sub(" ", self.content)[:DESCRIPTION_PREVIEW_LENGTH]
        flags = _WHITESPACE_RUN.sub(" ", ":".join(self.flag_names))
        return f'text "{preview}" [f:{flags}]'

    def _teardown(self) -> None:
        self.content = ""
        self._flags.clear()
