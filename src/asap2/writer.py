"""
Line-oriented sink for A2L text.

The encoder pushes tokens into the current line; ``new_line`` flushes the
pending line and sets the indentation of the next one.
"""

from __future__ import annotations

import io
from typing import TextIO

from .config import FormatOptions


def quote(text: str) -> str:
    """
    Wrap text in double quotes, escaping backslashes and quotes.

    Example:
        >>> quote('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class A2lWriter:
    """Collects tokens into indented lines and writes them to a stream."""

    def __init__(self, stream: TextIO | None = None, options: FormatOptions | None = None) -> None:
        self.options = options or FormatOptions()
        self._stream: TextIO = stream if stream is not None else io.StringIO()
        self._parts: list[str] = []
        self._depth = 0
        self.lines_written = 0

    @property
    def pending(self) -> bool:
        """True if the current line already holds tokens."""
        return bool(self._parts)

    def new_line(self, depth: int) -> None:
        self.flush()
        self._depth = depth

    def token(self, text: str) -> None:
        self._parts.append(text)

    def string(self, text: str) -> None:
        self._parts.append(quote(text))

    def text(self, body: str) -> None:
        """Add a verbatim body; lines after the first are written exactly as given."""
        first, *rest = body.split("\n")
        if first:
            self._parts.append(first)
        for line in rest:
            self.flush()
            self._stream.write(line + self.options.newline)
            self.lines_written += 1

    def comment(self, text: str) -> None:
        self._parts.append("/*" + text.replace("*/", "* /") + "*/")

    def flush(self) -> None:
        if not self._parts:
            return
        self._stream.write(self.options.indent * self._depth + " ".join(self._parts) + self.options.newline)
        self._parts = []
        self.lines_written += 1

    def getvalue(self) -> str:
        """Flush and return everything written so far (StringIO streams only)."""
        self.flush()
        if not isinstance(self._stream, io.StringIO):
            raise TypeError("getvalue() needs the default in-memory stream")
        return self._stream.getvalue()
