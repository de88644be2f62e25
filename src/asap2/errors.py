"""
Exception types raised by the ASAP2 document model and codec.

- SchemaError: a node type is declared inconsistently, or a node is built
  without one of its required fields. Programming error.
- DecodeError: the input text does not follow the grammar. Always carries
  the node type being decoded and the source position.
- EncodeError: an in-memory document is not structurally valid and cannot
  be written.
"""

from __future__ import annotations


class Asap2Error(Exception):
    """Base class for every error raised by this package."""


class SchemaError(Asap2Error):
    """Raised when a node type's field descriptors are inconsistent."""


class EncodeError(Asap2Error):
    """Raised when a document is not valid enough to be encoded."""


class DecodeError(Asap2Error):
    """
    Raised when the token stream does not match the grammar.

    Attributes:
        node_type: Keyword (or class name) of the node being decoded
        line: 1-based line of the offending token, or None if unknown
        column: 1-based column of the offending token, or None if unknown
    """

    def __init__(self, message: str, node_type: str | None = None,
                 line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.node_type = node_type
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.node_type:
            text = f"{self.node_type}: {text}"
        if self.line is not None:
            text = f"line {self.line}, column {self.column}: {text}"
        return text


class LexError(DecodeError):
    """Raised when the source text cannot be split into tokens."""
