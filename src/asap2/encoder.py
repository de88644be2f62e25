"""
A2L encoder.

Walks a node and its Schema, pushing tokens into an A2lWriter in ordinal
order. The whole tree is validated first, so a document that fails
validation produces no output at all.

Layout:
- block nodes open with ``/begin KEYWORD`` followed by their positional
  values on the same line, put every member on its own line one level
  deeper and close with ``/end KEYWORD`` (also when empty)
- simple nodes are one statement line: keyword (if any) and values
- a value flagged ``new_line`` starts a fresh line; a repeated value puts
  each item on its own line
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from .base import Node
from .config import FormatOptions
from .errors import EncodeError
from .lexer import IDENTIFIER_RE
from .schema import FieldDescriptor, NodeKind, Role, Schema, schema_of
from .writer import A2lWriter

logger = logging.getLogger(__name__)


# --------------------------
# Validation
# --------------------------

def validate(node: Node) -> None:
    """
    Check that a node tree can be encoded.

    Raises:
        EncodeError: Naming the first offending node and field
    """
    if not isinstance(node, Node) or not hasattr(node, "__asap2_schema__"):
        raise EncodeError(f"{node!r} is not an ASAP2 node")
    _validate_node(node, schema_of(node))


def _validate_node(node: Node, schema: Schema) -> None:
    for fd in schema.fields:
        value = getattr(node, fd.name)
        where = f"{schema.label}.{fd.name}"
        if fd.role is Role.COMMENT:
            if value is not None and not isinstance(value, str):
                raise EncodeError(f"{where}: comment must be a string")
        elif fd.role is Role.FLAG:
            if not isinstance(value, bool):
                raise EncodeError(f"{where}: flag must be True or False, got {value!r}")
        elif fd.role is Role.NODE:
            if value is None:
                if fd.required:
                    raise EncodeError(f"{where}: required child is not set")
                continue
            _validate_child(where, fd, value)
        elif fd.role is Role.LIST:
            if not isinstance(value, list):
                raise EncodeError(f"{where}: expected a list, got {type(value).__name__}")
            for child in value:
                _validate_child(where, fd, child)
        elif fd.role is Role.DICT:
            if not isinstance(value, Mapping):
                raise EncodeError(f"{where}: expected a NodeDict, got {type(value).__name__}")
            for key, child in value.items():
                _validate_child(where, fd, child)
                if child.key != key:
                    raise EncodeError(f"{where}: entry stored as {key!r} is named {child.key!r}")
        elif value is None:
            if fd.required:
                raise EncodeError(f"{where}: required field is not set")
        elif fd.repeated:
            if not isinstance(value, list):
                raise EncodeError(f"{where}: expected a list of values")
            for item in value:
                _validate_scalar(where, fd, item)
        else:
            _validate_scalar(where, fd, value)


def _validate_child(where: str, fd: FieldDescriptor, child: Any) -> None:
    if not isinstance(child, fd.kind):
        raise EncodeError(f"{where}: expected {fd.kind.__name__}, got {type(child).__name__}")
    _validate_node(child, fd.child_schema)


def _validate_scalar(where: str, fd: FieldDescriptor, value: Any) -> None:
    kind = fd.kind
    if fd.role in (Role.STRING, Role.TEXT):
        if not isinstance(value, str):
            raise EncodeError(f"{where}: expected a string, got {value!r}")
    elif isinstance(kind, type) and issubclass(kind, Enum):
        if not isinstance(value, kind):
            raise EncodeError(f"{where}: {value!r} is not a {kind.__name__}")
    elif kind is str:
        if not isinstance(value, str) or not IDENTIFIER_RE.fullmatch(value):
            raise EncodeError(f"{where}: {value!r} is not a valid identifier")
    elif kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{where}: expected an integer, got {value!r}")
        if fd.as_hex and value < 0:
            raise EncodeError(f"{where}: hex value must not be negative, got {value}")
    elif kind is Decimal:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise EncodeError(f"{where}: expected a number, got {value!r}")
        if not _is_finite(value):
            raise EncodeError(f"{where}: {value} cannot be written")


def _is_finite(value: int | float | Decimal) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return True


# --------------------------
# Emission
# --------------------------

def format_value(fd: FieldDescriptor, value: Any) -> str:
    """Render one unquoted value: enum label, hex or decimal number, identifier."""
    if isinstance(value, Enum):
        return value.value
    if fd.as_hex:
        return "0x%X" % value
    return str(value)


class Encoder:
    """Pushes one node tree into a writer."""

    def __init__(self, writer: A2lWriter) -> None:
        self.writer = writer
        self.comments = writer.options.comments

    def encode(self, node: Node, depth: int = 0) -> None:
        schema = schema_of(node)
        w = self.writer
        if schema.kind is NodeKind.ROOT:
            self._members(node, schema, depth)
            return

        w.new_line(depth)
        if schema.is_block:
            w.token("/begin")
        if schema.keyword:
            w.token(schema.keyword)
        for fd in schema.positional:
            self._positional(node, fd, depth + 1)
        if schema.is_block:
            self._members(node, schema, depth + 1)
            w.new_line(depth)
            w.token("/end")
            w.token(schema.keyword)

    def _positional(self, node: Node, fd: FieldDescriptor, depth: int) -> None:
        value = getattr(node, fd.name)
        if value is None:
            return
        w = self.writer
        if self.comments and fd.comment:
            w.comment(fd.comment)
        for item in (value if fd.repeated else [value]):
            # a value already heading its line stays there
            if fd.new_line and w.pending:
                w.new_line(depth)
            self._value(fd, item)

    def _value(self, fd: FieldDescriptor, value: Any) -> None:
        if fd.role is Role.STRING:
            self.writer.string(value)
        elif fd.role is Role.TEXT:
            self.writer.text(value)
        else:
            self.writer.token(format_value(fd, value))

    def _members(self, node: Node, schema: Schema, depth: int) -> None:
        w = self.writer
        for fd in schema.fields:
            if fd.positional:
                continue
            value = getattr(node, fd.name)
            if fd.role is Role.COMMENT:
                if self.comments and value:
                    w.new_line(depth)
                    w.comment(value)
            elif fd.role is Role.FLAG:
                if value:
                    w.new_line(depth)
                    w.token(fd.keyword)
            elif fd.role is Role.NODE:
                if value is not None:
                    self.encode(value, depth)
            elif fd.role in (Role.LIST, Role.DICT):
                children = list(value.values()) if fd.role is Role.DICT else value
                if self.comments and fd.comment and children:
                    w.new_line(depth)
                    w.comment(fd.comment)
                for child in children:
                    self.encode(child, depth)
            elif value is not None:
                w.new_line(depth)
                w.token(fd.keyword)
                self._value(fd, value)


def encode(node: Node, writer: A2lWriter) -> None:
    """
    Validate a node tree and write it.

    Raises:
        EncodeError: If the tree is not structurally valid; nothing is written
    """
    validate(node)
    label = schema_of(node).label
    logger.debug("Encoding %s", label)
    start = writer.lines_written
    Encoder(writer).encode(node)
    writer.flush()
    logger.debug("Encoded %s in %d lines", label, writer.lines_written - start)


def dumps(node: Node, options: FormatOptions | None = None) -> str:
    """Encode a node tree to A2L text."""
    writer = A2lWriter(options=options)
    encode(node, writer)
    return writer.getvalue()
