"""
A2L decoder.

Recursive descent over a token stream, driven entirely by the node Schemas:
positional values are bound in ordinal order, then the members of a block
are read until its ``/end`` in whatever order the file lists them. Any
token that cannot be placed is an error; nothing is skipped and no partial
document is ever returned.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from .base import Node, NodeDict
from .errors import DecodeError
from .lexer import HEX_RE, INTEGER_RE, Token, TokenType
from .schema import FieldDescriptor, NodeKind, Role, Schema, schema_of

logger = logging.getLogger(__name__)

_WORDS = (TokenType.IDENTIFIER, TokenType.KEYWORD)

# declared entry count field and entry list of the verbal conversion tables
_COUNTED = {
    "COMPU_VTAB": ("number_value_pairs", "value_pairs"),
    "COMPU_VTAB_RANGE": ("number_value_triples", "value_triples"),
}


class TokenStream:
    """Token iterator with arbitrary lookahead."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self._buffer: deque[Token] = deque()
        self._last: Token | None = None

    def peek(self, offset: int = 0) -> Token:
        while len(self._buffer) <= offset:
            if self._last is not None and self._last.type is TokenType.EOF:
                self._buffer.append(self._last)
                continue
            self._last = next(self._tokens, None) or Token(TokenType.EOF, "", 0, 0)
            self._buffer.append(self._last)
        return self._buffer[offset]

    def next(self) -> Token:
        token = self.peek()
        self._buffer.popleft()
        return token


class Decoder:
    """
    Builds nodes from a token stream.

    Usage:
        decoder = Decoder(tokenize(text, grammar_keywords(), verbatim_keywords()))
        doc = decoder.decode(Asap2File)
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.stream = TokenStream(tokens)
        self.nodes_built = 0

    def decode(self, node_type: type) -> Node:
        """
        Decode exactly one node of ``node_type`` followed by end of input.

        Raises:
            DecodeError: If the tokens do not form such a node
        """
        schema = schema_of(node_type)
        logger.debug("Decoding %s", schema.label)
        if schema.kind is NodeKind.ROOT:
            node = self._node(schema)
        else:
            token = self.stream.peek()
            if schema.is_block:
                self._expect(schema, TokenType.BLOCK_OPEN)
            if schema.keyword is not None:
                keyword = self._expect(schema, *_WORDS)
                if keyword.value != schema.keyword:
                    raise self._error(schema, f"expected {schema.keyword}", keyword)
            elif not self._binds(schema.positional[0], token, schema):
                raise self._error(schema, f"unexpected {token.describe()}", token)
            node = self._node(schema)
        token = self.stream.peek()
        if token.type is not TokenType.EOF:
            raise self._error(schema, f"unexpected {token.describe()} after the end", token)
        logger.debug("Decoded %s (%d nodes)", schema.label, self.nodes_built)
        return node

    # --------------------------
    # Nodes
    # --------------------------

    def _node(self, schema: Schema) -> Node:
        """Read a node whose opening keyword (if any) has been consumed."""
        values: dict[str, Any] = {}
        for fd in schema.fields:
            if fd.role is Role.LIST:
                values[fd.name] = []
            elif fd.role is Role.DICT:
                values[fd.name] = NodeDict()

        for fd in schema.positional:
            if fd.repeated:
                items = []
                while self._binds(fd, self.stream.peek(), schema):
                    items.append(self._scalar(schema, fd, self.stream.next()))
                values[fd.name] = items
            else:
                values[fd.name] = self._scalar(schema, fd, self.stream.next())

        if schema.is_block:
            self._members(schema, values, until=TokenType.BLOCK_CLOSE)
            self.stream.next()
            closing = self._expect(schema, *_WORDS)
            if closing.value != schema.keyword:
                raise self._error(schema, f"/end {closing.value} closes /begin {schema.keyword}", closing)
        elif schema.kind is NodeKind.ROOT:
            self._members(schema, values, until=TokenType.EOF)

        for fd in schema.fields:
            if fd.required and fd.role is Role.NODE and values.get(fd.name) is None:
                raise self._error(schema, f"missing {fd.child_schema.label}", self.stream.peek())

        node = schema.node_type(**values)
        self.nodes_built += 1
        if schema.keyword in _COUNTED:
            self._check_count(node, schema)
        return node

    def _members(self, schema: Schema, values: dict[str, Any], until: TokenType) -> None:
        while True:
            token = self.stream.peek()
            if token.type is until:
                return
            if token.type is TokenType.EOF:
                raise self._error(schema, f"/end {schema.keyword} missing", token)

            if token.type is TokenType.BLOCK_OPEN:
                word = self.stream.peek(1)
                fd = schema.block_keywords.get(word.value)
                if fd is None:
                    raise self._error(schema, f"unexpected block {word.value}", word)
                self.stream.next()
                self.stream.next()
                self._store(schema, values, fd, self._node(fd.child_schema), token)
                continue

            fd = schema.statement_keywords.get(token.value) if token.type in _WORDS else None
            if fd is not None:
                self.stream.next()
                if fd.role is Role.FLAG:
                    self._store(schema, values, fd, True, token)
                elif fd.role in (Role.NODE, Role.LIST, Role.DICT):
                    self._store(schema, values, fd, self._node(fd.child_schema), token)
                else:
                    self._store(schema, values, fd, self._scalar(schema, fd, self.stream.next()), token)
                continue

            for fd in schema.anonymous:
                if self._binds(fd.child_schema.positional[0], token, schema):
                    self._store(schema, values, fd, self._node(fd.child_schema), token)
                    break
            else:
                raise self._error(schema, f"unexpected {token.describe()}", token)

    def _store(self, schema: Schema, values: dict[str, Any], fd: FieldDescriptor,
               value: Any, token: Token) -> None:
        if fd.role is Role.LIST:
            values[fd.name].append(value)
        elif fd.role is Role.DICT:
            entries: NodeDict = values[fd.name]
            if value.key in entries:
                raise self._error(schema, f"duplicate {fd.child_schema.label} {value.key}", token)
            entries.add(value)
        elif fd.name in values:
            label = fd.keyword or fd.child_schema.label
            raise self._error(schema, f"{label} given more than once", token)
        else:
            values[fd.name] = value

    def _check_count(self, node: Node, schema: Schema) -> None:
        count_name, list_name = _COUNTED[schema.keyword]
        declared = getattr(node, count_name)
        found = len(getattr(node, list_name))
        if declared != found:
            logger.warning("%s %s declares %d entries but lists %d",
                           schema.keyword, node.key, declared, found)

    # --------------------------
    # Values
    # --------------------------

    def _binds(self, fd: FieldDescriptor, token: Token, schema: Schema) -> bool:
        """True if ``token`` has the right type to be a value of ``fd``."""
        kind = fd.kind
        if fd.role is Role.STRING:
            return token.type is TokenType.STRING
        if fd.role is Role.TEXT:
            return token.type is TokenType.TEXT
        if isinstance(kind, type) and issubclass(kind, Enum):
            return token.type in _WORDS and token.value in kind._value2member_map_
        if kind is str:
            return token.type is TokenType.IDENTIFIER or (
                token.type is TokenType.KEYWORD and token.value not in schema.statement_keywords
            )
        return token.type is TokenType.NUMBER

    def _scalar(self, schema: Schema, fd: FieldDescriptor, token: Token) -> Any:
        kind = fd.kind
        if fd.role in (Role.STRING, Role.TEXT):
            if token.type is not (TokenType.STRING if fd.role is Role.STRING else TokenType.TEXT):
                raise self._error(schema, f"expected a quoted string for {fd.name}, got {token.describe()}", token)
            return token.value
        if isinstance(kind, type) and issubclass(kind, Enum):
            if token.type not in _WORDS:
                raise self._error(schema, f"expected a {kind.__name__} label for {fd.name}, got {token.describe()}", token)
            try:
                return kind(token.value)
            except ValueError:
                raise self._error(schema, f"unknown {kind.__name__} label {token.value}", token) from None
        if kind is str:
            if token.type not in _WORDS:
                raise self._error(schema, f"expected an identifier for {fd.name}, got {token.describe()}", token)
            return token.value
        if token.type is not TokenType.NUMBER:
            raise self._error(schema, f"expected a number for {fd.name}, got {token.describe()}", token)
        text = token.value
        is_hex = HEX_RE.fullmatch(text) is not None
        if fd.as_hex and not is_hex:
            raise self._error(schema, f"expected a hex literal for {fd.name}, got {text}", token)
        if is_hex:
            number = int(text, 16)
            return number if kind is int else Decimal(number)
        if kind is int:
            if not INTEGER_RE.fullmatch(text):
                raise self._error(schema, f"expected an integer for {fd.name}, got {text}", token)
            return int(text)
        try:
            return Decimal(text)
        except InvalidOperation:
            raise self._error(schema, f"malformed number {text}", token) from None

    # --------------------------
    # Helpers
    # --------------------------

    def _expect(self, schema: Schema, *types: TokenType) -> Token:
        token = self.stream.next()
        if token.type not in types:
            expected = " or ".join(t.value for t in types)
            raise self._error(schema, f"expected {expected}, got {token.describe()}", token)
        return token

    @staticmethod
    def _error(schema: Schema, message: str, token: Token) -> DecodeError:
        return DecodeError(message, node_type=schema.label, line=token.line, column=token.column)
