"""
Token source for A2L text.

Splits the text into typed tokens carrying their 1-based line and column.
Comments are dropped. The body of a verbatim block (A2ML, IF_DATA) is
returned as a single TEXT token so that vendor-specific content never has
to follow the ASAP2 grammar.

Example:
    >>> [t.value for t in tokenize('/begin HEADER "demo" /end HEADER')]
    ['/begin', 'HEADER', 'demo', '/end', 'HEADER', '']
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from .errors import LexError


class TokenType(Enum):
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"
    TEXT = "text"
    BLOCK_OPEN = "/begin"
    BLOCK_CLOSE = "/end"
    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int

    def describe(self) -> str:
        if self.type in (TokenType.BLOCK_OPEN, TokenType.BLOCK_CLOSE, TokenType.EOF):
            return self.type.value
        if self.type is TokenType.STRING:
            return f'string "{self.value}"'
        return f"{self.type.value} {self.value}"


IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.\[\]]*")
HEX_RE = re.compile(r"[+-]?0[xX][0-9A-Fa-f]+")
INTEGER_RE = re.compile(r"[+-]?\d+")

_TOKEN_RE = re.compile(r"""
      (?P<space>\s+)
    | (?P<block_comment>/\*)
    | (?P<line_comment>//[^\n]*)
    | (?P<open>/begin\b)
    | (?P<close>/end\b)
    | (?P<string>")
    | (?P<number>[+-]?(?:0[xX][0-9A-Fa-f]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)(?![\w.\[\]]))
    | (?P<word>[A-Za-z_][A-Za-z0-9_.\[\]]*)
    """, re.VERBOSE)

# everything that matters while skipping over a verbatim body
_VERBATIM_RE = re.compile(r'"|/\*|//|/begin\b|/end\b')


class _Scanner:
    def __init__(self, text: str, keywords: frozenset[str], verbatim: frozenset[str]) -> None:
        self.text = text
        self.keywords = keywords
        self.verbatim = verbatim
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def column(self, pos: int) -> int:
        return pos - self.line_start + 1

    def advance(self, end: int) -> None:
        """Move to ``end``, keeping track of line breaks on the way."""
        chunk = self.text[self.pos:end]
        breaks = chunk.count("\n")
        if breaks:
            self.line += breaks
            self.line_start = self.pos + chunk.rindex("\n") + 1
        self.pos = end

    def error(self, message: str) -> LexError:
        return LexError(message, line=self.line, column=self.column(self.pos))

    def tokens(self) -> Iterator[Token]:
        # set to "/begin" or "/end" while the next word must be a keyword
        expect: str | None = None
        while True:
            if self.pos >= len(self.text):
                if expect:
                    raise self.error(f"keyword expected after {expect}")
                yield Token(TokenType.EOF, "", self.line, self.column(self.pos))
                return
            match = _TOKEN_RE.match(self.text, self.pos)
            if match is None:
                raise self.error(f"unexpected character {self.text[self.pos]!r}")
            kind = match.lastgroup
            start = match.start()
            line, column = self.line, self.column(start)

            if kind == "space" or kind == "line_comment":
                self.advance(match.end())
                continue
            if kind == "block_comment":
                end = self.text.find("*/", match.end())
                if end < 0:
                    raise self.error("unterminated comment")
                self.advance(end + 2)
                continue
            if expect and kind != "word":
                raise self.error(f"keyword expected after {expect}")

            if kind == "string":
                yield Token(TokenType.STRING, self._string(), line, column)
                continue

            self.advance(match.end())
            word = match.group()
            if kind == "open":
                yield Token(TokenType.BLOCK_OPEN, word, line, column)
                expect = "/begin"
            elif kind == "close":
                yield Token(TokenType.BLOCK_CLOSE, word, line, column)
                expect = "/end"
            elif kind == "number":
                yield Token(TokenType.NUMBER, word, line, column)
            elif expect:
                opened = expect == "/begin"
                expect = None
                yield Token(TokenType.KEYWORD, word, line, column)
                if opened and word in self.verbatim:
                    yield self._verbatim()
            else:
                token_type = TokenType.KEYWORD if word in self.keywords else TokenType.IDENTIFIER
                yield Token(token_type, word, line, column)

    def _string(self) -> str:
        """Read a quoted string starting at the opening quote."""
        text = self.text
        i = self.pos + 1
        parts: list[str] = []
        while True:
            if i >= len(text):
                raise self.error("unterminated string")
            ch = text[i]
            if ch == "\\" and i + 1 < len(text) and text[i + 1] in '"\\':
                parts.append(text[i + 1])
                i += 2
            elif ch == '"':
                if text.startswith('"', i + 1):
                    parts.append('"')
                    i += 2
                    continue
                self.advance(i + 1)
                return "".join(parts)
            else:
                parts.append(ch)
                i += 1

    def _verbatim(self) -> Token:
        """Capture everything up to the /end that balances the current /begin."""
        start = self.pos
        line, column = self.line, self.column(start)
        depth = 0
        i = start
        while True:
            match = _VERBATIM_RE.search(self.text, i)
            if match is None:
                raise LexError("unterminated block", line=line, column=column)
            found = match.group()
            if found == '"':
                self.advance(match.start())
                self._string()
                i = self.pos
            elif found == "/*":
                end = self.text.find("*/", match.end())
                if end < 0:
                    self.advance(match.start())
                    raise self.error("unterminated comment")
                i = end + 2
            elif found == "//":
                end = self.text.find("\n", match.end())
                i = len(self.text) if end < 0 else end
            elif found == "/begin":
                depth += 1
                i = match.end()
            elif depth:
                depth -= 1
                i = match.end()
            else:
                body = self.text[start:match.start()]
                self.advance(match.start())
                return Token(TokenType.TEXT, body, line, column)


def tokenize(text: str, keywords: frozenset[str] = frozenset(),
             verbatim: frozenset[str] = frozenset()) -> Iterator[Token]:
    """
    Split A2L text into tokens.

    Args:
        text: A2L source
        keywords: Words reported as KEYWORD instead of IDENTIFIER
        verbatim: Block keywords whose body is returned as one TEXT token

    Yields:
        Tokens, ending with a single EOF token

    Raises:
        LexError: On an unterminated string, comment or block, or on text
            that is not a valid token
    """
    return _Scanner(text, keywords, verbatim).tokens()
