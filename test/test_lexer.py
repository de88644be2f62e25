"""
Tests for the A2L token source.
"""

import pytest

from asap2 import LexError
from asap2.lexer import Token, TokenType, tokenize


def types(text: str, **kwargs) -> list[TokenType]:
    return [t.type for t in tokenize(text, **kwargs)]


def test_token_positions()->None:
    tokens = list(tokenize('/begin HEADER "x"\n/end HEADER'))
    assert tokens == [
        Token(TokenType.BLOCK_OPEN, "/begin", 1, 1),
        Token(TokenType.KEYWORD, "HEADER", 1, 8),
        Token(TokenType.STRING, "x", 1, 15),
        Token(TokenType.BLOCK_CLOSE, "/end", 2, 1),
        Token(TokenType.KEYWORD, "HEADER", 2, 6),
        Token(TokenType.EOF, "", 2, 12),
    ]


def test_keywords_and_identifiers()->None:
    tokens = list(tokenize("BIT_MASK Testvar1 Signal.x[2]", keywords=frozenset({"BIT_MASK"})))
    assert [(t.type, t.value) for t in tokens[:3]] == [
        (TokenType.KEYWORD, "BIT_MASK"),
        (TokenType.IDENTIFIER, "Testvar1"),
        (TokenType.IDENTIFIER, "Signal.x[2]"),
    ]


def test_numbers()->None:
    tokens = list(tokenize("0x1F -1.5e3 +7 .25 42"))
    assert [t.value for t in tokens if t.type is TokenType.NUMBER] == ["0x1F", "-1.5e3", "+7", ".25", "42"]


def test_string_escapes()->None:
    token = next(tokenize(r'"a \"b\" c\\d"'))
    assert token.type is TokenType.STRING
    assert token.value == 'a "b" c\\d'


def test_doubled_quote()->None:
    assert next(tokenize('"say ""hi"""')).value == 'say "hi"'


def test_comments_are_skipped()->None:
    text = "/* block\ncomment */ ECU_ADDRESS // trailing\n0x10"
    tokens = list(tokenize(text))
    assert [t.value for t in tokens] == ["ECU_ADDRESS", "0x10", ""]
    assert tokens[0].line == 2
    assert tokens[1].line == 3


def test_verbatim_body()->None:
    text = '/begin IF_DATA XCP /begin A 1 /end A "/end IF_DATA" /end IF_DATA'
    tokens = list(tokenize(text, verbatim=frozenset({"IF_DATA"})))
    assert [t.type for t in tokens] == [
        TokenType.BLOCK_OPEN, TokenType.KEYWORD, TokenType.TEXT,
        TokenType.BLOCK_CLOSE, TokenType.KEYWORD, TokenType.EOF,
    ]
    assert tokens[2].value == ' XCP /begin A 1 /end A "/end IF_DATA" '


def test_empty_verbatim_body()->None:
    tokens = list(tokenize("/begin A2ML /end A2ML", verbatim=frozenset({"A2ML"})))
    assert tokens[2] == Token(TokenType.TEXT, " ", 1, 12)


def test_verbatim_body_line_tracking()->None:
    text = "/begin IF_DATA\n\n  X\n/end IF_DATA\nBIT_MASK"
    tokens = list(tokenize(text, verbatim=frozenset({"IF_DATA"})))
    assert (tokens[3].line, tokens[3].column) == (4, 1)
    assert (tokens[5].line, tokens[5].column) == (5, 1)


@pytest.mark.parametrize("text,message", [
    ('"open', "unterminated string"),
    ("/* open", "unterminated comment"),
    ("ECU @", "unexpected character"),
    ("12abc", "unexpected character"),
    ("/begin 12", "keyword expected after /begin"),
    ("/end", "keyword expected after /end"),
])
def test_lex_errors(text: str, message: str)->None:
    with pytest.raises(LexError, match=message):
        list(tokenize(text))


def test_unterminated_verbatim_block()->None:
    with pytest.raises(LexError, match="unterminated block") as info:
        list(tokenize("\n/begin IF_DATA XCP 1 2", verbatim=frozenset({"IF_DATA"})))
    assert info.value.line == 2
