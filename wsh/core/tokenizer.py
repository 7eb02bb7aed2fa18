#!/usr/bin/env python3
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List

from .errors import UnclosedQuoteError


WHITESPACE = " \t\n\r\f\v"
OPERATOR_CHARS = "|;&<>"


class TokenKind(Enum):
    WORD = "word"
    PIPE = "pipe"
    REDIRECT_IN = "redirect_in"
    REDIRECT_OUT = "redirect_out"
    REDIRECT_APPEND = "redirect_append"
    BACKGROUND = "background"
    SEMICOLON = "semicolon"

    @property
    def is_redirect(self) -> bool:
        return self in REDIRECT_KINDS

    @property
    def is_separator(self) -> bool:
        return self in (TokenKind.PIPE, TokenKind.BACKGROUND, TokenKind.SEMICOLON)


REDIRECT_KINDS = frozenset(
    {TokenKind.REDIRECT_IN, TokenKind.REDIRECT_OUT, TokenKind.REDIRECT_APPEND}
)

_SINGLE_OPERATORS = {
    "|": TokenKind.PIPE,
    ";": TokenKind.SEMICOLON,
    "&": TokenKind.BACKGROUND,
    "<": TokenKind.REDIRECT_IN,
    ">": TokenKind.REDIRECT_OUT,
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


def _scan_word(line: str, pos: int) -> int:
    """Return the offset just past the word starting at ``pos``."""
    size = len(line)
    quote = None
    quote_start = pos

    while pos < size:
        char = line[pos]

        if quote == "'":
            if char == "'":
                quote = None
            pos += 1
            continue

        if quote == '"':
            if char == "\\" and pos + 1 < size:
                pos += 2
                continue
            if char == '"':
                quote = None
            pos += 1
            continue

        if char in WHITESPACE or char in OPERATOR_CHARS:
            break

        if char in ("'", '"'):
            quote = char
            quote_start = pos
            pos += 1
            continue

        if char == "\\":
            # A trailing backslash stays in the word as a literal
            pos += 2 if pos + 1 < size else 1
            continue

        pos += 1

    if quote is not None:
        raise UnclosedQuoteError(quote, quote_start)

    return pos


def iter_tokens(line: str) -> Iterator[Token]:
    pos = 0
    size = len(line)

    while pos < size:
        char = line[pos]

        if char in WHITESPACE:
            pos += 1
            continue

        if char == ">" and pos + 1 < size and line[pos + 1] == ">":
            yield Token(TokenKind.REDIRECT_APPEND, ">>", pos, 2)
            pos += 2
            continue

        kind = _SINGLE_OPERATORS.get(char)
        if kind is not None:
            yield Token(kind, char, pos, 1)
            pos += 1
            continue

        end = _scan_word(line, pos)
        yield Token(TokenKind.WORD, line[pos:end], pos, end - pos)
        pos = end


def tokenize(line: str) -> List[Token]:
    return list(iter_tokens(line))
