"""Tests for splitting command lines into tokens."""

import pytest

from wsh.core.errors import TokenizeError, UnclosedQuoteError
from wsh.core.tokenizer import TokenKind, iter_tokens, tokenize


def kinds(line):
    return [token.kind for token in tokenize(line)]


class TestOperators:
    def test_pipeline_with_redirect_and_background(self):
        tokens = tokenize("ls -la | grep foo > out.txt &")
        assert [(t.kind, t.text) for t in tokens] == [
            (TokenKind.WORD, "ls"),
            (TokenKind.WORD, "-la"),
            (TokenKind.PIPE, "|"),
            (TokenKind.WORD, "grep"),
            (TokenKind.WORD, "foo"),
            (TokenKind.REDIRECT_OUT, ">"),
            (TokenKind.WORD, "out.txt"),
            (TokenKind.BACKGROUND, "&"),
        ]

    def test_append_is_one_token(self):
        assert kinds("echo hi >> log") == [
            TokenKind.WORD,
            TokenKind.WORD,
            TokenKind.REDIRECT_APPEND,
            TokenKind.WORD,
        ]

    def test_operators_need_no_spaces(self):
        assert kinds("a|b;c<d") == [
            TokenKind.WORD,
            TokenKind.PIPE,
            TokenKind.WORD,
            TokenKind.SEMICOLON,
            TokenKind.WORD,
            TokenKind.REDIRECT_IN,
            TokenKind.WORD,
        ]

    def test_whitespace_only_line(self):
        assert tokenize(" \t\n\r\f\v") == []


class TestSpans:
    def test_offsets_point_into_source(self):
        line = "echo  'a b'  >>x"
        for token in tokenize(line):
            assert line[token.start:token.end] == token.text

    def test_iter_tokens_is_lazy(self):
        stream = iter_tokens("one two")
        first = next(stream)
        assert first.text == "one"
        assert first.length == 3


class TestQuoting:
    def test_quotes_hide_operators_and_spaces(self):
        tokens = tokenize("echo \"a | b\" 'c ; d'")
        assert [t.text for t in tokens] == ["echo", '"a | b"', "'c ; d'"]

    def test_backslash_escapes_space(self):
        tokens = tokenize(r"touch my\ file")
        assert [t.text for t in tokens] == ["touch", r"my\ file"]

    def test_escaped_quote_inside_double_quotes(self):
        tokens = tokenize(r'echo "say \"hi\""')
        assert len(tokens) == 2

    def test_trailing_backslash_is_literal(self):
        tokens = tokenize("echo foo\\")
        assert tokens[-1].text == "foo\\"

    def test_unclosed_double_quote(self):
        with pytest.raises(UnclosedQuoteError) as info:
            tokenize('echo "unterminated')
        assert info.value.quote == '"'
        assert info.value.position == 5

    def test_unclosed_single_quote_is_tokenize_error(self):
        with pytest.raises(TokenizeError):
            tokenize("echo 'oops")

    def test_backslash_does_not_escape_single_quote(self):
        with pytest.raises(UnclosedQuoteError):
            tokenize(r"echo 'it\'s'")
