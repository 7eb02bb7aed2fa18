#!/usr/bin/env python3
from .errors import TokenizeError, UnclosedQuoteError, WshError
from .parser import Command, Job, ParseResult, Pipeline, Redirect, RedirectMode, parse
from .repl import LineEditor, Repl
from .state import ShellState
from .tokenizer import Token, TokenKind, tokenize

__all__ = [
    "Command",
    "Job",
    "LineEditor",
    "ParseResult",
    "Pipeline",
    "Redirect",
    "RedirectMode",
    "Repl",
    "ShellState",
    "Token",
    "TokenKind",
    "TokenizeError",
    "UnclosedQuoteError",
    "WshError",
    "parse",
    "tokenize",
]
