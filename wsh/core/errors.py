#!/usr/bin/env python3


class WshError(Exception):
    """Base class for errors raised by the shell core."""


class TokenizeError(WshError):
    def __init__(self, message: str, position: int) -> None:
        super().__init__(message)
        self.position = position


class UnclosedQuoteError(TokenizeError):
    def __init__(self, quote: str, position: int) -> None:
        super().__init__(f"unclosed {quote} quote starting at column {position + 1}", position)
        self.quote = quote


class BuiltinUsageError(WshError):
    """Raised by builtin handlers when invoked with malformed arguments."""

    def __init__(self, usage: str) -> None:
        super().__init__(usage)
        self.usage = usage
