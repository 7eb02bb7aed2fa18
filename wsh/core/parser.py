#!/usr/bin/env python3
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from .tokenizer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)


class RedirectMode(Enum):
    IN = "<"
    OUT = ">"
    APPEND = ">>"


_REDIRECT_MODES = {
    TokenKind.REDIRECT_IN: RedirectMode.IN,
    TokenKind.REDIRECT_OUT: RedirectMode.OUT,
    TokenKind.REDIRECT_APPEND: RedirectMode.APPEND,
}


@dataclass
class Redirect:
    mode: RedirectMode
    target: str


@dataclass
class Command:
    argv: List[str] = field(default_factory=list)
    redirects: List[Redirect] = field(default_factory=list)
    next: Optional["Command"] = None

    @property
    def program(self) -> str:
        return self.argv[0] if self.argv else ""


@dataclass
class Pipeline:
    head: Command
    background: bool = False
    next: Optional["Pipeline"] = None

    @property
    def commands(self) -> List[Command]:
        items = []
        current: Optional[Command] = self.head
        while current is not None:
            items.append(current)
            current = current.next
        return items


@dataclass
class Job:
    head: Optional[Pipeline] = None

    @property
    def pipelines(self) -> List[Pipeline]:
        items = []
        current = self.head
        while current is not None:
            items.append(current)
            current = current.next
        return items

    def __iter__(self) -> Iterator[Pipeline]:
        return iter(self.pipelines)

    def __len__(self) -> int:
        return len(self.pipelines)


@dataclass(frozen=True)
class ParseDiagnostic:
    message: str
    offset: int


@dataclass
class ParseResult:
    job: Job
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def unquote_word(text: str) -> str:
    """Strip quotes and resolve backslash escapes in a word token."""
    out = []
    in_single = False
    in_double = False
    index = 0
    size = len(text)

    while index < size:
        char = text[index]
        if char == "\\" and not in_single:
            if index + 1 < size:
                out.append(text[index + 1])
                index += 2
            else:
                out.append(char)
                index += 1
            continue
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        else:
            out.append(char)
        index += 1

    return "".join(out)


class Parser:
    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.diagnostics: List[ParseDiagnostic] = []

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def advance(self) -> Optional[Token]:
        token = self.peek()
        if token is not None:
            self.pos += 1
        return token

    def check(self, kind: TokenKind) -> bool:
        token = self.peek()
        return token is not None and token.kind is kind

    def _report(self, message: str, offset: int) -> None:
        self.diagnostics.append(ParseDiagnostic(message, offset))
        logger.debug("parse diagnostic at %d: %s", offset, message)

    def parse_redirects(self, command: Command) -> None:
        while True:
            token = self.peek()
            if token is None or not token.kind.is_redirect:
                return
            self.advance()
            if not self.check(TokenKind.WORD):
                self._report(f"missing file name after '{token.text}'", token.start)
                continue
            target = self.advance()
            command.redirects.append(
                Redirect(_REDIRECT_MODES[token.kind], unquote_word(target.text))
            )

    def parse_command(self) -> Optional[Command]:
        if not self.check(TokenKind.WORD):
            return None

        command = Command()
        while True:
            if self.check(TokenKind.WORD):
                command.argv.append(unquote_word(self.advance().text))
                continue
            token = self.peek()
            if token is not None and token.kind.is_redirect:
                self.parse_redirects(command)
                continue
            break
        return command

    def parse_pipeline(self) -> Optional[Pipeline]:
        head = self.parse_command()
        if head is None:
            return None

        pipeline = Pipeline(head)
        tail = head
        while self.check(TokenKind.PIPE):
            pipe = self.advance()
            command = self.parse_command()
            if command is None:
                self._report("expected a command after '|'", pipe.start)
                break
            tail.next = command
            tail = command

        if self.check(TokenKind.BACKGROUND):
            self.advance()
            pipeline.background = True

        return pipeline

    def parse_job(self) -> Job:
        job = Job()
        tail: Optional[Pipeline] = None

        while self.peek() is not None:
            if self.check(TokenKind.SEMICOLON):
                self.advance()
                continue

            pipeline = self.parse_pipeline()
            if pipeline is None:
                token = self.advance()
                self._report(f"unexpected '{token.text}'", token.start)
                continue

            if tail is None:
                job.head = pipeline
            else:
                tail.next = pipeline
            tail = pipeline

        return job


def parse(line: str) -> ParseResult:
    parser = Parser(tokenize(line))
    job = parser.parse_job()
    return ParseResult(job, parser.diagnostics)
