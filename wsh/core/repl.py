#!/usr/bin/env python3
import logging
import sys
from typing import Callable, Iterable, Optional

from ..completion import CompletionEngine
from ..config import Config
from .escape import EscapeDecoder, Key, KeyPress
from .state import ShellState
from .terminal import InputStatus, Terminal

logger = logging.getLogger(__name__)

CTRL_A = "\x01"
CTRL_B = "\x02"
CTRL_C = "\x03"
CTRL_D = "\x04"
CTRL_E = "\x05"
CTRL_F = "\x06"
BACKSPACE_CTRL_H = "\x08"
TAB = "\t"
CTRL_K = "\x0b"
CTRL_L = "\x0c"
CTRL_U = "\x15"
CTRL_W = "\x17"
BACKSPACE = "\x7f"


class LineBuffer:
    def __init__(self, text: str = "") -> None:
        self.text = text
        self.cursor = len(text)

    @property
    def at_end(self) -> bool:
        return self.cursor == len(self.text)

    def set(self, text: str, cursor: Optional[int] = None) -> None:
        self.text = text
        self.cursor = len(text) if cursor is None else max(0, min(cursor, len(text)))

    def reset(self) -> None:
        self.set("")

    def insert(self, chars: str) -> None:
        self.text = self.text[: self.cursor] + chars + self.text[self.cursor :]
        self.cursor += len(chars)

    def delete_back(self) -> None:
        if self.cursor > 0:
            self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
            self.cursor -= 1

    def delete_forward(self) -> None:
        if self.cursor < len(self.text):
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1 :]

    def replace_before_cursor(self, length: int, replacement: str) -> None:
        start = max(0, self.cursor - length)
        self.text = self.text[:start] + replacement + self.text[self.cursor :]
        self.cursor = start + len(replacement)

    def move_left(self) -> None:
        self.cursor = max(0, self.cursor - 1)

    def move_right(self) -> None:
        self.cursor = min(len(self.text), self.cursor + 1)

    def move_home(self) -> None:
        self.cursor = 0

    def move_end(self) -> None:
        self.cursor = len(self.text)

    def kill_word(self) -> None:
        start = self.cursor
        while start > 0 and self.text[start - 1] == " ":
            start -= 1
        while start > 0 and self.text[start - 1] != " ":
            start -= 1
        self.text = self.text[:start] + self.text[self.cursor :]
        self.cursor = start

    def kill_line(self) -> None:
        self.reset()

    def kill_to_end(self) -> None:
        self.text = self.text[: self.cursor]


class LineEditor:
    """Applies key presses to the edit buffer, pager and history cursor."""

    def __init__(
        self,
        state: ShellState,
        engine: CompletionEngine,
        on_submit: Callable[[str], None],
        on_clear_screen: Optional[Callable[[], None]] = None,
        on_interrupt: Optional[Callable[[], None]] = None,
    ) -> None:
        self.state = state
        self.engine = engine
        self.on_submit = on_submit
        self.on_clear_screen = on_clear_screen or (lambda: None)
        self.on_interrupt = on_interrupt or (lambda: None)
        self.buffer = LineBuffer()
        self.decoder = EscapeDecoder()
        self.history_index = -1
        self.history_prefix = ""

    @property
    def pager(self):
        return self.state.pager

    @property
    def suggestion(self) -> Optional[str]:
        return self.state.history.get_suggestion(self.buffer.text)

    def feed(self, chars: str) -> None:
        for char in chars:
            for press in self.decoder.feed(char):
                self.handle(press)

    def handle(self, press: KeyPress) -> None:
        key = press.key
        if key is Key.CHAR:
            self.handle_char(press.char)
        elif key is Key.CANCEL:
            self.pager.clear()
        elif key is Key.ALT_ENTER:
            self._edit(lambda: self.buffer.insert("\n"))
        elif key is Key.UP:
            if self.pager.active:
                self.pager.select_previous()
            else:
                self.history_up()
        elif key is Key.DOWN:
            if self.pager.active:
                self.pager.select_next()
            else:
                self.history_down()
        elif key is Key.RIGHT:
            self.move_right_or_accept()
        elif key is Key.LEFT:
            self._move(self.buffer.move_left)
        elif key is Key.SHIFT_TAB:
            self.pager.select_previous()
        elif key is Key.DELETE:
            self.pager.clear()
            self._edit(self.buffer.delete_forward)

    def handle_char(self, char: str) -> None:
        if char == TAB:
            if self.pager.active:
                self.pager.select_next()
            else:
                self.complete()
        elif char == CTRL_A:
            self._move(self.buffer.move_home)
        elif char == CTRL_E:
            self._move(self.buffer.move_end)
        elif char == CTRL_B:
            self._move(self.buffer.move_left)
        elif char == CTRL_F:
            self.move_right_or_accept()
        elif char in (CTRL_W, CTRL_U, CTRL_K):
            action = {
                CTRL_W: self.buffer.kill_word,
                CTRL_U: self.buffer.kill_line,
                CTRL_K: self.buffer.kill_to_end,
            }[char]
            self._edit(action)
            self.pager.clear()
        elif char == CTRL_L:
            self.on_clear_screen()
        elif char == CTRL_C:
            self.on_interrupt()
            self.buffer.reset()
            self.reset_history_navigation()
            self.pager.clear()
        elif char == CTRL_D:
            if self.pager.active:
                self.pager.clear()
            elif not self.buffer.text:
                self.state.running = False
            else:
                self._edit(self.buffer.delete_forward)
        elif char in (BACKSPACE, BACKSPACE_CTRL_H):
            self._edit(self.buffer.delete_back)
            if self.pager.active:
                self.complete()
        elif char == " ":
            self.expand_abbreviation()
            self._edit(lambda: self.buffer.insert(" "))
            self.pager.clear()
        elif char in ("\r", "\n"):
            self.enter()
        elif char.isprintable():
            self._edit(lambda: self.buffer.insert(char))
            if self.pager.active:
                self.complete()

    def _edit(self, action: Callable[[], None]) -> None:
        action()
        self.reset_history_navigation()

    def _move(self, action: Callable[[], None]) -> None:
        # the pager filter is the text before the cursor
        self.pager.clear()
        action()

    def complete(self) -> int:
        return self.engine.complete(
            self.pager, self.buffer.text, self.buffer.cursor, self.state.cwd, self.state.env
        )

    def expand_abbreviation(self) -> None:
        text, cursor = self.state.abbreviations.expand_at(self.buffer.text, self.buffer.cursor)
        self.buffer.set(text, cursor)

    def move_right_or_accept(self) -> None:
        self.pager.clear()
        suggestion = self.suggestion
        if self.buffer.at_end and suggestion:
            self.buffer.set(suggestion)
            self.reset_history_navigation()
        else:
            self.buffer.move_right()

    def enter(self) -> None:
        if self.pager.active:
            candidate = self.pager.current
            self.buffer.replace_before_cursor(self.pager.filter_len, candidate.value)
            self.pager.clear()
            return

        line = self.buffer.text
        if line:
            line, _ = self.state.abbreviations.expand_at(line, len(line))
            self.state.history.add(line)
        self.buffer.reset()
        self.reset_history_navigation()
        self.on_submit(line)

    def reset_history_navigation(self) -> None:
        self.history_index = -1
        self.history_prefix = ""

    def history_up(self) -> None:
        history = self.state.history
        if self.history_index == -1:
            self.history_prefix = self.buffer.text
            self.history_index = len(history)

        index = history.find(self.history_prefix, self.history_index - 1, -1)
        if index == -1:
            return
        self.history_index = index
        self.buffer.set(history[index].command)

    def history_down(self) -> None:
        if self.history_index == -1:
            return

        history = self.state.history
        index = history.find(self.history_prefix, self.history_index + 1, 1)
        if index == -1:
            prefix = self.history_prefix
            self.reset_history_navigation()
            self.buffer.set(prefix)
            return
        self.history_index = index
        self.buffer.set(history[index].command)


class Repl:
    def __init__(
        self,
        state: ShellState,
        ui,
        executor,
        engine: CompletionEngine,
        terminal: Optional[Terminal] = None,
        highlighter=None,
    ) -> None:
        self.state = state
        self.ui = ui
        self.executor = executor
        self.terminal = terminal or Terminal()
        self.highlighter = highlighter
        self.editor = LineEditor(
            state,
            engine,
            on_submit=self.submit,
            on_clear_screen=self.ui.clear_screen,
            on_interrupt=self.ui.show_interrupt_marker,
        )

    def render(self) -> None:
        buffer = self.editor.buffer
        self.ui.render_line(
            self.state.display_cwd(),
            buffer.text,
            buffer.cursor,
            suggestion=self.editor.suggestion if buffer.at_end else None,
            pager=self.state.pager,
            highlighter=self.highlighter,
        )

    def submit(self, line: str) -> None:
        self.ui.finish_line()
        if not line:
            return
        with self.terminal.cooked():
            self.executor.execute(line)

    def run(self) -> int:
        if not self.terminal.interactive:
            return self.run_lines(sys.stdin)

        self.ui.show_welcome()
        with self.terminal.raw_mode():
            self.render()
            while self.state.running:
                status = self.terminal.wait_for_input(Config.INPUT_POLL_TIMEOUT)
                if status is InputStatus.TIMEOUT:
                    continue
                if status is InputStatus.ERROR:
                    logger.error("input wait failed, leaving the shell")
                    break

                char = self.terminal.read_char()
                if char is None:
                    break
                try:
                    self.editor.feed(char)
                    if self.state.running:
                        self.render()
                except Exception as error:
                    logger.exception("error while handling input %r", char)
                    self.ui.finish_line()
                    self.ui.display_error(self.editor.buffer.text, f"Error: {error}")

            self.ui.finish_line()

        self.ui.display_goodbye()
        return self.state.last_exit_code

    def run_lines(self, lines: Iterable[str]) -> int:
        for raw in lines:
            if not self.state.running:
                break
            line = raw.rstrip("\n")
            if line.strip():
                self.executor.execute(line)
        return self.state.last_exit_code
