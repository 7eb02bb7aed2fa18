#!/usr/bin/env python3
import getpass
import os
from typing import Iterable, List, Mapping, Optional, Tuple

from rich.console import Console, RenderableType
from rich.highlighter import Highlighter
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from ..completion import Pager
from ..config import Config
from ..core.history import HistoryEntry
from .highlighter import CommandLineHighlighter
from .theme import PanelTheme, prompt_style


CLEAR_TO_END = "\033[J"
CLEAR_LINE_TAIL = "\033[K"
CLEAR_SCREEN = "\033[2J\033[H"


def create_console() -> Console:
    return Console(highlight=False)


class UIManager:
    def __init__(self, console: Console) -> None:
        self.console = console
        self._user = self._current_user()
        self._cursor_row = 0
        self._rows_below = 0

    @staticmethod
    def _current_user() -> str:
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return os.environ.get("USER", "user")

    def prompt_text(self, display_cwd: str) -> Text:
        text = Text()
        text.append(self._user, style=prompt_style("user"))
        text.append(":", style=prompt_style("separator"))
        text.append(display_cwd, style=prompt_style("path"))
        text.append("> ", style=prompt_style("prompt_symbol"))
        return text

    def to_ansi(self, renderable: RenderableType) -> str:
        with self.console.capture() as capture:
            self.console.print(renderable, end="", soft_wrap=True)
        return capture.get()

    def _write(self, data: str) -> None:
        self.console.file.write(data)
        self.console.file.flush()

    def pager_lines(self, pager: Pager) -> List[Text]:
        lines = []
        start, end = pager.window(Config.PAGER_MAX_VISIBLE)
        for index in range(start, end):
            candidate = pager.candidates[index]
            style = "pager_selected" if index == pager.selected else "pager_item"
            line = Text(candidate.display, style=prompt_style(style))
            if candidate.description:
                line.append("  ")
                line.append(candidate.description, style=prompt_style("pager_description"))
            lines.append(line)
        if end - start < len(pager.candidates):
            lines.append(
                Text(
                    f"{pager.selected + 1}/{len(pager.candidates)}",
                    style=prompt_style("pager_description"),
                )
            )
        return lines

    def render_line(
        self,
        display_cwd: str,
        buffer: str,
        cursor: int,
        suggestion: Optional[str] = None,
        pager: Optional[Pager] = None,
        highlighter: Optional[Highlighter] = None,
    ) -> None:
        prompt = self.prompt_text(display_cwd)
        line = Text(buffer)
        if highlighter is not None:
            highlighter.highlight(line)

        parts = []
        if self._cursor_row:
            parts.append(f"\033[{self._cursor_row}A")
        parts += ["\r", CLEAR_TO_END, self.to_ansi(prompt), self.to_ansi(line)]
        if suggestion and suggestion.startswith(buffer) and len(suggestion) > len(buffer):
            parts.append(
                self.to_ansi(Text(suggestion[len(buffer):], style=prompt_style("suggestion")))
            )
        parts.append(CLEAR_LINE_TAIL)

        rows = self.pager_lines(pager) if pager is not None and pager.active else []
        for row in rows:
            parts.append("\r\n")
            parts.append(self.to_ansi(row))
            parts.append(CLEAR_LINE_TAIL)
        if rows:
            parts.append(f"\033[{len(rows)}A")

        before = buffer[:cursor]
        cursor_row = before.count("\n")
        last_row = buffer.count("\n")
        if last_row > cursor_row:
            parts.append(f"\033[{last_row - cursor_row}A")
        self._cursor_row = cursor_row
        self._rows_below = last_row - cursor_row

        column = Text(before.rsplit("\n", 1)[-1]).cell_len
        if cursor_row == 0:
            column += prompt.cell_len
        parts.append("\r")
        if column:
            parts.append(f"\033[{column}C")
        self._write("".join(parts))

    def _leave_edit_area(self) -> str:
        below, self._rows_below, self._cursor_row = self._rows_below, 0, 0
        return f"\033[{below}B" if below else ""

    def finish_line(self) -> None:
        self._write(self._leave_edit_area() + "\r\n" + CLEAR_TO_END)

    def clear_screen(self) -> None:
        self._cursor_row = self._rows_below = 0
        self._write(CLEAR_SCREEN)

    def show_interrupt_marker(self) -> None:
        self._write(self._leave_edit_area() + "^C\r\n")

    def show_welcome(self) -> None:
        if not Config.SHOW_STARTUP_BANNER:
            return

        lines = [Config.WELCOME_MESSAGE, ""]
        for keybind, description in Config.HELP_KEYBINDS:
            lines.append(f"  [cyan]{keybind}[/cyan] - {description}")

        self.console.print(PanelTheme.build("\n".join(lines), style="info", fit=True))
        self.console.print()

    def print_output(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def display_error(self, command: str, error_msg: str) -> None:
        tree = Tree("[bold red]Error[/bold red]")
        tree.add(Text.assemble(("Command: ", "cyan"), command))
        tree.add(Text.assemble(("Message: ", "red"), error_msg))
        self.console.print(
            PanelTheme.build(tree, title=" wsh", style="error", fit=True)
        )

    def display_usage(self, command: str, usage: str) -> None:
        tree = Tree("[bold red]Invalid usage[/bold red]")
        tree.add(Text.assemble(("Command: ", "cyan"), command))
        tree.add(Text.assemble(("Usage: ", "green"), usage))
        self.console.print(
            PanelTheme.build(tree, title=" wsh", style="error", fit=True)
        )

    def display_command_not_found(
        self, command: str, base_command: str, suggestions: List[str]
    ) -> None:
        tree = Tree("[bold red]Command Not Found[/bold red]")
        tree.add(Text.assemble(("Input: ", "cyan"), command))

        tips_node = tree.add("[green]Tips[/green]")
        tips_node.add(
            Text(f"Ensure '{base_command}' exists on your system or is available in PATH")
        )
        tips_node.add("Double-check for typos")

        if suggestions:
            suggestion_node = tree.add("[cyan]Possible similar commands[/cyan]")
            for suggestion in suggestions:
                suggestion_node.add(Text(f"- {suggestion}"))

        self.console.print(
            PanelTheme.build(tree, title=" wsh", style="error", fit=True)
        )

    def display_warning(self, message: str) -> None:
        self.console.print(
            PanelTheme.build(Text(message, style="yellow"), title=" wsh", style="warning", fit=True)
        )

    def display_interrupt(self, message: str = "^C - Command interrupted") -> None:
        self.display_warning(message)

    def display_goodbye(self) -> None:
        self.console.print("[yellow]Goodbye![/yellow]")

    def display_mapping(self, title: str, rows: Iterable[Tuple[str, str]], key_header: str, value_header: str) -> None:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column(key_header, style="bold")
        table.add_column(value_header, style="green")
        for key, value in rows:
            table.add_row(key, value)
        self.console.print(table)

    def display_environment(self, env: Mapping[str, str]) -> None:
        self.display_mapping("Environment", sorted(env.items()), "Name", "Value")

    def display_abbreviations(self, items: Iterable[Tuple[str, str]]) -> None:
        rows = list(items)
        if not rows:
            self.console.print("[yellow]No abbreviations defined[/yellow]")
            return
        self.display_mapping("Abbreviations", rows, "Abbreviation", "Expansion")

    def display_history(self, entries: Iterable[HistoryEntry]) -> None:
        table = Table(title="History", show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Command", style="bold")
        for index, entry in enumerate(entries, start=1):
            table.add_row(str(index), entry.command)
        self.console.print(table)


def create_highlighter(state) -> Optional[CommandLineHighlighter]:
    if not Config.is_highlighter_enabled():
        return None
    return CommandLineHighlighter(lambda: state.env, lambda: state.cwd)
