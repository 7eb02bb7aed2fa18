#!/usr/bin/env python3
import difflib
import logging
import os
import sys
from typing import Callable, Dict, List, Optional

import pyperclip
from prompt_toolkit.clipboard import Clipboard
from prompt_toolkit.clipboard.pyperclip import PyperclipClipboard

from ..completion import executables_on_path
from ..config import Config
from ..core.errors import BuiltinUsageError, TokenizeError
from ..core.parser import Command, Pipeline, parse
from ..core.state import ShellState
from .spawn import COMMAND_NOT_FOUND, ProcessSpawner

logger = logging.getLogger(__name__)

USAGE_ERROR = 2
INTERRUPTED = 130


class ShellCommandExecutor:
    def __init__(
        self,
        state: ShellState,
        ui,
        spawner: Optional[ProcessSpawner] = None,
        clipboard: Optional[Clipboard] = None,
    ) -> None:
        self.state = state
        self.ui = ui
        self.spawner = spawner or ProcessSpawner()
        self._clipboard = clipboard
        self._builtins: Dict[str, Callable[[List[str]], int]] = {
            "exit": self._handle_exit,
            "cd": self._handle_cd,
            "pwd": self._handle_pwd,
            "set": self._handle_set,
            "export": self._handle_export,
            "unset": self._handle_unset,
            "abbr": self._handle_abbr,
            "history": self._handle_history,
            "pbcopy": self._handle_pbcopy,
            "pbpaste": self._handle_pbpaste,
        }

    @property
    def clipboard(self) -> Clipboard:
        if self._clipboard is None:
            self._clipboard = PyperclipClipboard()
        return self._clipboard

    def execute(self, line: str) -> int:
        if not line.strip():
            return self.state.last_exit_code

        try:
            result = parse(line)
        except TokenizeError as error:
            self.ui.display_error(line, str(error))
            self.state.last_exit_code = USAGE_ERROR
            return USAGE_ERROR

        for diagnostic in result.diagnostics:
            logger.warning("%r: %s (column %d)", line, diagnostic.message, diagnostic.offset + 1)

        try:
            for pipeline in result.job:
                if not self.state.running:
                    break
                self.state.last_exit_code = self.run_pipeline(pipeline)
        except KeyboardInterrupt:
            self.ui.display_interrupt()
            self.state.last_exit_code = INTERRUPTED
        except Exception as error:
            logger.exception("error while executing %r", line)
            self.ui.display_error(line, f"Error: {error}")
            self.state.last_exit_code = 1

        return self.state.last_exit_code

    def run_pipeline(self, pipeline: Pipeline) -> int:
        commands = pipeline.commands
        if len(commands) > 1:
            logger.info(
                "pipe wiring unavailable, running only %r of %d stages",
                pipeline.head.program,
                len(commands),
            )
        for command in commands:
            if command.redirects:
                logger.info(
                    "redirects for %r not applied: %s",
                    command.program,
                    ", ".join(f"{r.mode.value}{r.target}" for r in command.redirects),
                )
        if pipeline.background:
            logger.info("background execution unavailable, running %r in the foreground", pipeline.head.program)

        return self.run_command(pipeline.head)

    def run_command(self, command: Command) -> int:
        handler = self._builtins.get(command.program)
        if handler is None:
            return self._spawn(command.argv)

        try:
            return handler(command.argv[1:])
        except BuiltinUsageError as error:
            self.ui.display_usage(" ".join(command.argv), error.usage)
            return USAGE_ERROR

    def _spawn(self, argv: List[str]) -> int:
        env = self.state.environment()
        code = self.spawner.spawn(argv, env, cwd=self.state.cwd)
        if code != COMMAND_NOT_FOUND:
            return code

        name, args = argv[0], argv[1:]
        for suffix in Config.EXECUTABLE_SUFFIXES:
            candidate = name + suffix
            if suffix in Config.SCRIPT_SUFFIXES:
                attempt = list(Config.COMMAND_INTERPRETER) + [candidate] + args
            else:
                attempt = [candidate] + args
            code = self.spawner.spawn(attempt, env, cwd=self.state.cwd)
            if code != COMMAND_NOT_FOUND:
                return code

        logger.debug("command not found: %s", name)
        self.ui.display_command_not_found(
            " ".join(argv), name, self._suggest_command_alternatives(name)
        )
        return COMMAND_NOT_FOUND

    def _suggest_command_alternatives(self, base_command: str) -> List[str]:
        if not base_command:
            return []

        candidates = set(self._builtins) | set(executables_on_path(self.state.env))
        return difflib.get_close_matches(base_command, sorted(candidates), n=3, cutoff=0.6)

    def _handle_exit(self, args: List[str]) -> int:
        if len(args) > 1:
            raise BuiltinUsageError("exit [CODE]")
        code = self.state.last_exit_code
        if args:
            try:
                code = int(args[0])
            except ValueError:
                raise BuiltinUsageError("exit [CODE]") from None
        self.state.running = False
        return code

    def _handle_cd(self, args: List[str]) -> int:
        if len(args) > 1:
            raise BuiltinUsageError("cd [DIRECTORY | -]")

        if not args:
            target = self.state.get_env("HOME") or self.state.home
        elif args[0] == "-":
            if not self.state.previous_cwd:
                self.ui.display_error("cd -", "cd: no previous directory")
                return 1
            target = self.state.previous_cwd
        else:
            target = self.state.expand_path(args[0])

        old_dir = self.state.cwd
        try:
            os.chdir(target)
        except OSError as error:
            self.ui.display_error(" ".join(["cd"] + args), f"cd: {error}")
            return 1

        self.state.previous_cwd = old_dir
        self.state.update_cwd()
        return 0

    def _handle_pwd(self, args: List[str]) -> int:
        self.ui.print_output(self.state.cwd)
        return 0

    def _handle_set(self, args: List[str]) -> int:
        if not args:
            self.ui.display_environment(self.state.env)
            return 0
        if args[0] == "-U":
            args = args[1:]
        if len(args) < 2:
            raise BuiltinUsageError("set [-U] KEY VALUE")
        self.state.set_env(args[0], " ".join(args[1:]))
        return 0

    def _handle_export(self, args: List[str]) -> int:
        if not args:
            self.ui.display_environment(self.state.env)
            return 0

        updates = {}
        for token in args:
            key, sep, value = token.partition("=")
            if not sep or not key:
                raise BuiltinUsageError("export KEY=VALUE...")
            updates[key] = value

        for key, value in updates.items():
            self.state.set_env(key, value)
        return 0

    def _handle_unset(self, args: List[str]) -> int:
        if not args:
            raise BuiltinUsageError("unset KEY...")
        removed = [name for name in args if self.state.unset_env(name)]
        return 0 if removed else 1

    def _handle_abbr(self, args: List[str]) -> int:
        table = self.state.abbreviations
        if not args:
            self.ui.display_abbreviations(table.items())
            return 0

        if args[0] == "-a" and len(args) >= 3:
            table.add(args[1], " ".join(args[2:]))
            table.save()
            return 0

        if args[0] == "-e" and len(args) == 2:
            if not table.remove(args[1]):
                self.ui.display_error(" ".join(["abbr"] + args), f"abbr: no abbreviation named '{args[1]}'")
                return 1
            table.save()
            return 0

        raise BuiltinUsageError("abbr [-a KEY EXPANSION... | -e KEY]")

    def _handle_history(self, args: List[str]) -> int:
        if args:
            raise BuiltinUsageError("history")
        self.ui.display_history(self.state.history)
        return 0

    def _handle_pbcopy(self, args: List[str]) -> int:
        text = " ".join(args) if args else sys.stdin.read()
        try:
            self.clipboard.set_text(text)
        except pyperclip.PyperclipException as error:
            self.ui.display_error("pbcopy", f"pbcopy: {error}")
            return 1
        return 0

    def _handle_pbpaste(self, args: List[str]) -> int:
        try:
            text = self.clipboard.get_data().text
        except pyperclip.PyperclipException as error:
            self.ui.display_error("pbpaste", f"pbpaste: {error}")
            return 1
        self.ui.print_output(text)
        return 0
