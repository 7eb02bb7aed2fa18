#!/usr/bin/env python3
import os
import shutil
from typing import Callable, Dict, List, Mapping, Optional

from rich.highlighter import Highlighter
from rich.text import Text

from ..config import Config
from ..core.errors import TokenizeError
from ..core.parser import unquote_word
from ..core.tokenizer import Token, TokenKind, iter_tokens


_CACHE_LIMIT = 256


class CommandLineHighlighter(Highlighter):
    """Styles a command line by token role."""

    def __init__(
        self,
        env_provider: Callable[[], Mapping[str, str]],
        cwd_provider: Callable[[], str] = os.getcwd,
    ) -> None:
        super().__init__()
        self._env_provider = env_provider
        self._cwd_provider = cwd_provider
        self._command_cache: Dict[tuple, bool] = {}

    def highlight(self, text: Text) -> None:
        plain = text.plain
        tokens: List[Token] = []
        unclosed_at: Optional[int] = None
        try:
            for token in iter_tokens(plain):
                tokens.append(token)
        except TokenizeError as error:
            unclosed_at = error.position

        env = self._env_provider()
        cwd = self._cwd_provider()
        command_position = True

        for token in tokens:
            if token.kind is not TokenKind.WORD:
                text.stylize(Config.HIGHLIGHT_STYLES["operator"], token.start, token.end)
                command_position = token.kind.is_separator
                continue

            style = self._word_style(token.text, command_position, env, cwd)
            if style:
                text.stylize(style, token.start, token.end)
            command_position = False

        if unclosed_at is not None:
            text.stylize(Config.HIGHLIGHT_STYLES["string"], unclosed_at, len(plain))

    def _word_style(
        self, word: str, command_position: bool, env: Mapping[str, str], cwd: str
    ) -> Optional[str]:
        styles = Config.HIGHLIGHT_STYLES
        if command_position:
            if word in Config.KEYWORDS:
                return styles["keyword"]
            if self.is_command(unquote_word(word), env, cwd):
                return styles["command.valid"]
            return styles["command.invalid"]

        if word.startswith("-"):
            return styles["option"]
        if word.startswith("$"):
            return styles["variable"]
        if word[0] in ("'", '"'):
            return styles["string"]
        if self._path_exists(unquote_word(word), env, cwd):
            return styles["path"]
        return None

    def is_command(self, name: str, env: Mapping[str, str], cwd: str) -> bool:
        if not name:
            return False
        if name in Config.BUILTIN_COMMANDS:
            return True

        key = (name, env.get("PATH", ""), cwd if "/" in name else "")
        cached = self._command_cache.get(key)
        if cached is not None:
            return cached

        if "/" in name:
            path = self._resolve(name, env, cwd)
            found = os.path.isfile(path) and os.access(path, os.X_OK)
        else:
            found = shutil.which(name, path=env.get("PATH", "")) is not None

        if len(self._command_cache) >= _CACHE_LIMIT:
            self._command_cache.clear()
        self._command_cache[key] = found
        return found

    @staticmethod
    def _resolve(path: str, env: Mapping[str, str], cwd: str) -> str:
        if path == "~" or path.startswith("~/"):
            path = env.get("HOME", os.path.expanduser("~")) + path[1:]
        return os.path.join(cwd, path)

    def _path_exists(self, word: str, env: Mapping[str, str], cwd: str) -> bool:
        if not word:
            return False
        return os.path.exists(self._resolve(word, env, cwd))
