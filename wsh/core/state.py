#!/usr/bin/env python3
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from ..completion import Pager
from ..config import Config
from .abbreviations import AbbreviationTable
from .history import HistoryStore


class ShellState:
    """Everything one shell session mutates, passed explicitly to each part."""

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
        history: Optional[HistoryStore] = None,
        abbreviations: Optional[AbbreviationTable] = None,
    ) -> None:
        self.env: Dict[str, str] = dict(os.environ if env is None else env)
        self.cwd = cwd or os.getcwd()
        self.previous_cwd: Optional[str] = None
        self.running = True
        self.last_exit_code = 0
        self.history = history if history is not None else HistoryStore()
        self.abbreviations = abbreviations if abbreviations is not None else AbbreviationTable()
        self.pager = Pager()

    @classmethod
    def create(cls) -> "ShellState":
        history = HistoryStore(Config.HISTORY_FILE, Config.HISTORY_MAX_ENTRIES)
        history.load()

        abbreviations = AbbreviationTable(Config.ABBR_FILE)
        for key, expansion in Config.DEFAULT_ABBREVIATIONS.items():
            abbreviations.add(key, expansion)
        abbreviations.load()

        return cls(history=history, abbreviations=abbreviations)

    def set_env(self, key: str, value: str) -> None:
        self.env[key] = value

    def get_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.env.get(key, default)

    def unset_env(self, key: str) -> bool:
        return self.env.pop(key, None) is not None

    @property
    def home(self) -> str:
        return self.env.get("HOME") or str(Path.home())

    def expand_path(self, path: str) -> str:
        if path == "~" or path.startswith("~/"):
            path = self.home + path[1:]
        if not os.path.isabs(path):
            path = os.path.join(self.cwd, path)
        return path

    def update_cwd(self) -> str:
        self.cwd = os.getcwd()
        self.env["PWD"] = self.cwd
        return self.cwd

    def display_cwd(self) -> str:
        home = self.home.rstrip("/")
        if home and (self.cwd == home or self.cwd.startswith(home + "/")):
            return "~" + self.cwd[len(home):]
        return self.cwd

    def environment(self) -> Dict[str, str]:
        return dict(self.env)
