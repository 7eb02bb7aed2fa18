import io
import os

import pytest
from prompt_toolkit.clipboard import InMemoryClipboard
from rich.console import Console

from wsh.commands.executor import ShellCommandExecutor
from wsh.config import Config
from wsh.core.abbreviations import AbbreviationTable
from wsh.core.history import HistoryStore
from wsh.core.state import ShellState
from wsh.ui.manager import UIManager


class RecordingSpawner:
    """Stands in for process spawning; records argv and replays exit codes."""

    def __init__(self, codes=None, default=0):
        self.calls = []
        self.codes = dict(codes or {})
        self.default = default

    def spawn(self, argv, env, cwd=None):
        self.calls.append(list(argv))
        return self.codes.get(argv[0], self.default)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_dir = tmp_path / ".wsh"
    monkeypatch.setattr(Config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(Config, "CONFIG_JSON_FILE", config_dir / "config.json")
    monkeypatch.setattr(Config, "LOG_FILE", config_dir / "shell.log")
    monkeypatch.setattr(Config, "ABBR_FILE", config_dir / "abbreviations.json")
    monkeypatch.setattr(Config, "HISTORY_FILE", tmp_path / "share" / "wsh_history")
    monkeypatch.setattr(Config, "COMPLETION_CACHE_DIR", tmp_path / "completions")
    monkeypatch.delenv("WSH_HIGHLIGHTER", raising=False)
    monkeypatch.delenv("WSH_LOG_LEVEL", raising=False)
    yield


@pytest.fixture()
def sandbox(tmp_path, monkeypatch):
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    env = {
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "HOME": str(tmp_path),
    }
    return work, env


@pytest.fixture()
def console():
    return Console(file=io.StringIO(), force_terminal=False, width=120, highlight=False)


@pytest.fixture()
def ui(console):
    return UIManager(console)


@pytest.fixture()
def state(sandbox, tmp_path):
    work, env = sandbox
    return ShellState(
        env=env,
        cwd=str(work),
        history=HistoryStore(tmp_path / "history"),
        abbreviations=AbbreviationTable(tmp_path / "abbreviations.json"),
    )


@pytest.fixture()
def spawner():
    return RecordingSpawner()


@pytest.fixture()
def executor(state, ui, spawner):
    return ShellCommandExecutor(state, ui, spawner=spawner, clipboard=InMemoryClipboard())
