#!/usr/bin/env python3
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

_CMD_PREFIX = "- cmd: "
_WHEN_PREFIX = "  when: "


@dataclass(frozen=True)
class HistoryEntry:
    command: str
    timestamp: int = 0


def _escape(command: str) -> str:
    return command.replace("\\", "\\\\").replace("\n", "\\n")


def _unescape(raw: str) -> str:
    out = []
    index = 0
    while index < len(raw):
        char = raw[index]
        if char == "\\" and index + 1 < len(raw):
            following = raw[index + 1]
            if following == "n":
                out.append("\n")
                index += 2
                continue
            if following == "\\":
                out.append("\\")
                index += 2
                continue
        out.append(char)
        index += 1
    return "".join(out)


class HistoryStore:
    """Bounded command history persisted as an append-only record file."""

    def __init__(self, path: Optional[Path] = None, max_entries: int = 1000) -> None:
        self.path = Path(path) if path is not None else None
        self.max_entries = max(1, int(max_entries))
        self._entries: List[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> HistoryEntry:
        return self._entries[index]

    @property
    def last(self) -> Optional[HistoryEntry]:
        return self._entries[-1] if self._entries else None

    def _push(self, entry: HistoryEntry) -> None:
        if len(self._entries) >= self.max_entries:
            self._entries.pop(0)
        self._entries.append(entry)

    def add(self, command: str, timestamp: Optional[int] = None) -> bool:
        if not command:
            return False
        if self._entries and self._entries[-1].command == command:
            return False

        entry = HistoryEntry(command, int(time.time()) if timestamp is None else timestamp)
        self._push(entry)
        self._append_to_file(entry)
        return True

    def _append_to_file(self, entry: HistoryEntry) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(f"{_CMD_PREFIX}{_escape(entry.command)}\n")
                handle.write(f"{_WHEN_PREFIX}{entry.timestamp}\n")
        except OSError as error:
            logger.warning("could not write history to %s: %s", self.path, error)

    def load(self) -> int:
        """Read the history file, keeping only the newest ``max_entries``."""
        self._entries = []
        if self.path is None or not self.path.exists():
            return 0

        try:
            lines = self.path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as error:
            logger.warning("could not read history from %s: %s", self.path, error)
            return 0

        pending: Optional[str] = None
        for line in lines:
            if line.startswith(_CMD_PREFIX):
                if pending is not None:
                    self._push(HistoryEntry(pending, 0))
                pending = _unescape(line[len(_CMD_PREFIX):])
            elif line.startswith(_WHEN_PREFIX) and pending is not None:
                raw = line[len(_WHEN_PREFIX):].strip()
                timestamp = int(raw) if raw.isdigit() else 0
                self._push(HistoryEntry(pending, timestamp))
                pending = None

        if pending is not None:
            self._push(HistoryEntry(pending, 0))

        logger.debug("loaded %d history entries from %s", len(self._entries), self.path)
        return len(self._entries)

    def get_suggestion(self, prefix: str) -> Optional[str]:
        if not prefix:
            return None
        for entry in reversed(self._entries):
            if entry.command.startswith(prefix) and entry.command != prefix:
                return entry.command
        return None

    def find(self, prefix: str, start: int, step: int) -> int:
        """Return the first index from ``start`` moving by ``step`` whose entry
        starts with ``prefix``, or -1."""
        index = start
        while 0 <= index < len(self._entries):
            if self._entries[index].command.startswith(prefix):
                return index
            index += step
        return -1
