#!/usr/bin/env python3
import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from prompt_toolkit.document import Document

from .config import Config

logger = logging.getLogger(__name__)

_OVERSTRIKE = re.compile(r".\x08")


@dataclass(frozen=True)
class CompletionCandidate:
    display: str
    value: str
    description: Optional[str] = None


class Pager:
    """Candidate list shown under the prompt while completing."""

    def __init__(self) -> None:
        self.candidates: List[CompletionCandidate] = []
        self.selected = 0
        self.filter = ""

    @property
    def active(self) -> bool:
        return bool(self.candidates)

    @property
    def filter_len(self) -> int:
        return len(self.filter)

    @property
    def current(self) -> Optional[CompletionCandidate]:
        if not self.candidates:
            return None
        return self.candidates[self.selected]

    def set(self, candidates: Iterable[CompletionCandidate], filter_text: str) -> None:
        self.candidates = list(candidates)
        self.selected = 0
        self.filter = filter_text

    def clear(self) -> None:
        self.candidates = []
        self.selected = 0
        self.filter = ""

    def select_next(self) -> None:
        if self.candidates:
            self.selected = (self.selected + 1) % len(self.candidates)

    def select_previous(self) -> None:
        if self.candidates:
            self.selected = (self.selected - 1) % len(self.candidates)

    def window(self, max_visible: int) -> Tuple[int, int]:
        """Return the ``[start, end)`` slice of candidates to draw."""
        count = len(self.candidates)
        if count <= max_visible:
            return 0, count
        start = min(max(0, self.selected - max_visible + 1), count - max_visible)
        return start, start + max_visible


def current_word(line: str, cursor: int) -> str:
    return Document(line, cursor).get_word_before_cursor(WORD=True)


def is_command_position(line: str, cursor: int, word: str) -> bool:
    return not line[: cursor - len(word)].strip()


def scan_directory(directory: Path, fragment: str, insert_prefix: str) -> List[CompletionCandidate]:
    candidates = []
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError:
        return candidates

    for entry in entries:
        name = entry.name
        if name in (".", ".."):
            continue
        if name.startswith(".") and not fragment.startswith("."):
            continue
        if not name.startswith(fragment):
            continue
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        if is_dir:
            candidates.append(
                CompletionCandidate(name + "/", insert_prefix + name + "/", "Directory")
            )
        else:
            candidates.append(CompletionCandidate(name, insert_prefix + name, "File"))
    return candidates


def complete_path(word: str, cwd: str, home: Optional[str] = None) -> List[CompletionCandidate]:
    slash = word.rfind("/")
    if slash == -1:
        return scan_directory(Path(cwd), word, "")

    dir_part = word[: slash + 1]
    fragment = word[slash + 1 :]
    search = dir_part
    if search.startswith("~") and home:
        search = home + search[1:]
    directory = Path(search)
    if not directory.is_absolute():
        directory = Path(cwd) / directory
    return scan_directory(directory, fragment, dir_part)


def search_path_dirs(env: Mapping[str, str]) -> List[str]:
    raw = env.get("PATH", "")
    return [directory for directory in raw.split(os.pathsep) if directory]


def executables_on_path(env: Mapping[str, str], prefix: str = "") -> List[str]:
    names: List[str] = []
    seen: Set[str] = set()
    for directory in search_path_dirs(env):
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError:
            continue
        for entry in entries:
            if entry.name in seen or not entry.name.startswith(prefix):
                continue
            try:
                if entry.is_file() and os.access(entry.path, os.X_OK):
                    seen.add(entry.name)
                    names.append(entry.name)
            except OSError:
                continue
    return names


def complete_command(word: str, env: Mapping[str, str]) -> List[CompletionCandidate]:
    candidates = [
        CompletionCandidate(name, name, "Builtin")
        for name in sorted(Config.BUILTIN_COMMANDS)
        if name.startswith(word)
    ]
    builtins = {candidate.value for candidate in candidates}
    for name in executables_on_path(env, word):
        if name not in builtins:
            candidates.append(CompletionCandidate(name, name, "Command"))
    return candidates


def parse_man_page(text: str) -> List[Tuple[str, str]]:
    """Extract ``(flags, description)`` rows from rendered man output."""
    rows = []
    for line in _OVERSTRIKE.sub("", text).splitlines():
        stripped = line.strip()
        if not stripped.startswith("-"):
            continue
        flags, sep, description = stripped.partition("  ")
        description = description.strip() if sep else ""
        rows.append((flags.strip(), description or "Flag"))
    return rows


class ManPageFlagCache:
    def __init__(self, cache_dir: Optional[Path] = None, timeout: Optional[float] = None) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir is not None else Config.COMPLETION_CACHE_DIR
        self.timeout = timeout if timeout is not None else Config.MAN_PAGE_TIMEOUT
        self._rows: Dict[str, List[Tuple[str, str]]] = {}

    def cache_file(self, command: str) -> Path:
        return self.cache_dir / f"{command}.comp"

    def get_flags(self, command: str) -> List[Tuple[str, str]]:
        if not command or "/" in command:
            return []
        if command in self._rows:
            return self._rows[command]

        path = self.cache_file(command)
        if path.exists():
            rows = self._read(path)
        else:
            rows = self._generate(command)
            if rows:
                self._write(path, rows)
        self._rows[command] = rows
        return rows

    def _read(self, path: Path) -> List[Tuple[str, str]]:
        rows = []
        try:
            for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
                flags, _, description = line.partition("|")
                if flags:
                    rows.append((flags, description or "Flag"))
        except OSError as error:
            logger.warning("could not read completion cache %s: %s", path, error)
        return rows

    def _write(self, path: Path, rows: List[Tuple[str, str]]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as handle:
                for flags, description in rows:
                    handle.write(f"{flags}|{description}\n")
        except OSError as error:
            logger.warning("could not write completion cache %s: %s", path, error)

    def _generate(self, command: str) -> List[Tuple[str, str]]:
        env = dict(os.environ, MANPAGER="cat", MANWIDTH="120")
        try:
            result = subprocess.run(
                ["man", command],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
                env=env,
            )
        except (FileNotFoundError, subprocess.SubprocessError) as error:
            logger.debug("man page lookup for %s failed: %s", command, error)
            return []

        if result.returncode != 0:
            return []
        return parse_man_page(result.stdout)


class CompletionEngine:
    def __init__(self, flag_cache: Optional[ManPageFlagCache] = None) -> None:
        self.flag_cache = flag_cache or ManPageFlagCache()

    def complete_flags(self, command: str, word: str) -> List[CompletionCandidate]:
        candidates = []
        seen: Set[str] = set()
        for flags, description in self.flag_cache.get_flags(command):
            for token in flags.split(", "):
                parts = token.split()
                if not parts:
                    continue
                flag = parts[0]
                if not flag.startswith("-") or not flag.startswith(word) or flag in seen:
                    continue
                seen.add(flag)
                candidates.append(CompletionCandidate(flag, flag, description))
        return candidates

    def candidates(
        self, line: str, cursor: int, cwd: str, env: Mapping[str, str]
    ) -> Tuple[str, List[CompletionCandidate]]:
        word = current_word(line, cursor)
        home = env.get("HOME")

        if "/" in word:
            return word, complete_path(word, cwd, home)

        if is_command_position(line, cursor, word):
            return word, complete_command(word, env) + complete_path(word, cwd, home)

        results: List[CompletionCandidate] = []
        if word.startswith("-"):
            command = line[:cursor].split()[0]
            results.extend(self.complete_flags(command, word))
        results.extend(complete_path(word, cwd, home))
        return word, results

    def complete(
        self, pager: Pager, line: str, cursor: int, cwd: str, env: Mapping[str, str]
    ) -> int:
        word, results = self.candidates(line, cursor, cwd, env)
        pager.set(results, word)
        logger.debug("completion for %r produced %d candidates", word, len(results))
        return len(results)


def create_completion_engine() -> CompletionEngine:
    return CompletionEngine()
