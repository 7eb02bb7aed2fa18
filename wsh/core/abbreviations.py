#!/usr/bin/env python3
import json
import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from prompt_toolkit.document import Document

logger = logging.getLogger(__name__)


class AbbreviationTable:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._table: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: str) -> bool:
        return key in self._table

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(sorted(self._table.items()))

    def add(self, key: str, expansion: str) -> None:
        self._table[key] = expansion

    def remove(self, key: str) -> bool:
        return self._table.pop(key, None) is not None

    def expand(self, word: str) -> Optional[str]:
        return self._table.get(word)

    def expand_at(self, text: str, cursor: int) -> Tuple[str, int]:
        """Replace the word ending at ``cursor`` with its expansion, if any."""
        document = Document(text, cursor)
        word = document.get_word_before_cursor(WORD=True)
        if not word:
            return text, cursor

        expansion = self._table.get(word)
        if expansion is None:
            return text, cursor

        start = cursor - len(word)
        new_text = text[:start] + expansion + text[cursor:]
        return new_text, cursor + len(expansion) - len(word)

    def load(self) -> int:
        if self.path is None or not self.path.exists():
            return 0
        try:
            raw = self.path.read_text(encoding="utf-8").strip()
            data = json.loads(raw) if raw else {}
        except (OSError, json.JSONDecodeError) as error:
            logger.warning("could not load abbreviations from %s: %s", self.path, error)
            return 0

        if isinstance(data, dict):
            for key, value in data.items():
                self._table[str(key)] = str(value)
        return len(self._table)

    def save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._table, indent=2), encoding="utf-8")
        except OSError as error:
            logger.warning("could not save abbreviations to %s: %s", self.path, error)
