"""Tests for abbreviation lookup, in-place expansion and persistence."""

import json

from wsh.core.abbreviations import AbbreviationTable


class TestExpansion:
    def test_expand_word_before_cursor(self):
        table = AbbreviationTable()
        table.add("gc", "git commit")
        assert table.expand_at("gc", 2) == ("git commit", 10)

    def test_expand_in_middle_of_line(self):
        table = AbbreviationTable()
        table.add("gco", "git checkout")
        text, cursor = table.expand_at("sudo gco main", 8)
        assert text == "sudo git checkout main"
        assert cursor == 17

    def test_unknown_word_is_untouched(self):
        table = AbbreviationTable()
        assert table.expand_at("ls", 2) == ("ls", 2)

    def test_cursor_after_space_has_no_word(self):
        table = AbbreviationTable()
        table.add("gc", "git commit")
        assert table.expand_at("gc ", 3) == ("gc ", 3)

    def test_lookup_is_verbatim(self):
        table = AbbreviationTable()
        table.add("gc", "git commit")
        assert table.expand("GC") is None
        assert table.expand("gc") == "git commit"

    def test_last_write_wins(self):
        table = AbbreviationTable()
        table.add("l", "ls")
        table.add("l", "ls -la")
        assert table.expand("l") == "ls -la"
        assert len(table) == 1


class TestPersistence:
    def test_save_and_load(self, tmp_path):
        path = tmp_path / "abbr.json"
        table = AbbreviationTable(path)
        table.add("gs", "git status")
        table.save()
        assert json.loads(path.read_text()) == {"gs": "git status"}

        fresh = AbbreviationTable(path)
        assert fresh.load() == 1
        assert "gs" in fresh

    def test_broken_file_is_ignored(self, tmp_path):
        path = tmp_path / "abbr.json"
        path.write_text("{not json")
        table = AbbreviationTable(path)
        assert table.load() == 0

    def test_remove(self):
        table = AbbreviationTable()
        table.add("gs", "git status")
        assert table.remove("gs") is True
        assert table.remove("gs") is False
        assert list(table.items()) == []
