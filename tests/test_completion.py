"""Tests for completion routing, the pager and the man-page flag cache."""

import os
import stat

import pytest

from wsh.completion import (
    CompletionCandidate,
    CompletionEngine,
    ManPageFlagCache,
    Pager,
    complete_command,
    complete_path,
    parse_man_page,
)


def make_executable(path):
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)


@pytest.fixture()
def tree(tmp_path):
    root = tmp_path / "tree"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.py").write_text("")
    (root / "setup.cfg").write_text("")
    (root / ".hidden").write_text("")
    return root


@pytest.fixture()
def bin_dir(tmp_path):
    directory = tmp_path / "bin"
    directory.mkdir()
    make_executable(directory / "frobnicate")
    make_executable(directory / "frobulate")
    (directory / "frobdata").write_text("not executable")
    return directory


@pytest.fixture()
def engine(tmp_path):
    return CompletionEngine(ManPageFlagCache(tmp_path / "cache"))


class TestPager:
    def test_active_follows_candidates(self):
        pager = Pager()
        assert not pager.active
        pager.set([CompletionCandidate("a", "a")], "")
        assert pager.active
        pager.clear()
        assert not pager.active
        assert pager.filter_len == 0

    def test_selection_wraps(self):
        pager = Pager()
        pager.set([CompletionCandidate(name, name) for name in "abc"], "x")
        pager.select_previous()
        assert pager.current.value == "c"
        pager.select_next()
        assert pager.current.value == "a"

    def test_window_keeps_selection_visible(self):
        pager = Pager()
        pager.set([CompletionCandidate(str(i), str(i)) for i in range(10)], "")
        assert pager.window(5) == (0, 5)
        for _ in range(7):
            pager.select_next()
        start, end = pager.window(5)
        assert start <= pager.selected < end
        assert end - start == 5


class TestPaths:
    def test_relative_directory_prefix(self, tree):
        values = [c.value for c in complete_path("./sr", str(tree))]
        assert values == ["./src/"]

    def test_nested_path(self, tree):
        candidates = complete_path("src/m", str(tree))
        assert [c.value for c in candidates] == ["src/main.py"]
        assert candidates[0].description == "File"

    def test_bare_fragment_lists_cwd(self, tree):
        values = [c.value for c in complete_path("s", str(tree))]
        assert values == ["setup.cfg", "src/"]

    def test_hidden_entries_need_a_dot(self, tree):
        assert ".hidden" not in [c.value for c in complete_path("", str(tree))]
        assert [c.value for c in complete_path(".h", str(tree))] == [".hidden"]

    def test_home_expansion(self, tree):
        values = [c.value for c in complete_path("~/sr", "/", home=str(tree))]
        assert values == ["~/src/"]

    def test_missing_directory(self, tree):
        assert complete_path("nope/x", str(tree)) == []


class TestCommands:
    def test_only_executables_once(self, bin_dir):
        env = {"PATH": os.pathsep.join([str(bin_dir), str(bin_dir)])}
        names = [c.value for c in complete_command("frob", env)]
        assert names == ["frobnicate", "frobulate"]

    def test_builtins_come_first(self, bin_dir):
        env = {"PATH": str(bin_dir)}
        candidates = complete_command("pw", env)
        assert candidates[0] == CompletionCandidate("pwd", "pwd", "Builtin")


class TestManPages:
    def test_parse_man_page(self):
        text = (
            "NAME\n"
            "     ls - list\n"
            "     -a, --all  do not ignore entries\n"
            "     -l\n"
            "     -\b-h\bh  human readable\n"
        )
        assert parse_man_page(text) == [
            ("-a, --all", "do not ignore entries"),
            ("-l", "Flag"),
            ("-h", "human readable"),
        ]

    def test_cache_file_is_read(self, tmp_path):
        cache = ManPageFlagCache(tmp_path)
        (tmp_path / "tool.comp").write_text("-v, --verbose|say more\n-q|\n")
        assert cache.get_flags("tool") == [("-v, --verbose", "say more"), ("-q", "Flag")]

    def test_generated_rows_are_written(self, tmp_path, monkeypatch):
        cache = ManPageFlagCache(tmp_path)
        monkeypatch.setattr(cache, "_generate", lambda command: [("-x", "extract")])
        assert cache.get_flags("tar") == [("-x", "extract")]
        assert (tmp_path / "tar.comp").read_text() == "-x|extract\n"

    def test_undecodable_man_output_is_replaced(self, tmp_path, monkeypatch):
        fake_bin = tmp_path / "fakebin"
        fake_bin.mkdir()
        man = fake_bin / "man"
        man.write_text("#!/bin/sh\nprintf '  -a, --all  show \\377 all\\n'\n")
        man.chmod(man.stat().st_mode | stat.S_IXUSR)
        monkeypatch.setenv("PATH", f"{fake_bin}{os.pathsep}{os.environ.get('PATH', '')}")

        cache = ManPageFlagCache(tmp_path / "cache")
        assert cache.get_flags("ls") == [("-a, --all", "show \ufffd all")]


class TestEngine:
    def test_first_word_routes_to_commands(self, engine, bin_dir, tree):
        pager = Pager()
        count = engine.complete(pager, "frobn", 5, str(tree), {"PATH": str(bin_dir)})
        assert count == 1
        assert pager.current.value == "frobnicate"
        assert pager.filter == "frobn"

    def test_slash_routes_to_paths(self, engine, tree):
        pager = Pager()
        engine.complete(pager, "cat ./sr", 8, str(tree), {"PATH": ""})
        assert [c.value for c in pager.candidates] == ["./src/"]
        assert pager.filter_len == 4

    def test_flags_then_paths(self, engine, tree):
        (engine.flag_cache.cache_dir).mkdir(parents=True, exist_ok=True)
        engine.flag_cache.cache_file("grep").write_text(
            "-i, --ignore-case|ignore case\n-r, --recursive|recurse\n"
        )
        (tree / "-rfile").write_text("")
        pager = Pager()
        engine.complete(pager, "grep -r", 7, str(tree), {"PATH": ""})
        assert [c.value for c in pager.candidates] == ["-r", "-rfile"]
        assert pager.candidates[0].description == "recurse"

    def test_argument_without_dash_uses_paths(self, engine, tree):
        pager = Pager()
        engine.complete(pager, "ls se", 5, str(tree), {"PATH": ""})
        assert [c.value for c in pager.candidates] == ["setup.cfg"]

    def test_no_candidates_leaves_pager_inactive(self, engine, tree):
        pager = Pager()
        assert engine.complete(pager, "ls zzz", 6, str(tree), {"PATH": ""}) == 0
        assert not pager.active
