"""Tests for building jobs, pipelines and commands from tokens."""

import pytest

from wsh.core.errors import UnclosedQuoteError
from wsh.core.parser import RedirectMode, parse, unquote_word


class TestPipelines:
    def test_full_pipeline_shape(self):
        result = parse("ls -la | grep foo > out.txt &")
        assert result.diagnostics == []

        pipelines = result.job.pipelines
        assert len(pipelines) == 1
        pipeline = pipelines[0]
        assert pipeline.background is True

        first, second = pipeline.commands
        assert first.argv == ["ls", "-la"]
        assert first.redirects == []
        assert second.argv == ["grep", "foo"]
        assert len(second.redirects) == 1
        assert second.redirects[0].mode is RedirectMode.OUT
        assert second.redirects[0].target == "out.txt"

    def test_semicolons_separate_pipelines(self):
        job = parse("cd /tmp; ls ;; pwd").job
        assert [p.head.argv for p in job] == [["cd", "/tmp"], ["ls"], ["pwd"]]
        assert len(job) == 3

    def test_background_then_next_pipeline(self):
        job = parse("sleep 1 & echo done").job
        first, second = job.pipelines
        assert first.background is True
        assert second.background is False
        assert second.head.argv == ["echo", "done"]

    def test_empty_line(self):
        result = parse("   ")
        assert result.job.head is None
        assert result.ok


class TestRedirects:
    def test_redirects_interleave_with_words(self):
        command = parse("sort < in.txt -r >> out.txt").job.head.head
        assert command.argv == ["sort", "-r"]
        assert [(r.mode, r.target) for r in command.redirects] == [
            (RedirectMode.IN, "in.txt"),
            (RedirectMode.APPEND, "out.txt"),
        ]

    def test_redirect_without_target_is_dropped(self):
        result = parse("echo hi >")
        command = result.job.head.head
        assert command.argv == ["echo", "hi"]
        assert command.redirects == []
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].offset == 8

    def test_redirect_binds_to_preceding_command(self):
        result = parse("cat a | wc -l > n.txt")
        first, second = result.job.head.commands
        assert first.redirects == []
        assert second.redirects[0].target == "n.txt"


class TestRecovery:
    def test_stray_pipe_reports_and_continues(self):
        result = parse("| ls")
        assert len(result.diagnostics) == 1
        assert result.job.head.head.argv == ["ls"]

    def test_pipe_without_command_ends_pipeline(self):
        result = parse("ls | ; pwd")
        pipelines = result.job.pipelines
        assert [p.head.argv for p in pipelines] == [["ls"], ["pwd"]]
        assert len(pipelines[0].commands) == 1
        assert len(result.diagnostics) == 1

    def test_leading_redirect_is_skipped(self):
        result = parse("> out echo")
        assert result.diagnostics
        assert result.job.head.head.argv == ["out", "echo"]

    def test_unclosed_quote_propagates(self):
        with pytest.raises(UnclosedQuoteError):
            parse('echo "unterminated')


class TestUnquote:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('"hello world"', "hello world"),
            ("'a\\b'", "a\\b"),
            (r"my\ file", "my file"),
            ('"it\'s"', "it's"),
            ("'say \"hi\"'", 'say "hi"'),
            ("pre'mid'post", "premidpost"),
            ("end\\", "end\\"),
        ],
    )
    def test_unquote_word(self, raw, expected):
        assert unquote_word(raw) == expected

    def test_words_are_unquoted_in_argv(self):
        command = parse("echo 'a b' \"c d\"").job.head.head
        assert command.argv == ["echo", "a b", "c d"]
