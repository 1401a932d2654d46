"""Tests for the output system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- JSON output
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from eol.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)
from eol import output as output_module


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("eol.output._is_tty", lambda: False)


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_color_enabled_by_default(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False

    def test_flag_wins(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert OutputManager(no_color=True).no_color is True


class TestStreams:
    def test_print_data_goes_to_stdout(self, capsys) -> None:
        OutputManager(no_color=True).print_data("hello")
        captured = capsys.readouterr()
        assert captured.out == "hello\n"
        assert captured.err == ""

    def test_print_data_keeps_single_trailing_newline(self, capsys) -> None:
        OutputManager(no_color=True).print_data("hello\n")
        assert capsys.readouterr().out == "hello\n"

    def test_diagnostics_go_to_stderr(self, capsys) -> None:
        out = OutputManager(no_color=True)
        out.info("info msg")
        out.warning("careful")
        out.error("broken")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "info msg" in captured.err
        assert "Warning: careful" in captured.err
        assert "Error: broken" in captured.err


class TestQuietVerbose:
    def test_quiet_suppresses_info_and_success(self, capsys) -> None:
        out = OutputManager(no_color=True, quiet=True)
        out.info("hidden")
        out.success("hidden too")
        out.suggest("also hidden")
        assert capsys.readouterr().err == ""

    def test_quiet_keeps_warnings_and_errors(self, capsys) -> None:
        out = OutputManager(no_color=True, quiet=True)
        out.warning("w")
        out.error("e")
        err = capsys.readouterr().err
        assert "Warning: w" in err
        assert "Error: e" in err

    def test_debug_only_when_verbose(self, capsys) -> None:
        OutputManager(no_color=True).debug("nope")
        assert capsys.readouterr().err == ""
        OutputManager(no_color=True, verbose=True).debug("yes")
        assert "[debug] yes" in capsys.readouterr().err


class TestJSON:
    def test_print_json_plain_when_piped(self, capsys, non_tty) -> None:
        out = OutputManager(format=OutputFormat.JSON)
        out.print_json({"name": "go", "versions": ["1.24"]})
        assert json.loads(capsys.readouterr().out) == {"name": "go", "versions": ["1.24"]}

    def test_is_json(self) -> None:
        assert OutputManager(format=OutputFormat.JSON).is_json
        assert not OutputManager(format=OutputFormat.TEXT).is_json

    def test_format_from_string(self) -> None:
        assert OutputManager(format="json").format == OutputFormat.JSON


class TestGlobalInstance:
    def test_lazy_default(self) -> None:
        assert get_output().format == OutputFormat.TEXT

    def test_set_and_reset(self) -> None:
        manager = OutputManager(format=OutputFormat.JSON)
        set_output(manager)
        assert get_output() is manager
        reset_output()
        assert get_output() is not manager

    def test_convenience_functions_delegate(self, capsys) -> None:
        set_output(OutputManager(no_color=True))
        output_module.print_data("data")
        output_module.warning("w")
        captured = capsys.readouterr()
        assert captured.out == "data\n"
        assert "Warning: w" in captured.err
