"""Tests for the output system.

Covers:
- stdout vs stderr discipline
- Raw byte passthrough for page bodies
- Quiet and verbose modes
- Tab-separated tables when colour is off
- NO_COLOR / TERM=dumb
- The spinner falling back to a no-op
- Global instance management
"""

from __future__ import annotations

import contextlib

import pytest

from aoc import output as output_module
from aoc.output import (
    OutputManager,
    _color_disabled_by_env,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStreams:
    def test_print_data_goes_to_stdout(self, capsys):
        OutputManager(no_color=True).print_data("hello")
        captured = capsys.readouterr()
        assert captured.out == "hello\n"
        assert captured.err == ""

    def test_print_data_keeps_existing_newline(self, capsys):
        OutputManager(no_color=True).print_data("hello\n")
        assert capsys.readouterr().out == "hello\n"

    def test_write_bytes_is_unchanged(self, capsysbinary):
        body = b"seeds: 79 14\r\n\x00\xff"
        OutputManager(no_color=True).write_bytes(body)
        assert capsysbinary.readouterr().out == body

    def test_diagnostics_go_to_stderr(self, capsys):
        mgr = OutputManager(no_color=True)
        mgr.info("info")
        mgr.success("done")
        mgr.warning("careful")
        mgr.error("broken")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines() == [
            "info",
            "done",
            "Warning: careful",
            "Error: broken",
        ]


# ------------------------------------------------------------------ #
# Quiet / verbose
# ------------------------------------------------------------------ #


class TestModes:
    def test_quiet_suppresses_info_and_success(self, capsys):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.info("info")
        mgr.success("done")
        assert capsys.readouterr().err == ""

    def test_quiet_keeps_errors_and_warnings(self, capsys):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.warning("careful")
        mgr.error("broken")
        err = capsys.readouterr().err
        assert "careful" in err
        assert "broken" in err

    def test_debug_only_when_verbose(self, capsys):
        OutputManager(no_color=True).debug("hidden")
        OutputManager(no_color=True, verbose=True).debug("shown")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "[debug] shown" in err


# ------------------------------------------------------------------ #
# Tables
# ------------------------------------------------------------------ #


class TestTable:
    def test_plain_table_is_tab_separated(self, capsys):
        OutputManager(no_color=True).print_table(["a", "b"], [["1", "2"], ["3", "4"]])
        assert capsys.readouterr().out == "a\tb\n1\t2\n3\t4\n"


# ------------------------------------------------------------------ #
# Colour and spinner
# ------------------------------------------------------------------ #


class TestColor:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        assert _color_disabled_by_env() is True

    def test_dumb_terminal(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _color_disabled_by_env() is True

    def test_color_allowed(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _color_disabled_by_env() is False


class TestStatus:
    @pytest.mark.parametrize("kwargs", [{"quiet": True}, {"no_color": True}])
    def test_status_is_noop(self, kwargs):
        status = OutputManager(**kwargs).status("Requesting")
        assert isinstance(status, contextlib.nullcontext)

    def test_status_noop_when_stderr_not_terminal(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        with OutputManager().status("Requesting"):
            pass


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_set_and_get(self):
        mgr = OutputManager(no_color=True)
        set_output(mgr)
        assert get_output() is mgr

    def test_reset_creates_fresh_default(self):
        mgr = OutputManager(no_color=True)
        set_output(mgr)
        reset_output()
        assert get_output() is not mgr

    def test_module_helpers_use_global(self, capsys):
        set_output(OutputManager(no_color=True))
        output_module.print_data("via helper")
        output_module.error("oops")
        captured = capsys.readouterr()
        assert captured.out == "via helper\n"
        assert captured.err == "Error: oops\n"
