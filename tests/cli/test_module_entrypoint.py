"""Tests for running dynexpr as a module."""

from __future__ import annotations

import runpy
import sys
from pathlib import Path

import pytest

from dynexpr import cli


def test_module_entrypoint_delegates_to_cli_main(monkeypatch: pytest.MonkeyPatch) -> None:
    """Running dynexpr.__main__ should hand control to cli.main exactly once."""
    calls: list[list[str]] = []
    monkeypatch.setattr(sys, "argv", ["dynexpr", "path", "a"])
    monkeypatch.setattr(cli, "main", lambda: calls.append(list(sys.argv)))

    runpy.run_module("dynexpr.__main__", run_name="__main__")

    assert calls == [["dynexpr", "path", "a"]]


def test_module_entrypoint_runs_path_command(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """python -m dynexpr path should print normalized paths and exit cleanly."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "argv", ["dynexpr", "path", "items[007].name"])

    with pytest.raises(SystemExit) as excinfo:
        runpy.run_module("dynexpr.__main__", run_name="__main__")

    assert excinfo.value.code == 0
    assert capsys.readouterr().out == "items[7].name\n"
