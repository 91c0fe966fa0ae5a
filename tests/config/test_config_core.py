"""Tests for dynexpr.config helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import typer

from dynexpr import config


def test_load_config_missing_file_returns_empty(tmp_path: Path) -> None:
    """Missing config should return empty config without error."""
    missing = tmp_path / "missing.json"
    data, malformed = config.load_config(str(missing))

    assert data == {}
    assert malformed is False


def test_load_config_directory_path_is_malformed(tmp_path: Path) -> None:
    """Directory path should be treated as malformed config."""
    config_dir = tmp_path / "cfgdir"
    config_dir.mkdir()
    data, malformed = config.load_config(str(config_dir))

    assert data == {}
    assert malformed is True


def test_load_config_non_dict_is_malformed(tmp_path: Path) -> None:
    """Non-object JSON should be marked malformed."""
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2, 3]", encoding="utf-8")

    data, malformed = config.load_config(str(config_path))

    assert data == {}
    assert malformed is True


def test_load_config_invalid_json_is_malformed(tmp_path: Path) -> None:
    """Invalid JSON should be marked malformed."""
    config_path = tmp_path / "config.json"
    config_path.write_text("{", encoding="utf-8")

    assert config.load_config(str(config_path)) == ({}, True)


def test_parse_color_defaults_conflict() -> None:
    """Conflicting color flags should be rejected."""
    defaults, valid = config.parse_color_defaults({"--color": True, "--no-color": True})

    assert defaults == {}
    assert valid is False


@pytest.mark.parametrize(
    ("section", "expected"),
    [
        ({"--color": True}, {"color_flag": True}),
        ({"--no-color": True}, {"color_flag": False}),
        ({"--color": False}, {}),
    ],
)
def test_parse_color_defaults(section: dict[str, object], expected: dict[str, object]) -> None:
    """Color flags should map to the color_flag parameter."""
    defaults, valid = config.parse_color_defaults(section)

    assert valid is True
    assert defaults == expected


def test_build_config_defaults_valid() -> None:
    """Valid defaults should map option names to parameter names."""
    defaults = config.build_config_defaults(
        {"defaults": {"--out": "table", "--no-color": True, "--verbose": True}}
    )

    assert defaults == {"out": "table", "color_flag": False, "verbose": True}


@pytest.mark.parametrize(
    "raw",
    [
        {"other": {}},
        {"defaults": []},
        {"defaults": {"--out": "yaml"}},
        {"defaults": {"--out": " "}},
        {"defaults": {"--verbose": "yes"}},
        {"defaults": {"--color": 1}},
        {"defaults": {"--unknown": 1}},
    ],
)
def test_build_config_defaults_rejects_malformed(raw: dict[str, object]) -> None:
    """Unknown sections, options, and invalid values should be rejected."""
    assert config.build_config_defaults(raw) is None


def test_build_config_defaults_empty() -> None:
    """An empty config yields no defaults."""
    assert config.build_config_defaults({}) == {}


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (["dynexpr", "render", "doc.json"], ".dynexpr.json"),
        (["dynexpr", "render", "--config", "custom.json", "doc.json"], "custom.json"),
        (["dynexpr", "render", "--config=other.json"], "other.json"),
        (["dynexpr", "render", "--config"], ".dynexpr.json"),
    ],
)
def test_parse_config_argument(argv: list[str], expected: str) -> None:
    """Only the --config value should be extracted from argv."""
    assert config.parse_config_argument(argv) == expected


def test_load_cli_config_reads_relative_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Relative config names are resolved against the working directory."""
    (tmp_path / ".dynexpr.json").write_text(
        json.dumps({"defaults": {"--out": "table"}}), encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    assert config.load_cli_config(["dynexpr", "render", "doc.json"]) == {"out": "table"}


def test_load_cli_config_missing_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing config file yields no defaults."""
    monkeypatch.chdir(tmp_path)

    assert config.load_cli_config(["dynexpr"]) == {}


@pytest.mark.parametrize(
    "content",
    ["not json", json.dumps({"defaults": {"--out": "xml"}})],
)
def test_load_cli_config_malformed_raises(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, content: str
) -> None:
    """Malformed configs should be reported as bad parameters."""
    config_path = tmp_path / "bad.json"
    config_path.write_text(content, encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    with pytest.raises(typer.BadParameter, match="Malformed config"):
        config.load_cli_config(["dynexpr", "--config", str(config_path)])


def test_build_default_map_targets_render_command() -> None:
    """Defaults go to the render command, without the global verbose flag."""
    default_map = config.build_default_map({"out": "table", "verbose": True})

    assert default_map == {"render": {"out": "table"}}


def test_log_applied_config_defaults(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Applied defaults are logged with their option names."""
    monkeypatch.setattr(logging.getLogger("dynexpr"), "propagate", True)
    monkeypatch.setattr(config, "CONFIG_DEFAULTS", {"out": "table", "color_flag": False})
    caplog.set_level(logging.INFO, logger="dynexpr")

    config.log_applied_config_defaults("render")

    assert "Config defaults applied (render): --color/--no-color=False, --out='table'" in caplog.text


def test_log_applied_config_defaults_silent_when_disabled(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Nothing is logged when INFO is disabled."""
    monkeypatch.setattr(config, "CONFIG_DEFAULTS", {"out": "table"})
    caplog.set_level(logging.WARNING, logger="dynexpr")

    config.log_applied_config_defaults("render")

    assert caplog.text == ""
