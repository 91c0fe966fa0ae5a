"""Configuration handling for the dynexpr CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import cast

import typer


DEFAULT_CONFIG_NAME = ".dynexpr.json"

OUTPUT_FORMATS = ("json", "table")

BOOL_OPTIONS: dict[str, str] = {
    "--verbose": "verbose",
}

STR_OPTIONS: dict[str, str] = {
    "--out": "out",
}

DEST_TO_OPTION_NAME: dict[str, str] = {
    "color_flag": "--color/--no-color",
    "out": "--out",
    "verbose": "--verbose",
}

CONFIG_DEFAULTS: dict[str, object] = {}


logger = logging.getLogger("dynexpr")


def load_config(filepath: str) -> tuple[dict[str, object], bool]:
    """Load config from JSON file.

    Args:
        filepath: Path to config file

    Returns:
        Tuple of (config dict, malformed flag)
    """
    try:
        with open(filepath, encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        return ({}, False)
    except OSError:
        return ({}, True)
    except json.JSONDecodeError:
        return ({}, True)

    if not isinstance(config, dict):
        return ({}, True)

    return (config, False)


def parse_color_defaults(config: dict[str, object]) -> tuple[dict[str, object], bool]:
    """Parse color-related config defaults."""
    defaults: dict[str, object] = {}
    color_value = config.get("--color")
    no_color_value = config.get("--no-color")

    if "--color" in config and not isinstance(color_value, bool):
        return ({}, False)
    if "--no-color" in config and not isinstance(no_color_value, bool):
        return ({}, False)
    if color_value is True and no_color_value is True:
        return ({}, False)

    if color_value is True:
        defaults["color_flag"] = True
    if no_color_value is True:
        defaults["color_flag"] = False

    return (defaults, True)


def validate_str_option(key: str, value: object) -> str | None:
    """Validate string option value."""
    if not isinstance(value, str) or not value.strip():
        return None
    if key == "--out" and value not in OUTPUT_FORMATS:
        return None
    return value


def apply_config_entry(key: str, value: object, defaults: dict[str, object]) -> bool:
    """Apply a config entry to defaults if valid."""
    if key in BOOL_OPTIONS:
        if not isinstance(value, bool):
            return False
        defaults[BOOL_OPTIONS[key]] = value
        return True
    if key in STR_OPTIONS:
        str_value = validate_str_option(key, value)
        if str_value is None:
            return False
        defaults[STR_OPTIONS[key]] = str_value
        return True
    return False


def build_config_defaults(config: dict[str, object]) -> dict[str, object] | None:
    """Validate the `defaults` section and build option defaults.

    Accepted shape:
      {
        "defaults": {"--out": "table", "--no-color": true, "--verbose": false}
      }

    Returns:
        Option defaults keyed by parameter name, or None if malformed
    """
    if any(key != "defaults" for key in config):
        return None

    section = config.get("defaults", {})
    if not isinstance(section, dict):
        return None
    section = cast(dict[str, object], section)

    defaults, valid = parse_color_defaults(section)
    if not valid:
        return None

    for key, value in section.items():
        if key in ("--color", "--no-color"):
            continue
        if not apply_config_entry(key, value, defaults):
            return None

    return defaults


def parse_config_argument(argv: list[str]) -> str:
    """Parse only the --config argument from argv."""
    for idx, arg in enumerate(argv[1:], start=1):
        if arg == "--config" and idx + 1 < len(argv):
            return argv[idx + 1]
        if arg.startswith("--config="):
            return arg.split("=", 1)[1]
    return DEFAULT_CONFIG_NAME


def load_cli_config(argv: list[str]) -> dict[str, object]:
    """Load config defaults from the configured file path."""
    config_name = parse_config_argument(argv)
    config_path = Path(config_name)
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_name
    config, load_error = load_config(str(config_path))

    if load_error:
        raise typer.BadParameter("Malformed config")

    defaults = build_config_defaults(config)
    if defaults is None:
        raise typer.BadParameter("Malformed config")

    return defaults


def build_default_map(defaults: dict[str, object]) -> dict[str, dict[str, object]]:
    """Build Click default_map for Typer commands."""
    render_defaults = {key: value for key, value in defaults.items() if key != "verbose"}
    return {"render": render_defaults}


def log_applied_config_defaults(command_name: str) -> None:
    """Log config defaults loaded from config file."""
    if not logger.isEnabledFor(logging.INFO):
        return

    entries = [
        f"{DEST_TO_OPTION_NAME[dest]}={value!r}"
        for dest, value in sorted(CONFIG_DEFAULTS.items())
        if dest in DEST_TO_OPTION_NAME
    ]
    if entries:
        logger.info("Config defaults applied (%s): %s", command_name, ", ".join(entries))
