"""Configuration for omni.

Nothing has to exist on disk: an optional YAML file at
``$XDG_CONFIG_HOME/omni/config.yaml`` is merged over the defaults, then a
few ``OMNI_*`` environment variables are applied on top. The result is a
frozen Settings object handed to components at construction.
"""

from __future__ import annotations

import copy
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "debug": False,
    "color": True,
    "picker": "fzf",
    "tools": {
        "fzf": "fzf",
        "bat": ["bat", "batcat"],
        "shfmt": "shfmt",
    },
    "preview": {
        "window": "right:60%:wrap",
        "height": "80%",
        "bat_style": "numbers",
        "timeout": 5,
    },
}

PICKER_BACKENDS = ("fzf", "menu")

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the omni config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "omni"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.yaml"


def get_log_path() -> Path:
    """Get the path to the debug log file."""
    return get_config_dir() / "debug.log"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load the config file merged over the defaults.

    A missing or unreadable file yields the defaults.
    """
    config_path = path or get_config_path()
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            return copy.deepcopy(DEFAULT_CONFIG)
        return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), data)
    except FileNotFoundError:
        return copy.deepcopy(DEFAULT_CONFIG)
    except (yaml.YAMLError, OSError):
        return copy.deepcopy(DEFAULT_CONFIG)


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _resolve_executable(candidates: str | list[str]) -> str:
    """Return the first candidate found on PATH, else the first candidate."""
    names = [candidates] if isinstance(candidates, str) else list(candidates)
    if not names:
        return ""
    for name in names:
        if shutil.which(name):
            return name
    return names[0]


def _section(cfg: Mapping[str, Any], name: str) -> dict[str, Any]:
    """Return a config section, or an empty one when it is not a mapping."""
    value = cfg.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring config section %r: expected a mapping, got %r", name, value)
        return {}
    return value


def _string(section: Mapping[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if isinstance(value, (str, int, float)) and not isinstance(value, bool) and str(value):
        return str(value)
    logger.warning("Ignoring config value %r=%r, using %r", key, value, default)
    return default


def _number(section: Mapping[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = -1.0
    if isinstance(value, bool) or number <= 0:
        logger.warning("Ignoring config value %r=%r, using %r", key, value, default)
        return default
    return number


def _executables(section: Mapping[str, Any], key: str, default: str | list[str]) -> str | list[str]:
    """Return an executable name or list of names, else the default."""
    value = section.get(key, default)
    if isinstance(value, str) and value:
        return value
    if isinstance(value, list) and value and all(isinstance(v, str) and v for v in value):
        return value
    logger.warning("Ignoring config value %r=%r, using %r", key, value, default)
    return default


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings.

    Attributes:
        picker: Picker backend, "fzf" or "menu".
        fzf: fzf executable.
        bat: bat executable (``batcat`` on Debian-family systems).
        shfmt: shfmt executable used to tidy command previews.
        preview_window: fzf ``--preview-window`` value.
        picker_height: fzf ``--height`` value for sub-pickers.
        bat_style: bat ``--style`` value.
        preview_timeout: Seconds a single preview probe may take.
        color: Whether to emit colors.
        debug: Whether to write a debug log.
    """

    picker: str = "fzf"
    fzf: str = "fzf"
    bat: str = "bat"
    shfmt: str = "shfmt"
    preview_window: str = "right:60%:wrap"
    picker_height: str = "80%"
    bat_style: str = "numbers"
    preview_timeout: float = 5
    color: bool = True
    debug: bool = False


def load_settings(
    debug: bool | None = None,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
) -> Settings:
    """Build Settings from the config file, environment and CLI flags."""
    env = os.environ if env is None else env
    cfg = load_config(path)
    tools = _section(cfg, "tools")
    preview = _section(cfg, "preview")

    picker = str(env.get("OMNI_PICKER") or cfg.get("picker") or "fzf")
    if picker not in PICKER_BACKENDS:
        picker = "fzf"

    debug_enabled = bool(cfg.get("debug", False))
    if "OMNI_DEBUG" in env:
        debug_enabled = _truthy(env["OMNI_DEBUG"])
    if debug is not None:
        debug_enabled = debug_enabled or debug

    color = bool(cfg.get("color", True)) and "NO_COLOR" not in env

    return Settings(
        picker=picker,
        fzf=env.get("OMNI_FZF") or _resolve_executable(_executables(tools, "fzf", "fzf")),
        bat=env.get("OMNI_BAT") or _resolve_executable(_executables(tools, "bat", ["bat", "batcat"])),
        shfmt=_resolve_executable(_executables(tools, "shfmt", "shfmt")),
        preview_window=_string(preview, "window", "right:60%:wrap"),
        picker_height=_string(preview, "height", "80%"),
        bat_style=_string(preview, "bat_style", "numbers"),
        preview_timeout=_number(preview, "timeout", 5),
        color=color,
        debug=debug_enabled,
    )
