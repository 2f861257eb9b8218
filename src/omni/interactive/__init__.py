"""Terminal UI helpers shared by the session loop and handlers."""

from __future__ import annotations

from .core import configure_console, console, custom_style, set_console
from .pause import wait_for_continue
from .prompts import ask_install, confirm, show_result

__all__ = [
    "ask_install",
    "configure_console",
    "confirm",
    "console",
    "custom_style",
    "set_console",
    "show_result",
    "wait_for_continue",
]
