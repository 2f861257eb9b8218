"""Semantic style helpers for omni's terminal output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TuiTheme:
    """Semantic palette tokens for Rich and TerminalMenu renderers."""

    name: str
    accent_rich: str
    info_rich: str
    success_rich: str
    warning_rich: str
    error_rich: str
    muted_rich: str
    accent_term: str


_BASE_THEME = TuiTheme(
    name="default",
    accent_rich="cyan",
    info_rich="blue",
    success_rich="green",
    warning_rich="yellow",
    error_rich="red",
    muted_rich="grey50",
    accent_term="fg_cyan",
)

_current_theme: TuiTheme = _BASE_THEME


def get_theme() -> TuiTheme:
    """Return current active theme."""
    return _current_theme


def terminal_menu_style_kwargs() -> dict[str, Any]:
    """Shared style kwargs for simple_term_menu."""
    theme = get_theme()
    return {
        "menu_cursor_style": (theme.accent_term, "bold"),
        "menu_highlight_style": (theme.accent_term, "bold"),
    }
