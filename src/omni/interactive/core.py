"""Core utilities for interactive UI.

Console management, questionary style and status line helpers.
"""

from __future__ import annotations

from questionary import Style
from rich.console import Console
from rich.markup import escape

from .theme import get_theme

# Console management for testability
# Tests can call set_console() to inject a console writing to a buffer
_console_instance: Console | None = None


def _get_console() -> Console:
    """Get the console instance, creating one if needed."""
    global _console_instance
    if _console_instance is None:
        _console_instance = Console(highlight=False)
    return _console_instance


def set_console(new_console: Console | None) -> None:
    """Set the console instance (for testing).

    Args:
        new_console: Console to use, or None to reset to default.

    Example:
        from io import StringIO
        from rich.console import Console
        from omni.interactive import set_console

        output = StringIO()
        set_console(Console(file=output, force_terminal=False))
        # ... run code ...
        set_console(None)  # Reset
    """
    global _console_instance
    _console_instance = new_console


def configure_console(color: bool = True) -> None:
    """Replace the default console according to terminal capabilities."""
    set_console(Console(highlight=False, no_color=not color))


class _ConsoleProxy:
    """Proxy that delegates to the current console instance.

    This allows set_console() to affect all code using the module-level
    `console` variable, even after import.
    """

    def __getattr__(self, name: str):
        return getattr(_get_console(), name)

    def __enter__(self):
        return _get_console().__enter__()

    def __exit__(self, *args):
        return _get_console().__exit__(*args)


# Module-level console that can be swapped via set_console()
console = _ConsoleProxy()

# Custom style for questionary
custom_style = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "fg:white bold"),
        ("answer", "fg:cyan"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("separator", "fg:gray"),
        ("instruction", "fg:gray"),
    ]
)


def heading(title: str) -> None:
    """Print a section title underlined with '='."""
    theme = get_theme()
    console.print(f"[{theme.accent_rich}]{escape(title)}[/{theme.accent_rich}]")
    console.print(f"[{theme.accent_rich}]{'=' * len(title)}[/{theme.accent_rich}]")


def subheading(title: str) -> None:
    theme = get_theme()
    console.print(f"[{theme.info_rich}]{escape(title)}[/{theme.info_rich}]")


def success(message: str) -> None:
    theme = get_theme()
    console.print(f"[{theme.success_rich}]✓ {escape(message)}[/{theme.success_rich}]")


def warning(message: str) -> None:
    theme = get_theme()
    console.print(f"[{theme.warning_rich}]{escape(message)}[/{theme.warning_rich}]")


def error(message: str) -> None:
    theme = get_theme()
    console.print(f"[{theme.error_rich}]✗ {escape(message)}[/{theme.error_rich}]")


def info(message: str) -> None:
    theme = get_theme()
    console.print(f"[{theme.info_rich}]{escape(message)}[/{theme.info_rich}]")


def muted(message: str) -> None:
    theme = get_theme()
    console.print(f"[{theme.muted_rich}]{escape(message)}[/{theme.muted_rich}]")
