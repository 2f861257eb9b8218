"""Pause helper shown after non-interactive actions."""

from __future__ import annotations

import readchar

from .core import console

CONTINUE_PROMPT = "[dim]Press any key to continue or Ctrl+C to exit...[/dim]"


def wait_for_continue(prompt: str = CONTINUE_PROMPT) -> None:
    """Block until any key is pressed.

    Ctrl+C propagates so the whole program can exit; end of input returns.
    """
    console.print()
    console.print(prompt)
    try:
        readchar.readkey()
    except EOFError:
        return
