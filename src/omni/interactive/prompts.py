"""Prompts: yes/no questions, result lines and install offers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import questionary

from ..errors import OmniError
from ..types import InstallSpec, Outcome, Result
from .core import console, custom_style, error, muted, success

if TYPE_CHECKING:
    from ..context import ActionContext


def confirm(question: str, default: bool = True) -> bool:
    """Ask a yes/no question. Ctrl+C or EOF counts as "no"."""
    answer = questionary.confirm(question, default=default, style=custom_style).ask()
    return bool(answer)


def show_result(result: Result) -> None:
    """Print a dispatcher result as a one-line status."""
    if result.outcome == Outcome.FAILED:
        error(result.message or f"{result.action} failed")
    elif result.outcome == Outcome.CANCELLED:
        if result.message:
            muted(result.message)
    elif result.message:
        success(result.message)


def ask_install(
    ctx: "ActionContext",
    program: str,
    purpose: str,
    install_action: str | None = None,
    executable: str | None = None,
) -> bool:
    """Offer to install a missing program.

    Args:
        ctx: Handler context.
        program: Display name of the program.
        purpose: Why it is wanted, e.g. "to test your internet speed".
        install_action: Installable action to dispatch; a plain package
            install of ``program`` is used when omitted.
        executable: Executable to probe afterwards (defaults to ``program``).

    Returns:
        True if the program is available afterwards.
    """
    question = f"{program} is not installed. Would you like to install it {purpose}?"
    if not ctx.confirm(question):
        muted(f"Continuing without {program}")
        return False

    if install_action and ctx.dispatcher is not None:
        result = ctx.dispatcher.execute(install_action, ctx.os)
    else:
        from ..installer import install_program

        try:
            result = install_program(InstallSpec(program), ctx)
        except OmniError as e:
            result = Result.failed(e, action=program)

    show_result(result)
    installed = result.ok and ctx.is_installed(executable or program)
    if not installed and result.ok:
        error(f"Failed to install {program}")
    console.print()
    return installed
