"""The action catalog.

Every menu entry and installable program is declared in one of the
modules of this package; ``build_registry`` collects them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from ..registry import ActionRegistry
from . import fonts, network, packages, programs, system

if TYPE_CHECKING:
    from ..context import ActionContext

PreviewFn = Callable[["ActionContext", str], str]


def build_registry() -> ActionRegistry:
    """Register every action."""
    registry = ActionRegistry()
    for module in (system, network, fonts, packages, programs):
        for action in module.actions():
            registry.register(action)
    return registry


def preview_functions() -> dict[str, PreviewFn]:
    """Preview kinds rendered by the catalog modules."""
    return {
        "interface": network.preview_interface,
        "port": network.preview_port,
        "font": fonts.preview_installed_font,
        "nerd_font": fonts.preview_nerd_font,
        "installed_program": packages.preview_installed_program,
    }
