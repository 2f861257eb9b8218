"""Preview pane rendering.

Every picker names a preview kind; the renderer turns (kind, label) into
plain text. Rendering only reads system state, each probe is bounded by
``preview_timeout`` and any failure degrades to partial text, so a broken
preview never blocks the picker.

fzf runs previews in a child process, so this module is also executable:

    python -m omni.preview <kind> <label>
"""

from __future__ import annotations

import logging
import sys
from typing import Callable

from .context import ActionContext
from .errors import NotFoundError
from .installer import plan_install
from .types import EXIT_LABEL, Action, Category

logger = logging.getLogger(__name__)

# Preview kind -> bat syntax used to highlight it
PREVIEW_LANGUAGES: dict[str, str] = {
    "menu": "bash",
    "program": "bash",
    "interface": "yaml",
    "port": "yaml",
    "font": "yaml",
    "installed_program": "yaml",
    "nerd_font": "yaml",
}


def preview_language(kind: str) -> str:
    """bat ``--language`` for a preview kind."""
    return PREVIEW_LANGUAGES.get(kind, "yaml")


class PreviewRenderer:
    """Produces preview text for picker rows."""

    def __init__(self, ctx: ActionContext):
        from .actions import preview_functions

        self.ctx = ctx
        self._renderers: dict[str, Callable[[str], str]] = {
            "menu": self.render_action,
            "program": self.render_action,
        }
        for kind, fn in preview_functions().items():
            self._renderers[kind] = lambda label, fn=fn: fn(self.ctx, label)

    def render(self, kind: str, label: str) -> str:
        """Render preview text. Never raises."""
        renderer = self._renderers.get(kind)
        if renderer is None:
            return label
        try:
            return renderer(label)
        except Exception as e:
            logger.debug("preview %s for %r failed: %s", kind, label, e)
            return f"{label}\n\nPreview unavailable: {e}"

    def render_action(self, name: str) -> str:
        """Describe what an action will do on this OS and its current status."""
        if name == EXIT_LABEL:
            return "Exit the Omni tool"
        if self.ctx.registry is None:
            return f"Function preview for: {name}"
        try:
            action = self.ctx.registry.lookup(name)
        except NotFoundError:
            return f"Function preview for: {name}"

        if action.category == Category.INSTALLABLE:
            return self._render_installable(action)
        return self._render_menu_action(action)

    def _render_menu_action(self, action: Action) -> str:
        os_name = str(self.ctx.os)
        lines = [f"# Function: {action.name} (showing {os_name} specific code)"]
        if action.description:
            lines.append(f"# {action.description}")
        lines.append("")

        steps = action.steps_for(self.ctx.os)
        if steps:
            lines.append(self._format_shell("\n".join(steps)))
        elif action.handler_for(self.ctx.os) is None:
            lines.append(f"# Not available on {os_name}")
        return "\n".join(lines)

    def _render_installable(self, action: Action) -> str:
        lines = [f"# Program: {action.name} (showing {self.ctx.os} specific code)"]
        if action.description:
            lines.append(f"# {action.description}")

        spec = action.install
        if spec is not None:
            lines.append(f"# PROGRAM: {spec.program}")
            lines.append(self._status_line(spec.program))
            lines.append("")
            steps = action.steps_for(self.ctx.os) or tuple(plan_install(spec, self.ctx))
            lines.append(self._format_shell("\n".join(steps)))
        else:
            lines.append("")
            lines.append(self._format_shell("\n".join(action.steps_for(self.ctx.os))))
        return "\n".join(lines)

    def _status_line(self, program: str) -> str:
        try:
            path = self.ctx.which(program)
        except OSError:
            return "# Status: unknown"
        if path:
            return f"# Status: installed ({path})"
        return "# Status: not installed"

    def _format_shell(self, text: str) -> str:
        """Tidy shell text with shfmt when it is available."""
        shfmt = self.ctx.settings.shfmt
        if not text.strip() or not shfmt or not self.ctx.which(shfmt):
            return text
        result = self.ctx.runner.capture(
            [shfmt, "-ln=posix", "-i=4", "-ci"],
            input=text + "\n",
            timeout=self.ctx.settings.preview_timeout,
        )
        if result.ok and result.stdout.strip():
            return result.stdout.rstrip("\n")
        return text


def main(argv: list[str] | None = None) -> int:
    """Entry point used by fzf's ``--preview`` command."""
    from .actions import build_registry
    from .config import load_settings
    from .host import detect_os

    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 2:
        print("usage: python -m omni.preview <kind> <label>", file=sys.stderr)
        return 2

    kind, label = argv[0], " ".join(argv[1:])
    ctx = ActionContext(os=detect_os(), settings=load_settings(), registry=build_registry())
    print(PreviewRenderer(ctx).render(kind, label))
    return 0


if __name__ == "__main__":
    sys.exit(main())
