"""Interactive pickers.

A picker shows a filterable list and returns what the user chose. The
default backend pipes the labels into fzf; filtering and key handling are
entirely fzf's. Preview panes are named by a preview kind so that fzf, a
separate process, can call back into ``python -m omni.preview``.

A second backend built on simple_term_menu is available for hosts without
fzf (``picker: menu`` in the config file).
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import sys
from typing import Callable, Protocol, Sequence

from simple_term_menu import TerminalMenu

from .config import Settings
from .errors import MandatoryDependencyMissing
from .host import WhichFn
from .interactive.core import error, muted
from .interactive.theme import terminal_menu_style_kwargs
from .preview import preview_language
from .types import PickerResult

logger = logging.getLogger(__name__)

# fzf exit codes
FZF_OK = 0
FZF_NO_MATCH = 1
FZF_ERROR = 2
FZF_INTERRUPTED = 130

NO_ITEMS_MESSAGE = "No items to choose from"


class Picker(Protocol):
    """Anything that can present labels and return a selection."""

    def pick(
        self,
        items: Sequence[str],
        *,
        prompt: str = "> ",
        header: str | None = None,
        preview: str | None = None,
        height: str | None = None,
    ) -> PickerResult: ...


def _clean(items: Sequence[str]) -> list[str]:
    return [item for item in items if item and item.strip()]


class FzfPicker:
    """Picker backed by an fzf subprocess."""

    def __init__(self, settings: Settings, which: WhichFn = shutil.which):
        self.settings = settings
        self.which = which

    def preview_command(self, kind: str) -> str:
        """Shell command fzf runs for each highlighted line."""
        command = f"{shlex.quote(sys.executable)} -m omni.preview {shlex.quote(kind)} {{}}"
        if self.settings.bat and self.which(self.settings.bat):
            command += (
                f" | {shlex.quote(self.settings.bat)} --language={preview_language(kind)}"
                f" --style={self.settings.bat_style} --color=always"
            )
        return command

    def build_command(
        self,
        *,
        prompt: str,
        header: str | None,
        preview: str | None,
        height: str | None,
    ) -> list[str]:
        """Build the fzf argument list."""
        cmd = [self.settings.fzf, "-i", f"--prompt={prompt}", "--reverse"]
        if height:
            cmd.append(f"--height={height}")
        if header:
            cmd.append(f"--header={header}")
        if preview:
            cmd.extend(
                [
                    "--preview",
                    self.preview_command(preview),
                    f"--preview-window={self.settings.preview_window}",
                ]
            )
        return cmd

    def pick(
        self,
        items: Sequence[str],
        *,
        prompt: str = "> ",
        header: str | None = None,
        preview: str | None = None,
        height: str | None = None,
    ) -> PickerResult:
        """Show ``items`` in fzf and block until the user selects or cancels.

        Returns:
            PickerResult; escape, Ctrl+C inside fzf, no match and an empty
            list all come back as cancelled.

        Raises:
            MandatoryDependencyMissing: If the fzf executable cannot be started.
        """
        labels = _clean(items)
        if not labels:
            muted(NO_ITEMS_MESSAGE)
            return PickerResult.cancel()

        cmd = self.build_command(prompt=prompt, header=header, preview=preview, height=height)
        logger.debug("fzf: %s", cmd)
        try:
            completed = subprocess.run(
                cmd,
                input="\n".join(labels) + "\n",
                stdout=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError:
            raise MandatoryDependencyMissing(self.settings.fzf) from None

        if completed.returncode == FZF_OK:
            selected = (completed.stdout or "").rstrip("\n")
            if selected:
                return PickerResult.choose(selected)
            return PickerResult.cancel()

        if completed.returncode == FZF_ERROR:
            logger.warning("fzf exited with an error: %s", cmd)
            error("fzf failed to start the picker")
        return PickerResult.cancel()


class MenuPicker:
    """Picker backed by simple_term_menu, with an in-process preview."""

    def __init__(self, renderer: Callable[[str, str], str] | None = None):
        self.renderer = renderer

    def pick(
        self,
        items: Sequence[str],
        *,
        prompt: str = "> ",
        header: str | None = None,
        preview: str | None = None,
        height: str | None = None,
    ) -> PickerResult:
        labels = _clean(items)
        if not labels:
            muted(NO_ITEMS_MESSAGE)
            return PickerResult.cancel()

        kwargs = {}
        if preview and self.renderer is not None:
            renderer = self.renderer
            kwargs["preview_command"] = lambda label: renderer(preview, label)
            kwargs["preview_size"] = 0.6

        title = prompt if not header else f"{header}\n{prompt}"
        menu = TerminalMenu(
            labels,
            title=title,
            menu_cursor="❯ ",
            quit_keys=("q", "\x1b"),
            search_key="/",
            show_search_hint=True,
            **terminal_menu_style_kwargs(),
            **kwargs,
        )
        index = menu.show()
        if index is None:
            return PickerResult.cancel()
        return PickerResult.choose(labels[index])


def make_picker(settings: Settings, renderer: Callable[[str, str], str] | None = None) -> Picker:
    """Build the picker backend selected in the settings."""
    if settings.picker == "menu":
        return MenuPicker(renderer)
    return FzfPicker(settings)
