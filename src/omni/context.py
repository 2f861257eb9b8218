"""Per-invocation context handed to every handler."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from .config import Settings
from .host import WhichFn
from .runner import Runner
from .types import OSIdentifier

if TYPE_CHECKING:
    from .dispatcher import Dispatcher
    from .picker import Picker
    from .registry import ActionRegistry


def _default_console() -> Any:
    from .interactive.core import console

    return console


def _default_confirm(question: str, default: bool = True) -> bool:
    from .interactive.prompts import confirm

    return confirm(question, default=default)


@dataclass
class ActionContext:
    """Everything a handler may touch.

    Attributes:
        os: OS the handler runs for.
        settings: Resolved runtime settings.
        runner: Spawns external tools.
        picker: Interactive picker for self-interactive actions.
        registry: The action registry.
        dispatcher: Dispatcher, for handlers that trigger other actions.
        which: PATH lookup.
        probe: Optional "is installed" probe overriding ``which``.
        confirm: Yes/no prompt.
        console: Rich console (or proxy) for output.
    """

    os: OSIdentifier
    settings: Settings = field(default_factory=Settings)
    runner: Runner = field(default_factory=Runner)
    picker: "Picker | None" = None
    registry: "ActionRegistry | None" = None
    dispatcher: "Dispatcher | None" = None
    which: WhichFn = shutil.which
    probe: Callable[[str], bool] | None = None
    confirm: Callable[..., bool] = _default_confirm
    console: Any = field(default_factory=_default_console)

    def is_installed(self, program: str) -> bool:
        """Probe whether ``program`` is currently available."""
        if self.probe is not None:
            return self.probe(program)
        return self.which(program) is not None
