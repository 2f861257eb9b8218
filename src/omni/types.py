"""Type definitions for omni.

Shared enums and dataclasses used across the codebase: the OS identifier,
action categories, the Action record itself, install specs and the outcome
values produced by the dispatcher and the picker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from .context import ActionContext


# Main menu entry that ends the session; never a registered action.
EXIT_LABEL = "Exit"


class OSIdentifier(str, Enum):
    """Host operating system families omni knows how to drive."""

    MACOS = "macOS"
    LINUX = "Linux"
    UNSUPPORTED = "Unsupported"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_system(cls, system: str) -> "OSIdentifier":
        """Map a ``platform.system()`` / ``uname`` value to an identifier."""
        if system == "Darwin":
            return cls.MACOS
        if system == "Linux":
            return cls.LINUX
        return cls.UNSUPPORTED


class Category(str, Enum):
    """Where an action shows up: the main menu or the program installer."""

    MENU = "menu"
    INSTALLABLE = "installable"

    def __str__(self) -> str:
        return self.value


class PackageVariant(str, Enum):
    """Homebrew package flavour."""

    FORMULA = "formula"
    CASK = "cask"

    def __str__(self) -> str:
        return self.value


class Outcome(str, Enum):
    """Result kinds reported back to the session loop."""

    SUCCESS = "success"
    ALREADY_INSTALLED = "already_installed"
    CANCELLED = "cancelled"
    FAILED = "failed"


# A handler receives the per-invocation context and may return a Result.
# Returning None means plain success.
Handler = Callable[["ActionContext"], "Result | None"]

# Linux fallback installers receive the context and the package name.
Fallback = Callable[["ActionContext", str], None]


@dataclass(frozen=True)
class InstallSpec:
    """How to install one program on each supported OS.

    Attributes:
        program: Executable name probed to decide whether it is installed.
        mac_package: Homebrew package name (defaults to ``program``).
        linux_package: Distribution package name (defaults to ``program``).
        variant: Homebrew formula or cask.
        linux_fallbacks: Installers tried in order when no Linux package
            manager is available.
    """

    program: str
    mac_package: str = ""
    linux_package: str = ""
    variant: PackageVariant = PackageVariant.FORMULA
    linux_fallbacks: tuple[Fallback, ...] = ()

    def __post_init__(self):
        if not self.mac_package:
            object.__setattr__(self, "mac_package", self.program)
        if not self.linux_package:
            object.__setattr__(self, "linux_package", self.program)


@dataclass(frozen=True)
class Action:
    """A named, dispatchable unit of functionality.

    Attributes:
        name: Unique label shown in menus.
        category: Main menu entry or installable program.
        handlers: Per-OS implementations.
        fallback: OS-agnostic implementation used when no exact handler exists.
        description: One-line summary for previews.
        interactive: True for actions that drive their own picker and hand
            control straight back to the main menu.
        steps: Per-OS command lines shown in the preview pane.
        install: Install recipe for installable actions.
    """

    name: str
    category: Category
    handlers: Mapping[OSIdentifier, Handler] = field(default_factory=dict)
    fallback: Handler | None = None
    description: str = ""
    interactive: bool = False
    steps: Mapping[OSIdentifier, tuple[str, ...]] = field(default_factory=dict)
    install: InstallSpec | None = None

    def handler_for(self, current_os: OSIdentifier) -> Handler | None:
        """Exact OS handler, then the fallback, else None."""
        handler = self.handlers.get(current_os)
        if handler is not None:
            return handler
        return self.fallback

    def steps_for(self, current_os: OSIdentifier) -> tuple[str, ...]:
        return tuple(self.steps.get(current_os, ()))


@dataclass(frozen=True)
class Result:
    """Outcome of dispatching one action."""

    outcome: Outcome
    action: str = ""
    message: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != Outcome.FAILED

    @classmethod
    def success(cls, message: str = "", action: str = "") -> "Result":
        return cls(Outcome.SUCCESS, action=action, message=message)

    @classmethod
    def already_installed(cls, message: str = "", action: str = "") -> "Result":
        return cls(Outcome.ALREADY_INSTALLED, action=action, message=message)

    @classmethod
    def cancelled(cls, message: str = "", action: str = "") -> "Result":
        return cls(Outcome.CANCELLED, action=action, message=message)

    @classmethod
    def failed(cls, error: Exception, action: str = "") -> "Result":
        return cls(Outcome.FAILED, action=action, message=str(error), error=error)

    def with_action(self, action: str) -> "Result":
        if self.action:
            return self
        return Result(self.outcome, action=action, message=self.message, error=self.error)


@dataclass(frozen=True)
class PickerResult:
    """What the user did with a picker."""

    selected: str | None = None
    cancelled: bool = False

    @classmethod
    def cancel(cls) -> "PickerResult":
        return cls(selected=None, cancelled=True)

    @classmethod
    def choose(cls, label: str) -> "PickerResult":
        return cls(selected=label, cancelled=False)


def to_dict(action: Action) -> dict[str, Any]:
    """Plain summary of an action, used in debug logging."""
    return {
        "name": action.name,
        "category": str(action.category),
        "handlers": sorted(str(os_id) for os_id in action.handlers),
        "fallback": action.fallback is not None,
        "interactive": action.interactive,
    }
