"""Host detection: OS family, executables on PATH, package managers."""

from __future__ import annotations

import platform
import shutil
from typing import Callable, Sequence

from .types import OSIdentifier

WhichFn = Callable[[str], "str | None"]

# Tried in order for installs; first available wins.
LINUX_INSTALL_MANAGERS = ("apt", "dnf", "pacman", "brew")

# Tried in order for system upgrades and package listings.
LINUX_SYSTEM_MANAGERS = ("apt", "yum", "dnf", "pacman")

_current_os: OSIdentifier | None = None


def detect_os() -> OSIdentifier:
    """Detect the OS family once per process."""
    global _current_os
    if _current_os is None:
        _current_os = OSIdentifier.from_system(platform.system())
    return _current_os


def detect_package_manager(
    managers: Sequence[str] = LINUX_INSTALL_MANAGERS,
    which: WhichFn = shutil.which,
) -> str | None:
    """Return the first package manager from ``managers`` found on PATH."""
    for name in managers:
        if which(name):
            return name
    return None
