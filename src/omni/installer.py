"""Program installation across Homebrew and Linux package managers.

``install_program`` is the shared recipe behind every installable action:
probe, install through the first usable package manager (or the
program's fallbacks), then probe again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Sequence, TypeVar

from .errors import InstallVerificationFailed, NoPackageManagerError, UnsupportedOSError
from .host import LINUX_INSTALL_MANAGERS, detect_package_manager
from .types import InstallSpec, OSIdentifier, PackageVariant, Result

if TYPE_CHECKING:
    from .context import ActionContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


def homebrew_command(package: str, variant: PackageVariant = PackageVariant.FORMULA) -> list[str]:
    """Get the Homebrew install command for a formula or cask."""
    if variant == PackageVariant.CASK:
        return ["brew", "install", "--cask", package]
    return ["brew", "install", package]


def linux_install_commands(manager: str, package: str) -> list[list[str]]:
    """Get the install commands for a Linux package manager, run in order."""
    commands: dict[str, list[list[str]]] = {
        "apt": [["sudo", "apt", "update"], ["sudo", "apt", "install", "-y", package]],
        "dnf": [["sudo", "dnf", "install", "-y", package]],
        "pacman": [["sudo", "pacman", "-S", package]],
        "brew": [["brew", "install", package]],
    }
    return commands.get(manager, [])


def first_success(candidates: Sequence[Callable[[], T]]) -> T:
    """Try candidates in order until one returns without raising.

    Raises:
        The last candidate's exception when every candidate fails.
        ValueError: If there are no candidates.
    """
    if not candidates:
        raise ValueError("No candidates to try")

    for candidate in candidates[:-1]:
        try:
            return candidate()
        except Exception as e:
            logger.debug("candidate %r failed: %s", candidate, e)
    return candidates[-1]()


def plan_install(spec: InstallSpec, ctx: "ActionContext") -> list[str]:
    """Describe, as shell lines, what ``install_program`` would run here."""
    if ctx.os == OSIdentifier.MACOS:
        return [" ".join(homebrew_command(spec.mac_package, spec.variant))]
    if ctx.os == OSIdentifier.LINUX:
        manager = detect_package_manager(LINUX_INSTALL_MANAGERS, ctx.which)
        if manager:
            return [" && ".join(" ".join(cmd) for cmd in linux_install_commands(manager, spec.linux_package))]
        if spec.linux_fallbacks:
            return [f"# fallback: {_fallback_name(fb)}" for fb in spec.linux_fallbacks]
        return [f"# no package manager found; install {spec.program} manually"]
    return ["# unsupported operating system"]


def _fallback_name(fallback: Callable) -> str:
    doc = (getattr(fallback, "__doc__", "") or "").strip()
    if doc:
        return doc.splitlines()[0]
    return getattr(fallback, "__name__", repr(fallback))


def install_program(spec: InstallSpec, ctx: "ActionContext") -> Result:
    """Install a program unless it is already present.

    Args:
        spec: What to install on each OS.
        ctx: Handler context (OS, runner, probes, console).

    Returns:
        ``Result.already_installed`` when the probe finds the program first,
        ``Result.success`` when the post-install probe finds it.

    Raises:
        UnsupportedOSError: On an OS without a package manager mapping.
        NoPackageManagerError: On Linux with no package manager and no fallback.
        InstallVerificationFailed: If installation ran but the program is
            still not detectable.
        CommandFailed: If a package manager command exits non-zero.
    """
    if ctx.is_installed(spec.program):
        return Result.already_installed(f"{spec.program} is already installed!")

    ctx.console.print(f"Installing {spec.program}...")

    if ctx.os == OSIdentifier.MACOS:
        ctx.runner.run(homebrew_command(spec.mac_package, spec.variant))
    elif ctx.os == OSIdentifier.LINUX:
        manager = detect_package_manager(LINUX_INSTALL_MANAGERS, ctx.which)
        if manager:
            logger.info("installing %s via %s", spec.linux_package, manager)
            for cmd in linux_install_commands(manager, spec.linux_package):
                ctx.runner.run(cmd)
        elif spec.linux_fallbacks:
            ctx.console.print(
                f"Package managers don't have {spec.program}, trying fallback installation..."
            )
            first_success(
                [
                    (lambda fb=fb: fb(ctx, spec.linux_package))
                    for fb in spec.linux_fallbacks
                ]
            )
        else:
            raise NoPackageManagerError(spec.program)
    else:
        raise UnsupportedOSError(spec.program, str(ctx.os))

    if not ctx.is_installed(spec.program):
        raise InstallVerificationFailed(spec.program)
    return Result.success(f"{spec.program} installed successfully!")
