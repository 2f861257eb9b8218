"""Command line entry point for omni."""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="omni",
        description="omni: an interactive menu of system utilities for macOS and Linux",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"omni {__version__}")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Write a debug log to the config directory",
    )
    return parser


def configure_logging(debug: bool) -> None:
    """Send log records to the debug log file when debugging, else drop them."""
    root = logging.getLogger("omni")
    root.handlers.clear()
    if not debug:
        root.addHandler(logging.NullHandler())
        root.propagate = False
        return

    from .config import get_log_path

    log_path = get_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    root.propagate = False
    logger.debug("omni %s starting", __version__)


def check_dependencies(ctx) -> None:
    """Make sure the tools omni cannot run without are present.

    Homebrew (macOS), fzf (when it is the picker backend) and bat are
    mandatory; shfmt is optional and only improves previews.

    Raises:
        MandatoryDependencyMissing: If a mandatory tool is missing and the
            user declines (or fails) to install it.
    """
    from .errors import MandatoryDependencyMissing
    from .interactive.prompts import ask_install
    from .types import OSIdentifier

    mandatory: list[tuple[str, str, str, str]] = []
    if ctx.os == OSIdentifier.MACOS:
        mandatory.append(("brew", "Homebrew", "Homebrew", "to install other tools"))
    if ctx.settings.picker == "fzf":
        mandatory.append((ctx.settings.fzf, "fzf", "fzf", "for interactive menus"))
    mandatory.append((ctx.settings.bat, "bat", "Bat", "for syntax highlighted previews"))

    for executable, program, install_action, purpose in mandatory:
        if ctx.is_installed(executable):
            continue
        if not ask_install(ctx, program, purpose, install_action, executable=executable):
            raise MandatoryDependencyMissing(program)

    shfmt = ctx.settings.shfmt
    if shfmt and not ctx.is_installed(shfmt):
        ask_install(ctx, "shfmt", "for formatted command previews", "shfmt")


def run(debug: bool | None = None) -> int:
    """Start an interactive session. Returns the exit code."""
    from .actions import build_registry
    from .config import load_settings
    from .context import ActionContext
    from .dispatcher import Dispatcher
    from .errors import MandatoryDependencyMissing
    from .host import detect_os
    from .interactive.core import configure_console, error
    from .picker import make_picker
    from .preview import PreviewRenderer
    from .runner import Runner
    from .session import SessionLoop
    from .types import OSIdentifier

    settings = load_settings(debug=debug)
    configure_logging(settings.debug)
    configure_console(settings.color)

    current_os = detect_os()
    if current_os == OSIdentifier.UNSUPPORTED:
        error("Unsupported operating system. omni runs on macOS and Linux.")
        return 1

    registry = build_registry()
    ctx = ActionContext(os=current_os, settings=settings, runner=Runner(), registry=registry)
    dispatcher = Dispatcher(registry, ctx)

    renderer = None
    if settings.picker == "menu":
        renderer = PreviewRenderer(ctx).render
    ctx.picker = make_picker(settings, renderer)

    try:
        check_dependencies(ctx)
        return SessionLoop(registry, dispatcher, ctx.picker, current_os).run()
    except MandatoryDependencyMissing as e:
        logger.info("mandatory dependency missing: %s", e.program)
        error(str(e))
        return 1


def main() -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        sys.exit(run(debug=args.debug))
    except KeyboardInterrupt:
        print()
        sys.exit(130)
