"""Helpers shared by the action catalog modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Mapping, Sequence, Union

from ..errors import ToolUnavailable
from ..interactive.core import console, info
from ..types import Action, Category, Handler, OSIdentifier, PickerResult, Result

if TYPE_CHECKING:
    from ..context import ActionContext

MAC = OSIdentifier.MACOS
LINUX = OSIdentifier.LINUX

Operation = Union[str, Callable[["ActionContext"], None]]


def probe(ctx: "ActionContext", args: Sequence[str]) -> str:
    """Bounded, read-only command for previews; empty string on failure."""
    result = ctx.runner.capture(args, timeout=ctx.settings.preview_timeout)
    return result.stdout if result.ok else ""


def head(text: str, count: int) -> str:
    return "\n".join(text.splitlines()[:count])


def section(title: str, body: str, underline: str = "=") -> str:
    """Titled block for preview text."""
    body = body.rstrip("\n") or "(not available)"
    return f"{title}\n{underline * len(title)}\n{body}\n"


def read_text(path: str) -> str:
    try:
        with open(path) as f:
            return f.read().strip()
    except OSError:
        return ""


def browse(
    ctx: "ActionContext",
    items: Sequence[str],
    *,
    prompt: str,
    header: str,
    preview: str,
) -> PickerResult:
    """Show a sub-picker with the configured height."""
    if ctx.picker is None:
        raise ToolUnavailable("picker", "No interactive picker is configured")
    return ctx.picker.pick(
        items,
        prompt=prompt,
        header=header,
        preview=preview,
        height=ctx.settings.picker_height,
    )


def echo(text: str) -> None:
    """Print external tool output verbatim."""
    if text.strip():
        console.print(text.rstrip("\n"), markup=False, highlight=False)


def platform_operation(title: str, done: str, operation: Operation) -> Handler:
    """Handler that announces ``title``, runs ``operation`` and reports ``done``.

    ``operation`` is either a shell snippet or a callable taking the context.
    """

    def handler(ctx: "ActionContext") -> Result:
        info(f"{title}...")
        if callable(operation):
            operation(ctx)
        else:
            ctx.runner.shell(operation)
        return Result.success(done)

    return handler


def menu_action(
    name: str,
    description: str,
    *,
    mac: Handler | None = None,
    linux: Handler | None = None,
    fallback: Handler | None = None,
    interactive: bool = False,
    steps: Mapping[OSIdentifier, Sequence[str]] | None = None,
) -> Action:
    """Build a main menu Action."""
    handlers: dict[OSIdentifier, Handler] = {}
    if mac is not None:
        handlers[MAC] = mac
    if linux is not None:
        handlers[LINUX] = linux
    return Action(
        name=name,
        category=Category.MENU,
        handlers=handlers,
        fallback=fallback,
        description=description,
        interactive=interactive,
        steps={os_id: tuple(lines) for os_id, lines in (steps or {}).items()},
    )
