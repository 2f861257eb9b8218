"""Pytest fixtures for omni tests."""

from __future__ import annotations

from io import StringIO
from typing import Callable, Sequence

import pytest
from rich.console import Console

from omni.config import Settings
from omni.context import ActionContext
from omni.errors import CommandFailed
from omni.interactive.core import set_console
from omni.runner import CommandResult, Runner
from omni.types import OSIdentifier, PickerResult


class FakeHost:
    """PATH lookups answered from a set of installed executables."""

    def __init__(self, installed: Sequence[str] = ()):
        self.installed = set(installed)

    def which(self, name: str) -> str | None:
        if name in self.installed:
            return f"/usr/bin/{name}"
        return None


class FakeRunner(Runner):
    """Records commands instead of spawning them.

    ``outputs`` maps an argument tuple to captured stdout; ``failing`` holds
    argument tuples that exit non-zero; ``on_run`` is called for every
    ``run``/``shell`` invocation so tests can simulate side effects.
    """

    def __init__(self):
        self.calls: list[list[str]] = []
        self.captures: list[list[str]] = []
        self.outputs: dict[tuple[str, ...], str] = {}
        self.failing: set[tuple[str, ...]] = set()
        self.on_run: Callable[[list[str]], None] | None = None

    def run(self, args, *, check=True, cwd=None) -> CommandResult:
        cmd = list(args)
        self.calls.append(cmd)
        if self.on_run is not None:
            self.on_run(cmd)
        returncode = 1 if tuple(cmd) in self.failing else 0
        if check and returncode:
            raise CommandFailed(cmd, returncode, "boom")
        return CommandResult(cmd, returncode)

    def capture(self, args, *, timeout=None, input=None) -> CommandResult:
        cmd = list(args)
        self.captures.append(cmd)
        if tuple(cmd) in self.failing:
            return CommandResult(cmd, 1)
        if tuple(cmd) in self.outputs:
            return CommandResult(cmd, 0, self.outputs[tuple(cmd)])
        return CommandResult(cmd, 127, stderr=f"Command not found: {cmd[0]}")

    @property
    def spawned(self) -> list[list[str]]:
        """Every command run or captured, in order."""
        return self.calls + self.captures


class FakePicker:
    """Returns scripted results and records what it was asked to show."""

    def __init__(self, results: Sequence[PickerResult] = ()):
        self.results = list(results)
        self.shown: list[tuple[list[str], dict]] = []

    def pick(self, items, *, prompt="> ", header=None, preview=None, height=None) -> PickerResult:
        self.shown.append(
            (list(items), {"prompt": prompt, "header": header, "preview": preview, "height": height})
        )
        if not self.results:
            return PickerResult.cancel()
        return self.results.pop(0)


@pytest.fixture(autouse=True)
def output():
    """Route all console output to a buffer."""
    buffer = StringIO()
    set_console(Console(file=buffer, force_terminal=False, width=200))
    yield buffer
    set_console(None)


@pytest.fixture
def host():
    return FakeHost(["apt"])


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def picker():
    return FakePicker()


@pytest.fixture
def answers():
    """Answers given to yes/no prompts, consumed in order (default: no)."""
    return []


@pytest.fixture
def ctx(host, runner, picker, answers):
    def confirm(question, default=True):
        return answers.pop(0) if answers else False

    return ActionContext(
        os=OSIdentifier.LINUX,
        settings=Settings(),
        runner=runner,
        picker=picker,
        which=host.which,
        confirm=confirm,
    )
