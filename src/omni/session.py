"""Main menu session loop.

States and transitions:

    MAIN_MENU --"Exit"--> EXIT
    MAIN_MENU --cancel--> MAIN_MENU
    MAIN_MENU --action--> EXECUTING
    EXECUTING --self-interactive action--> MAIN_MENU
    EXECUTING --other action--> AWAITING_CONFIRMATION
    AWAITING_CONFIRMATION --any key--> MAIN_MENU
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from .dispatcher import Dispatcher
from .errors import NotFoundError
from .interactive.pause import wait_for_continue
from .interactive.prompts import show_result
from .picker import Picker
from .registry import ActionRegistry
from .types import EXIT_LABEL, Category, OSIdentifier

logger = logging.getLogger(__name__)

MAIN_PROMPT = "Select a function: "


class State(str, Enum):
    """Session loop states."""

    MAIN_MENU = "main_menu"
    EXECUTING = "executing"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXIT = "exit"


class SessionLoop:
    """Drives the main menu until the user picks Exit."""

    def __init__(
        self,
        registry: ActionRegistry,
        dispatcher: Dispatcher,
        picker: Picker,
        current_os: OSIdentifier,
        wait: Callable[[], None] = wait_for_continue,
    ):
        self.registry = registry
        self.dispatcher = dispatcher
        self.picker = picker
        self.current_os = current_os
        self.wait = wait
        self.state = State.MAIN_MENU
        self.pending: str | None = None

    def menu_labels(self) -> list[str]:
        """Main menu entries: sorted menu actions, then Exit."""
        return [*self.registry.list_by_category(Category.MENU), EXIT_LABEL]

    def step(self) -> State:
        """Perform one transition and return the new state."""
        if self.state == State.MAIN_MENU:
            self.state = self._main_menu()
        elif self.state == State.EXECUTING:
            self.state = self._execute()
        elif self.state == State.AWAITING_CONFIRMATION:
            self.wait()
            self.state = State.MAIN_MENU
        return self.state

    def run(self) -> int:
        """Loop until Exit. Returns the process exit code."""
        while self.state != State.EXIT:
            self.step()
        return 0

    def _main_menu(self) -> State:
        result = self.picker.pick(self.menu_labels(), prompt=MAIN_PROMPT, preview="menu")
        if result.cancelled or not result.selected:
            # Escape at the top level never exits
            return State.MAIN_MENU
        if result.selected == EXIT_LABEL:
            return State.EXIT
        self.pending = result.selected
        return State.EXECUTING

    def _execute(self) -> State:
        name = self.pending or ""
        self.pending = None
        logger.info("executing %s", name)

        result = self.dispatcher.execute(name, self.current_os)
        show_result(result)

        if isinstance(result.error, NotFoundError):
            return State.MAIN_MENU
        action = self.registry.lookup(name)
        if action.interactive:
            return State.MAIN_MENU
        return State.AWAITING_CONFIRMATION
