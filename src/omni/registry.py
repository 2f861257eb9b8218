"""Action registry for omni.

Holds every menu entry and installable program. The registry is declared
in code and rebuilt at every start; nothing is discovered at runtime.
"""

from __future__ import annotations

import logging
from typing import Iterator

from .errors import DuplicateNameError, InvalidActionError, NotFoundError
from .types import Action, Category, OSIdentifier, to_dict

logger = logging.getLogger(__name__)

_SUPPORTED = (OSIdentifier.MACOS, OSIdentifier.LINUX)


class ActionRegistry:
    """In-memory catalog of named actions."""

    def __init__(self, actions: list[Action] | None = None):
        """Initialize, optionally registering ``actions`` in order."""
        self._actions: dict[str, Action] = {}
        for action in actions or []:
            self.register(action)

    def register(self, action: Action) -> Action:
        """Add an action to the registry.

        Raises:
            DuplicateNameError: If the name is already registered.
            InvalidActionError: If no handler covers macOS or Linux and
                there is no fallback.
        """
        if action.name in self._actions:
            raise DuplicateNameError(action.name)
        if action.fallback is None and not any(os_id in action.handlers for os_id in _SUPPORTED):
            raise InvalidActionError(action.name)

        self._actions[action.name] = action
        logger.debug("registered %s", to_dict(action))
        return action

    def lookup(self, name: str) -> Action:
        """Get an action by name.

        Raises:
            NotFoundError: If no action has that name.
        """
        try:
            return self._actions[name]
        except KeyError:
            raise NotFoundError(name) from None

    def has(self, name: str) -> bool:
        return name in self._actions

    def list_by_category(self, category: Category) -> list[str]:
        """Names of actions in a category, sorted lexicographically."""
        return sorted(name for name, action in self._actions.items() if action.category == category)

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions.values())
