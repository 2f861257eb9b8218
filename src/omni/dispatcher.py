"""Dispatcher: resolve an action for the current OS and run it.

Resolution order is the exact OS handler, then the action's fallback, else
UnsupportedOSError. Whatever the handler does wrong comes back as a failed
Result; nothing raised by a handler escapes ``execute``.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .context import ActionContext
from .errors import CommandFailed, HandlerFailed, OmniError, UnsupportedOSError
from .installer import install_program
from .registry import ActionRegistry
from .types import Handler, InstallSpec, OSIdentifier, Result

logger = logging.getLogger(__name__)


class Dispatcher:
    """Runs registered actions."""

    def __init__(self, registry: ActionRegistry, context: ActionContext):
        self.registry = registry
        self.context = context
        if context.registry is None:
            context.registry = registry
        if context.dispatcher is None:
            context.dispatcher = self

    def resolve(self, name: str, current_os: OSIdentifier) -> Handler:
        """Pick the handler for ``name`` on ``current_os``.

        Raises:
            NotFoundError: If the action is not registered.
            UnsupportedOSError: If neither an OS handler nor a fallback exists.
        """
        action = self.registry.lookup(name)
        handler = action.handler_for(current_os)
        if handler is None:
            raise UnsupportedOSError(name, str(current_os))
        return handler

    def _context_for(self, current_os: OSIdentifier) -> ActionContext:
        if current_os == self.context.os:
            return self.context
        return replace(self.context, os=current_os)

    def execute(self, name: str, current_os: OSIdentifier | None = None) -> Result:
        """Resolve and invoke an action.

        Args:
            name: Registered action name.
            current_os: OS to dispatch for (defaults to the context's OS).

        Returns:
            Result. Failures carry NotFoundError, UnsupportedOSError,
            NoPackageManagerError, InstallVerificationFailed, ToolUnavailable
            or HandlerFailed as ``error``.
        """
        current_os = current_os or self.context.os
        try:
            handler = self.resolve(name, current_os)
        except OmniError as e:
            logger.info("cannot dispatch %s on %s: %s", name, current_os, e)
            return Result.failed(e, action=name)

        logger.debug("dispatching %s on %s", name, current_os)
        try:
            outcome = handler(self._context_for(current_os))
        except CommandFailed as e:
            return Result.failed(HandlerFailed(name, e), action=name)
        except OmniError as e:
            return Result.failed(e, action=name)
        except Exception as e:
            logger.exception("handler for %s raised", name)
            return Result.failed(HandlerFailed(name, e), action=name)

        if outcome is None:
            return Result.success(action=name)
        return outcome.with_action(name)

    def install_program(self, spec: InstallSpec, current_os: OSIdentifier | None = None) -> Result:
        """Run the install recipe directly, with the same error boundary."""
        current_os = current_os or self.context.os
        try:
            return install_program(spec, self._context_for(current_os)).with_action(spec.program)
        except CommandFailed as e:
            return Result.failed(HandlerFailed(spec.program, e), action=spec.program)
        except OmniError as e:
            return Result.failed(e, action=spec.program)
        except Exception as e:
            logger.exception("install of %s raised", spec.program)
            return Result.failed(HandlerFailed(spec.program, e), action=spec.program)
