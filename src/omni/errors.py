"""Error types raised by the registry, dispatcher and installers.

Every in-session error is caught at the dispatcher boundary and shown to
the user as text. Only MandatoryDependencyMissing ends the process.
"""

from __future__ import annotations


class OmniError(RuntimeError):
    """Base error for omni operations."""


class NotFoundError(OmniError):
    """Raised when an action name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid selection: {name}")


class DuplicateNameError(OmniError):
    """Raised when registering an action whose name is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Action already registered: {name}")


class InvalidActionError(OmniError):
    """Raised when an action has no handler for macOS or Linux and no fallback."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Action has no macOS or Linux handler and no fallback: {name}")


class UnsupportedOSError(OmniError):
    """Raised when no handler applies to the current OS."""

    def __init__(self, action: str, os_name: str):
        self.action = action
        self.os_name = os_name
        super().__init__(f"Unsupported operating system ({os_name}) for: {action}")


class CommandFailed(OmniError):
    """Raised by the runner when an external command exits non-zero."""

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(f"'{' '.join(self.args_list)}' failed (exit {returncode}){detail}")


class HandlerFailed(OmniError):
    """Raised when a handler fails: non-zero exit, spawn error or exception."""

    def __init__(self, action: str, cause: BaseException | str):
        self.action = action
        self.cause = cause
        super().__init__(f"{action} failed: {cause}")


class NoPackageManagerError(OmniError):
    """Raised when no package manager and no fallback can install a program."""

    def __init__(self, program: str):
        self.program = program
        super().__init__(
            f"No supported package manager found. "
            f"Please install {program} manually from your distribution's package manager"
        )


class InstallVerificationFailed(OmniError):
    """Raised when the installer ran but the program is still not detectable."""

    def __init__(self, program: str):
        self.program = program
        super().__init__(
            f"Failed to install {program}: the installer finished but "
            f"'{program}' is still not on PATH"
        )


class ToolUnavailable(OmniError):
    """Raised when an action needs an external tool that is missing."""

    def __init__(self, tool: str, reason: str = ""):
        self.tool = tool
        super().__init__(reason or f"{tool} is not available")


class MandatoryDependencyMissing(OmniError):
    """Raised at startup when a required tool is missing and not installed."""

    def __init__(self, program: str):
        self.program = program
        super().__init__(f"{program} is required for this tool to function. Exiting.")
