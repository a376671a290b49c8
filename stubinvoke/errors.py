"""
Errors — User-facing failures with actionable hints

Every error carries a short message and an optional hint line.
The CLI prints both; completion paths never let these escape.

Taxonomy:
- Configuration: stub not registered, reserved stub name, bad config value
- Resolution: command not found in a known stub
- Invocation: child exited non-zero, or could not be launched
- Usage: malformed verb arguments
"""

from typing import List, Optional


class StubInvokeError(Exception):
    """Base class for all errors the CLI reports to the user."""

    hint: Optional[str] = None

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        """Message plus hint, ready for stderr."""
        lines = [f"Error: {self.message}"]
        if self.hint:
            lines.append(f"  {self.hint}")
        return "\n".join(lines)


# =============================================================================
# Configuration
# =============================================================================

class ConfigError(StubInvokeError):
    """Invalid configuration key or value."""


class StubNotFoundError(StubInvokeError):
    """Stub name is not in the registry."""

    def __init__(self, stub: str):
        super().__init__(
            f"Stub '{stub}' is not registered.",
            hint="Run: stubinvoke  (no arguments) to list registered stubs"
        )
        self.stub = stub


class ReservedStubNameError(StubInvokeError):
    """Stub name collides with a reserved verb."""

    def __init__(self, stub: str):
        super().__init__(
            f"'{stub}' is a reserved verb and cannot be used as a stub name.",
            hint="Choose another name; reserved verbs always take precedence."
        )
        self.stub = stub


# =============================================================================
# Resolution
# =============================================================================

class CommandNotFoundError(StubInvokeError):
    """Command does not exist (or is not visible) in a known stub."""

    def __init__(self, stub: str, command: str, suggestions: Optional[List[str]] = None):
        self.stub = stub
        self.command = command
        self.suggestions = list(suggestions or [])
        hint = None
        if self.suggestions:
            hint = "Did you mean: " + ", ".join(self.suggestions) + "?"
        else:
            hint = f"Run: stubinvoke {stub}  to list its commands"
        super().__init__(f"Command '{command}' not found in stub '{stub}'.", hint=hint)


# =============================================================================
# Invocation
# =============================================================================

class InvocationError(StubInvokeError):
    """Base for child process failures."""

    exit_code: int = 1


class CommandFailedError(InvocationError):
    """
    Child process exited with a non-zero status.

    A child killed by signal N reports returncode -N; exit_code follows
    the shell convention of 128 + N so it stays a valid process status.
    """

    def __init__(self, command: str, returncode: int):
        if returncode < 0:
            message = f"'{command}' was terminated by signal {-returncode} (exit code {returncode})."
        else:
            message = f"'{command}' failed with exit code {returncode}."
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.exit_code = 128 - returncode if returncode < 0 else returncode


class CommandLaunchError(InvocationError):
    """Child process could not be started."""

    exit_code = 127

    def __init__(self, command: str, reason: str):
        super().__init__(f"Could not launch '{command}': {reason}")
        self.command = command
        self.reason = reason


# =============================================================================
# Usage
# =============================================================================

class UsageError(StubInvokeError):
    """Verb called with missing or malformed arguments."""

    exit_code = 2
