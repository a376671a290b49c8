"""
ParameterIntrospector — Capability interface for schema extraction

Completion, help and the invoker depend only on this interface.
Implementations must never raise: an unreadable command yields an empty
schema so completion degrades quietly mid-keystroke.
"""

from abc import ABC, abstractmethod

from ..core.commands import CommandFile
from .schema import CommandHelp, ParameterSchema


class ParameterIntrospector(ABC):
    """Extracts declared parameters and help text from a command."""

    @abstractmethod
    def introspect(self, command: CommandFile) -> ParameterSchema:
        """Declared parameters, in declaration order."""
        pass

    @abstractmethod
    def describe(self, command: CommandFile) -> CommandHelp:
        """Structured help; empty CommandHelp when nothing is documented."""
        pass
