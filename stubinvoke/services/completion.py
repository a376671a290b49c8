"""
Completion — Query functions a host shell calls on every keystroke

All three functions are pure queries and never raise: incomplete input,
unknown stubs, unreadable folders and broken scripts all yield empty
results.
"""

import logging
from typing import List, Optional

from ..core.context import EngineContext
from ..core.discovery import command_names, discover_stub
from ..core.resolver import CommandResolver
from ..core.stubs import RESERVED_VERBS
from ..introspection import introspect
from ..introspection.schema import ParameterSchema


logger = logging.getLogger(__name__)


def _matches(candidate: str, partial: Optional[str]) -> bool:
    if not partial:
        return True
    return candidate.lower().startswith(partial.lower())


def list_stub_names(
    context: EngineContext,
    partial: Optional[str] = None,
    include_verbs: bool = False
) -> List[str]:
    """Registered stub names starting with partial (case-insensitive)."""
    try:
        names = [n for n in context.registry.names() if _matches(n, partial)]
        if include_verbs:
            verbs = [v for v in RESERVED_VERBS if _matches(v, partial)]
            names = verbs + [n for n in names if n not in verbs]
        return names
    except Exception as e:
        logger.debug("Stub completion failed: %s", e)
        return []


def list_command_names(
    context: EngineContext,
    stub: str,
    partial: Optional[str] = None
) -> List[str]:
    """Visible command names of a stub, prefix-stripped and de-duplicated."""
    try:
        names = command_names(discover_stub(stub, context))
        return [n for n in names if _matches(n, partial)]
    except Exception as e:
        logger.debug("Command completion failed for %r: %s", stub, e)
        return []


def list_parameters(context: EngineContext, stub: str, command: str) -> ParameterSchema:
    """Declared parameters of the command that (stub, command) resolves to."""
    try:
        result = CommandResolver(context).resolve(stub, command)
        return introspect(result.command)
    except Exception as e:
        logger.debug("Parameter completion failed for %r %r: %s", stub, command, e)
        return ParameterSchema.empty()


def complete_line(context: EngineContext, words: List[str]) -> List[str]:
    """
    Candidates for the last word of a partially typed command line.

    words excludes the program name; the last element is the word being
    completed ('' right after a space).
    """
    try:
        if not words:
            words = [""]
        if len(words) == 1:
            return list_stub_names(context, words[0], include_verbs=True)
        if len(words) == 2:
            if words[0] in RESERVED_VERBS:
                if words[0] in ("help", "update"):
                    return list_stub_names(context, words[1])
                return []
            return list_command_names(context, words[0], words[1])

        if words[0] == "help" and len(words) == 3:
            return list_command_names(context, words[1], words[2])
        if words[0] in RESERVED_VERBS:
            return []

        current = words[-1]
        if current and not current.startswith("-"):
            return []
        schema = list_parameters(context, words[0], words[1])
        return [f for f in schema.flags() if _matches(f, current)]
    except Exception as e:
        logger.debug("Line completion failed for %r: %s", words, e)
        return []
