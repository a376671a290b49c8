"""
Introspection — Parameter schemas and help for resolved commands

Two implementations behind one interface:
- ScriptIntrospector: argparse declarations of Python scripts
- SidecarIntrospector: metadata.<name>.yaml beside native executables

Usage:
    from stubinvoke.introspection import introspect, describe

    schema = introspect(command)     # never raises
    help = describe(command)
"""

import logging
from typing import Optional

from ..core.commands import CommandFile, CommandKind
from .base import ParameterIntrospector
from .schema import CommandHelp, Parameter, ParameterSchema
from .script import COMMON_PARAMETERS, ScriptIntrospector, is_common_parameter
from .sidecar import SidecarIntrospector, find_sidecar


logger = logging.getLogger(__name__)

INTROSPECTORS = {
    CommandKind.SCRIPT: ScriptIntrospector,
    CommandKind.EXECUTABLE: SidecarIntrospector,
}


def get_introspector(command: CommandFile) -> ParameterIntrospector:
    """Introspector matching the command's kind."""
    return INTROSPECTORS[command.kind]()


def introspect(command: Optional[CommandFile]) -> ParameterSchema:
    """Parameter schema of a command; empty for None or on any failure."""
    if command is None:
        return ParameterSchema.empty()
    try:
        return get_introspector(command).introspect(command)
    except Exception as e:
        logger.debug("Introspection failed for %s: %s", command.path, e)
        return ParameterSchema.empty()


def describe(command: Optional[CommandFile]) -> Optional[CommandHelp]:
    """Structured help of a command; None for None, empty help on failure."""
    if command is None:
        return None
    try:
        return get_introspector(command).describe(command)
    except Exception as e:
        logger.debug("Help extraction failed for %s: %s", command.path, e)
        return CommandHelp(name=command.name)


__all__ = [
    'ParameterIntrospector', 'ScriptIntrospector', 'SidecarIntrospector',
    'Parameter', 'ParameterSchema', 'CommandHelp',
    'COMMON_PARAMETERS', 'is_common_parameter', 'find_sidecar',
    'get_introspector', 'introspect', 'describe',
]
