"""
Commands — Reserved verbs with self-registration

Each verb module:
1. Defines XxxCommand class (handler implementation)
2. Exports register_parser(subparsers) to configure its argparse
3. Exports handle(cli, args) returning the process exit status

Verbs are intercepted before stub resolution: a stub registered under a
verb's name is shadowed. Adding a verb means adding its module here and
its name to RESERVED_VERBS.
"""

import importlib
import logging
from typing import Dict, Callable, Any, List, Set

from ..core.stubs import RESERVED_VERBS
from .base import BaseCommand


logger = logging.getLogger(__name__)

# Verb modules that participate in auto-registration
# Order determines help display order
VERB_MODULES = [
    'search_cmd',
    'help_cmd',
    'update_cmd',
]

# Handler registry: verb -> handle function
_handlers: Dict[str, Callable] = {}

# Verbs whose arguments are taken literally, even when they look like options
_literal_verbs: Set[str] = set()


def register_all(subparsers) -> None:
    """
    Register every verb parser and handler.

    Args:
        subparsers: argparse subparsers object from the verb parser
    """
    _handlers.clear()
    _literal_verbs.clear()

    for module_name in VERB_MODULES:
        module = importlib.import_module(f'.{module_name}', __package__)

        if hasattr(module, 'register_parser'):
            module.register_parser(subparsers)

        if hasattr(module, 'handle'):
            verb = getattr(module, 'COMMAND_NAME', None) or module_name.replace('_cmd', '')
            _handlers[verb] = module.handle
            if getattr(module, 'LITERAL_ARGS', False):
                _literal_verbs.add(verb)
            logger.debug("Registered verb %r", verb)


def is_verb(word: str) -> bool:
    """True when word names a reserved verb (case-insensitive)."""
    return bool(word) and word.lower() in RESERVED_VERBS


def verb_argv(verb: str, args: List[str]) -> List[str]:
    """
    Argument vector for the verb parser.

    For literal verbs everything after the verb is fenced behind '--', so
    `search --dry-run` searches for "--dry-run" instead of failing as an
    unknown option. A '--' the user typed first is not doubled.
    """
    verb = verb.lower()
    if verb not in _literal_verbs:
        return [verb] + list(args)
    if args and args[0] == '--':
        args = args[1:]
    return [verb, '--'] + list(args)


def dispatch(verb: str, cli: Any, args: Any) -> int:
    """
    Dispatch a verb to its registered handler.

    Returns:
        Exit status from the handler

    Raises:
        KeyError: If verb not registered
    """
    verb = verb.lower()
    if verb not in _handlers:
        raise KeyError(f"Unknown verb: {verb}. Available: {list(_handlers.keys())}")

    return _handlers[verb](cli, args)


def get_registered_commands() -> List[str]:
    """Get list of registered verb names."""
    return list(_handlers.keys())


__all__ = [
    'BaseCommand', 'VERB_MODULES', 'register_all', 'dispatch', 'is_verb', 'verb_argv',
    'get_registered_commands',
]
