"""
Core — Stubs, lifecycle model, discovery and resolution

Pure file-system logic with no process or terminal side effects.
"""

from .stubs import Stub, StubRegistry, RESERVED_VERBS, is_reserved_name
from .commands import CommandFile, CommandKind, LifecycleStage, split_stage
from .context import EngineContext, VisibilityPolicy
from .discovery import discover, discover_stub, command_names
from .resolver import CommandResolver, ResolveResult, ResolveStatus

__all__ = [
    'Stub', 'StubRegistry', 'RESERVED_VERBS', 'is_reserved_name',
    'CommandFile', 'CommandKind', 'LifecycleStage', 'split_stage',
    'EngineContext', 'VisibilityPolicy',
    'discover', 'discover_stub', 'command_names',
    'CommandResolver', 'ResolveResult', 'ResolveStatus',
]
