"""
stubinvoke — One entry point for scripts and executables organized by stub

A stub is a named folder of commands. Commands live in <root>/Commands,
either directly or in a subfolder of the same name (which may also hold
private helper files). Pre-release versions sit beside them as
alpha.<name> / beta.<name> and take over when their stage is enabled.

Usage:
    stubinvoke --register Demo ~/tools/demo
    stubinvoke Demo                       # list commands
    stubinvoke Demo deploy --env prod     # run one
    stubinvoke search deploy
    stubinvoke help Demo deploy
    stubinvoke update
"""

__version__ = "0.1.0"

# Core layer (file-system model)
from .core.stubs import Stub, StubRegistry, RESERVED_VERBS, is_reserved_name
from .core.commands import CommandFile, CommandKind, LifecycleStage
from .core.context import EngineContext, VisibilityPolicy
from .core.discovery import discover, discover_stub, command_names
from .core.resolver import CommandResolver, ResolveResult, ResolveStatus

# Introspection layer
from .introspection import introspect, describe, Parameter, ParameterSchema, CommandHelp

# Services layer
from .services.invoker import Invoker, build_argv, validate_arguments
from .services.completion import list_stub_names, list_command_names, list_parameters
from .services.git import GitIntegration

# Errors
from .errors import (
    StubInvokeError, ConfigError, StubNotFoundError, ReservedStubNameError,
    CommandNotFoundError, InvocationError, CommandFailedError, CommandLaunchError,
    UsageError,
)

# Config (stays at root)
from .config import Config, ConfigManager, get_config

__all__ = [
    # Core
    'Stub', 'StubRegistry', 'RESERVED_VERBS', 'is_reserved_name',
    'CommandFile', 'CommandKind', 'LifecycleStage',
    'EngineContext', 'VisibilityPolicy',
    'discover', 'discover_stub', 'command_names',
    'CommandResolver', 'ResolveResult', 'ResolveStatus',
    # Introspection
    'introspect', 'describe', 'Parameter', 'ParameterSchema', 'CommandHelp',
    # Services
    'Invoker', 'build_argv', 'validate_arguments',
    'list_stub_names', 'list_command_names', 'list_parameters',
    'GitIntegration',
    # Errors
    'StubInvokeError', 'ConfigError', 'StubNotFoundError', 'ReservedStubNameError',
    'CommandNotFoundError', 'InvocationError', 'CommandFailedError', 'CommandLaunchError',
    'UsageError',
    # Config
    'Config', 'ConfigManager', 'get_config',
]
