"""
Services — Process and integration layer

- Invoker: child process execution with per-kind argument forwarding
- Completion: never-raising queries for shell completion
- Git: remote tracking for the update verb
"""

from .invoker import Invoker, build_argv, forwarded_args, split_raw, validate_arguments
from .completion import list_stub_names, list_command_names, list_parameters, complete_line
from .git import GitIntegration, GitResult

__all__ = [
    # Invoker
    "Invoker", "build_argv", "forwarded_args", "split_raw", "validate_arguments",
    # Completion
    "list_stub_names", "list_command_names", "list_parameters", "complete_line",
    # Git
    "GitIntegration", "GitResult",
]
