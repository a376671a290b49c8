"""
Invoker — Run a resolved command as a child process

Two forwarding policies, chosen by command kind:

Script (.py):
  The raw trailing text, when available, is split with shlex (POSIX
  rules), the same splitter the CLI uses for --raw. When only discrete
  tokens are available they are forwarded unchanged; no join-and-resplit,
  so a token with internal spaces stays one argument.
  argv = [interpreter, script, *args]

Executable (.exe):
  Tokens are the OS argument vector, passed with shell=False so no shell
  ever reinterprets metacharacters. Raw text is tokenized once with shlex
  and never expanded. Zero arguments means argv == [path]: no sentinel
  token is ever added.

Child stdio is inherited. The exit code is the only status channel.
KeyboardInterrupt is not trapped here; the child gets the terminal's
SIGINT along with us.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..core.commands import CommandFile
from ..core.context import EngineContext
from ..errors import CommandFailedError, CommandLaunchError, UsageError
from ..introspection.schema import ParameterSchema


logger = logging.getLogger(__name__)


def split_raw(raw_args: str) -> List[str]:
    """
    Tokenize literal argument text with POSIX shell quoting rules.

    Raises:
        UsageError: Unbalanced quotes or a dangling escape
    """
    try:
        return shlex.split(raw_args, posix=True)
    except ValueError as e:
        raise UsageError(f"Cannot parse arguments {raw_args!r}: {e}")


def forwarded_args(
    command: CommandFile,
    raw_args: Optional[str] = None,
    tokens: Optional[Sequence[str]] = None
) -> List[str]:
    """Arguments the child will receive (argv minus program/interpreter)."""
    if command.is_script:
        if raw_args is not None:
            return split_raw(raw_args)
        return [str(t) for t in tokens or []]

    if tokens is not None:
        return [str(t) for t in tokens]
    if raw_args is not None:
        return split_raw(raw_args)
    return []


def build_argv(
    command: CommandFile,
    context: EngineContext,
    raw_args: Optional[str] = None,
    tokens: Optional[Sequence[str]] = None
) -> List[str]:
    """Full argument vector for the child process."""
    args = forwarded_args(command, raw_args=raw_args, tokens=tokens)
    if command.is_script:
        return [context.interpreter_path, str(command.path)] + args
    return [str(command.path)] + args


@dataclass
class ArgumentCheck:
    """Outcome of validating arguments against a schema."""
    missing: List[str] = field(default_factory=list)
    unknown: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


def validate_arguments(schema: ParameterSchema, args: Sequence[str]) -> ArgumentCheck:
    """
    Check required parameters are present.

    Best effort: options are matched by flag (also --flag=value); required
    positionals are counted against the non-option tokens. Unknown flags
    are reported but do not fail the check, since argparse accepts
    abbreviations and the schema may be incomplete.
    """
    check = ArgumentCheck()
    if not schema:
        return check

    given_flags = set()
    positionals = []
    after_separator = False
    for arg in args:
        if after_separator:
            positionals.append(arg)
        elif arg == "--":
            after_separator = True
        elif arg.startswith("-") and len(arg) > 1:
            given_flags.add(arg.split("=", 1)[0])
        else:
            positionals.append(arg)

    known_flags = set(schema.flags())
    check.unknown = sorted(f for f in given_flags if f.startswith("--") and f not in known_flags)

    for param in schema.options():
        if param.required and param.flag not in given_flags:
            check.missing.append(param.flag)

    required_positionals = [p for p in schema.positionals() if p.required]
    for param in required_positionals[len(positionals):]:
        check.missing.append(param.name)

    return check


class Invoker:
    """Executes resolved commands with the per-kind forwarding policy."""

    def __init__(self, context: EngineContext, env: Optional[Dict[str, str]] = None):
        self.context = context
        self.env = env

    def invoke(
        self,
        command: CommandFile,
        raw_args: Optional[str] = None,
        tokens: Optional[Sequence[str]] = None,
        cwd=None
    ) -> int:
        """
        Run a command and wait for it.

        Args:
            command: Resolved command
            raw_args: Literal trailing text as typed (preferred for scripts)
            tokens: Pre-split arguments (preferred for executables)
            cwd: Working directory for the child (default: ours)

        Returns:
            0 on success

        Raises:
            CommandFailedError: Child exited non-zero
            CommandLaunchError: Child could not be started
        """
        argv = build_argv(command, self.context, raw_args=raw_args, tokens=tokens)
        if not command.path.is_file():
            raise CommandLaunchError(command.name, f"file not found: {command.path}")
        logger.debug("Launching %s: %r", command.display_name, argv)

        try:
            result = subprocess.run(argv, cwd=cwd, env=self.env, check=False)
        except FileNotFoundError:
            raise CommandLaunchError(command.name, f"file not found: {argv[0]}")
        except PermissionError:
            raise CommandLaunchError(command.name, f"permission denied: {argv[0]}")
        except OSError as e:
            raise CommandLaunchError(command.name, str(e))

        if result.returncode != 0:
            logger.debug("%s exited with %d", command.display_name, result.returncode)
            raise CommandFailedError(command.name, result.returncode)
        return 0
