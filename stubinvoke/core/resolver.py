"""
Command Resolver — Map (stub, command) to exactly one file

Resolution is a targeted lookup, not a scan. Precedence (first hit wins):
  1. alpha.<cmd>  (only when alpha is visible)
  2. beta.<cmd>   (only when beta is visible)
  3. <cmd>
For each stage, Commands/<file> is tried before Commands/<cmd>/<file>,
and the script extension before the executable extension.

Provides clear feedback on missing stubs vs missing commands.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from rapidfuzz import process, fuzz

from .commands import CommandFile, has_reserved_prefix
from .context import EngineContext
from .discovery import build_command, command_names, discover
from ..errors import CommandNotFoundError, StubNotFoundError


logger = logging.getLogger(__name__)

# Minimum rapidfuzz score for a "did you mean" suggestion
SUGGESTION_CUTOFF = 70
MAX_SUGGESTIONS = 3


class ResolveStatus(Enum):
    """Resolution outcome."""
    FOUND = "found"
    STUB_MISSING = "stub_missing"
    COMMAND_MISSING = "command_missing"


@dataclass
class ResolveResult:
    """Result of command resolution."""
    status: ResolveStatus
    stub_name: str
    query: str
    command: Optional[CommandFile] = None
    suggestions: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is ResolveStatus.FOUND


def is_valid_command_name(name: str) -> bool:
    """Names that could never address a command file are rejected early."""
    if not name or name in (".", ".."):
        return False
    if "/" in name or "\\" in name:
        return False
    return not has_reserved_prefix(name)


class CommandResolver:
    """
    Precedence-ordered command lookup.

    Holds no state between calls: every resolve() re-reads the policy
    and the file system.
    """

    def __init__(self, context: EngineContext):
        self.context = context

    def candidates(self, stub_root: Path, command_name: str) -> Iterator[Tuple[Path, Optional[str]]]:
        """(path, enclosing folder) pairs probed for command_name, in precedence order."""
        commands_dir = Path(stub_root) / "Commands"
        for stage in self.context.policy.stages():
            file_stem = f"{stage.prefix}{command_name}"
            for directory, folder in ((commands_dir, None), (commands_dir / command_name, command_name)):
                for ext in self.context.extensions:
                    yield directory / f"{file_stem}{ext}", folder

    def resolve(self, stub_name: str, command_name: str) -> ResolveResult:
        """
        Resolve a command name within a stub.

        Args:
            stub_name: Registered stub name
            command_name: Bare command name (no stage prefix, no extension)

        Returns:
            ResolveResult with status and, when found, the CommandFile
        """
        command_name = (command_name or "").strip()
        stub = self.context.registry.get(stub_name)
        if stub is None:
            logger.debug("Stub %r is not registered", stub_name)
            return ResolveResult(
                status=ResolveStatus.STUB_MISSING,
                stub_name=stub_name,
                query=command_name
            )

        if is_valid_command_name(command_name):
            for path, folder in self.candidates(stub.root_path, command_name):
                if not path.is_file():
                    continue
                command = build_command(path, self.context, stub=stub.name, folder=folder)
                if command is not None:
                    logger.debug("Resolved %s %s -> %s", stub.name, command_name, path)
                    return ResolveResult(
                        status=ResolveStatus.FOUND,
                        stub_name=stub.name,
                        query=command_name,
                        command=command
                    )

        return ResolveResult(
            status=ResolveStatus.COMMAND_MISSING,
            stub_name=stub.name,
            query=command_name,
            suggestions=self._suggest(stub.root_path, stub.name, command_name)
        )

    def require(self, stub_name: str, command_name: str) -> CommandFile:
        """
        Resolve or raise. Used by interactive invocation paths.

        Raises:
            StubNotFoundError: Stub not registered
            CommandNotFoundError: No visible command with that name
        """
        result = self.resolve(stub_name, command_name)
        if result.status is ResolveStatus.STUB_MISSING:
            raise StubNotFoundError(stub_name)
        if result.status is ResolveStatus.COMMAND_MISSING:
            raise CommandNotFoundError(stub_name, command_name, result.suggestions)
        return result.command

    def _suggest(self, stub_root: Path, stub_name: str, query: str) -> List[str]:
        """Close visible command names for a missing command."""
        if not query:
            return []
        names = command_names(discover(stub_root, self.context, stub=stub_name))
        if not names:
            return []
        matches = process.extract(
            query,
            names,
            scorer=fuzz.WRatio,
            limit=MAX_SUGGESTIONS,
            score_cutoff=SUGGESTION_CUTOFF
        )
        return [name for name, _score, _index in matches]
