"""
Command model — Lifecycle stages and discovered command files

Lifecycle stage is encoded in the file name:
  alpha.deploy.py  -> ALPHA
  beta.deploy.py   -> BETA
  deploy.py        -> PRODUCTION

The stage is parsed once, when the CommandFile is built, and carried as
an enum from then on.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


METADATA_PREFIX = "metadata."


class LifecycleStage(Enum):
    """Release stage of a command, in resolution precedence order."""
    ALPHA = "alpha"
    BETA = "beta"
    PRODUCTION = "production"

    @property
    def prefix(self) -> str:
        """File name prefix for this stage ('' for production)."""
        if self is LifecycleStage.PRODUCTION:
            return ""
        return f"{self.value}."

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]


_PRECEDENCE = {
    LifecycleStage.ALPHA: 0,
    LifecycleStage.BETA: 1,
    LifecycleStage.PRODUCTION: 2,
}


class CommandKind(Enum):
    """How a command file is executed."""
    SCRIPT = "script"
    EXECUTABLE = "executable"


def split_stage(stem: str) -> Tuple[LifecycleStage, str]:
    """
    Split a file stem into (stage, bare name).

    Examples:
        split_stage("alpha.deploy") -> (ALPHA, "deploy")
        split_stage("deploy")       -> (PRODUCTION, "deploy")
    """
    for stage in (LifecycleStage.ALPHA, LifecycleStage.BETA):
        if stem.startswith(stage.prefix) and len(stem) > len(stage.prefix):
            return stage, stem[len(stage.prefix):]
    return LifecycleStage.PRODUCTION, stem


def has_reserved_prefix(name: str) -> bool:
    """True for names that can never be typed as a command name."""
    lowered = name.lower()
    return (
        lowered.startswith(METADATA_PREFIX)
        or lowered.startswith(LifecycleStage.ALPHA.prefix)
        or lowered.startswith(LifecycleStage.BETA.prefix)
    )


@dataclass(frozen=True)
class CommandFile:
    """A resolvable command: one concrete file on disk."""
    path: Path
    name: str
    stage: LifecycleStage
    kind: CommandKind
    stub: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def display_name(self) -> str:
        """Name with its stage prefix, e.g. 'beta.deploy'."""
        return f"{self.stage.prefix}{self.name}"

    @property
    def qualified_name(self) -> str:
        """'<stub> <command>' as typed on the command line."""
        if self.stub:
            return f"{self.stub} {self.name}"
        return self.name

    @property
    def is_script(self) -> bool:
        return self.kind is CommandKind.SCRIPT

    @property
    def is_executable(self) -> bool:
        return self.kind is CommandKind.EXECUTABLE

    def sort_key(self):
        return (self.name.lower(), self.stage.precedence, str(self.path))
