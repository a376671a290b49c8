"""
Engine context — Explicit state passed to discovery, resolution, invocation

Holds the stub registry, the visibility policy and the file-type settings.
Nothing in the engine reads global state; tests build as many independent
contexts as they need.
"""

import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

from .commands import CommandKind, LifecycleStage
from .stubs import StubRegistry


DEFAULT_SCRIPT_EXTENSION = ".py"
DEFAULT_EXECUTABLE_EXTENSION = ".exe"


@dataclass(frozen=True)
class VisibilityPolicy:
    """Which pre-release stages are visible. Production always is."""
    alpha_enabled: bool = False
    beta_enabled: bool = False

    def allows(self, stage: LifecycleStage) -> bool:
        if stage is LifecycleStage.ALPHA:
            return self.alpha_enabled
        if stage is LifecycleStage.BETA:
            return self.beta_enabled
        return True

    def stages(self) -> Tuple[LifecycleStage, ...]:
        """Visible stages in resolution precedence order."""
        return tuple(s for s in LifecycleStage if self.allows(s))


@dataclass
class EngineContext:
    """Everything the engine needs to find and run commands."""
    registry: StubRegistry = field(default_factory=StubRegistry)
    policy: VisibilityPolicy = field(default_factory=VisibilityPolicy)
    script_extension: str = DEFAULT_SCRIPT_EXTENSION
    executable_extension: str = DEFAULT_EXECUTABLE_EXTENSION
    interpreter: Optional[str] = None

    def __post_init__(self):
        self.script_extension = _normalize_extension(self.script_extension)
        self.executable_extension = _normalize_extension(self.executable_extension)

    @property
    def extensions(self) -> Tuple[str, str]:
        """Extensions in lookup order: script first, then executable."""
        return (self.script_extension, self.executable_extension)

    @property
    def interpreter_path(self) -> str:
        """Interpreter used for script commands (defaults to the running one)."""
        return self.interpreter or sys.executable

    def kind_for(self, path: Path) -> Optional[CommandKind]:
        """Map a file to its command kind by extension, or None."""
        suffix = path.suffix
        if suffix == self.script_extension:
            return CommandKind.SCRIPT
        if suffix == self.executable_extension:
            return CommandKind.EXECUTABLE
        return None

    def with_policy(self, alpha: Optional[bool] = None, beta: Optional[bool] = None) -> "EngineContext":
        """Copy of this context with visibility changed."""
        policy = VisibilityPolicy(
            alpha_enabled=self.policy.alpha_enabled if alpha is None else alpha,
            beta_enabled=self.policy.beta_enabled if beta is None else beta,
        )
        return replace(self, policy=policy)


def _normalize_extension(ext: str) -> str:
    ext = (ext or "").strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext
