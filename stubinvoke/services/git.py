"""
Git Integration — Keep stub roots in sync with their remotes

Used by the `update` verb:
- clone when a stub has a remote but its root does not exist yet
- fast-forward pull otherwise

Every operation returns (success, message) and never raises, so a batch
update can report each stub independently.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)

# Generous ceiling for network operations (seconds)
GIT_TIMEOUT = 300


@dataclass
class GitResult:
    """Outcome of one git invocation."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Most informative single line for display."""
        text = (self.stdout.strip() or self.stderr.strip())
        lines = [line for line in text.splitlines() if line.strip()]
        return lines[-1].strip() if lines else ""


class GitIntegration:
    """Git operations on one stub root."""

    def __init__(self, repo_path: Optional[Path] = None):
        """
        Initialize git integration.

        Args:
            repo_path: Stub root. If None, uses current directory.
        """
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.git_dir = self.repo_path / ".git"

    @property
    def is_git_repo(self) -> bool:
        """Check if the stub root is a git working tree."""
        if self.git_dir.exists():
            return True
        if not self.repo_path.is_dir():
            return False
        result = self._run_git(["rev-parse", "--is-inside-work-tree"])
        return result.ok and result.stdout.strip() == "true"

    def _run_git(self, args: List[str], cwd: Optional[Path] = None) -> GitResult:
        """Run a git command; failures come back as a non-zero GitResult."""
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=cwd or self.repo_path,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT,
                check=False
            )
            return GitResult(result.returncode, result.stdout, result.stderr)
        except FileNotFoundError:
            return GitResult(127, stderr="git is not installed")
        except subprocess.TimeoutExpired:
            return GitResult(124, stderr=f"git {args[0]} timed out after {GIT_TIMEOUT}s")
        except OSError as e:
            return GitResult(1, stderr=str(e))

    def head(self) -> Optional[str]:
        """Current commit hash."""
        result = self._run_git(["rev-parse", "HEAD"])
        return result.stdout.strip() if result.ok else None

    def clone(self, url: str) -> Tuple[bool, str]:
        """
        Clone url into the stub root.

        Returns:
            Tuple of (success, message)
        """
        if self.repo_path.exists() and any(self.repo_path.iterdir()):
            return False, f"{self.repo_path} exists and is not empty"

        self.repo_path.parent.mkdir(parents=True, exist_ok=True)
        result = self._run_git(["clone", url, str(self.repo_path)], cwd=self.repo_path.parent)
        if not result.ok:
            return False, result.output or f"git clone exited with {result.returncode}"
        return True, f"Cloned {url}"

    def pull(self) -> Tuple[bool, str]:
        """
        Fast-forward the working tree from its upstream.

        Returns:
            Tuple of (success, message)
        """
        if not self.is_git_repo:
            return False, "Not a git repository"

        before = self.head()
        result = self._run_git(["pull", "--ff-only"])
        if not result.ok:
            return False, result.output or f"git pull exited with {result.returncode}"

        after = self.head()
        if before and after and before != after:
            return True, f"Updated {before[:8]}..{after[:8]}"
        return True, "Already up to date"

    def update(self, remote_url: Optional[str] = None) -> Tuple[bool, str]:
        """
        Bring the stub root up to date: clone if missing, else pull.

        Args:
            remote_url: Remote recorded for the stub (used for cloning)
        """
        if not self.repo_path.exists():
            if not remote_url:
                return False, f"Root {self.repo_path} does not exist and no remote is set"
            logger.debug("Cloning %s into %s", remote_url, self.repo_path)
            return self.clone(remote_url)

        if not self.is_git_repo:
            if remote_url:
                return False, f"Remote set but {self.repo_path} is not a git repository"
            return False, "Not tracked by git"

        return self.pull()
