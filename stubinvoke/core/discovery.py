"""
Command Discoverer — Enumerate the visible commands of a stub

Layout of a stub root:

    <root>/Commands/deploy.py             command "deploy"
    <root>/Commands/beta.deploy.py        command "deploy" (beta)
    <root>/Commands/build/build.py        command "build"
    <root>/Commands/build/helper.py       helper, never a command
    <root>/Commands/build/notes.txt       data file, never a command
    <root>/Commands/metadata.tool.yaml    help for "tool", never a command

Only the top of Commands/ and its first-level subfolders are scanned.
A file inside subfolder D is a command only when its name (minus stage
prefix and extension) is D itself. Scans are done fresh on every call.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional

from .commands import METADATA_PREFIX, CommandFile, split_stage
from .context import EngineContext


logger = logging.getLogger(__name__)


def _iter_dir(directory: Path) -> Iterator[Path]:
    """Directory entries in name order; nothing if unreadable."""
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        return
    yield from entries


def build_command(
    path: Path,
    context: EngineContext,
    stub: Optional[str] = None,
    folder: Optional[str] = None
) -> Optional[CommandFile]:
    """
    Turn a file into a CommandFile, or None if it is not a command.

    Args:
        path: Candidate file
        context: Supplies extensions
        stub: Owning stub name
        folder: Enclosing subfolder name when the file is one level down

    Returns:
        CommandFile, or None for helpers, metadata and foreign extensions
    """
    kind = context.kind_for(path)
    if kind is None:
        return None

    stem = path.name[:-len(path.suffix)] if path.suffix else path.name
    if stem.startswith(METADATA_PREFIX):
        return None

    stage, name = split_stage(stem)
    if not name:
        return None
    if folder is not None and name != folder:
        return None

    return CommandFile(path=path, name=name, stage=stage, kind=kind, stub=stub)


def discover(
    stub_root: Path,
    context: EngineContext,
    stub: Optional[str] = None
) -> List[CommandFile]:
    """
    List every command visible under the context's policy.

    A missing root or Commands/ folder yields an empty list; the caller
    decides whether that deserves a warning.

    Args:
        stub_root: Root directory of the stub
        context: Engine context (policy + extensions)
        stub: Stub name recorded on each CommandFile

    Returns:
        Sorted CommandFiles (name, then stage precedence)
    """
    commands_dir = Path(stub_root) / "Commands"
    if not commands_dir.is_dir():
        logger.debug("No Commands directory at %s", commands_dir)
        return []

    found = []
    for entry in _iter_dir(commands_dir):
        if entry.is_file():
            command = build_command(entry, context, stub=stub)
            if command:
                found.append(command)
        elif entry.is_dir():
            for child in _iter_dir(entry):
                if not child.is_file():
                    continue
                command = build_command(child, context, stub=stub, folder=entry.name)
                if command:
                    found.append(command)

    visible = [c for c in found if context.policy.allows(c.stage)]
    logger.debug(
        "Discovered %d command file(s) in %s, %d visible",
        len(found), commands_dir, len(visible)
    )
    return sorted(set(visible), key=CommandFile.sort_key)


def discover_stub(stub_name: str, context: EngineContext) -> List[CommandFile]:
    """Discover by registered stub name; unknown stubs yield nothing."""
    stub = context.registry.get(stub_name)
    if stub is None:
        return []
    return discover(stub.root_path, context, stub=stub.name)


def command_names(commands: List[CommandFile]) -> List[str]:
    """Bare command names, prefix-stripped and de-duplicated."""
    return sorted({c.name for c in commands}, key=lambda n: (n.lower(), n))
