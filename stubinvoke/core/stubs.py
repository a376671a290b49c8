"""
Stub Registry — Named namespaces mapped to command roots

A stub is a name plus a root directory (and optionally the git remote it
tracks). The registry is pure data: lookup, insert, remove.
Persistence lives in config.py.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..errors import ReservedStubNameError, StubNotFoundError


# Top-level words intercepted before stub resolution
RESERVED_VERBS = ("search", "help", "update")


def is_reserved_name(name: str) -> bool:
    """True when name collides with a reserved verb (case-insensitive)."""
    return name.strip().lower() in RESERVED_VERBS


def is_valid_stub_name(name) -> bool:
    """Non-empty and free of whitespace once trimmed."""
    name = name.strip() if isinstance(name, str) else ""
    return bool(name) and not any(c.isspace() for c in name)


@dataclass(frozen=True)
class Stub:
    """A registered namespace of commands."""
    name: str
    root_path: Path
    remote_url: Optional[str] = None

    @property
    def commands_dir(self) -> Path:
        """Directory scanned for commands."""
        return self.root_path / "Commands"

    def to_dict(self) -> Dict[str, Optional[str]]:
        data = {"path": str(self.root_path)}
        if self.remote_url:
            data["remote"] = self.remote_url
        return data


class StubRegistry:
    """
    In-memory name -> Stub mapping.

    Names are unique; adding an existing name overwrites it.
    Root paths are made absolute but need not exist.
    """

    def __init__(self, stubs: Optional[List[Stub]] = None):
        self._stubs: Dict[str, Stub] = {}
        for stub in stubs or []:
            self._stubs[stub.name] = stub

    def add(
        self,
        name: str,
        root_path,
        remote_url: Optional[str] = None,
        allow_reserved: bool = False
    ) -> Stub:
        """
        Register (or re-register) a stub.

        Args:
            name: Unique stub name
            root_path: Root directory holding a Commands/ folder
            remote_url: Optional git remote tracked by `update`
            allow_reserved: Accept a reserved verb name (config loading only)

        Raises:
            ReservedStubNameError: If name is a reserved verb
            ValueError: If name is empty or contains whitespace
        """
        if not is_valid_stub_name(name):
            raise ValueError(f"Invalid stub name: {name!r}")
        name = name.strip()
        if is_reserved_name(name) and not allow_reserved:
            raise ReservedStubNameError(name)

        stub = Stub(
            name=name,
            root_path=Path(root_path).expanduser().absolute(),
            remote_url=remote_url or None
        )
        self._stubs[name] = stub
        return stub

    def remove(self, name: str) -> Stub:
        """Unregister a stub. Files on disk are never touched."""
        if name not in self._stubs:
            raise StubNotFoundError(name)
        return self._stubs.pop(name)

    def get(self, name: str) -> Optional[Stub]:
        return self._stubs.get(name)

    def names(self) -> List[str]:
        """Registered names, sorted case-insensitively."""
        return sorted(self._stubs, key=str.lower)

    def shadowed_names(self) -> List[str]:
        """Registered names hidden by a reserved verb."""
        return [n for n in self.names() if is_reserved_name(n)]

    def __contains__(self, name: str) -> bool:
        return name in self._stubs

    def __iter__(self) -> Iterator[Stub]:
        for name in self.names():
            yield self._stubs[name]

    def __len__(self) -> int:
        return len(self._stubs)
