"""
Parameter schema and command help — What a command declares about itself
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass(frozen=True)
class Parameter:
    """One declared parameter of a command."""
    name: str
    type: str = "str"
    required: bool = False
    flag: Optional[str] = None          # "--dry-run"; None for positionals
    description: str = ""
    choices: Optional[tuple] = None

    @property
    def is_positional(self) -> bool:
        return self.flag is None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
        }
        if self.flag:
            data["flag"] = self.flag
        if self.description:
            data["description"] = self.description
        if self.choices:
            data["choices"] = list(self.choices)
        return data


class ParameterSchema:
    """
    Ordered name -> Parameter mapping.

    Built fresh for every query; the command file may change between calls.
    Later declarations with an already-seen name are ignored.
    """

    def __init__(self, parameters: Optional[List[Parameter]] = None):
        self._params: Dict[str, Parameter] = {}
        for param in parameters or []:
            self._params.setdefault(param.name, param)

    @classmethod
    def empty(cls) -> "ParameterSchema":
        return cls()

    def get(self, name: str) -> Optional[Parameter]:
        return self._params.get(name)

    def names(self) -> List[str]:
        return list(self._params)

    def required(self) -> List[Parameter]:
        return [p for p in self._params.values() if p.required]

    def positionals(self) -> List[Parameter]:
        return [p for p in self._params.values() if p.is_positional]

    def options(self) -> List[Parameter]:
        return [p for p in self._params.values() if not p.is_positional]

    def flags(self) -> List[str]:
        """Option flags for completion (e.g. ['--env', '--dry-run'])."""
        return [p.flag for p in self.options()]

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: p.to_dict() for name, p in self._params.items()}

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._params.values())

    def __len__(self) -> int:
        return len(self._params)

    def __contains__(self, name: str) -> bool:
        return name in self._params

    def __bool__(self) -> bool:
        return bool(self._params)

    def __repr__(self) -> str:
        return f"ParameterSchema({self.names()!r})"


@dataclass
class CommandHelp:
    """Structured help for one command."""
    name: str
    synopsis: str = ""
    description: str = ""
    parameters: ParameterSchema = field(default_factory=ParameterSchema)
    examples: List[str] = field(default_factory=list)
    source: str = ""   # "docstring" | "argparse" | "metadata" | ""

    @property
    def is_empty(self) -> bool:
        return not (self.synopsis or self.description or self.examples or len(self.parameters))

    @property
    def search_text(self) -> str:
        """Lower-cased text matched by the search verb."""
        return " ".join([self.name, self.synopsis, self.description]).lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "synopsis": self.synopsis,
            "description": self.description,
            "parameters": self.parameters.to_dict(),
            "examples": list(self.examples),
            "source": self.source,
        }
