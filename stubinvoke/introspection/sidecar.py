"""
Sidecar metadata — Help and parameters for commands that cannot describe themselves

Native executables carry no parameter metadata. A YAML file next to the
command fills the gap:

    Commands/metadata.tool.yaml

    synopsis: Convert images in bulk
    description: |
      Longer text...
    parameters:
      - name: input
        type: path
        required: true
        description: Source folder
      - name: --quality
        type: int
    examples:
      - stubinvoke media tool --quality 80 ./in

Names starting with '-' are options; anything else is positional.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..config import bool_setting
from ..core.commands import METADATA_PREFIX, CommandFile
from .base import ParameterIntrospector
from .schema import CommandHelp, Parameter, ParameterSchema


logger = logging.getLogger(__name__)

SIDECAR_EXTENSIONS = (".yaml", ".yml")


def find_sidecar(command: CommandFile) -> Optional[Path]:
    """Path of the metadata file for a command, if one exists."""
    for ext in SIDECAR_EXTENSIONS:
        candidate = command.path.parent / f"{METADATA_PREFIX}{command.name}{ext}"
        if candidate.is_file():
            return candidate
    return None


def load_sidecar(path: Path) -> Dict[str, Any]:
    """Parsed sidecar mapping; {} when unreadable or not a mapping."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.debug("Ignoring unreadable metadata %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def _parse_parameters(entries: Any) -> List[Parameter]:
    params = []
    if not isinstance(entries, list):
        return params

    for entry in entries:
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, dict) or not entry.get("name"):
            continue

        raw_name = str(entry["name"]).strip()
        flag = raw_name if raw_name.startswith("-") else None
        choices = entry.get("choices")
        params.append(Parameter(
            name=raw_name.lstrip("-"),
            type=str(entry.get("type", "str")),
            required=bool_setting(entry.get("required")),
            flag=flag,
            description=str(entry.get("description", "") or "").strip(),
            choices=tuple(str(c) for c in choices) if isinstance(choices, list) else None,
        ))
    return params


class SidecarIntrospector(ParameterIntrospector):
    """Reads metadata.<name>.yaml beside the command."""

    def introspect(self, command: CommandFile) -> ParameterSchema:
        path = find_sidecar(command)
        if path is None:
            return ParameterSchema.empty()
        return ParameterSchema(_parse_parameters(load_sidecar(path).get("parameters")))

    def describe(self, command: CommandFile) -> CommandHelp:
        path = find_sidecar(command)
        if path is None:
            return CommandHelp(name=command.name)

        data = load_sidecar(path)
        examples = data.get("examples") or []
        if isinstance(examples, str):
            examples = [examples]

        return CommandHelp(
            name=command.name,
            synopsis=str(data.get("synopsis", "") or "").strip(),
            description=str(data.get("description", "") or "").strip(),
            parameters=ParameterSchema(_parse_parameters(data.get("parameters"))),
            examples=[str(e).strip() for e in examples if e],
            source="metadata" if data else "",
        )
