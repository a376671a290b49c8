"""
Script introspection — Read a Python script's argparse declarations statically

The script is parsed with `ast`, never imported or executed. Every
`<parser>.add_argument(...)` call with literal flags becomes a Parameter.

Cross-cutting switches (help, verbosity, diagnostics) belong to every
script rather than to the command's own contract, so they are never
reported.

Help text comes from the module docstring:

    \"\"\"Deploy the service to an environment.

    Longer description paragraphs...

    Examples:
        stubinvoke ops deploy prod --dry-run
    \"\"\"
"""

import ast
import logging
import re
from typing import Dict, List, Optional, Tuple

from ..core.commands import CommandFile
from .base import ParameterIntrospector
from .schema import CommandHelp, Parameter, ParameterSchema
from .sidecar import SidecarIntrospector


logger = logging.getLogger(__name__)

COMMON_PARAMETERS = frozenset({
    "help",
    "version",
    "verbose",
    "verbosity",
    "quiet",
    "silent",
    "debug",
    "trace",
    "log-level",
    "loglevel",
    "log-file",
    "error-action",
    "warning-action",
    "information-action",
    "no-color",
})

_OPTIONAL_NARGS = ("?", "*")
_OPTIONAL_NARGS_ATTRS = ("OPTIONAL", "ZERO_OR_MORE", "REMAINDER")
_BOOL_ACTIONS = ("store_true", "store_false", "store_const")
_EXAMPLES_HEADER = re.compile(r"^\s*examples?\s*:\s*$", re.IGNORECASE)


def _literal(node: Optional[ast.AST]):
    """Literal value of a node, or None if it is not a literal."""
    if node is None:
        return None
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        return None


def _dotted_tail(node: ast.AST) -> Optional[str]:
    """'Path' for pathlib.Path, 'int' for int, None otherwise."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _normalize(name: str) -> str:
    return name.strip().lstrip("-").replace("_", "-").lower()


def is_common_parameter(*names: str) -> bool:
    """True if any spelling of a parameter is a cross-cutting switch."""
    return any(_normalize(n) in COMMON_PARAMETERS for n in names)


class _ArgparseCollector(ast.NodeVisitor):
    """Collects add_argument() calls and the parser description."""

    def __init__(self):
        self.parameters: List[Parameter] = []
        self.description: Optional[str] = None

    def visit_Call(self, node: ast.Call):
        name = _dotted_tail(node.func)
        if name == "add_argument" and isinstance(node.func, ast.Attribute):
            param = self._parameter(node)
            if param is not None:
                self.parameters.append(param)
        elif name == "ArgumentParser" and self.description is None:
            for kw in node.keywords:
                if kw.arg == "description":
                    value = _literal(kw.value)
                    if isinstance(value, str):
                        self.description = value.strip()
        self.generic_visit(node)

    def _parameter(self, node: ast.Call) -> Optional[Parameter]:
        flags = [_literal(a) for a in node.args]
        flags = [f for f in flags if isinstance(f, str) and f]
        if not flags:
            return None

        keywords: Dict[str, ast.AST] = {kw.arg: kw.value for kw in node.keywords if kw.arg}

        help_node = keywords.get("help")
        if help_node is not None and _dotted_tail(help_node) == "SUPPRESS":
            return None
        if is_common_parameter(*flags):
            return None

        is_option = flags[0].startswith("-")
        if is_option:
            long_flags = [f for f in flags if f.startswith("--")]
            flag = long_flags[0] if long_flags else flags[0]
            name = flag.lstrip("-")
            required = _literal(keywords.get("required")) is True
        else:
            flag = None
            name = flags[0]
            required = self._positional_required(keywords)

        help_text = _literal(help_node)
        choices = _literal(keywords.get("choices"))
        if isinstance(choices, (list, tuple, set, frozenset)):
            choices = tuple(str(c) for c in choices)
        else:
            choices = None

        return Parameter(
            name=name,
            type=self._type_name(keywords),
            required=required,
            flag=flag,
            description=help_text.strip() if isinstance(help_text, str) else "",
            choices=choices,
        )

    @staticmethod
    def _positional_required(keywords: Dict[str, ast.AST]) -> bool:
        if "default" in keywords:
            return False
        nargs = keywords.get("nargs")
        if nargs is None:
            return True
        value = _literal(nargs)
        if value in _OPTIONAL_NARGS:
            return False
        if _dotted_tail(nargs) in _OPTIONAL_NARGS_ATTRS:
            return False
        return True

    @staticmethod
    def _type_name(keywords: Dict[str, ast.AST]) -> str:
        action = keywords.get("action")
        action_value = _literal(action)
        if action_value in _BOOL_ACTIONS or _dotted_tail(action) == "BooleanOptionalAction":
            return "bool"
        if action_value == "count":
            return "int"

        type_node = keywords.get("type")
        type_name = _dotted_tail(type_node) if type_node is not None else None
        type_name = type_name or "str"
        if action_value == "append":
            return f"list[{type_name}]"
        return type_name


def parse_script(source: str) -> Tuple[Optional[ast.Module], Optional[str]]:
    """(tree, docstring) or (None, None) if the source does not parse."""
    try:
        tree = ast.parse(source)
    except (SyntaxError, ValueError, RecursionError, MemoryError) as e:
        logger.debug("Script does not parse: %s", e)
        return None, None
    return tree, ast.get_docstring(tree)


def split_docstring(doc: Optional[str]) -> Tuple[str, str, List[str]]:
    """
    Split a module docstring into (synopsis, description, examples).

    Synopsis is the first line. Description is everything up to an
    'Examples:' header; lines after the header are the examples.
    """
    if not doc:
        return "", "", []

    lines = doc.strip().splitlines()
    synopsis = lines[0].strip()
    body: List[str] = []
    examples: List[str] = []
    in_examples = False

    for line in lines[1:]:
        if _EXAMPLES_HEADER.match(line):
            in_examples = True
            continue
        if in_examples:
            if line.strip():
                examples.append(line.strip())
        else:
            body.append(line.rstrip())

    return synopsis, "\n".join(body).strip(), examples


class ScriptIntrospector(ParameterIntrospector):
    """Static argparse introspection for Python script commands."""

    def __init__(self, sidecar: Optional[SidecarIntrospector] = None):
        self.sidecar = sidecar or SidecarIntrospector()

    def _collect(self, command: CommandFile) -> Tuple[Optional[_ArgparseCollector], Optional[str]]:
        try:
            source = command.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", command.path, e)
            return None, None

        tree, doc = parse_script(source)
        if tree is None:
            return None, None

        collector = _ArgparseCollector()
        try:
            collector.visit(tree)
        except RecursionError:
            return None, doc
        return collector, doc

    def introspect(self, command: CommandFile) -> ParameterSchema:
        collector, _doc = self._collect(command)
        if collector is None:
            return ParameterSchema.empty()
        return ParameterSchema(collector.parameters)

    def describe(self, command: CommandFile) -> CommandHelp:
        collector, doc = self._collect(command)
        synopsis, description, examples = split_docstring(doc)
        parameters = ParameterSchema(collector.parameters) if collector else ParameterSchema.empty()

        if synopsis:
            source = "docstring"
        elif collector is not None and collector.description:
            synopsis, description, examples = split_docstring(collector.description)
            source = "argparse"
        else:
            fallback = self.sidecar.describe(command)
            if not fallback.is_empty:
                if not len(fallback.parameters):
                    fallback.parameters = parameters
                return fallback
            source = ""

        return CommandHelp(
            name=command.name,
            synopsis=synopsis,
            description=description,
            parameters=parameters,
            examples=examples,
            source=source,
        )
