"""
SearchCommand — Find commands by name or help text across all stubs

Matching is a case-insensitive substring test over each visible command's
name, synopsis and description. Only the variant the resolver would run
is described, so an enabled alpha.deploy is what "deploy" matches against.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from ..commands.base import BaseCommand
from ..core.commands import LifecycleStage
from ..core.discovery import command_names, discover
from ..errors import UsageError
from ..introspection import describe
from ..presentation.symbols import safe_print, sanitize_control_chars, symbol_for_stage, truncate
from ..presentation.template import render_rows


logger = logging.getLogger(__name__)


@dataclass
class SearchHit:
    """One matching command."""
    stub: str
    command: str
    synopsis: str
    stage: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stub": self.stub,
            "command": self.command,
            "synopsis": self.synopsis,
            "stage": self.stage,
        }


class SearchCommand(BaseCommand):
    """Command handler for the search verb."""

    def search(self, query: str) -> List[SearchHit]:
        """
        Search every registered stub.

        Args:
            query: Text to look for (case-insensitive)

        Returns:
            Hits sorted by stub then command; empty when nothing matches

        Raises:
            UsageError: Query is empty or blank
        """
        needle = (query or "").strip().lower()
        if not needle:
            raise UsageError(
                "search needs a query.",
                hint="Usage: stubinvoke search <text>"
            )

        hits: List[SearchHit] = []
        for stub in self.registry:
            names = command_names(discover(stub.root_path, self.context, stub=stub.name))
            for name in names:
                result = self.resolver.resolve(stub.name, name)
                if not result.found:
                    continue
                help_info = describe(result.command)
                haystack = help_info.search_text if help_info else name.lower()
                if needle in haystack:
                    hits.append(SearchHit(
                        stub=stub.name,
                        command=name,
                        synopsis=help_info.synopsis if help_info else "",
                        stage=result.command.stage.value
                    ))

        logger.debug("search %r: %d hit(s)", query, len(hits))
        return sorted(hits, key=lambda h: (h.stub.lower(), h.command.lower(), h.command))

    def show(self, query: str) -> int:
        """Print search results. Returns exit status."""
        hits = self.search(query)
        symbols = self.symbols

        if self.output_format == "json":
            safe_print(render_rows([h.to_dict() for h in hits], ["Stub", "Command", "Synopsis", "Stage"],
                                   format="json"))
            return 0

        if not hits:
            print(f"No commands match '{query}'.")
            return 0

        rows = []
        for hit in hits:
            marker = symbol_for_stage(symbols, LifecycleStage(hit.stage))
            rows.append({
                "stub": hit.stub,
                "command": f"{marker} {hit.command}",
                "synopsis": truncate(sanitize_control_chars(hit.synopsis), 60),
            })
        safe_print(render_rows(rows, ["Stub", "Command", "Synopsis"], format=self.output_format,
                               symbols=symbols))
        print(f"\n{len(hits)} match(es)")
        return 0


COMMAND_NAME = 'search'

# Query words may start with '-' (e.g. searching for a flag name)
LITERAL_ARGS = True


def register_parser(subparsers):
    """Register search verb parser."""
    p = subparsers.add_parser('search', help='Search commands of all stubs by name or help text')
    p.add_argument('query', nargs='*', help='Text to search for (case-insensitive)')
    return p


def handle(cli, args):
    """Handle search verb dispatch."""
    return cli._search_cmd.show(" ".join(args.query))
