"""
UpdateCommand — Sync stub roots with their git remotes

For each selected stub:
  root missing + remote set  -> git clone
  root is a git working tree -> git pull --ff-only
  otherwise                  -> failure entry ("Not tracked by git")

One stub failing never stops the batch; every stub gets an UpdateResult.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..commands.base import BaseCommand
from ..core.stubs import Stub
from ..errors import StubNotFoundError
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate
from ..services.git import GitIntegration


logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Outcome of updating one stub."""
    stub: str
    success: bool
    message: str


class UpdateCommand(BaseCommand):
    """Command handler for the update verb."""

    def update(self, stub_name: Optional[str] = None) -> List[UpdateResult]:
        """
        Update one stub, or every registered stub.

        Raises:
            StubNotFoundError: stub_name given but not registered
        """
        if stub_name:
            stub = self.registry.get(stub_name)
            if stub is None:
                raise StubNotFoundError(stub_name)
            stubs = [stub]
        else:
            stubs = list(self.registry)

        return [self._update_one(stub) for stub in stubs]

    def _update_one(self, stub: Stub) -> UpdateResult:
        try:
            success, message = GitIntegration(stub.root_path).update(stub.remote_url)
        except Exception as e:
            logger.debug("Update of %s raised: %r", stub.name, e)
            success, message = False, str(e) or type(e).__name__
        logger.debug("Update %s: %s (%s)", stub.name, "ok" if success else "failed", message)
        return UpdateResult(stub=stub.name, success=success, message=message)

    def show(self, stub_name: Optional[str] = None) -> int:
        """Run the update and print a report. Exit status 1 if any stub failed."""
        symbols = self.symbols
        results = self.update(stub_name)

        if not results:
            print("No stubs registered.")
            print("Register one with: stubinvoke --register NAME PATH [--remote URL]")
            return 0

        lines = []
        for result in results:
            mark = symbols.check_pass if result.success else symbols.check_fail
            lines.append(f"{mark} {result.stub}: {result.message}")

        failed = [r for r in results if not r.success]
        template = OutputTemplate(symbols=symbols)
        template.section("UPDATE", "\n".join(lines))
        if failed:
            template.footer(f"{len(results) - len(failed)} updated, {len(failed)} failed")
        else:
            template.footer(f"{len(results)} stub(s) up to date")
        safe_print(template.render())

        return 1 if failed else 0


COMMAND_NAME = 'update'


def register_parser(subparsers):
    """Register update verb parser."""
    p = subparsers.add_parser('update', help='Pull or clone stubs from their git remotes')
    p.add_argument('stub', nargs='?', help='Stub to update (default: all)')
    return p


def handle(cli, args):
    """Handle update verb dispatch."""
    return cli._update_cmd.show(args.stub)
