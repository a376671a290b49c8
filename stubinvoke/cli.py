"""
CLI — One entry point for every registered command

    stubinvoke                          stubs and reserved verbs
    stubinvoke <stub>                   visible commands of a stub
    stubinvoke <stub> <command> [args]  run a command
    stubinvoke <verb> [args]            search / help / update

Reserved verbs are intercepted before stub resolution. Everything after
the command name is handed to the child untouched: argparse never sees it.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .commands import dispatch, is_verb, register_all, verb_argv
from .commands.help_cmd import HelpCommand
from .commands.search_cmd import SearchCommand
from .commands.update_cmd import UpdateCommand
from .config import ConfigManager, parse_bool
from .core.discovery import command_names, discover
from .core.resolver import CommandResolver
from .core.stubs import RESERVED_VERBS
from .errors import StubInvokeError, StubNotFoundError, UsageError
from .introspection import introspect
from .presentation.symbols import get_symbols, safe_print, symbol_for_kind, symbol_for_stage
from .presentation.template import VALID_FORMATS, render_rows
from .services.completion import complete_line
from .services.invoker import Invoker, forwarded_args, validate_arguments
from . import __version__


logger = logging.getLogger(__name__)

DEBUG_ENV = "STUBINVOKE_DEBUG"


class InvokeCLI:
    """Command-line interface for running stub commands."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        output_format: Optional[str] = None
    ):
        self.config_manager = config_manager or ConfigManager()
        self.reload()
        self._format_override = output_format

        # Verb handlers (modular architecture)
        self._search_cmd = SearchCommand(self)
        self._help_cmd = HelpCommand(self)
        self._update_cmd = UpdateCommand(self)

    def reload(self):
        """(Re)build every engine resource from the effective configuration."""
        self.config = self.config_manager.load()
        self.context = self.config.build_context()
        self.symbols = get_symbols(self.config.display.symbols)
        self.resolver = CommandResolver(self.context)
        self.invoker = Invoker(self.context)

    @property
    def output_format(self) -> str:
        return self._format_override or self.config.display.format

    # =========================================================================
    # Registry and visibility
    # =========================================================================

    def register(self, name: str, path: str, remote_url: Optional[str] = None) -> int:
        """
        Register a stub.

        Raises:
            ReservedStubNameError: name is a reserved verb
        """
        try:
            stub = self.config_manager.register_stub(name, path, remote_url)
        except ValueError as e:
            raise UsageError(str(e), hint="Stub names cannot be empty or contain spaces")

        self.reload()
        print(f"{self.symbols.check_pass} Registered stub '{stub.name}' -> {stub.root_path}")
        if not stub.commands_dir.is_dir():
            print(f"{self.symbols.warning} {stub.commands_dir} does not exist yet")
        return 0

    def unregister(self, name: str) -> int:
        """Remove a stub from the registry. Its files are left in place."""
        stub = self.config_manager.remove_stub(name)
        self.reload()
        print(f"{self.symbols.check_pass} Unregistered stub '{stub.name}' (files kept at {stub.root_path})")
        return 0

    def set_visibility(self, stage: str, value: str) -> int:
        """Persist alpha/beta visibility."""
        error = self.config_manager.set(f"visibility.{stage}", value)
        if error:
            raise UsageError(error)
        self.reload()
        state = "on" if parse_bool(value) else "off"
        print(f"{self.symbols.check_pass} {stage.capitalize()} commands: {state}")
        return 0

    def show_config(self) -> int:
        safe_print(self.config_manager.display())
        return 0

    # =========================================================================
    # Listings
    # =========================================================================

    def list_stubs(self) -> int:
        """Print reserved verbs and registered stubs."""
        symbols = self.symbols
        shadowed = set(self.context.registry.shadowed_names())

        rows = [{"name": verb, "kind": "verb", "path": ""} for verb in RESERVED_VERBS]
        for stub in self.context.registry:
            kind = "stub (hidden by verb)" if stub.name in shadowed else "stub"
            rows.append({"name": stub.name, "kind": kind, "path": str(stub.root_path)})

        if self.output_format == "json":
            safe_print(render_rows(rows, ["Name", "Kind", "Path"], format="json"))
            return 0

        for row in rows:
            marker = symbols.verb if row["kind"] == "verb" else symbols.stub
            row["name"] = f"{marker} {row['name']}"
        safe_print(render_rows(rows, ["Name", "Kind", "Path"], format=self.output_format, symbols=symbols))

        if len(self.context.registry) == 0:
            print("\nNo stubs registered.")
            print("Register one with: stubinvoke --register NAME PATH [--remote URL]")
        return 0

    def list_commands(self, stub_name: str) -> int:
        """
        Print the visible commands of a stub (the variant that would run).

        Raises:
            StubNotFoundError: Stub not registered
        """
        stub = self.context.registry.get(stub_name)
        if stub is None:
            raise StubNotFoundError(stub_name)

        symbols = self.symbols
        if not stub.commands_dir.is_dir():
            print(f"{symbols.warning} Stub '{stub.name}' has no Commands folder at {stub.commands_dir}",
                  file=sys.stderr)

        commands = []
        for name in command_names(discover(stub.root_path, self.context, stub=stub.name)):
            result = self.resolver.resolve(stub.name, name)
            if result.found:
                commands.append(result.command)

        if self.output_format == "json":
            rows = [{
                "command": c.name,
                "stage": c.stage.value,
                "kind": c.kind.value,
                "file": str(c.path),
            } for c in commands]
            safe_print(render_rows(rows, ["Command", "Stage", "Kind", "File"], format="json"))
            return 0

        display_rows = [{
            "command": f"{symbol_for_stage(symbols, c.stage)} {c.name}",
            "stage": c.stage.value,
            "kind": f"{symbol_for_kind(symbols, c.kind)} {c.kind.value}",
        } for c in commands]
        safe_print(render_rows(
            display_rows, ["Command", "Stage", "Kind"],
            format=self.output_format, symbols=symbols,
            empty_message=f"No visible commands in stub '{stub.name}'."
        ))
        return 0

    # =========================================================================
    # Invocation
    # =========================================================================

    def run(
        self,
        stub_name: str,
        command_name: str,
        tokens: Optional[List[str]] = None,
        raw_args: Optional[str] = None,
        validate: bool = False
    ) -> int:
        """
        Resolve and run a command.

        Raises:
            StubNotFoundError / CommandNotFoundError: Resolution failed
            UsageError: --validate found missing required parameters
            CommandFailedError / CommandLaunchError: Child failed
        """
        command = self.resolver.require(stub_name, command_name)

        if validate:
            args = forwarded_args(command, raw_args=raw_args, tokens=tokens)
            check = validate_arguments(introspect(command), args)
            if check.unknown:
                print(f"{self.symbols.warning} Unrecognized option(s): {', '.join(check.unknown)}",
                      file=sys.stderr)
            if not check.ok:
                raise UsageError(
                    f"Missing required parameter(s) for '{command.qualified_name}': "
                    f"{', '.join(check.missing)}",
                    hint=f"Run: stubinvoke help {stub_name} {command.name}"
                )

        return self.invoker.invoke(command, raw_args=raw_args, tokens=tokens)

    def complete(self, words: List[str]) -> int:
        """Print completion candidates for a partial line, one per line."""
        for candidate in complete_line(self.context, words):
            print(candidate)
        return 0


# =============================================================================
# Entry point
# =============================================================================

def configure_logging(debug: bool = False):
    """DEBUG diagnostics to stderr when requested; silent otherwise."""
    if debug or os.environ.get(DEBUG_ENV, "").lower() in ("1", "true", "yes", "on"):
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s"
        )


def build_parser() -> argparse.ArgumentParser:
    """Top-level parser: global options, then the untouched command line."""
    parser = argparse.ArgumentParser(
        prog="stubinvoke",
        description="stubinvoke -- run scripts and executables organized by stub",
        epilog="Reserved verbs: " + ", ".join(RESERVED_VERBS) + ". Try: stubinvoke help"
    )

    parser.add_argument('--register', nargs=2, metavar=('NAME', 'PATH'),
                        help='Register a stub rooted at PATH')
    parser.add_argument('--remote', metavar='URL',
                        help='Git remote of the stub being registered')
    parser.add_argument('--unregister', metavar='NAME',
                        help='Remove a stub from the registry (files are kept)')
    parser.add_argument('--alpha', choices=['on', 'off'],
                        help='Show or hide alpha commands (persisted)')
    parser.add_argument('--beta', choices=['on', 'off'],
                        help='Show or hide beta commands (persisted)')
    parser.add_argument('--config', action='store_true',
                        help='Show configuration')
    parser.add_argument('--raw', metavar='STRING',
                        help='Literal argument text for the command (shell-quoted)')
    parser.add_argument('--validate', action='store_true',
                        help='Check required parameters before running')
    parser.add_argument('--complete', action='store_true',
                        help='Print completion candidates for the given words')
    parser.add_argument('--format', choices=list(VALID_FORMATS),
                        help='Listing format')
    parser.add_argument('--debug', action='store_true',
                        help=f'Debug logging to stderr (or {DEBUG_ENV}=1)')
    parser.add_argument('--version', '-V', action='version',
                        version=f'stubinvoke {__version__}')

    parser.add_argument('words', nargs=argparse.REMAINDER,
                        help='[stub] [command] [args...] or <verb> [args...]')
    return parser


def build_verb_parser() -> argparse.ArgumentParser:
    """Parser for the reserved verbs, populated from the verb registry."""
    parser = argparse.ArgumentParser(prog="stubinvoke")
    subparsers = parser.add_subparsers(dest='verb')
    register_all(subparsers)
    return parser


def execute(argv: Optional[List[str]] = None, config_manager: Optional[ConfigManager] = None) -> int:
    """Parse argv and execute. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)
    logger.debug("stubinvoke %s, words=%r", __version__, args.words)

    cli = InvokeCLI(config_manager=config_manager, output_format=args.format)
    words = list(args.words)

    if args.complete:
        return cli.complete(words)

    acted = False
    if args.remote and not args.register:
        raise UsageError("--remote is only valid with --register")
    if args.register:
        cli.register(args.register[0], args.register[1], args.remote)
        acted = True
    if args.unregister:
        cli.unregister(args.unregister)
        acted = True
    for stage in ("alpha", "beta"):
        value = getattr(args, stage)
        if value:
            cli.set_visibility(stage, value)
            acted = True
    if args.config:
        cli.show_config()
        acted = True

    if not words:
        if acted:
            return 0
        return cli.list_stubs()

    first = words[0]
    if is_verb(first):
        for hidden in cli.context.registry.shadowed_names():
            if hidden.lower() == first.lower():
                print(f"{cli.symbols.warning} Stub '{hidden}' is hidden by the reserved verb '{first.lower()}'",
                      file=sys.stderr)
        verb_parser = build_verb_parser()
        vargs = verb_parser.parse_args(verb_argv(first, words[1:]))
        return dispatch(vargs.verb, cli, vargs)

    if len(words) == 1:
        if args.raw is not None:
            raise UsageError("--raw needs a stub and a command")
        return cli.list_commands(first)

    stub_name, command_name, tokens = words[0], words[1], words[2:]
    if args.raw is not None and tokens:
        raise UsageError("Pass arguments either after the command or with --raw, not both")
    if args.raw is not None:
        return cli.run(stub_name, command_name, raw_args=args.raw, validate=args.validate)
    return cli.run(stub_name, command_name, tokens=tokens, validate=args.validate)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the stubinvoke CLI.

    User-facing errors print to stderr as "Error: <message>" plus a hint.
    A failed command makes us exit with the command's own exit code.
    """
    try:
        return execute(argv)
    except StubInvokeError as e:
        safe_print(e.format(), file=sys.stderr)
        return getattr(e, "exit_code", 1)
    except KeyboardInterrupt:
        return 130


if __name__ == '__main__':
    sys.exit(main())
