"""
HelpCommand — Usage, stub overviews and per-command help pages

Three levels:
  help                   -> general usage and the reserved verbs
  help <stub>            -> the stub's visible commands with synopses
  help <stub> <command>  -> parameters, description and examples of the
                            command the resolver would run

A command without any help text is not an error: it prints
"No help available".
"""

from typing import List, Optional, Tuple

from ..commands.base import BaseCommand
from ..core.commands import CommandFile
from ..core.discovery import command_names, discover
from ..core.stubs import RESERVED_VERBS
from ..errors import StubNotFoundError
from ..introspection import describe
from ..introspection.schema import CommandHelp, Parameter
from ..presentation.symbols import (
    safe_print, sanitize_control_chars, symbol_for_kind, symbol_for_stage, truncate,
)
from ..presentation.template import OutputTemplate


VERB_SUMMARIES = {
    "search": ("search <text>", "Find commands across all stubs by name or help text"),
    "help": ("help [stub [command]]", "Show usage, a stub's commands, or a command's help"),
    "update": ("update [stub]", "Pull (or clone) stubs from their git remotes"),
}

USAGE = """\
Usage:
  stubinvoke                           List stubs and verbs
  stubinvoke <stub>                    List a stub's commands
  stubinvoke <stub> <command> [args]   Run a command
  stubinvoke <verb> [args]             Run a reserved verb

Options (before the stub):
  --register NAME PATH [--remote URL]  Register a stub
  --unregister NAME                    Remove a stub (files untouched)
  --alpha {on,off} / --beta {on,off}   Show pre-release commands
  --raw STRING                         Literal argument text for the command
  --validate                           Check required parameters first
  --config                             Show configuration
  --format {auto,table,list,json}      Listing format"""


class HelpCommand(BaseCommand):
    """Command handler for the help verb."""

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def stub_commands(self, stub_name: str) -> List[Tuple[CommandFile, Optional[CommandHelp]]]:
        """
        Resolved command and help for every visible command name of a stub.

        Raises:
            StubNotFoundError: Stub not registered
        """
        stub = self.registry.get(stub_name)
        if stub is None:
            raise StubNotFoundError(stub_name)

        entries = []
        for name in command_names(discover(stub.root_path, self.context, stub=stub.name)):
            result = self.resolver.resolve(stub.name, name)
            if result.found:
                entries.append((result.command, describe(result.command)))
        return entries

    def command_help(self, stub_name: str, command_name: str) -> Tuple[CommandFile, CommandHelp]:
        """
        Help of the command that (stub, command) resolves to.

        Raises:
            StubNotFoundError: Stub not registered
            CommandNotFoundError: No visible command with that name
        """
        command = self.resolver.require(stub_name, command_name)
        return command, describe(command) or CommandHelp(name=command.name)

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def show(self, stub_name: Optional[str] = None, command_name: Optional[str] = None) -> int:
        """Print help at the level selected by the arguments. Returns exit status."""
        if not stub_name:
            self.show_usage()
        elif not command_name:
            self.show_stub(stub_name)
        else:
            self.show_command(stub_name, command_name)
        return 0

    def show_usage(self):
        symbols = self.symbols
        print(USAGE)
        print("\nVerbs:")
        for verb in RESERVED_VERBS:
            usage, summary = VERB_SUMMARIES[verb]
            print(f"  {symbols.verb} {usage:<24} {summary}")

        shadowed = self.registry.shadowed_names()
        if shadowed:
            print(f"\n{symbols.warning} Stub(s) hidden by a verb: {', '.join(shadowed)}")

    def show_stub(self, stub_name: str):
        symbols = self.symbols
        entries = self.stub_commands(stub_name)
        stub = self.registry.get(stub_name)

        template = OutputTemplate(symbols=symbols)
        template.header(f"{symbols.stub} {stub.name}", str(stub.root_path))

        lines = []
        for command, help_info in entries:
            synopsis = sanitize_control_chars(help_info.synopsis) if help_info else ""
            marker = symbol_for_stage(symbols, command.stage)
            line = f"{marker} {command.name}"
            if synopsis:
                line = f"{line:<28} {truncate(synopsis, 60)}"
            lines.append(line)
        template.section("COMMANDS", "\n".join(lines))

        if entries:
            template.footer(
                f"{len(entries)} command(s)",
                f"stubinvoke help {stub.name} <command>  for details"
            )
        else:
            template.footer(f"No visible commands in {stub.commands_dir}")
        safe_print(template.render())

    def show_command(self, stub_name: str, command_name: str):
        command, help_info = self.command_help(stub_name, command_name)
        symbols = self.symbols

        if help_info.is_empty:
            print(f"No help available for '{command.qualified_name}'.")
            return

        template = OutputTemplate(symbols=symbols)
        title = f"{symbol_for_kind(symbols, command.kind)} {command.qualified_name}"
        template.header(title, sanitize_control_chars(help_info.synopsis) or None)
        template.section("DESCRIPTION", sanitize_control_chars(help_info.description))
        template.section("PARAMETERS", "\n".join(
            self._format_parameter(p) for p in help_info.parameters
        ))
        template.section("EXAMPLES", "\n".join(
            f"  {sanitize_control_chars(e)}" for e in help_info.examples
        ))

        footer = f"{command.stage.value} {command.kind.value}: {command.path}"
        template.footer(footer)
        safe_print(template.render())

    @staticmethod
    def _format_parameter(param: Parameter) -> str:
        label = param.name if param.is_positional else param.flag
        details = [param.type]
        if param.required:
            details.append("required")
        if param.choices:
            details.append("one of: " + ", ".join(str(c) for c in param.choices))
        line = f"  {label:<20} ({', '.join(details)})"
        if param.description:
            line += f"  {sanitize_control_chars(param.description)}"
        return line


COMMAND_NAME = 'help'


def register_parser(subparsers):
    """Register help verb parser."""
    p = subparsers.add_parser('help', help='Show usage, stub commands, or command help')
    p.add_argument('stub', nargs='?', help='Stub to describe')
    p.add_argument('command', nargs='?', help='Command within the stub')
    return p


def handle(cli, args):
    """Handle help verb dispatch."""
    return cli._help_cmd.show(args.stub, args.command)
