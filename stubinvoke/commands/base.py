"""
BaseCommand — Shared foundation for the reserved verbs

Provides access to CLI resources via composition.
Verbs receive the CLI instance and access its resources through properties.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..cli import InvokeCLI


class BaseCommand:
    """
    Base class for verb handlers with access to shared resources.

    Verbs don't rebuild the engine context; they read it from the CLI
    instance, so a --alpha/--beta override applies to them as well.
    """

    def __init__(self, cli: 'InvokeCLI'):
        self._cli = cli

    # -------------------------------------------------------------------------
    # Core resources (convenience properties)
    # -------------------------------------------------------------------------

    @property
    def config(self):
        """Effective configuration."""
        return self._cli.config

    @property
    def context(self):
        """Engine context: registry, visibility policy, extensions."""
        return self._cli.context

    @property
    def registry(self):
        """Registered stubs."""
        return self._cli.context.registry

    @property
    def resolver(self):
        """Precedence-ordered command resolver."""
        return self._cli.resolver

    @property
    def symbols(self):
        """Symbol set for display (Unicode/ASCII)."""
        return self._cli.symbols

    @property
    def output_format(self) -> str:
        """Listing format: auto, table, list or json."""
        return self._cli.output_format
