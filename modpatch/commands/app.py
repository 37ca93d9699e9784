"""
Defines the main Click command group for the MODPATCH application.

This module provides:
- The root `cli` command group for the application.
- Integration with Rich-enhanced Click classes (`RichGroup`).
- Registration of subcommands from other modules.

Usage:
Import `cli` to initialize and run the command-line interface.
"""

from rich.console import Console
import click
from modpatch.commands.base import RichGroup
from modpatch.commands.document import info, blocks, tables
from modpatch.commands.fill import fill, reset
from modpatch.commands.export import export, patch

console: Console = Console()


@click.group(
    cls=RichGroup,
    help="""
    MODPATCH Save-Patch Toolkit

    Inspect patch files, fill their placeholder tokens and export the result.
    """,
)
def cli() -> None:
    """
    The root Click command group for MODPATCH.
    """
    pass


# Explicitly annotate `cli` as `click.Group` for static type checking
cli: click.Group = cli

# Register subcommands
for command in (info, blocks, tables, fill, reset, export, patch):
    cli.add_command(command)
