"""
Base classes and shared helpers for the MODPATCH command line.

This module defines:
- `RichGroup`: a Click group with Rich-enhanced help rendering.
- `RichCommand`: a Click command with Rich-enhanced help rendering.
- `rich_help`: the help-text template every command uses.
- Loading helpers shared by the commands: reading a patch file into a
  Document and looking up a block by ordinal.

Commands print through their own module-level console so tests can capture
each one separately.
"""

from pathlib import Path
from typing import NoReturn
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
import click
from modpatch.lib.document import document_parse, text_read
from modpatch.lib.log import LOG
from modpatch.models.dataModel import CodeBlock, Document

console: Console = Console()


def rich_help(command: str, description: str, usage: str, args: dict) -> str:
    """
    Generate Rich-enhanced help text for commands.

    :param command: The command name.
    :param description: Description of the command.
    :param usage: Usage syntax for the command.
    :param args: Dictionary of arguments and their descriptions.
    :return: Formatted Rich help string.
    """
    help_text = f"[bold cyan]{description}[/bold cyan]\n\n"
    help_text += f"[bold yellow]Usage:[/bold yellow]\n    [green]{escape(usage)}[/green]\n\n"
    help_text += "[bold yellow]Arguments:[/bold yellow]\n"
    for arg, desc in args.items():
        help_text += f"    [green]{escape(arg)}[/green]: {desc}\n"
    return help_text


class RichGroup(click.Group):
    """
    A Click Group that renders its help with Rich.

    Methods:
        format_help(ctx, formatter): Renders usage, description, commands and options.
    """

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        try:
            info_name: str = ctx.info_name or "modpatch"
            console.print(
                f"[bold yellow]Usage:[/bold yellow] [cyan]{info_name}[/cyan] "
                f"[magenta]\\[OPTIONS] COMMAND \\[ARGS]...[/magenta]\n"
            )

            if self.help:
                console.print(f"[bold cyan]{self.help.strip()}[/bold cyan]\n")

            if self.commands:
                console.print("[bold green]Available Commands:[/bold green]")
                for name in self.list_commands(ctx):
                    command = self.commands[name]
                    console.print(
                        f"- [cyan]{name}[/cyan]: [white]{command.short_help or 'No description available.'}[/white]"
                    )
                console.print()

            params = self.get_params(ctx)
            if params:
                console.print("[bold yellow]Options:[/bold yellow]")
                for param in params:
                    console.print(
                        f"- [cyan]{param.opts[0]}[/cyan]: {getattr(param, 'help', None) or 'No description'}"
                    )
        except Exception as e:
            LOG(f"Help rendering error: {e}")
            console.print(f"[bold red]Help rendering error:[/bold red] {e}")


class RichCommand(click.Command):
    """
    A Click Command that renders its help text inside a Rich panel,
    followed by its options.
    """

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        try:
            help_text = self.help or "No help text available."
            panel_width = max(len(line) for line in help_text.splitlines()) + 10
            panel_width = min(panel_width, 80)
            console.print(
                Panel(help_text, expand=False, width=panel_width, border_style="cyan")
            )
            options = [p for p in self.get_params(ctx) if isinstance(p, click.Option)]
            if options:
                console.print("[bold yellow]Options:[/bold yellow]")
                for option in options:
                    console.print(
                        f"- [cyan]{', '.join(option.opts)}[/cyan]: {option.help or 'No description'}"
                    )
        except Exception as e:
            LOG(f"Help rendering error: {e}")
            console.print(f"[bold red]Help rendering error:[/bold red] {e}")


def error_exit(out: Console, message: str, code: int = 1) -> NoReturn:
    """Print an error on `out` and leave the command with `code`."""
    LOG(message)
    out.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise SystemExit(code)


def document_load(path: Path) -> tuple[str, Document]:
    """Read and parse a patch file.

    :param path: File to read.
    :return: The raw text and the parsed Document.
    """
    text: str = text_read(path)
    return text, document_parse(text)


def block_require(doc: Document, ordinal: int) -> CodeBlock:
    """
    Look up a block by ordinal.

    :raises click.BadParameter: If the document has no block with that ordinal.
    """
    block = doc.block_get(ordinal)
    if block is None:
        raise click.BadParameter(
            f"No block #{ordinal}; the file has {len(doc.blocks)} block(s).",
            param_hint="ORDINAL",
        )
    return block


# Shared argument type for patch files
PATCH_FILE = click.Path(exists=True, dir_okay=False, readable=True, path_type=Path)
