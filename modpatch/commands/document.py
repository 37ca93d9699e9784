"""
Document inspection commands.

Commands:
- info FILE: Show the header fields and a summary of a patch file.
- blocks FILE: List the code blocks with their ordinals and token counts.
- tables FILE [NAME]: List the option tables, or show the rows of one.
"""

from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.table import Table
import click
from modpatch.commands.base import (
    PATCH_FILE,
    RichCommand,
    document_load,
    error_exit,
    rich_help,
)
from modpatch.lib.engine import block_displayName, block_isModsHeader
from modpatch.lib.input import table_render
from modpatch.lib.parser import RegexTokenScanner
from modpatch.lib.tables import TableCatalog
from modpatch.models.dataModel import TokenKind

console: Console = Console()


@click.command(
    cls=RichCommand,
    short_help="Show patch file header and summary",
    help=rich_help(
        command="info",
        description="Show the header fields and a summary of a patch file.",
        usage="modpatch info <file>",
        args={"<file>": "Patch file to read."},
    ),
)
@click.argument("file", type=PATCH_FILE)
def info(file: Path) -> None:
    """
    Print id, title, platform, source and counts for one file.
    """
    text, doc = document_load(file)
    catalog: TableCatalog = TableCatalog.from_text(text)
    blocks = [b for b in doc.blocks if not block_isModsHeader(b)]

    view: Table = Table(show_header=False, box=None)
    view.add_column(style="bold cyan")
    view.add_column(style="white")
    view.add_row("Id", escape(doc.id or "-"))
    view.add_row("Title", escape(doc.title or "-"))
    view.add_row("Platform", escape(doc.platform or "-"))
    view.add_row("Source", escape(doc.source or "-"))
    view.add_row("Metadata", str(len(doc.metadata)))
    view.add_row("Blocks", str(len(blocks)))
    view.add_row("Tables", str(len(catalog)))
    console.print(view)


@click.command(
    cls=RichCommand,
    short_help="List code blocks",
    help=rich_help(
        command="blocks",
        description="List the code blocks of a patch file. Blocks that still "
        "hold tokens are marked with -M-.",
        usage="modpatch blocks <file>",
        args={"<file>": "Patch file to read."},
    ),
)
@click.argument("file", type=PATCH_FILE)
def blocks(file: Path) -> None:
    """
    Print a table of ordinal, display name, line count and token counts.
    """
    _, doc = document_load(file)
    scanner = RegexTokenScanner()

    view: Table = Table(title=escape(doc.title or str(file.name)))
    view.add_column("#", justify="right", style="cyan")
    view.add_column("Name", style="white")
    view.add_column("Lines", justify="right")
    view.add_column("AMOUNT", justify="right", style="yellow")
    view.add_column("Named", justify="right", style="green")
    for block in doc.blocks:
        if block_isModsHeader(block):
            continue
        tokens = scanner.scan(block.lines)
        view.add_row(
            str(block.ordinal),
            escape(block_displayName(block, scanner)),
            str(len(block.lines)),
            str(sum(1 for t in tokens if t.kind == TokenKind.AMOUNT)),
            str(sum(1 for t in tokens if t.kind == TokenKind.NAMED)),
        )
    console.print(view)


@click.command(
    cls=RichCommand,
    short_help="List option tables",
    help=rich_help(
        command="tables",
        description="List the option tables of a patch file, or show one table.",
        usage="modpatch tables <file> [name]",
        args={
            "<file>": "Patch file to read.",
            "[name]": "Table to show (case-insensitive).",
        },
    ),
)
@click.argument("file", type=PATCH_FILE)
@click.argument("name", type=str, required=False)
def tables(file: Path, name: Optional[str]) -> None:
    """
    List every table with its column and row counts, or render one table.
    """
    text, _ = document_load(file)
    catalog: TableCatalog = TableCatalog.from_text(text)

    if name:
        table = catalog.table_get(name)
        if table is None:
            error_exit(console, f"No option table named '{name}'")
        console.print(table_render(table))
        return

    if not len(catalog):
        console.print("[bold yellow]No option tables found.[/bold yellow]")
        return

    view: Table = Table(title="Option tables")
    view.add_column("Name", style="cyan")
    view.add_column("Columns", style="white")
    view.add_column("Rows", justify="right")
    for table in catalog.tables.values():
        view.add_row(
            escape(table.name), escape(" > ".join(table.headers)), str(len(table.rows))
        )
    console.print(view)
