"""
Export commands.

Commands:
- export FILE: Print the canonical paired-hex form of code blocks.
- patch FILE --select SEL: Build the patch text for the selected blocks.
"""

from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.markup import escape
import click
from modpatch.commands.base import (
    PATCH_FILE,
    RichCommand,
    block_require,
    document_load,
    error_exit,
    rich_help,
)
from modpatch.lib.engine import block_isModsHeader
from modpatch.lib.export import (
    FORMATTERS,
    ExportFormatter,
    block_codeText,
    formatter_get,
    patch_build,
    selection_compress,
    selection_parse,
)
from modpatch.models.dataModel import CodeBlock, ParseResult

console: Console = Console()

formatter_option = click.option(
    "--formatter",
    "-f",
    "formatter_name",
    type=click.Choice(list(FORMATTERS), case_sensitive=False),
    default="paired",
    show_default=True,
    help="Export strategy: 'paired' keeps only hex words, 'reflow' leaves non-hex lines alone.",
)


def text_print(text: str) -> None:
    console.print(text, markup=False, highlight=False, soft_wrap=True)


@click.command(
    cls=RichCommand,
    short_help="Print blocks in paired-hex form",
    help=rich_help(
        command="export",
        description="Print code blocks as paired 8-digit hex words. All "
        "blocks are exported unless --block is given.",
        usage="modpatch export <file> [--block N ...] [--no-pad] [--no-preserve]",
        args={"<file>": "Patch file to read."},
    ),
)
@click.argument("file", type=PATCH_FILE)
@click.option(
    "--block", "-b", "ordinals", type=click.IntRange(min=1), multiple=True,
    help="Block ordinal to export (repeatable).",
)
@click.option("--pad/--no-pad", default=None, help="Pad a lone last word with 00000000.")
@click.option(
    "--preserve/--no-preserve", default=None, help="Keep blank lines in place."
)
@formatter_option
def export(
    file: Path,
    ordinals: tuple[int, ...],
    pad: Optional[bool],
    preserve: Optional[bool],
    formatter_name: str,
) -> None:
    """
    Format and print the selected blocks, each under its header line.
    """
    _, doc = document_load(file)
    selected: list[CodeBlock] = (
        [block_require(doc, n) for n in ordinals]
        if ordinals
        else [b for b in doc.blocks if not block_isModsHeader(b)]
    )
    formatter: ExportFormatter = formatter_get(
        formatter_name, pad_pairs=pad, preserve_lines=preserve
    )
    for n, block in enumerate(selected):
        if n:
            text_print("")
        text_print(f"[{block.name}]")
        body: str = formatter.format(block_codeText(block))
        if body:
            text_print(body)


@click.command(
    cls=RichCommand,
    short_help="Build patch text for selected blocks",
    help=rich_help(
        command="patch",
        description="Build the patch text handed to the patch applier. "
        "Blocks with unresolved tokens are refused.",
        usage="modpatch patch <file> --select 1-3,5 [-o OUT]",
        args={"<file>": "Patch file to read."},
    ),
)
@click.argument("file", type=PATCH_FILE)
@click.option(
    "--select", "-s", "selection", required=True,
    help="Block ordinals, e.g. '1-3,5'.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the patch text to this file instead of printing it.",
)
@formatter_option
def patch(file: Path, selection: str, output: Optional[Path], formatter_name: str) -> None:
    """
    Concatenate `[name]` and exported lines for every selected block.
    """
    try:
        ordinals: list[int] = selection_parse(selection)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--select") from e
    if not ordinals:
        raise click.BadParameter("Nothing selected", param_hint="--select")

    _, doc = document_load(file)
    selected: list[CodeBlock] = [block_require(doc, n) for n in ordinals]
    result: ParseResult = patch_build(
        selected, formatter_get(formatter_name, preserve_lines=False)
    )
    if not result.success:
        error_exit(console, result.error or "Patch build failed")

    if output:
        output.write_text(result.text, encoding="ascii", errors="replace")
        console.print(
            f"[bold green]Wrote blocks {selection_compress(ordinals)} to "
            f"{escape(str(output))}[/bold green]"
        )
    else:
        text_print(result.text.rstrip("\n"))
