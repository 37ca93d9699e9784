"""
Block resolution commands.

Commands:
- fill FILE ORDINAL: Fill every token of one block, interactively or from
  `--value` answers given in order.
- reset FILE ORDINAL: Show a block as restored from the file's own text.
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
from modpatch.config.settings import appsettings
from modpatch.lib.engine import (
    ResolutionSession,
    ValuePrompter,
    block_openValues,
    block_resetFromDatabase,
)
from modpatch.lib.input import ConsolePrompter, ScriptedPrompter
from modpatch.lib.tables import TableCatalog
from modpatch.models.dataModel import CodeBlock, FlowResult, StepOutcome, StepResult

console: Console = Console()


def block_print(block: CodeBlock) -> None:
    console.print(f"[bold cyan]#{block.ordinal}[/bold cyan] [white]{escape(block.name)}[/white]")
    console.print(block.text, markup=False, highlight=False, soft_wrap=True)


def steps_print(result: FlowResult) -> None:
    for step in result.steps:
        detail: str = step.text or step.error or ""
        console.print(
            f"  [yellow]{step.outcome.value:<12}[/yellow] "
            f"[cyan]{escape(step.token or '-')}[/cyan] {escape(detail)}"
        )


@click.command(
    cls=RichCommand,
    short_help="Fill the tokens of one block",
    help=rich_help(
        command="fill",
        description="Fill every token of one code block. AMOUNT tokens are "
        "asked first, then named tokens. Without --value the answers are "
        "prompted for.",
        usage="modpatch fill <file> <ordinal> [--value V ...] [-o OUT]",
        args={
            "<file>": "Patch file to read.",
            "<ordinal>": "1-based block number, as listed by 'blocks'.",
        },
    ),
)
@click.argument("file", type=PATCH_FILE)
@click.argument("ordinal", type=click.IntRange(min=1))
@click.option(
    "--value",
    "-v",
    "values",
    multiple=True,
    help="Answer for the next prompt, in order (repeatable).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the resolved block lines to this file.",
)
def fill(file: Path, ordinal: int, values: tuple[str, ...], output: Optional[Path]) -> None:
    """
    Run the open-values flow on one block and print the result.
    """
    text, doc = document_load(file)
    block: CodeBlock = block_require(doc, ordinal)

    session: ResolutionSession = ResolutionSession()
    session.pristine_capture(text)
    prompter: ValuePrompter = ScriptedPrompter(values) if values else ConsolePrompter()

    result: FlowResult = block_openValues(
        block, session, TableCatalog.from_text(text), prompter, text
    )
    if appsettings.detailedOutput:
        steps_print(result)

    if result.outcome in (StepOutcome.ABORTED, StepOutcome.RESTORE_MISS):
        error_exit(console, result.steps[-1].error or result.outcome.value)
    if result.outcome == StepOutcome.CANCELLED:
        console.print("[bold yellow]Cancelled; partial values kept.[/bold yellow]")
    elif result.outcome == StepOutcome.NO_TOKENS:
        console.print("[bold yellow]No tokens to fill.[/bold yellow]")
    else:
        console.print(f"[bold green]Resolved {result.resolved} token(s).[/bold green]")

    block_print(block)
    if output:
        output.write_text(block.text + "\n", encoding="utf-8")
        console.print(f"[bold green]Wrote {escape(str(output))}[/bold green]")


@click.command(
    cls=RichCommand,
    short_help="Restore one block from the file text",
    help=rich_help(
        command="reset",
        description="Restore a block's tokenized lines from the section of "
        "the same name. Sections that still hold tokens are preferred, "
        "then the one closest in position.",
        usage="modpatch reset <file> <ordinal>",
        args={
            "<file>": "Patch file to read.",
            "<ordinal>": "1-based block number, as listed by 'blocks'.",
        },
    ),
)
@click.argument("file", type=PATCH_FILE)
@click.argument("ordinal", type=click.IntRange(min=1))
def reset(file: Path, ordinal: int) -> None:
    """
    Print the block as it looks after a restore.
    """
    text, doc = document_load(file)
    block: CodeBlock = block_require(doc, ordinal)
    step: StepResult = block_resetFromDatabase(block, text)
    if step.outcome != StepOutcome.RESTORED:
        error_exit(console, step.error or "Restore failed")
    block_print(block)
