"""
Value prompting for MODPATCH.

This module provides the collaborators that answer the resolution engine's
questions during a fill:

- `ConsolePrompter`: interactive prompts with history, rendering option
  tables with rich
- `ScriptedPrompter`: answers taken in order from a list, for
  non-interactive use (`fill --value ...`) and tests

Answer grammar for AMOUNT tokens:
- `123`           unsigned decimal
- `0x7B`          hex literal
- `1.5`           float, for FLOAT tokens
- `1.5:FLOAT:LITTLE` value with type and byte-order overrides, accepted
  only where the token allows them (HEX and FLOAT tokens)

For named tokens an answer is a row number, a row value, a row label, or
any other text, which is used as a custom value.
"""

from typing import Final, Iterable, Iterator, Optional, Self
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from rich.markup import escape
from rich.table import Table
from modpatch.config.settings import HISTORY_FILE, appsettings, configDir_ensure, console
from modpatch.lib.encoder import spec_build, value_encode
from modpatch.lib.log import LOG
from modpatch.lib.parser import amountInput_fromText
from modpatch.models.dataModel import (
    AmountInput,
    AmountType,
    CodeBlock,
    EncodingSpec,
    Endian,
    OptionRow,
    OptionTable,
    ParseResult,
    Token,
)

TYPE_NAMES: Final[dict[str, AmountType]] = {t.value: t for t in AmountType}
ENDIAN_NAMES: Final[dict[str, Endian]] = {e.value: e for e in Endian}


def amountAnswer_parse(text: str, spec: EncodingSpec) -> AmountInput:
    """Read an AMOUNT answer, honouring `:TYPE` and `:ENDIAN` suffixes.

    Suffixes are only split off when the token allows overrides; text
    encodings take the answer verbatim.

    Raises:
        ValueError: On an unknown type or byte-order suffix
    """
    if not spec.selectable:
        return AmountInput(text=text)

    value, *opts = text.strip().split(":")
    answer: AmountInput = amountInput_fromText(value)
    for opt in opts:
        key = opt.strip().upper()
        if key in TYPE_NAMES and TYPE_NAMES[key] in (AmountType.HEX, AmountType.FLOAT):
            answer.type = TYPE_NAMES[key]
        elif key in ENDIAN_NAMES and ENDIAN_NAMES[key] != Endian.TXT:
            answer.endian = ENDIAN_NAMES[key]
        else:
            raise ValueError(f"Unknown option '{opt}' (use HEX, FLOAT, BIG or LITTLE)")
    return answer


def row_match(table: OptionTable, text: str) -> Optional[OptionRow]:
    """Find the row an answer refers to.

    A number selects the row at that 1-based position; otherwise the first
    row whose value or label equals the answer (case-insensitive) wins.
    A non-empty answer that matches nothing becomes a custom value row.
    """
    s: str = (text or "").strip()
    if not s:
        return None
    if s.isascii() and s.isdigit() and 1 <= int(s) <= len(table.rows):
        return table.rows[int(s) - 1]
    key = s.casefold()
    for row in table.rows:
        if row.value.casefold() == key or (row.name and row.name.casefold() == key):
            return row
    return OptionRow(cells=[s])


def table_render(table: OptionTable, caption: str = "") -> Table:
    """Build a rich Table listing every row with its 1-based number."""
    view: Table = Table(title=escape(caption or table.name), show_lines=False)
    view.add_column("#", justify="right", style="cyan")
    for header in table.headers:
        view.add_column(escape(header), style="green" if header == table.headers[0] else "white")
    for n, row in enumerate(table.rows, start=1):
        view.add_row(str(n), *(escape(c) for c in row.cells))
    return view


def spec_describe(spec: EncodingSpec) -> str:
    parts: list[str] = [f"{spec.type.value}/{spec.endian.value}"]
    if spec.type not in (AmountType.ABC123, AmountType.UTF08, AmountType.UTF16):
        parts.append(f"{spec.width} byte(s)")
    if spec.max_value is not None:
        parts.append(f"max {spec.max_value}")
    if spec.max_length is not None:
        parts.append(f"max {spec.max_length} chars")
    return ", ".join(parts)


class BoundedFileHistory(FileHistory):
    """FileHistory that loads at most `limit` of the most recent entries."""

    def __init__(self: Self, filename: str, limit: int) -> None:
        super().__init__(filename)
        self.limit: int = limit

    def load_history_strings(self: Self) -> Iterator[str]:
        for n, entry in enumerate(super().load_history_strings()):
            if n >= self.limit:
                break
            yield entry


class ConsolePrompter:
    """Interactive prompter built on prompt_toolkit with persistent history."""

    def __init__(self: Self, session: Optional[PromptSession] = None) -> None:
        self.session: Optional[PromptSession] = session

    def session_get(self: Self) -> PromptSession:
        if self.session is None:
            configDir_ensure()
            self.session = PromptSession(
                history=BoundedFileHistory(str(HISTORY_FILE), appsettings.historyLength),
                enable_history_search=True,
            )
        return self.session

    def ask(self: Self, message: str, default: str = "") -> Optional[str]:
        """Prompt once; None when the user interrupts or closes input."""
        try:
            return self.session_get().prompt(f"{message} ", default=default)
        except (EOFError, KeyboardInterrupt):
            LOG("Prompt cancelled by user")
            return None

    def row_choose(
        self: Self, token: Token, table: OptionTable, caption: str
    ) -> Optional[OptionRow]:
        console.print(table_render(table, caption))
        while True:
            text = self.ask(f"{{{token.name}}} row # or value:")
            if text is None:
                return None
            row = row_match(table, text)
            if row is not None:
                return row
            console.print("[bold red]Error:[/bold red] Enter a row number or a value")

    def amount_ask(
        self: Self, token: Token, spec: EncodingSpec, caption: str
    ) -> Optional[AmountInput]:
        console.print(f"[bold cyan]{escape(caption)}[/bold cyan] [white]({spec_describe(spec)})[/white]")
        if spec.selectable:
            console.print("[dim]Append :HEX/:FLOAT or :BIG/:LITTLE to override.[/dim]")
        while True:
            text = self.ask("Value:", default=spec.initial)
            if text is None:
                return None
            try:
                answer: AmountInput = amountAnswer_parse(text, spec)
            except ValueError as e:
                console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
                continue
            check: ParseResult = value_encode(answer, spec_build(token, answer.type, answer.endian))
            if check.success:
                return answer
            console.print(f"[bold red]Error:[/bold red] {escape(check.error or '')}")

    def miss_confirm(self: Self, token: Token) -> bool:
        console.print(f"[bold yellow]No option table for {{{token.name}}}.[/bold yellow]")
        text = self.ask("[s]kip this token or [a]bort?", default="s")
        return bool(text) and text.strip().lower().startswith("s")

    def restore_confirm(self: Self, block: CodeBlock) -> bool:
        console.print(
            f"[bold yellow]Block #{block.ordinal} \\[{escape(block.name)}] has no tokens left.[/bold yellow]"
        )
        text = self.ask("Restore the original code from the file? [y/N]")
        return bool(text) and text.strip().lower().startswith("y")


class ScriptedPrompter:
    """Prompter that replays a fixed list of answers in order.

    Once the answers run out every prompt is cancelled. Missing tables are
    skipped or aborted according to `appsettings.skipMissing`.
    """

    def __init__(self: Self, values: Iterable[str]) -> None:
        self.values: Iterator[str] = iter(values)

    def next_get(self: Self) -> Optional[str]:
        return next(self.values, None)

    def row_choose(
        self: Self, token: Token, table: OptionTable, caption: str
    ) -> Optional[OptionRow]:
        text = self.next_get()
        if text is None:
            return None
        row = row_match(table, text)
        LOG(f"{caption}: '{text}' -> {row.cells if row else None}")
        return row

    def amount_ask(
        self: Self, token: Token, spec: EncodingSpec, caption: str
    ) -> Optional[AmountInput]:
        text = self.next_get()
        if text is None:
            return None
        try:
            return amountAnswer_parse(text, spec)
        except ValueError as e:
            LOG(f"{caption}: {e}")
            return AmountInput(text=text)

    def miss_confirm(self: Self, token: Token) -> bool:
        return appsettings.skipMissing

    def restore_confirm(self: Self, block: CodeBlock) -> bool:
        return True
