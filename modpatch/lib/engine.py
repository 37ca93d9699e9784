"""
Resolution engine for MODPATCH.

Replaces the placeholder tokens of a code block, one token per step, with
concrete bytes or option values, and restores tokenized lines when a block
has already been filled.

The engine handles:
- Token-by-token replacement (`block_resolveNext`)
- Restoring a block from the file text (`block_resetFromDatabase`),
  preferring the same-named section that still holds tokens
- The open-values flow (`block_openValues`): restore if needed, then AMOUNT
  tokens first and named tokens second, asking a prompter for each value
- Write-once per-file state held in a `ResolutionSession`

Every failure stays local to one step: the token stays unresolved, the
block keeps whatever progress was already made, other blocks are untouched.

Example:
    session = ResolutionSession()
    session.pristine_capture(text)
    result = block_openValues(block, session, TableCatalog.from_text(text), prompter)
"""

import re
from typing import Final, Optional, Protocol, Self, runtime_checkable
from modpatch.config.settings import appsettings
from modpatch.lib.document import (
    MOD_MARKER,
    header_match,
    name_clean,
    name_isModsHeader,
    text_normalize,
)
from modpatch.lib.log import LOG
from modpatch.lib.parser import (
    AmountResolver,
    NamedResolver,
    RegexTokenScanner,
    TokenResolver,
    TokenScanner,
    token_first,
    token_remove,
    token_splice,
)
from modpatch.lib.tables import TableCatalog, line_isBareTag
from modpatch.lib.encoder import spec_build
from modpatch.models.dataModel import (
    AmountInput,
    CodeBlock,
    EncodingSpec,
    FlowResult,
    OptionRow,
    OptionTable,
    ParseResult,
    StepOutcome,
    StepResult,
    Token,
    TokenKind,
)

_code_line_re: Final[re.Pattern] = re.compile(r"^[0-9A-Fa-f]{6,}\s")


@runtime_checkable
class ValuePrompter(Protocol):
    """Protocol for the collaborator that supplies values during a fill.

    Every method may return None (or False) to cancel.
    """

    def row_choose(
        self: Self, token: Token, table: OptionTable, caption: str
    ) -> Optional[OptionRow]:
        """Pick one row of `table` for a named token."""
        ...

    def amount_ask(
        self: Self, token: Token, spec: EncodingSpec, caption: str
    ) -> Optional[AmountInput]:
        """Ask for an AMOUNT value within the limits of `spec`."""
        ...

    def miss_confirm(self: Self, token: Token) -> bool:
        """A named token has no table: True skips it, False aborts."""
        ...

    def restore_confirm(self: Self, block: CodeBlock) -> bool:
        """Allow overwriting the block's lines with the tokenized original."""
        ...


class ResolutionSession:
    """Per-file resolution state.

    Attributes:
        pristine: Full file text captured once, used for every restore
        backups: Tokenized lines per block ordinal, recorded once
        scanner: Token scanner shared by all engine calls
    """

    def __init__(self: Self, scanner: Optional[TokenScanner] = None) -> None:
        self.pristine: Optional[str] = None
        self.backups: dict[int, list[str]] = {}
        self.scanner: TokenScanner = scanner or RegexTokenScanner()
        self.resolvers: dict[TokenKind, TokenResolver] = {
            TokenKind.NAMED: NamedResolver(),
            TokenKind.AMOUNT: AmountResolver(),
        }

    def pristine_capture(self: Self, text: str) -> bool:
        """Keep the first non-empty text ever offered; later calls are no-ops."""
        if self.pristine or not (text and text.strip()):
            return False
        self.pristine = text
        LOG(f"Captured pristine text ({len(text)} chars)")
        return True

    def file_notifyNew(self: Self, text: str) -> None:
        """A different file was loaded: forget everything about the last one."""
        self.pristine = text if text and text.strip() else None
        self.backups.clear()

    def reference_text(self: Self, current: str = "") -> str:
        return self.pristine or current or ""

    def block_backup(self: Self, block: CodeBlock) -> bool:
        """Record the block's lines the first time they contain a token."""
        if block.ordinal in self.backups:
            return False
        if not self.scanner.scan(block.lines):
            return False
        self.backups[block.ordinal] = list(block.lines)
        LOG(f"Backed up block #{block.ordinal} ({len(block.lines)} lines)")
        return True

    def backup_get(self: Self, ordinal: int) -> Optional[list[str]]:
        lines = self.backups.get(ordinal)
        return list(lines) if lines else None


def block_isModsHeader(block: CodeBlock) -> bool:
    return name_isModsHeader(block.name)


def block_displayName(block: CodeBlock, scanner: Optional[TokenScanner] = None) -> str:
    """Block name as listed, with the `-M-` marker when it still holds tokens."""
    name: str = block.name
    if block_isModsHeader(block) or name.upper().startswith(MOD_MARKER):
        return name
    if (scanner or RegexTokenScanner()).scan(block.lines):
        return f"{MOD_MARKER} {name}"
    return name


def label_append(block: CodeBlock, piece: Optional[str]) -> None:
    """Merge `piece` into the block name's `(a; b)` suffix, without repeats.

    A `;` inside `piece` is written as `,` so the label stays one part.
    """
    piece = (piece or "").replace(";", ",").strip()
    if not piece:
        return
    name: str = block.name or ""
    parts: list[str] = []
    if name.endswith(")") and " (" in name:
        open_at = name.rfind(" (")
        parts = [p.strip() for p in name[open_at + 2 : -1].split(";") if p.strip()]
        name = name[:open_at]
    if piece not in parts:
        parts.append(piece)
    block.name = f"{name} ({'; '.join(parts)})"


def block_resolveNext(
    block: CodeBlock,
    value: OptionRow | AmountInput | str,
    session: ResolutionSession,
    kind: Optional[TokenKind] = None,
) -> StepResult:
    """Replace the first unresolved token of the block with `value`.

    With no `kind`, AMOUNT tokens go before named tokens.

    Args:
        block: Block to mutate in place
        value: Answer for the token
        session: Per-file state (backups, scanner, resolvers)
        kind: Restrict the step to one token kind

    Returns:
        StepResult; on FAILED the block is unchanged
    """
    session.block_backup(block)

    token: Optional[Token] = None
    for k in [kind] if kind else [TokenKind.AMOUNT, TokenKind.NAMED]:
        token = token_first(session.scanner, block.lines, k)
        if token:
            break
    if token is None:
        return StepResult(outcome=StepOutcome.NO_TOKENS)

    result: ParseResult = session.resolvers[token.kind].resolve(token, value)
    if not result.success:
        LOG(f"Block #{block.ordinal}: {{{token.name}}} left unresolved: {result.error}")
        return StepResult(outcome=StepOutcome.FAILED, token=token.name, error=result.error)

    block.lines[token.line] = token_splice(block.lines[token.line], token, result.text)
    label_append(block, result.label)
    return StepResult(outcome=StepOutcome.RESOLVED, token=token.name, text=result.text)


def block_skipToken(block: CodeBlock, token: Token) -> StepResult:
    """Drop one token span so scanning moves on to the next token."""
    block.lines[token.line] = token_remove(block.lines[token.line], token)
    LOG(f"Block #{block.ordinal}: skipped {{{token.name}}}")
    return StepResult(outcome=StepOutcome.SKIPPED, token=token.name)


def line_isCode(line: str) -> bool:
    return bool(_code_line_re.match(line))


def body_extract(lines: list[str], start: int, end: int) -> list[str]:
    """Collect the code lines of one section.

    Starts at `start` and stops at `end`, at another `[header]` or bare tag
    line, or at the first non-code line. A blank line is kept only when
    another code line follows the run of blanks. Trailing blanks are dropped.
    """
    result: list[str] = []
    seen: bool = False
    i: int = start
    while i < end:
        row: str = lines[i]
        t: str = row.rstrip()
        if header_match(t) is not None or line_isBareTag(t):
            break
        if not t:
            if not seen:
                i += 1
                continue
            k = i + 1
            while k < end and not lines[k].strip():
                k += 1
            if k < end and line_isCode(lines[k].rstrip()):
                result.append(row)
                i += 1
                continue
            break
        if not line_isCode(t):
            break
        result.append(row)
        seen = True
        i += 1

    while result and not result[-1].strip():
        result.pop()
    return result


def sections_find(text: str, name: str) -> list[tuple[int, str, list[str]]]:
    """Every `[header]` section whose cleaned name matches `name`.

    Returns:
        (ordinal, raw header name, extracted body) per match, in file order
    """
    lines: list[str] = text_normalize(text).split("\n")
    headers: list[tuple[int, str]] = [
        (i, h) for i, h in ((i, header_match(ln)) for i, ln in enumerate(lines)) if h is not None
    ]
    wanted: str = name_clean(name).casefold()
    found: list[tuple[int, str, list[str]]] = []
    for n, (line_idx, raw) in enumerate(headers):
        if name_clean(raw).casefold() != wanted:
            continue
        end = headers[n + 1][0] if n + 1 < len(headers) else len(lines)
        found.append((n + 1, raw, body_extract(lines, line_idx + 1, end)))
    return found


def section_choose(
    block: CodeBlock, reference_text: str, scanner: TokenScanner
) -> Optional[tuple[int, str, list[str]]]:
    """Pick the section a block should be restored from.

    Sections whose body still holds tokens win; remaining ties go to the
    header ordinal closest to the block's own.
    """
    if not reference_text or not name_clean(block.name):
        return None
    candidates = [c for c in sections_find(reference_text, block.name) if c[2]]
    if not candidates:
        return None
    tokenized = [c for c in candidates if scanner.scan(c[2])]
    shortlist = tokenized or candidates
    return min(shortlist, key=lambda c: abs(c[0] - block.ordinal))


def block_resetFromDatabase(
    block: CodeBlock,
    reference_text: str,
    scanner: Optional[TokenScanner] = None,
) -> StepResult:
    """Restore a block's lines and name from the reference file text.

    Args:
        block: Block to restore in place
        reference_text: Full original file text
        scanner: Token scanner used to rank candidates

    Returns:
        RESTORED, or RESTORE_MISS with the block left untouched
    """
    chosen = section_choose(block, reference_text, scanner or RegexTokenScanner())
    if chosen is None:
        msg: str = f"Original code section [{name_clean(block.name)}] was not found"
        LOG(msg)
        return StepResult(outcome=StepOutcome.RESTORE_MISS, error=msg)

    ordinal, raw, body = chosen
    block.lines = list(body)
    block.name = raw
    LOG(f"Block #{block.ordinal} restored from section #{ordinal} [{raw}]")
    return StepResult(outcome=StepOutcome.RESTORED, text=raw)


def block_tokensEnsure(
    block: CodeBlock,
    session: ResolutionSession,
    prompter: ValuePrompter,
    current_text: str = "",
) -> Optional[StepResult]:
    """Bring tokens back into an already-filled block.

    Tries the per-ordinal backup first, then the reference text (only after
    the prompter confirms). Returns None when the block already has tokens.
    """
    if session.scanner.scan(block.lines):
        return None

    backup = session.backup_get(block.ordinal)
    if backup:
        block.lines = backup
        LOG(f"Block #{block.ordinal} restored from backup")
        return StepResult(outcome=StepOutcome.RESTORED)

    reference: str = session.reference_text(current_text)
    if section_choose(block, reference, session.scanner) is None:
        msg: str = "No place to add mods in this code"
        LOG(f"Block #{block.ordinal}: {msg}")
        return StepResult(outcome=StepOutcome.RESTORE_MISS, error=msg)

    if appsettings.confirmRestore and not prompter.restore_confirm(block):
        return StepResult(outcome=StepOutcome.CANCELLED)

    step = block_resetFromDatabase(block, reference, session.scanner)
    session.block_backup(block)
    return step


def block_openValues(
    block: CodeBlock,
    session: ResolutionSession,
    catalog: TableCatalog,
    prompter: ValuePrompter,
    current_text: str = "",
) -> FlowResult:
    """Fill every token of a block, asking `prompter` for each value.

    AMOUNT tokens are filled first in document order, then named tokens.
    A failed answer is asked again; cancelling keeps partial progress.

    Returns:
        FlowResult with every step and the final outcome
    """
    steps: list[StepResult] = []
    session.block_backup(block)

    restore = block_tokensEnsure(block, session, prompter, current_text)
    if restore is not None:
        steps.append(restore)
        if restore.outcome != StepOutcome.RESTORED:
            return FlowResult(outcome=restore.outcome, steps=steps)
        if not session.scanner.scan(block.lines):
            return FlowResult(outcome=StepOutcome.NO_TOKENS, steps=steps)

    caption_base: str = name_clean(block.name)

    while (token := token_first(session.scanner, block.lines, TokenKind.AMOUNT)) is not None:
        spec: EncodingSpec = spec_build(token)
        answer = prompter.amount_ask(token, spec, f"{caption_base} / AMOUNT")
        if answer is None:
            steps.append(StepResult(outcome=StepOutcome.CANCELLED, token=token.name))
            return FlowResult(outcome=StepOutcome.CANCELLED, steps=steps)
        steps.append(block_resolveNext(block, answer, session, TokenKind.AMOUNT))

    while (token := token_first(session.scanner, block.lines, TokenKind.NAMED)) is not None:
        table: Optional[OptionTable] = catalog.table_get(token.name)
        if table is None:
            LOG(f"Block #{block.ordinal}: no option table {{{token.name}}}")
            if prompter.miss_confirm(token):
                steps.append(block_skipToken(block, token))
                continue
            msg: str = f"No option table {{{token.name}}}"
            steps.append(StepResult(outcome=StepOutcome.ABORTED, token=token.name, error=msg))
            return FlowResult(outcome=StepOutcome.ABORTED, steps=steps)

        row = prompter.row_choose(token, table, f"{caption_base} / {token.name}")
        if row is None:
            steps.append(StepResult(outcome=StepOutcome.CANCELLED, token=token.name))
            return FlowResult(outcome=StepOutcome.CANCELLED, steps=steps)
        steps.append(block_resolveNext(block, row, session, TokenKind.NAMED))

    return FlowResult(outcome=StepOutcome.RESOLVED, steps=steps)
