"""
Export formatting for MODPATCH.

Turns resolved code lines into the canonical text handed to a clipboard,
a file or the external patch applier.

Two formatter strategies are available, chosen explicitly by the caller:

- `PairedHexFormatter` (the default): every line is reduced to its 8-digit
  hex words, emitted two per line. A longer hex run is cut into consecutive
  8-digit words. Lines without any hex word become blank.
- `HexOnlyReflowFormatter`: only lines made purely of hex words and
  whitespace are reflowed into pairs; any other line is kept as written.

Both are idempotent: formatting formatted text changes nothing.

Example:
    formatter = FORMATTERS["paired"](pad_pairs=True, preserve_lines=False)
    print(formatter.format(block.text))
"""

import re
from typing import Final, Iterable, Optional, Protocol, Self, runtime_checkable
from modpatch.config.settings import appsettings
from modpatch.lib.log import LOG
from modpatch.lib.document import name_isModsHeader
from modpatch.lib.parser.base import RegexTokenScanner, TokenScanner, lines_codePortion
from modpatch.models.dataModel import CodeBlock, ParseResult

PAD_WORD: Final[str] = "00000000"

_word_re: Final[re.Pattern] = re.compile(r"[0-9A-Fa-f]{8}")
_hex_only_re: Final[re.Pattern] = re.compile(r"^[0-9A-Fa-f\s]+$")
_range_re: Final[re.Pattern] = re.compile(r"^(\d+)\s*-\s*(\d+)$")


@runtime_checkable
class ExportFormatter(Protocol):
    """Protocol for a strategy that re-serializes code text."""

    def format(self: Self, text: str) -> str:
        """Return the canonical form of `text`."""
        ...


def words_pair(words: list[str], pad: bool) -> list[str]:
    """Join uppercased hex words two per line, padding a lone last word."""
    out: list[str] = []
    for i in range(0, len(words), 2):
        pair = [w.upper() for w in words[i : i + 2]]
        if len(pair) == 1 and pad:
            pair.append(PAD_WORD)
        out.append(" ".join(pair))
    return out


def lines_trimTrailing(lines: list[str]) -> list[str]:
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


class PairedHexFormatter:
    """Keep only the 8-digit hex words of each line, two per output line."""

    def __init__(
        self: Self, pad_pairs: Optional[bool] = None, preserve_lines: Optional[bool] = None
    ) -> None:
        self.pad_pairs: bool = appsettings.padPairs if pad_pairs is None else pad_pairs
        self.preserve_lines: bool = (
            appsettings.preserveLines if preserve_lines is None else preserve_lines
        )

    def format(self: Self, text: str) -> str:
        out: list[str] = []
        for line in (text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n"):
            words: list[str] = _word_re.findall(line)
            if not words:
                if self.preserve_lines:
                    out.append("")
                continue
            out.extend(words_pair(words, self.pad_pairs))
        return "\n".join(lines_trimTrailing(out))


class HexOnlyReflowFormatter(PairedHexFormatter):
    """Reflow lines that are nothing but hex words; leave the rest alone."""

    def format(self: Self, text: str) -> str:
        out: list[str] = []
        for line in (text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n"):
            t: str = line.rstrip()
            if not t.strip():
                if self.preserve_lines:
                    out.append("")
                continue
            words: list[str] = t.split()
            if _hex_only_re.match(t) and all(len(w) % 8 == 0 for w in words):
                out.extend(words_pair(_word_re.findall(t), self.pad_pairs))
            else:
                out.append(t)
        return "\n".join(lines_trimTrailing(out))


FORMATTERS: Final[dict[str, type[PairedHexFormatter]]] = {
    "paired": PairedHexFormatter,
    "reflow": HexOnlyReflowFormatter,
}


def formatter_get(
    name: str = "paired",
    pad_pairs: Optional[bool] = None,
    preserve_lines: Optional[bool] = None,
) -> ExportFormatter:
    """Instantiate a formatter by name.

    Raises:
        ValueError: If no formatter has that name
    """
    try:
        cls = FORMATTERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown formatter '{name}'. Choose from: {', '.join(FORMATTERS)}"
        ) from None
    return cls(pad_pairs=pad_pairs, preserve_lines=preserve_lines)


def text_export(
    text: str,
    preserve_lines: Optional[bool] = None,
    pad_pairs: Optional[bool] = None,
    formatter: Optional[ExportFormatter] = None,
) -> str:
    """Format `text` for export; settings supply any option left as None."""
    fmt: ExportFormatter = formatter or PairedHexFormatter(
        pad_pairs=pad_pairs, preserve_lines=preserve_lines
    )
    return fmt.format(text)


def block_codeText(block: CodeBlock) -> str:
    """The block's code lines, without any trailing option table definition."""
    return "\n".join(lines_codePortion(block.lines))


def tokens_unresolved(text: str, scanner: Optional[TokenScanner] = None) -> list[str]:
    """Every placeholder the scanner still finds in `text`, in order."""
    lines: list[str] = (text or "").split("\n")
    return [
        lines[t.line][t.start : t.end]
        for t in (scanner or RegexTokenScanner()).scan(lines)
    ]


def patch_build(
    blocks: Iterable[CodeBlock],
    formatter: Optional[ExportFormatter] = None,
    scanner: Optional[TokenScanner] = None,
) -> ParseResult:
    """Build the patch text for the external applier.

    Each block contributes its `[name]` line followed by its formatted,
    non-blank lines. The `[MODS:]` section is never included.

    Args:
        blocks: Selected blocks, in the order they should appear
        formatter: Export strategy; paired hex words without blank lines
            when omitted
        scanner: Token scanner deciding what is still unresolved

    Returns:
        ParseResult with the patch text, or the blocks that still hold
        unresolved tokens
    """
    fmt: ExportFormatter = formatter or PairedHexFormatter(preserve_lines=False)
    scan: TokenScanner = scanner or RegexTokenScanner()
    out: list[str] = []
    pending: list[str] = []
    for block in blocks:
        if name_isModsHeader(block.name):
            continue
        code: str = block_codeText(block)
        left = tokens_unresolved(code, scan)
        if left:
            pending.append(f"[{block.name}] {' '.join(left)}")
            continue
        out.append(f"[{block.name}]")
        out.extend(ln for ln in fmt.format(code).split("\n") if ln.strip())

    if pending:
        msg: str = "Unresolved tokens remain: " + "; ".join(pending)
        LOG(msg)
        return ParseResult(text="", error=msg, success=False)
    if not out:
        msg = "No code blocks selected"
        LOG(msg)
        return ParseResult(text="", error=msg, success=False)
    return ParseResult(text="\n".join(out) + "\n", error=None, success=True)


def selection_compress(ordinals: Iterable[int]) -> str:
    """Render ordinals in compressed form, e.g. [1, 2, 3, 5] -> "1-3,5"."""
    values: list[int] = sorted(set(ordinals))
    parts: list[str] = []
    i: int = 0
    while i < len(values):
        j = i
        while j + 1 < len(values) and values[j + 1] == values[j] + 1:
            j += 1
        parts.append(str(values[i]) if i == j else f"{values[i]}-{values[j]}")
        i = j + 1
    return ",".join(parts)


def selection_parse(text: str) -> list[int]:
    """Read a compressed selection such as "1-3,5" into sorted ordinals.

    Raises:
        ValueError: On anything other than positive integers and ranges
    """
    values: set[int] = set()
    for part in (text or "").split(","):
        part = part.strip()
        if not part:
            continue
        m = _range_re.match(part)
        if m:
            lo, hi = int(m.group(1)), int(m.group(2))
            if lo > hi:
                lo, hi = hi, lo
            values.update(range(lo, hi + 1))
        elif part.isascii() and part.isdigit():
            values.add(int(part))
        else:
            raise ValueError(f"Invalid selection element: '{part}'")
    if 0 in values:
        raise ValueError("Block ordinals start at 1")
    return sorted(values)
