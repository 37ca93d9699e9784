"""
Patch document parser for MODPATCH.

Splits raw save-patch text into header metadata and ordered code blocks.

The text grammar:
- The first two `;` comment lines at the top carry the title id and title
  (optionally prefixed with a platform tag, e.g. "PS4 Some Game").
- `;source: ...` anywhere records where the patch came from.
- Lines starting with `:*` or `: ` are document metadata.
- `[name]` opens a new code block; every other non-blank line belongs to
  the active block (or to the metadata when no block is open yet).

Parsing never fails. Anything missing simply stays empty.

Example:
    doc = document_parse(text)
    for block in doc.blocks:
        print(block.ordinal, block.name, len(block.lines))
"""

import re
from pathlib import Path
from typing import Final, Optional
from modpatch.lib.log import LOG
from modpatch.models.dataModel import CodeBlock, Document

MOD_MARKER: Final[str] = "-M-"

_id_re: Final[re.Pattern] = re.compile(r"^CUSA(\d+)$", re.IGNORECASE)
_platform_re: Final[re.Pattern] = re.compile(r"^PS4\s+(.*)$", re.IGNORECASE)
_source_re: Final[re.Pattern] = re.compile(r"^;source:\s*(.*)$", re.IGNORECASE)
_header_re: Final[re.Pattern] = re.compile(r"^\[(?P<name>.*)\]$")
_mods_re: Final[re.Pattern] = re.compile(r"^\[\s*MODS\s*:\s*\]$", re.IGNORECASE)


def text_normalize(text: str) -> str:
    """Unify line endings and drop BOM / zero-width spaces."""
    return (
        (text or "")
        .replace("\r\n", "\n")
        .replace("\r", "\n")
        .replace("\ufeff", "")
        .replace("\u200b", "")
    )


def text_read(path: Path | str) -> str:
    """Read a patch file as text; undecodable bytes are replaced."""
    return Path(path).read_text(encoding="utf-8-sig", errors="replace")


def header_match(line: str) -> Optional[str]:
    """Return the trimmed name if `line` is a `[name]` header, else None."""
    m = _header_re.match((line or "").rstrip())
    if not m:
        return None
    return m.group("name").strip()


def name_clean(name: str) -> str:
    """Strip the mod marker and a trailing applied-values parenthetical.

    "-M- Max Money (999; Gold)" -> "Max Money"
    """
    n = (name or "").strip()
    if n.upper().startswith(MOD_MARKER):
        n = n[len(MOD_MARKER):].lstrip()
    if n.endswith(")"):
        open_at = n.rfind(" (")
        if open_at > 0:
            n = n[:open_at].rstrip()
    return n


def name_isModsHeader(name: str) -> bool:
    """True for the `[MODS:]` option section, with or without the marker."""
    return bool(_mods_re.match(f"[{name_clean(name)}]"))


def header_scan(lines: list[str]) -> list[str]:
    """Collect the values of the first two leading `;` comment lines.

    A `[header]` line before any comment, or a blank line once the comment
    run has started, ends the scan.
    """
    values: list[str] = []
    started: bool = False
    for raw in lines:
        t = raw.rstrip()
        if not t:
            if started:
                break
            continue
        if t.startswith(";"):
            started = True
            v = t[1:].strip()
            if v:
                values.append(v)
            if len(values) >= 2:
                break
            continue
        if started or header_match(t) is not None:
            break
    return values


def header_apply(doc: Document, values: list[str]) -> None:
    if values:
        m = _id_re.match(values[0])
        doc.id = f"CUSA{m.group(1)}" if m else values[0]
    if len(values) >= 2:
        m = _platform_re.match(values[1])
        if m:
            doc.platform = "PS4"
            doc.title = m.group(1).strip()
        else:
            doc.title = values[1]


def document_parse(text: str) -> Document:
    """Parse save-patch text into a Document.

    Args:
        text: Raw file text (any line endings, optional BOM)

    Returns:
        Document with header fields, metadata and code blocks in file order
    """
    doc: Document = Document()
    lines: list[str] = text_normalize(text).split("\n")

    header_apply(doc, header_scan(lines))

    current: Optional[CodeBlock] = None
    ordinal: int = 0
    for raw in lines:
        line = raw.rstrip()
        if not line:
            continue

        if line.startswith(";"):
            m = _source_re.match(line)
            if m:
                doc.source = m.group(1).strip()
            continue

        if line.startswith(":*") or line.startswith(": "):
            doc.metadata.append(line)
            continue

        name = header_match(line)
        if name is not None:
            ordinal += 1
            current = CodeBlock(name=name, ordinal=ordinal)
            doc.blocks.append(current)
            continue

        if current is not None:
            current.lines.append(line)
        else:
            doc.metadata.append(line)

    if not doc.id:
        LOG("Document has no header comment; id and title left empty")
    LOG(f"Parsed {len(doc.blocks)} code block(s), {len(doc.metadata)} metadata line(s)")
    return doc
