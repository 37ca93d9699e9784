r"""
Option table parsers for MODPATCH.

Named tokens such as `{MOD}` in a code line are resolved by picking a row
from an option table of the same name. Tables come in two grammars:

Inline blocks, anywhere in the file:

    {MOD}
    Value>Name
    0001=Potion
    0002=Ether
    {/MOD}

Id-keyed blocks, only inside a `[MODS:]` section:

    [MODS:]
    {ITEM}
    Value>Name>Type
    0001 Small Potion Heal
    {\ITEM}

Header lines use `>` as the column separator. Rows accept TAB, `=` (a
value/name pair), `>` or runs of spaces. Malformed tables never raise;
they fall back to a single "Value" column or are skipped.
"""

import re
from typing import Final, Iterator, Optional, Self
from modpatch.lib.document import text_normalize, header_match, name_isModsHeader
from modpatch.lib.log import LOG
from modpatch.models.dataModel import OptionRow, OptionTable

_inline_re: Final[re.Pattern] = re.compile(
    r"^[ \t]*\{(?P<name>[A-Za-z0-9_]+)\}[ \t]*\n(?P<body>.*?)^[ \t]*\{[/\\](?P=name)\}[ \t]*$",
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)
_start_re: Final[re.Pattern] = re.compile(r"^\s*\{\s*([A-Za-z0-9_]+)\s*\}\s*$")
_end_re: Final[re.Pattern] = re.compile(r"^\s*\{\\\s*([A-Za-z0-9_]+)\s*\}\s*$")
_spaces_re: Final[re.Pattern] = re.compile(r" {2,}")
_bare_tag_re: Final[re.Pattern] = re.compile(r"^\{[/\\]?[A-Za-z0-9_]+\}$")


def line_isBareTag(line: str) -> bool:
    """True for a line holding only `{TAG}`, `{/TAG}` or `{\\TAG}`."""
    return bool(_bare_tag_re.match((line or "").strip()))


def cells_fit(cells: list[str], count: int) -> list[str]:
    """Pad with empty strings, or truncate, to exactly `count` cells."""
    if count <= 0:
        return cells
    return (cells + [""] * count)[:count]


def row_split(line: str, count: int) -> list[str]:
    """Split one table row into cells.

    Precedence, first match wins: TAB, then `=` (split once), then `>`,
    then runs of two or more spaces, then single spaces.
    """
    if "\t" in line:
        parts = line.split("\t")
    elif "=" in line:
        parts = line.split("=", 1)
    elif ">" in line:
        parts = line.split(">")
    else:
        s = line.strip()
        parts = _spaces_re.split(s)
        if len(parts) <= 1:
            parts = s.split(" ")
    return cells_fit([p.strip() for p in parts], count)


def header_split(line: str) -> list[str]:
    return [h.strip() for h in line.split(">") if h.strip()]


def table_parseBody(name: str, body: str) -> OptionTable:
    """Parse the body of one inline `{NAME}...{/NAME}` block."""
    content: list[str] = [
        ln.strip() for ln in text_normalize(body).split("\n") if ln.strip()
    ]
    if not content:
        LOG(f"Option table {{{name}}} is empty")
        return OptionTable(name=name, headers=["Value"], rows=[])

    hdr_idx: int = 0
    for i, ln in enumerate(content):
        if ln.startswith(";"):
            continue
        if ">" in ln:
            hdr_idx = i
            break
    else:
        LOG(f"Option table {{{name}}} has no '>' header; using first line")

    headers: list[str] = header_split(content[hdr_idx]) or ["Value"]

    if len(headers) == 1 and hdr_idx + 1 < len(content):
        probe = content[hdr_idx + 1]
        if "\t" in probe or "=" in probe:
            headers = [headers[0], "Name"]

    rows: list[OptionRow] = [
        OptionRow(cells=row_split(ln, len(headers)))
        for ln in content[hdr_idx + 1:]
        if not ln.startswith(";")
    ]
    return OptionTable(name=name, headers=headers, rows=rows)


def table_keep(tables: dict[str, OptionTable], table: OptionTable) -> None:
    """Store `table` unless an equally rich or richer one is already kept."""
    key = table.name.upper()
    existing = tables.get(key)
    if existing is None or table.richer_than(existing):
        tables[key] = table


def tables_parseInline(text: str) -> dict[str, OptionTable]:
    """Parse every bare `{NAME}` ... `{/NAME}` block in the text.

    Returns:
        Mapping of upper-cased table name to table
    """
    tables: dict[str, OptionTable] = {}
    if not text or not text.strip():
        return tables
    for m in _inline_re.finditer(text_normalize(text)):
        table_keep(tables, table_parseBody(m.group("name"), m.group("body")))
    return tables


def modsRegions_find(lines: list[str]) -> Iterator[list[str]]:
    """Yield the lines of each `[MODS:]` section, up to the next header."""
    region: Optional[list[str]] = None
    for line in lines:
        name = header_match(line.strip())
        if name is not None:
            if region is not None:
                yield region
            region = [] if name_isModsHeader(name) else None
            continue
        if region is not None:
            region.append(line)
    if region is not None:
        yield region


def modsRow_tokenize(line: str, count: int) -> Optional[list[str]]:
    """Whitespace tokenization for id-keyed rows.

    Three or more columns: first token, middle text, last token.
    Otherwise: first token, remaining text.
    """
    raw = line.strip().split()
    want = 3 if count >= 3 else 2
    if len(raw) < want:
        return None
    if want == 3:
        cells = [raw[0], " ".join(raw[1:-1]), raw[-1]]
    else:
        cells = [raw[0], " ".join(raw[1:])]
    return cells_fit(cells, count)


def modsBlock_parse(tag: str, lines: list[str], i: int) -> tuple[OptionTable, int]:
    """Parse one `{ID}` block whose start tag was at `lines[i - 1]`."""
    headers: list[str] = []
    while i < len(lines):
        line = lines[i].rstrip()
        if not line.strip():
            i += 1
            continue
        if not _end_re.match(line) and ">" in line:
            headers = [h.upper() for h in header_split(line)]
            i += 1
        break

    if not headers:
        headers = ["VALUE", "NAME"]

    rows: list[OptionRow] = []
    while i < len(lines):
        line = lines[i].rstrip()
        if _end_re.match(line):
            i += 1
            break
        if _start_re.match(line):
            LOG(f"Option block {{{tag}}} is not closed before the next block")
            break
        i += 1
        if not line.strip() or line.lstrip().startswith(";"):
            continue
        cells = modsRow_tokenize(line, len(headers))
        if cells is None:
            LOG(f"Option block {{{tag}}}: row skipped, too few fields: {line!r}")
            continue
        rows.append(OptionRow(cells=cells))

    return OptionTable(name=tag, headers=headers, rows=rows), i


def text_withoutMods(text: str) -> str:
    """The text with every `[MODS:]` section removed."""
    kept: list[str] = []
    inside: bool = False
    for line in text_normalize(text).split("\n"):
        name = header_match(line.strip())
        if name is not None:
            inside = name_isModsHeader(name)
        if not inside:
            kept.append(line)
    return "\n".join(kept)


def tables_parseMods(text: str) -> dict[str, OptionTable]:
    """Parse the id-keyed `{ID}` ... `{\\ID}` blocks of `[MODS:]` sections."""
    tables: dict[str, OptionTable] = {}
    if not text:
        return tables
    for region in modsRegions_find(text_normalize(text).split("\n")):
        i = 0
        while i < len(region):
            m = _start_re.match(region[i])
            i += 1
            if not m:
                continue
            table, i = modsBlock_parse(m.group(1).strip(), region, i)
            table_keep(tables, table)
    return tables


class TableCatalog:
    """Case-insensitive lookup of option tables by token name.

    Inline tables and `[MODS:]` tables are merged; when both define the
    same name, the richer table wins. Blocks inside `[MODS:]` are
    read with the id-keyed grammar only.
    """

    def __init__(self: Self, tables: Optional[dict[str, OptionTable]] = None) -> None:
        self.tables: dict[str, OptionTable] = {}
        for table in (tables or {}).values():
            table_keep(self.tables, table)

    @classmethod
    def from_text(cls, text: str) -> "TableCatalog":
        catalog = cls(tables_parseInline(text_withoutMods(text)))
        for table in tables_parseMods(text).values():
            table_keep(catalog.tables, table)
        LOG(f"Table catalog holds {len(catalog)} table(s)")
        return catalog

    def table_get(self: Self, name: str) -> Optional[OptionTable]:
        return self.tables.get((name or "").upper())

    def names(self: Self) -> list[str]:
        return [t.name for t in self.tables.values()]

    def __contains__(self: Self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self.tables

    def __len__(self: Self) -> int:
        return len(self.tables)
