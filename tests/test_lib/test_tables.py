"""Tests for the option table parsers and the table catalog."""

from typing import Final
import pytest
from modpatch.lib.tables import (
    TableCatalog,
    line_isBareTag,
    modsRow_tokenize,
    row_split,
    table_parseBody,
    tables_parseInline,
    tables_parseMods,
)

MODS_TEXT: Final[str] = """[Cheat]
11111111 0000{ITEM}
[MODS:]
{ITEM}
Value>Name>Type
0001 Small Potion Heal
0002 Ether Magic
0003 Lonely
{\\ITEM}
{WEAPON}
0010 Sword
{\\WEAPON}
[After]
22222222 33333333
"""


def test_inline_value_name_table() -> None:
    tables = tables_parseInline("{MOD}\nValue>Name\n0001=Potion\n0002=Ether\n{/MOD}\n")
    table = tables["MOD"]
    assert table.name == "MOD"
    assert table.headers == ["Value", "Name"]
    assert [r.cells for r in table.rows] == [["0001", "Potion"], ["0002", "Ether"]]


@pytest.mark.parametrize(
    "header,count",
    [("A>B>C", 3), ("A>>B", 2), ("A> >B>", 2), ("Value", 1)],
)
def test_header_column_count(header: str, count: int) -> None:
    table = table_parseBody("X", f"{header}\n1\n")
    assert len(table.headers) == count


def test_single_column_expanded_by_pair_row() -> None:
    table = table_parseBody("X", "Value\n0001=Potion\n")
    assert table.headers == ["Value", "Name"]
    assert table.rows[0].cells == ["0001", "Potion"]


def test_single_column_kept_without_pair_row() -> None:
    table = table_parseBody("X", "Value\n0001\n")
    assert table.headers == ["Value"]
    assert table.rows[0].cells == ["0001"]


def test_comments_and_blanks_skipped() -> None:
    table = table_parseBody("X", "; note\n\nValue>Name\n0001=A\n; skipped\n\n0002=B\n")
    assert table.headers == ["Value", "Name"]
    assert [r.value for r in table.rows] == ["0001", "0002"]


def test_empty_body_falls_back_to_value_column() -> None:
    table = tables_parseInline("{EMPTY}\n{/EMPTY}\n")["EMPTY"]
    assert table.headers == ["Value"]
    assert table.rows == []


def test_backslash_closer_accepted() -> None:
    tables = tables_parseInline("{MOD}\nValue>Name\n1=One\n{\\MOD}\n")
    assert "MOD" in tables


def test_repeated_name_richer_wins() -> None:
    text = "{MOD}\nValue\n0001\n0002\n{/MOD}\n{mod}\nValue>Name\n0001>One\n{/mod}\n"
    table = tables_parseInline(text)["MOD"]
    assert table.headers == ["Value", "Name"]
    assert len(table.rows) == 1


def test_repeated_name_tie_on_columns_more_rows_wins() -> None:
    text = "{MOD}\nValue>Name\n1=A\n{/MOD}\n{MOD}\nValue>Name\n1=A\n2=B\n{/MOD}\n"
    assert len(tables_parseInline(text)["MOD"].rows) == 2


@pytest.mark.parametrize(
    "line,count,cells",
    [
        ("A\tB=C>D", 2, ["A", "B=C>D"]),
        ("A=B=C", 2, ["A", "B=C"]),
        ("A=B", 3, ["A", "B", ""]),
        ("A>B>C", 2, ["A", "B"]),
        ("A  B C", 2, ["A", "B C"]),
        ("A B C", 3, ["A", "B", "C"]),
        (" A\t B ", 2, ["A", "B"]),
    ],
)
def test_row_split_precedence(line: str, count: int, cells: list[str]) -> None:
    assert row_split(line, count) == cells


def test_mods_tables_parsed_inside_region() -> None:
    tables = tables_parseMods(MODS_TEXT)
    item = tables["ITEM"]
    assert item.headers == ["VALUE", "NAME", "TYPE"]
    assert [r.cells for r in item.rows] == [
        ["0001", "Small Potion", "Heal"],
        ["0002", "Ether", "Magic"],
    ]


def test_mods_header_needs_separator() -> None:
    weapon = tables_parseMods(MODS_TEXT)["WEAPON"]
    assert weapon.headers == ["VALUE", "NAME"]
    assert weapon.rows[0].cells == ["0010", "Sword"]


def test_mods_blocks_ignored_outside_region() -> None:
    assert tables_parseMods("[Cheat]\n{Z}\n0001 A\n{\\Z}\n") == {}


@pytest.mark.parametrize(
    "line,count,cells",
    [
        ("0001 Small Potion Heal", 3, ["0001", "Small Potion", "Heal"]),
        ("0001 Small Potion", 2, ["0001", "Small Potion"]),
        ("0001 A B", 4, ["0001", "A", "B", ""]),
        ("0001", 2, None),
    ],
)
def test_mods_row_tokenize(line: str, count: int, cells: list[str] | None) -> None:
    assert modsRow_tokenize(line, count) == cells


def test_catalog_reads_mods_region_with_id_keyed_grammar() -> None:
    catalog = TableCatalog.from_text(MODS_TEXT)
    assert "item" in catalog
    assert "Weapon" in catalog
    assert len(catalog) == 2
    assert catalog.table_get("item").rows[0].cells == ["0001", "Small Potion", "Heal"]
    assert catalog.table_get("WEAPON").headers == ["VALUE", "NAME"]
    assert catalog.table_get("missing") is None


@pytest.mark.parametrize(
    "line,expected",
    [
        ("{MOD}", True),
        ("  {/MOD} ", True),
        ("{\\MOD}", True),
        ("11111111 {MOD}", False),
        ("{AMOUNT:00FF}", False),
    ],
)
def test_bare_tag_lines(line: str, expected: bool) -> None:
    assert line_isBareTag(line) is expected


def test_catalog_richer_table_wins_across_grammars() -> None:
    text = (
        "[Cheat]\n11111111 {MOD}\n{MOD}\nValue>Name>Note\n1>One>x\n{/MOD}\n"
        "[MODS:]\n{MOD}\nValue>Name\n0001 One\n0002 Two\n{\\MOD}\n"
    )
    table = TableCatalog.from_text(text).table_get("mod")
    assert table.headers == ["Value", "Name", "Note"]
    assert table.rows[0].cells == ["1", "One", "x"]
