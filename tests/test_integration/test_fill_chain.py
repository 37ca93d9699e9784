"""End-to-end: parse a patch file, fill its blocks, build the patch text."""

from typing import Final
from modpatch.lib.document import document_parse
from modpatch.lib.engine import ResolutionSession, block_openValues
from modpatch.lib.export import patch_build, selection_parse, text_export
from modpatch.lib.input import ScriptedPrompter
from modpatch.lib.tables import TableCatalog
from modpatch.models.dataModel import StepOutcome

TEXT: Final[str] = """;CUSA07777
;PS4 Chain Test
[Money]
20A0B0C0 {AMOUNT:0000FFFF:HEX:LITTLE}
[Speed]
20A0B0D0 {AMOUNT::FLOAT:BIG}
[Name]
20A0B0E0 {AMOUNT:00000000:UTF08:BIG}
[Item]
20A0B0F0 000000{ITEM}
{ITEM}
Value>Name
01=Potion
02=Ether
{/ITEM}
"""


def test_fill_every_block_then_patch() -> None:
    doc = document_parse(TEXT)
    session = ResolutionSession()
    session.pristine_capture(TEXT)
    catalog = TableCatalog.from_text(TEXT)

    answers = {1: ["1000"], 2: ["1.5"], 3: ["ABCD"], 4: ["Ether"]}
    for ordinal, values in answers.items():
        result = block_openValues(doc.block_get(ordinal), session, catalog, ScriptedPrompter(values))
        assert result.outcome == StepOutcome.RESOLVED

    assert doc.block_get(1).lines == ["20A0B0C0 E8030000"]
    assert doc.block_get(2).lines == ["20A0B0D0 3FC00000"]
    assert doc.block_get(3).lines == ["20A0B0E0 41424344"]
    assert doc.block_get(4).lines[0] == "20A0B0F0 00000002"

    blocks = [doc.block_get(n) for n in selection_parse("1-4")]
    result = patch_build(blocks)
    assert result.success
    assert result.text.splitlines() == [
        "[Money (1000)]",
        "20A0B0C0 E8030000",
        "[Speed (1.5)]",
        "20A0B0D0 3FC00000",
        "[Name (ABCD)]",
        "20A0B0E0 41424344",
        "[Item (Ether)]",
        "20A0B0F0 00000002",
    ]


def test_export_of_filled_block_is_stable() -> None:
    doc = document_parse(TEXT)
    block = doc.block_get(1)
    block_openValues(block, ResolutionSession(), TableCatalog(), ScriptedPrompter(["7"]))
    once = text_export(block.text, preserve_lines=True, pad_pairs=True)
    assert once == "20A0B0C0 07000000"
    assert text_export(once, preserve_lines=True, pad_pairs=True) == once


def test_eight_byte_amount_reaches_the_patch() -> None:
    text = ";CUSA07777\n;PS4 Chain Test\n[Money]\n2000ABCD {AMOUNT:0000000000000000}\n"
    doc = document_parse(text)
    block = doc.block_get(1)
    result = block_openValues(block, ResolutionSession(), TableCatalog(), ScriptedPrompter(["1000"]))
    assert result.outcome == StepOutcome.RESOLVED
    assert block.lines == ["2000ABCD 00000000000003E8"]

    built = patch_build([block])
    assert built.success
    assert built.text == "[Money (1000)]\n2000ABCD 00000000\n000003E8 00000000\n"
