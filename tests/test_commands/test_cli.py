"""
Tests for the MODPATCH command line.
"""

from pathlib import Path
from typing import Final, Generator
import io
from contextlib import ExitStack
import pytest
import click
from unittest.mock import patch
from click.testing import CliRunner
from rich.console import Console
from modpatch.commands.app import cli

SAMPLE: Final[str] = """;CUSA00001
;PS4 Test Game
;source: example.com
[Max Money]
12345678 {AMOUNT:0000FFFF}
[Item]
11111111 0000{ITEM} {AMOUNT:00}
{ITEM}
Value>Name
0001=Potion
0002=Ether
{/ITEM}
[Missing Table]
11111111 {NOPE} {AMOUNT:00}
[MODS:]
{WEAPON}
0010 Sword
{\\WEAPON}
[Plain]
11223344 55667788
99AABBCC
"""

COMMAND_MODULES: Final[list[str]] = ["base", "document", "fill", "export"]


@pytest.fixture
def runner() -> CliRunner:
    """Provides a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def patch_file(tmp_path: Path) -> Path:
    path = tmp_path / "game.savepatch"
    path.write_text(SAMPLE, encoding="utf-8")
    return path


@pytest.fixture
def captured_output() -> Generator[io.StringIO, None, None]:
    """Captures the console output of every command module."""
    output = io.StringIO()
    console = Console(file=output, width=200)
    with ExitStack() as stack:
        for module in COMMAND_MODULES:
            stack.enter_context(patch(f"modpatch.commands.{module}.console", console))
        yield output


def test_cli_group_structure() -> None:
    assert isinstance(cli, click.Group)
    for cmd in ["info", "blocks", "tables", "fill", "reset", "export", "patch"]:
        assert cmd in cli.commands


def test_cli_help(runner: CliRunner, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    output = captured_output.getvalue()
    assert "MODPATCH Save-Patch Toolkit" in output
    assert "fill" in output


def test_command_help(runner: CliRunner, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["fill", "--help"])
    assert result.exit_code == 0
    assert "--value" in captured_output.getvalue()


def test_info(runner: CliRunner, patch_file: Path, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["info", str(patch_file)])
    assert result.exit_code == 0
    output = captured_output.getvalue()
    assert "CUSA00001" in output
    assert "Test Game" in output
    assert "example.com" in output


def test_blocks_marks_and_hides(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["blocks", str(patch_file)])
    assert result.exit_code == 0
    output = captured_output.getvalue()
    assert "-M- Max Money" in output
    assert "-M- Plain" not in output
    assert "Plain" in output
    assert "MODS:" not in output


def test_tables_list_and_show(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["tables", str(patch_file)])
    assert result.exit_code == 0
    assert "ITEM" in captured_output.getvalue()
    assert "WEAPON" in captured_output.getvalue()

    result = runner.invoke(cli, ["tables", str(patch_file), "weapon"])
    assert result.exit_code == 0
    assert "Sword" in captured_output.getvalue()


def test_tables_unknown_name(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["tables", str(patch_file), "nope"])
    assert result.exit_code == 1
    assert "No option table named 'nope'" in captured_output.getvalue()


def test_fill_with_values(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO, tmp_path: Path
) -> None:
    out = tmp_path / "item.txt"
    result = runner.invoke(
        cli, ["fill", str(patch_file), "2", "-v", "5", "-v", "Ether", "-o", str(out)]
    )
    assert result.exit_code == 0
    output = captured_output.getvalue()
    assert "Resolved 2 token(s)" in output
    assert "11111111 00000002 05" in output
    assert "Item (5; Ether)" in output
    assert out.read_text(encoding="utf-8").startswith("11111111 00000002 05\n")


def test_fill_skips_missing_table(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["fill", str(patch_file), "3", "--value", "3"])
    assert result.exit_code == 0
    assert "11111111  03" in captured_output.getvalue()


def test_fill_cancelled_when_values_run_out(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["fill", str(patch_file), "2", "--value", "5"])
    assert result.exit_code == 0
    assert "Cancelled" in captured_output.getvalue()


def test_fill_unknown_block(runner: CliRunner, patch_file: Path) -> None:
    result = runner.invoke(cli, ["fill", str(patch_file), "99", "--value", "1"])
    assert result.exit_code == 2


def test_fill_missing_file(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["fill", str(tmp_path / "absent.txt"), "1"])
    assert result.exit_code == 2


def test_reset(runner: CliRunner, patch_file: Path, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["reset", str(patch_file), "1"])
    assert result.exit_code == 0
    assert "12345678 {AMOUNT:0000FFFF}" in captured_output.getvalue()


def test_export_block(runner: CliRunner, patch_file: Path, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["export", str(patch_file), "--block", "5"])
    assert result.exit_code == 0
    assert captured_output.getvalue() == "[Plain]\n11223344 55667788\n99AABBCC 00000000\n"


def test_export_no_pad(runner: CliRunner, patch_file: Path, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["export", str(patch_file), "-b", "5", "--no-pad"])
    assert result.exit_code == 0
    assert captured_output.getvalue().endswith("\n99AABBCC\n")


def test_export_all_skips_mods(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["export", str(patch_file)])
    assert result.exit_code == 0
    output = captured_output.getvalue()
    assert "[Max Money]" in output
    assert "[MODS:]" not in output


def test_patch_output(runner: CliRunner, patch_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "patch.txt"
    result = runner.invoke(cli, ["patch", str(patch_file), "--select", "5", "-o", str(out)])
    assert result.exit_code == 0
    assert out.read_text() == "[Plain]\n11223344 55667788\n99AABBCC 00000000\n"


def test_patch_refuses_unresolved(
    runner: CliRunner, patch_file: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["patch", str(patch_file), "--select", "1,5"])
    assert result.exit_code == 1
    assert "Unresolved tokens remain" in captured_output.getvalue()


@pytest.mark.parametrize("selection", ["x", "0", "", "9"])
def test_patch_bad_selection(runner: CliRunner, patch_file: Path, selection: str) -> None:
    result = runner.invoke(cli, ["patch", str(patch_file), "--select", selection])
    assert result.exit_code == 2
