"""Tests for the MODPATCH entry point."""

from pathlib import Path
import pytest
from click.testing import CliRunner
from unittest.mock import patch
from modpatch.modpatch import __version__, cli, main, signal_handle


def test_version_option() -> None:
    result = CliRunner().invoke(cli, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_main_runs_command(tmp_path: Path) -> None:
    path = tmp_path / "game.savepatch"
    path.write_text(";CUSA00001\n;Game\n[A]\n11111111 22222222\n", encoding="utf-8")
    with patch("modpatch.modpatch.signal.signal") as mock_signal:
        with pytest.raises(SystemExit) as exc:
            main(["info", str(path)])
    assert exc.value.code == 0
    mock_signal.assert_called_once()


def test_main_usage_error() -> None:
    with patch("modpatch.modpatch.signal.signal"):
        with pytest.raises(SystemExit) as exc:
            main(["nonsense"])
    assert exc.value.code == 2


def test_main_reports_unexpected_errors() -> None:
    with (
        patch("modpatch.modpatch.signal.signal"),
        patch.object(cli, "main", side_effect=RuntimeError("boom")),
        patch("modpatch.modpatch.console") as mock_console,
    ):
        with pytest.raises(SystemExit) as exc:
            main([])
    assert exc.value.code == 1
    assert "boom" in mock_console.print.call_args[0][0]


def test_signal_handle_exits() -> None:
    with patch("modpatch.modpatch.console"):
        with pytest.raises(SystemExit) as exc:
            signal_handle(2, None)
    assert exc.value.code == 130
