"""
MODPATCH Main Module.

This module serves as the main entry point for MODPATCH, a toolkit for
save-editor patch files: it parses the patch text, lists code blocks and
option tables, fills placeholder tokens with encoded values and exports the
result for the external patch applier.

Features:
- Inspects patch files (header fields, code blocks, option tables)
- Fills AMOUNT and named tokens interactively or from scripted answers
- Restores filled blocks from the tokenized originals in the file
- Exports paired hex words and builds patch text for selected blocks
- Handles graceful termination on user interruption

Examples:
    List code blocks:
        $ modpatch blocks game.savepatch

    Fill block 3 from the command line:
        $ modpatch fill game.savepatch 3 --value 999 --value Potion

    Build the patch text for blocks 1 to 3 and 5:
        $ modpatch patch game.savepatch --select 1-3,5 -o out.txt

Environment:
    MODPATCH_BEQUIET, MODPATCH_DETAILEDOUTPUT, MODPATCH_PADPAIRS,
    MODPATCH_PRESERVELINES, MODPATCH_CONFIRMRESTORE, MODPATCH_SKIPMISSING
"""

import signal
import sys
from types import FrameType
from typing import Final, Optional
import click
from rich.console import Console
from modpatch.commands.app import cli
from modpatch.lib.log import LOG

__version__: Final[str] = "0.1.0"

console: Final[Console] = Console()

cli = click.version_option(__version__, "-V", "--version", prog_name="modpatch")(cli)


def signal_handle(sig: int, frame: Optional[FrameType]) -> None:
    """Signal handler for graceful interruption.

    Args:
        sig: Signal number
        frame: Current stack frame
    """
    console.print("\n[bold cyan]Interrupt received. Exiting.[/bold cyan]")
    sys.exit(130)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the MODPATCH command line.

    Args:
        argv: Arguments to use instead of sys.argv[1:]

    Note:
        Registers the SIGINT handler, then hands control to the click group.
        Unexpected errors are logged and reported with exit code 1.
    """
    signal.signal(signal.SIGINT, signal_handle)

    try:
        cli.main(args=argv, prog_name="modpatch", standalone_mode=True)
    except KeyboardInterrupt:
        console.print("\n[bold cyan]Program interrupted by user. Exiting.[/bold cyan]")
    except Exception as e:
        LOG(f"Unhandled exception in main: {e}")
        console.print(f"[bold red]An unexpected error occurred: {e}[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
