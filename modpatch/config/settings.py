"""
settings.py

This module provides application configuration management for the MODPATCH
application.

Features:
- Centralized application configuration using Pydantic settings
- Constants for application-wide use
- Location of the per-user configuration directory

Usage:
Import appsettings for application configuration values.
"""

from pathlib import Path
from typing import Final
from appdirs import user_config_dir
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

# Console instance for rich output
console: Final[Console] = Console()

# Set up the configuration directory using appdirs
CONFIG_DIR: Final[Path] = Path(user_config_dir("modpatch", ""))
HISTORY_FILE: Final[Path] = CONFIG_DIR / "history"


class App(BaseSettings):
    """
    Application settings model.

    Provides a centralized configuration for application behavior and features.
    Settings can be overridden through environment variables with MODPATCH_ prefix.

    Attributes:
        beQuiet: Suppress detailed logging output
        detailedOutput: Print every resolution step
        padPairs: Pad an unpaired trailing hex word with 00000000 on export
        preserveLines: Keep blank lines in place on export
        confirmRestore: Ask before restoring a block from the file text
        skipMissing: Skip tokens whose option table is missing (scripted fills)
        historyLength: Number of prompt history entries kept
    """

    beQuiet: bool = False
    detailedOutput: bool = False

    padPairs: bool = True
    preserveLines: bool = True

    confirmRestore: bool = True
    skipMissing: bool = True

    historyLength: int = 1000

    model_config = SettingsConfigDict(
        env_prefix="MODPATCH_",  # Environment variables with this prefix override settings
        case_sensitive=False,  # Allow case-insensitive environment variables
        extra="allow",  # Allow additional attributes not defined in the model
    )


def configDir_ensure() -> Path:
    """
    Ensure the configuration directory exists and return it.

    Returns:
        Path: The created or existing path
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


# Create the application settings instance
appsettings: Final[App] = App()
