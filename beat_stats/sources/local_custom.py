"""Enumerate custom levels from a local Beat Saber installation."""

import logging
import os
import sys
from pathlib import Path

from beat_stats.errors import MissingOrMalformedFile
from beat_stats.parsers.beatmap_parser import MANIFEST_NAMES

logger = logging.getLogger(__name__)

GAME_DATA_SUBPATH = Path("Beat Saber_Data")
CUSTOM_LEVELS_SUBPATH = GAME_DATA_SUBPATH / "CustomLevels"


def default_game_path() -> Path:
    """Default Steam install location of the game on this platform."""
    if sys.platform == "win32":
        program_files = Path(os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)"))
        return program_files / "Steam" / "steamapps" / "common" / "Beat Saber"
    return Path("~/.steam/steam/steamapps/common/Beat Saber").expanduser()


def _has_manifest(folder: Path) -> bool:
    return any((folder / name).is_file() for name in MANIFEST_NAMES)


def find_custom_level_folders(beat_saber_path: Path) -> list[Path]:
    """Return every CustomLevels sub-folder that holds an Info.dat, sorted by name.

    A missing install is fatal. An install without a CustomLevels folder
    has no custom levels.
    """
    if not beat_saber_path.is_dir():
        raise MissingOrMalformedFile(f"Game install not found at {beat_saber_path}")
    game_data = beat_saber_path / GAME_DATA_SUBPATH
    if not game_data.is_dir():
        raise MissingOrMalformedFile(f"Game levels not found at {game_data}")

    custom_dir = beat_saber_path / CUSTOM_LEVELS_SUBPATH
    if not custom_dir.is_dir():
        logger.warning("CustomLevels directory not found: %s", custom_dir)
        return []

    folders = [
        folder
        for folder in sorted(custom_dir.iterdir())
        if folder.is_dir() and _has_manifest(folder)
    ]
    logger.info("Found %d custom levels in %s", len(folders), custom_dir)
    return folders
