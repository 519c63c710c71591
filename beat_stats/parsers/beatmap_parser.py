"""Dispatch a difficulty file to its version-specific note parser."""

import logging
from pathlib import Path

from beat_stats.errors import MissingOrMalformedFile
from beat_stats.schemas.detection import detect_beatmap_version
from beat_stats.schemas.normalized import BeatmapNote
from beat_stats.schemas.v2 import parse_v2_notes, parse_v26_notes
from beat_stats.schemas.v3 import parse_v3_notes

logger = logging.getLogger(__name__)

_NOTE_PARSERS = {
    "2": parse_v2_notes,
    "2.6": parse_v26_notes,
    "3": parse_v3_notes,
}

MANIFEST_NAMES = ("Info.dat", "info.dat", "INFO.dat")


def find_info_dat(folder: Path) -> Path:
    """Find Info.dat in a folder, case-insensitive."""
    for name in MANIFEST_NAMES:
        path = folder / name
        if path.is_file():
            return path
    raise MissingOrMalformedFile(f"No Info.dat found in {folder}")


def normalize_notes(beatmap_data: dict, where: object = "beatmap") -> list[BeatmapNote]:
    """Convert a decoded difficulty file into a beat-ordered note sequence."""
    version = detect_beatmap_version(beatmap_data, where)
    notes = _NOTE_PARSERS[version](beatmap_data, where)
    logger.debug("Parsed %d notes from %s (schema %s)", len(notes), where, version)
    return notes
