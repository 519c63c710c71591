"""Load the optional reference table of official (OST/DLC) level stats.

The table is a CSV with one header row and one row per level::

    0 song, 1 artist, 2 mapper, 3 bpm, 4 environment, 5 "MM:SS" duration,
    then one 8-column block per difficulty starting at 8*d + 5, whose
    columns +7 and +8 hold that difficulty's NPS and note count,
    46 level id

Every column is read as a string and converted here, so odd cells fail with
the offending row and column rather than being silently re-typed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pyarrow as pa
import pyarrow.csv as pacsv

from beat_stats.errors import MissingOrMalformedFile, MissingRequiredField
from beat_stats.schemas.normalized import DIFFICULTY_NAMES

logger = logging.getLogger(__name__)

LEVEL_ID_COLUMN = 46
DURATION_COLUMN = 5
BLOCK_WIDTH = 8
BLOCK_OFFSET = 5
NPS_IN_BLOCK = 7
NOTES_IN_BLOCK = 8

# Autogenerated pyarrow column names are f0, f1, ...; force all of them to string.
_MAX_COLUMNS = 128
_STRING_COLUMNS = {f"f{i}": pa.string() for i in range(_MAX_COLUMNS)}


@dataclass
class ReferenceDifficulty:
    notes_per_second: float | None = None
    note_count: int | None = None


@dataclass
class ReferenceLevel:
    level_id: str
    song: str
    artist: str
    mapper: str
    bpm: float
    environment: str
    duration_seconds: float
    difficulties: dict[int, ReferenceDifficulty] = field(default_factory=dict)

    def difficulty(self, index: int) -> ReferenceDifficulty:
        return self.difficulties.get(index, ReferenceDifficulty())


def difficulty_columns(index: int) -> tuple[int, int]:
    """Column indices of (NPS, note count) for a difficulty index."""
    offset = BLOCK_WIDTH * index + BLOCK_OFFSET
    return offset + NPS_IN_BLOCK, offset + NOTES_IN_BLOCK


def parse_duration(text: str, where: object = "duration") -> float:
    """Parse an "MM:SS" cell into seconds. A blank cell means 0."""
    text = text.strip()
    if not text:
        return 0.0
    minutes, sep, seconds = text.partition(":")
    try:
        if not sep:
            return float(minutes)
        return float(minutes) * 60.0 + float(seconds)
    except ValueError as exc:
        raise MissingRequiredField(f"{where}: invalid MM:SS duration {text!r}") from exc


def _optional_number(text: str, kind: type, where: object):
    text = text.strip()
    if not text:
        return None
    try:
        return kind(text)
    except ValueError as exc:
        raise MissingRequiredField(f"{where}: expected a number, got {text!r}") from exc


def parse_reference_row(row: list[str], where: object = "row") -> ReferenceLevel:
    if len(row) <= LEVEL_ID_COLUMN:
        raise MissingRequiredField(
            f"{where}: expected at least {LEVEL_ID_COLUMN + 1} columns, got {len(row)}"
        )

    bpm = _optional_number(row[3], float, f"{where} column 3")
    level = ReferenceLevel(
        level_id=row[LEVEL_ID_COLUMN],
        song=row[0],
        artist=row[1],
        mapper=row[2],
        bpm=bpm if bpm is not None else 0.0,
        environment=row[4],
        duration_seconds=parse_duration(row[DURATION_COLUMN], f"{where} column {DURATION_COLUMN}"),
    )
    for index in range(len(DIFFICULTY_NAMES)):
        nps_col, notes_col = difficulty_columns(index)
        level.difficulties[index] = ReferenceDifficulty(
            notes_per_second=_optional_number(row[nps_col], float, f"{where} column {nps_col}"),
            note_count=_optional_number(row[notes_col], int, f"{where} column {notes_col}"),
        )
    return level


def _has_data_rows(path: Path) -> bool:
    """True when anything but blank lines follows the header row."""
    try:
        lines = path.read_bytes().splitlines()
    except OSError as exc:
        raise MissingOrMalformedFile(f"{path}: cannot read reference table ({exc})") from exc
    return any(line.strip() for line in lines[1:])


def load_reference_table(path: Path) -> dict[str, ReferenceLevel] | None:
    """Read the reference CSV into a level-id keyed dict.

    Returns None (after a warning) when the file does not exist, and an
    empty dict when it holds no rows after the header.
    """
    if not path.is_file():
        logger.warning("No %s found, official level info will be scores only", path)
        return None

    if not _has_data_rows(path):
        logger.warning("%s has no level rows, official level info will be scores only", path)
        return {}

    try:
        table = pacsv.read_csv(
            path,
            read_options=pacsv.ReadOptions(skip_rows=1, autogenerate_column_names=True),
            convert_options=pacsv.ConvertOptions(
                column_types=_STRING_COLUMNS, strings_can_be_null=False,
            ),
        )
    except (pa.ArrowInvalid, OSError) as exc:
        raise MissingOrMalformedFile(f"{path}: cannot read reference table ({exc})") from exc

    columns = [column.to_pylist() for column in table.columns]
    levels: dict[str, ReferenceLevel] = {}
    for row_number, row in enumerate(zip(*columns), start=2):
        level = parse_reference_row(list(row), where=f"{path} row {row_number}")
        levels[level.level_id] = level

    logger.info("Loaded %d reference levels from %s", len(levels), path)
    return levels
