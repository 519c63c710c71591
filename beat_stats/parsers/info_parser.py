"""Parse v2 Info.dat manifests into song metadata and difficulty entries."""

from typing import NamedTuple

from beat_stats.errors import MissingRequiredField
from beat_stats.schemas.fields import get_float, get_int, get_list, get_str
from beat_stats.schemas.normalized import DIFFICULTY_NAMES, BeatmapRecord


class DifficultyEntry(NamedTuple):
    characteristic: str
    difficulty: str
    filename: str


def difficulty_name_for_rank(rank: int, where: object = "manifest") -> str:
    """Map a ``_difficultyRank`` (0/2/4/6/8, or the game's 1/3/5/7/9) to its name."""
    index = rank // 2
    if not 0 <= index < len(DIFFICULTY_NAMES):
        raise MissingRequiredField(f"{where}: _difficultyRank {rank} is out of range")
    return DIFFICULTY_NAMES[index]


def parse_info(
    info_data: dict, where: object = "manifest"
) -> tuple[BeatmapRecord, list[DifficultyEntry]]:
    """Parse Info.dat content.

    Returns a BeatmapRecord holding the song metadata (its id is left empty
    until every file has been hashed) and the difficulty entries in manifest
    order.
    """
    bpm = get_float(info_data, "_beatsPerMinute", where)
    if bpm <= 0:
        raise MissingRequiredField(f"{where}: _beatsPerMinute must be positive, got {bpm}")

    record = BeatmapRecord(
        id="",
        song=get_str(info_data, "_songName", where),
        artist=get_str(info_data, "_songAuthorName", where),
        mapper=get_str(info_data, "_levelAuthorName", where),
        bpm=bpm,
        environment=get_str(info_data, "_environmentName", where),
    )

    entries: list[DifficultyEntry] = []
    for bset in get_list(info_data, "_difficultyBeatmapSets", where):
        characteristic = get_str(bset, "_beatmapCharacteristicName", where)

        for bmap in get_list(bset, "_difficultyBeatmaps", where):
            entries.append(DifficultyEntry(
                characteristic=characteristic,
                difficulty=difficulty_name_for_rank(
                    get_int(bmap, "_difficultyRank", where), where
                ),
                filename=get_str(bmap, "_beatmapFilename", where),
            ))

    return record, entries
