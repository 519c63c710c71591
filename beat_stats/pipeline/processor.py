"""Process individual custom level folders into beatmap stats records."""

import logging
from pathlib import Path
from typing import Mapping, Sequence

from beat_stats.analysis.density import analyze_density
from beat_stats.errors import DuplicateDifficulty
from beat_stats.parsers.beatmap_parser import find_info_dat, normalize_notes
from beat_stats.parsers.dat_reader import read_dat_file
from beat_stats.parsers.info_parser import parse_info
from beat_stats.pipeline.identity import ContentIdentity
from beat_stats.schemas.normalized import BeatmapRecord, DifficultyStats, ScoreRecord

logger = logging.getLogger(__name__)

ScoreIndex = Mapping[str, Sequence[ScoreRecord]]


def process_map_folder(folder: Path, scores_by_level: ScoreIndex | None = None) -> BeatmapRecord:
    """Parse, hash and analyze one map folder, then attach its scores.

    Every error is raised to the caller; a malformed map aborts the run.
    """
    info_path = find_info_dat(folder)
    logger.debug("Processing %s", info_path)

    identity = ContentIdentity()
    info_data = read_dat_file(info_path, identity)
    record, entries = parse_info(info_data, where=info_path)

    for entry in entries:
        dat_path = folder / entry.filename
        logger.debug(
            "Processing %s char=%s diff=%s", dat_path, entry.characteristic, entry.difficulty
        )
        beatmap_data = read_dat_file(dat_path, identity)
        notes = normalize_notes(beatmap_data, where=dat_path)
        density = analyze_density(notes, record.bpm)
        record.duration_seconds = max(record.duration_seconds, density.duration_seconds)

        difficulties = record.characteristics.setdefault(entry.characteristic, {})
        if entry.difficulty in difficulties:
            raise DuplicateDifficulty(
                f"{info_path}: {entry.characteristic}/{entry.difficulty} is listed more than once"
            )
        difficulties[entry.difficulty] = DifficultyStats(
            notes_per_10_seconds=density.notes_per_10_seconds,
            notes_per_second=density.notes_per_second,
            note_count=density.note_count,
        )

    record.id = identity.level_id
    if scores_by_level:
        attach_scores(record, scores_by_level.get(record.id, ()))
    return record


def attach_scores(record: BeatmapRecord, scores: Sequence[ScoreRecord]) -> int:
    """Copy matching scores into the record's slots. Returns the number applied.

    Scores for a slot the map no longer defines are skipped.
    """
    applied = 0
    for score in scores:
        slot = record.slot(score.characteristic, score.difficulty_name)
        if slot is None:
            logger.debug(
                "Skipping score processing for id=%s char=%s diff=%s",
                record.id, score.characteristic, score.difficulty_name,
            )
            continue
        slot.apply_score(score)
        applied += 1
    return applied
