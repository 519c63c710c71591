"""Resolve score records that no local custom level accounted for.

Runs single-threaded after the worker pool has joined. Pending scores are
first matched against the reference table (official levels, Standard
characteristic only), and whatever is left becomes an orphan record built
from the scores alone. When an official level also has non-Standard scores,
both a reference record and an orphan record are emitted for the same id.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from beat_stats.pipeline.processor import attach_scores
from beat_stats.schemas.normalized import STANDARD, BeatmapRecord, DifficultyStats, ScoreRecord
from beat_stats.sources.player_data import group_scores_by_level
from beat_stats.sources.reference_table import ReferenceLevel

logger = logging.getLogger(__name__)


def group_pending_scores(
    scores: Iterable[ScoreRecord], processed_ids: set[str]
) -> dict[str, list[ScoreRecord]]:
    """Group scores whose level id was not produced by the pool."""
    return group_scores_by_level(s for s in scores if s.level_id not in processed_ids)


def build_reference_record(level: ReferenceLevel, scores: Iterable[ScoreRecord]) -> BeatmapRecord:
    """Record for an official level, with densities taken from the table."""
    difficulties: dict[str, DifficultyStats] = {}
    for score in scores:
        known = level.difficulty(score.difficulty)
        stats = DifficultyStats(
            notes_per_second=known.notes_per_second,
            note_count=known.note_count,
        )
        stats.apply_score(score)
        logger.debug("Got reference score for id=%s diff=%s", level.level_id, score.difficulty_name)
        difficulties[score.difficulty_name] = stats

    return BeatmapRecord(
        id=level.level_id,
        song=level.song,
        artist=level.artist,
        mapper=level.mapper,
        bpm=level.bpm,
        environment=level.environment,
        duration_seconds=level.duration_seconds,
        characteristics={STANDARD: difficulties},
    )


def build_orphan_record(level_id: str, scores: Sequence[ScoreRecord]) -> BeatmapRecord:
    """Record with no metadata, holding only whatever scores exist."""
    record = BeatmapRecord(id=level_id)
    for score in scores:
        record.characteristics.setdefault(score.characteristic, {})[
            score.difficulty_name
        ] = DifficultyStats()
    attach_scores(record, scores)
    return record


def resolve_reference(
    pending: dict[str, list[ScoreRecord]],
    reference: Mapping[str, ReferenceLevel],
) -> list[BeatmapRecord]:
    """Build reference records, removing the scores they consume from *pending*.

    An id leaves *pending* only when Standard was its only pending
    characteristic.
    """
    records: list[BeatmapRecord] = []
    for level_id in list(pending):
        level = reference.get(level_id)
        if level is None:
            continue
        scores = pending[level_id]
        standard = [s for s in scores if s.characteristic == STANDARD]
        if not standard:
            continue
        logger.debug("Reference level id=%s found num_scores=%d", level_id, len(scores))

        records.append(build_reference_record(level, standard))
        remaining = [s for s in scores if s.characteristic != STANDARD]
        if remaining:
            pending[level_id] = remaining
        else:
            del pending[level_id]
    return records


def reconcile(
    records: list[BeatmapRecord],
    scores: Iterable[ScoreRecord],
    reference: Mapping[str, ReferenceLevel] | None = None,
) -> list[BeatmapRecord]:
    """Append reference and orphan records for every unaccounted score.

    Args:
        records: Records produced by the worker pool.
        scores: Every score record of the player.
        reference: Optional level-id keyed reference table.

    Returns:
        A new list: the pool records, then reference records, then orphans.
    """
    processed_ids = {r.id for r in records}
    pending = group_pending_scores(scores, processed_ids)
    logger.info("%d levels have scores but no local custom level", len(pending))

    merged = list(records)
    if reference:
        reference_records = resolve_reference(pending, reference)
        logger.info("Resolved %d levels from the reference table", len(reference_records))
        merged.extend(reference_records)

    for level_id, level_scores in pending.items():
        merged.append(build_orphan_record(level_id, level_scores))
    logger.info("Added %d orphan levels", len(pending))
    return merged
