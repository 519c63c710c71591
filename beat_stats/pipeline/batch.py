"""Orchestrate the full stats pipeline: scan, process, reconcile, write."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from functools import partial
from pathlib import Path

from beat_stats.errors import MissingOrMalformedFile, MissingRequiredField
from beat_stats.pipeline.pool import WorkerPool
from beat_stats.pipeline.processor import process_map_folder
from beat_stats.pipeline.reconcile import reconcile
from beat_stats.schemas.normalized import BeatmapRecord
from beat_stats.sources.local_custom import default_game_path, find_custom_level_folders
from beat_stats.sources.player_data import (
    default_save_path,
    group_scores_by_level,
    load_player_scores,
)
from beat_stats.sources.reference_table import load_reference_table
from beat_stats.storage.writer import OUTPUT_FORMATS, write_report

logger = logging.getLogger(__name__)

_PATH_FIELDS = ("save_path", "game_path", "reference_table", "output")


@dataclass
class StatsConfig:
    save_path: Path = field(default_factory=default_save_path)
    game_path: Path = field(default_factory=default_game_path)
    player_number: int = 0
    threads: int = 0  # 0 = one per CPU
    reference_table: Path = Path("ost.csv")
    output: Path = Path("stats.csv")
    output_format: str = "csv"
    show_progress: bool = True

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        data = asdict(self)
        for name in _PATH_FIELDS:
            data[name] = str(data[name])
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> StatsConfig:
        """Load config from JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MissingOrMalformedFile(f"{path}: cannot read config ({exc})") from exc
        if not isinstance(data, dict):
            raise MissingOrMalformedFile(f"{path}: config must be a JSON object")
        # Only pass known fields to handle forward/backward compat
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for name in _PATH_FIELDS:
            if name in kwargs:
                kwargs[name] = Path(kwargs[name]).expanduser()
        if kwargs.get("output_format", "csv") not in OUTPUT_FORMATS:
            raise MissingRequiredField(
                f"{path}: output_format must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got {kwargs['output_format']!r}"
            )
        return cls(**kwargs)


@dataclass
class PipelineResult:
    records: list[BeatmapRecord] = field(default_factory=list)
    custom_levels: int = 0
    total_rows: int = 0


def collect_records(config: StatsConfig) -> PipelineResult:
    """Run every stage except the report writer."""
    scores = load_player_scores(config.save_path, config.player_number)
    scores_by_level = group_scores_by_level(scores)
    folders = find_custom_level_folders(config.game_path)

    # 1. Custom levels, in parallel
    logger.info("Processing %d custom levels...", len(folders))
    pool = WorkerPool(
        partial(process_map_folder, scores_by_level=scores_by_level),
        threads=config.threads,
        show_progress=config.show_progress,
    )
    custom_records = pool.run(folders)

    # 2. Reference table and orphans
    logger.info("Resolving scores for levels that are not installed...")
    reference = load_reference_table(config.reference_table)
    return PipelineResult(
        records=reconcile(custom_records, scores, reference),
        custom_levels=len(custom_records),
    )


def run_pipeline(config: StatsConfig) -> PipelineResult:
    """Run the full pipeline and write the report.

    Nothing is written unless every stage succeeds.
    """
    result = collect_records(config)
    result.total_rows = write_report(result.records, config.output, config.output_format)
    logger.info(
        "Pipeline complete: %d levels (%d custom), %d rows",
        len(result.records), result.custom_levels, result.total_rows,
    )
    return result
