"""Write the merged beatmap stats report as CSV or Parquet."""

import logging
import math
from pathlib import Path

import pyarrow as pa
import pyarrow.csv as pacsv
import pyarrow.parquet as pq

from beat_stats.schemas.normalized import BeatmapRecord

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("csv", "parquet")

# --- Arrow schema ------------------------------------------------------------

STATS_SCHEMA = pa.schema(
    [
        pa.field("Song", pa.string()),
        pa.field("Artist", pa.string()),
        pa.field("Mapper", pa.string()),
        pa.field("BPM", pa.float64()),
        pa.field("Environment", pa.string()),
        pa.field("Duration", pa.string()),  # MM:SS
        pa.field("Characteristic", pa.string()),
        pa.field("Difficulty", pa.string()),
        pa.field("Notes", pa.int64()),
        pa.field("NPS", pa.float64()),
        pa.field("NP10S", pa.float64()),
        pa.field("Score", pa.int64()),
        pa.field("Combo", pa.string()),
        pa.field("Rank", pa.string()),
        pa.field("Plays", pa.int64()),
        pa.field("Valid", pa.bool_()),
        pa.field("ID", pa.string()),
    ]
)


def format_duration(seconds: float) -> str:
    """Format seconds as zero-padded MM:SS (minutes are not wrapped into hours)."""
    return f"{math.floor(seconds / 60):02d}:{math.floor(seconds % 60):02d}"


def flatten_records(records: list[BeatmapRecord]) -> dict[str, list]:
    """One row per (beatmap, characteristic, difficulty), as Arrow-ready columns."""
    cols: dict[str, list] = {name: [] for name in STATS_SCHEMA.names}

    for record in records:
        duration = format_duration(record.duration_seconds)
        for characteristic, difficulties in record.characteristics.items():
            for difficulty, stats in difficulties.items():
                cols["Song"].append(record.song)
                cols["Artist"].append(record.artist)
                cols["Mapper"].append(record.mapper)
                cols["BPM"].append(record.bpm)
                cols["Environment"].append(record.environment)
                cols["Duration"].append(duration)
                cols["Characteristic"].append(characteristic)
                cols["Difficulty"].append(difficulty)
                cols["Notes"].append(stats.note_count)
                cols["NPS"].append(stats.notes_per_second)
                cols["NP10S"].append(stats.notes_per_10_seconds)
                cols["Score"].append(stats.score)
                cols["Combo"].append(stats.combo)
                cols["Rank"].append(stats.rank)
                cols["Plays"].append(stats.plays)
                cols["Valid"].append(stats.valid)
                cols["ID"].append(record.id)

    return cols


def records_to_table(records: list[BeatmapRecord]) -> pa.Table:
    return pa.table(flatten_records(records), schema=STATS_SCHEMA)


def write_report(
    records: list[BeatmapRecord],
    output_path: Path,
    output_format: str = "csv",
) -> int:
    """Write the report, replacing any existing file. Returns the row count.

    Unset metrics (no notes parsed) are written as empty CSV cells / nulls.
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format!r}")

    table = records_to_table(records)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.exists():
        output_path.unlink()

    if output_format == "parquet":
        pq.write_table(table, output_path, compression="snappy")
    else:
        pacsv.write_csv(table, str(output_path))

    logger.info(
        "Wrote %d rows for %d levels to %s", table.num_rows, len(records), output_path
    )
    return table.num_rows
