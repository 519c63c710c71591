"""Command-line interface for the beat-stats report."""

import argparse
import logging
import sys
from pathlib import Path

from beat_stats.errors import BeatStatsError

logger = logging.getLogger("beat_stats")


def _fmt(value) -> str:
    return "-" if value is None else f"{value:g}"


def cmd_run(args: argparse.Namespace) -> None:
    from beat_stats.pipeline.batch import StatsConfig, run_pipeline

    config = StatsConfig.load(Path(args.config)) if args.config else StatsConfig()
    if args.save_path:
        config.save_path = Path(args.save_path).expanduser()
    if args.game_path:
        config.game_path = Path(args.game_path).expanduser()
    if args.player_number is not None:
        config.player_number = args.player_number
    if args.threads is not None:
        config.threads = args.threads
    if args.reference_table:
        config.reference_table = Path(args.reference_table)
    if args.output:
        config.output = Path(args.output)
    if args.format:
        config.output_format = args.format
    if args.no_progress:
        config.show_progress = False

    result = run_pipeline(config)
    print(
        f"Done: {len(result.records)} levels ({result.custom_levels} custom), "
        f"{result.total_rows} rows -> {config.output}"
    )


def cmd_inspect(args: argparse.Namespace) -> None:
    from beat_stats.pipeline.processor import process_map_folder
    from beat_stats.storage.writer import format_duration

    record = process_map_folder(Path(args.folder))
    print(f"{record.song} - {record.artist} [{record.mapper}]")
    print(f"ID: {record.id}")
    print(f"BPM: {record.bpm:g}  Duration: {format_duration(record.duration_seconds)}")
    for characteristic, difficulties in record.characteristics.items():
        for difficulty, stats in difficulties.items():
            print(
                f"  {characteristic:<12} {difficulty:<8} "
                f"notes={stats.note_count if stats.note_count is not None else '-'} "
                f"nps={_fmt(stats.notes_per_second)} "
                f"np10s={_fmt(stats.notes_per_10_seconds)}"
            )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="beat-stats",
        description="Per-difficulty Beat Saber map stats merged with your scores",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command")

    # run (full pipeline)
    run = sub.add_parser("run", help="Build the stats report")
    run.add_argument("--save-path", default=None,
                     help="PlayerData.dat path (default: the game's save location)")
    run.add_argument("--game-path", default=None,
                     help="Beat Saber install directory (default: Steam location)")
    run.add_argument("--player-number", type=int, default=None,
                     help="Index into localPlayers (default: 0)")
    run.add_argument("--threads", type=int, default=None,
                     help="Worker threads (default: 0 = one per CPU)")
    run.add_argument("--reference-table", default=None,
                     help="Official level stats CSV (default: ost.csv)")
    run.add_argument("--output", default=None, help="Report path (default: stats.csv)")
    run.add_argument("--format", choices=["csv", "parquet"], default=None,
                     help="Report format (default: csv)")
    run.add_argument("--config", default=None, help="Optional JSON config file")
    run.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    # inspect
    ins = sub.add_parser("inspect", help="Show density stats for one map folder")
    ins.add_argument("folder", help="Custom level folder containing Info.dat")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "run": cmd_run,
        "inspect": cmd_inspect,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0
    try:
        handler(args)
    except BeatStatsError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
