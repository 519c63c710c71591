"""Load a player's score history from the game's PlayerData.dat."""

import logging
import os
import sys
from pathlib import Path
from typing import Iterable

from beat_stats.errors import MissingOrMalformedFile, MissingRequiredField
from beat_stats.parsers.dat_reader import read_dat_file
from beat_stats.schemas.fields import get_bool, get_int, get_list, get_str
from beat_stats.schemas.normalized import DIFFICULTY_NAMES, RANK_NAMES, ScoreRecord

logger = logging.getLogger(__name__)

SAVE_FILE_NAME = "PlayerData.dat"
PROTON_SAVE_PATH = Path(
    "~/.steam/steam/steamapps/compatdata/620980/pfx"
) / SAVE_FILE_NAME


def default_save_path() -> Path:
    """Where the game keeps PlayerData.dat on this platform."""
    if sys.platform == "win32":
        local_app_data = Path(os.environ.get("LOCALAPPDATA", ""))
        return (
            local_app_data.parent
            / "LocalLow"
            / "Hyperbolic Magnetism"
            / "Beat Saber"
            / SAVE_FILE_NAME
        )
    return PROTON_SAVE_PATH.expanduser()


def parse_score(raw: dict, where: object = "levelsStatsData") -> ScoreRecord:
    """Validate one ``levelsStatsData`` entry into a ScoreRecord."""
    difficulty = get_int(raw, "difficulty", where)
    if not 0 <= difficulty < len(DIFFICULTY_NAMES):
        raise MissingRequiredField(f"{where}: difficulty index {difficulty} is out of range")
    max_rank = get_int(raw, "maxRank", where)
    if not 0 <= max_rank < len(RANK_NAMES):
        raise MissingRequiredField(f"{where}: maxRank index {max_rank} is out of range")

    return ScoreRecord(
        level_id=get_str(raw, "levelId", where),
        characteristic=get_str(raw, "beatmapCharacteristicName", where),
        difficulty=difficulty,
        play_count=get_int(raw, "playCount", where),
        max_rank=max_rank,
        full_combo=get_bool(raw, "fullCombo", where),
        max_combo=get_int(raw, "maxCombo", where),
        high_score=get_int(raw, "highScore", where),
        valid_score=get_bool(raw, "validScore", where),
    )


def parse_player_scores(save_data: dict, player_number: int = 0, where: object = "save") -> list[ScoreRecord]:
    players = get_list(save_data, "localPlayers", where)
    if not 0 <= player_number < len(players):
        raise MissingRequiredField(
            f"{where}: no player #{player_number} in localPlayers ({len(players)} found)"
        )
    player_where = f"{where}: localPlayers[{player_number}]"
    return [
        parse_score(raw, f"{player_where}.levelsStatsData[{i}]")
        for i, raw in enumerate(get_list(players[player_number], "levelsStatsData", player_where))
    ]


def load_player_scores(save_path: Path, player_number: int = 0) -> list[ScoreRecord]:
    """Read the save file and return the chosen player's score records."""
    if not save_path.is_file():
        raise MissingOrMalformedFile(f"Save file not found at {save_path}")
    scores = parse_player_scores(read_dat_file(save_path), player_number, where=save_path)
    logger.info("Loaded %d score records for player #%d", len(scores), player_number)
    return scores


def group_scores_by_level(scores: Iterable[ScoreRecord]) -> dict[str, list[ScoreRecord]]:
    """Index scores by level id, keeping first-appearance order."""
    grouped: dict[str, list[ScoreRecord]] = {}
    for score in scores:
        grouped.setdefault(score.level_id, []).append(score)
    return grouped
