"""Shared fixtures: build custom level folders and score records on disk."""

import json
from pathlib import Path

import pytest

from beat_stats.schemas.normalized import ScoreRecord


def v3_beatmap(beats=(), bombs=(), bursts=(), sliders=()) -> dict:
    """A v3 difficulty file; *sliders* are (head, tail) beat pairs."""
    return {
        "version": "3.0.0",
        "colorNotes": [{"b": b, "x": 1, "y": 0, "c": 0, "d": 1} for b in beats],
        "bombNotes": [{"b": b, "x": 0, "y": 0} for b in bombs],
        "burstSliders": [{"b": b, "tb": b + 0.5} for b in bursts],
        "sliders": [{"b": head, "tb": tail} for head, tail in sliders],
    }


def info_dat(difficulty_sets, song="Test Song", bpm=120.0) -> dict:
    """A v2 Info.dat; *difficulty_sets* maps characteristic -> [(rank, filename)]."""
    return {
        "_version": "2.0.0",
        "_songName": song,
        "_songAuthorName": "Test Artist",
        "_levelAuthorName": "Test Mapper",
        "_beatsPerMinute": bpm,
        "_environmentName": "DefaultEnvironment",
        "_difficultyBeatmapSets": [
            {
                "_beatmapCharacteristicName": characteristic,
                "_difficultyBeatmaps": [
                    {"_difficultyRank": rank, "_beatmapFilename": filename}
                    for rank, filename in entries
                ],
            }
            for characteristic, entries in difficulty_sets.items()
        ],
    }


@pytest.fixture
def make_map(tmp_path):
    """Write a custom level folder.

    ``difficulties`` maps characteristic -> {rank: beatmap dict}; each beatmap
    is written to ``<characteristic><rank>.dat``.
    """

    def _make(name="level", difficulties=None, song="Test Song", bpm=120.0, root=None):
        if difficulties is None:
            difficulties = {"Standard": {6: v3_beatmap([0.0, 2.0])}}
        folder = (root or tmp_path) / name
        folder.mkdir(parents=True)
        sets = {}
        for characteristic, by_rank in difficulties.items():
            entries = []
            for rank, beatmap in by_rank.items():
                filename = f"{characteristic}{rank}.dat"
                (folder / filename).write_text(json.dumps(beatmap))
                entries.append((rank, filename))
            sets[characteristic] = entries
        (folder / "Info.dat").write_text(json.dumps(info_dat(sets, song=song, bpm=bpm)))
        return folder

    return _make


@pytest.fixture
def make_score():
    def _make(level_id, characteristic="Standard", difficulty=3, **overrides):
        values = {
            "level_id": level_id,
            "characteristic": characteristic,
            "difficulty": difficulty,
            "play_count": 3,
            "max_rank": 5,
            "full_combo": False,
            "max_combo": 250,
            "high_score": 123456,
            "valid_score": True,
        }
        values.update(overrides)
        return ScoreRecord(**values)

    return _make


def score_json(score: ScoreRecord) -> dict:
    """Save-file shape of a ScoreRecord."""
    return {
        "levelId": score.level_id,
        "beatmapCharacteristicName": score.characteristic,
        "difficulty": score.difficulty,
        "playCount": score.play_count,
        "maxRank": score.max_rank,
        "fullCombo": score.full_combo,
        "maxCombo": score.max_combo,
        "highScore": score.high_score,
        "validScore": score.valid_score,
    }


@pytest.fixture
def write_save(tmp_path):
    def _write(scores, path: Path | None = None, players=1):
        path = path or tmp_path / "PlayerData.dat"
        data = {
            "version": "2.0.5",
            "localPlayers": [
                {"playerName": f"p{i}", "levelsStatsData": [score_json(s) for s in scores]}
                for i in range(players)
            ],
        }
        path.write_text(json.dumps(data))
        return path

    return _write
