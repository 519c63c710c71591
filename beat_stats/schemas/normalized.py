"""Normalized beatmap statistics data format.

Dataclasses shared by every stage of the pipeline: the transient note
sequence produced by the version-specific parsers, the per-difficulty stats
slots, the per-beatmap record that ends up in the report, and the read-only
score records loaded from the player's save data.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DIFFICULTY_NAMES: tuple[str, ...] = ("Easy", "Normal", "Hard", "Expert", "Expert+")
RANK_NAMES: tuple[str, ...] = ("E", "D", "C", "B", "A", "S", "SS", "SSS")

FULL_COMBO = "FC"
STANDARD = "Standard"
CUSTOM_LEVEL_PREFIX = "custom_level_"


@dataclass
class BeatmapNote:
    """Anything the player has to react to, reduced to its beat position."""

    beat: float


@dataclass
class DifficultyStats:
    """Stats for one (characteristic, difficulty) slot of a beatmap."""

    valid: bool = False
    plays: int = 0
    rank: str = ""
    combo: str = ""  # FULL_COMBO or the max combo as a decimal string
    score: int = 0
    notes_per_10_seconds: float | None = None
    notes_per_second: float | None = None
    note_count: int | None = None

    def apply_score(self, score: ScoreRecord) -> None:
        """Overwrite the score fields in place from a save-data entry."""
        self.valid = score.valid_score
        self.plays = score.play_count
        self.rank = score.rank_name
        self.combo = score.combo
        self.score = score.high_score


@dataclass
class BeatmapRecord:
    """One report entry per distinct beatmap."""

    id: str
    song: str = ""
    artist: str = ""
    mapper: str = ""
    bpm: float = 0.0
    environment: str = ""
    duration_seconds: float = 0.0  # longest note span across all difficulties
    # characteristic name -> difficulty name -> stats
    characteristics: dict[str, dict[str, DifficultyStats]] = field(default_factory=dict)

    def slot(self, characteristic: str, difficulty: str) -> DifficultyStats | None:
        return self.characteristics.get(characteristic, {}).get(difficulty)


@dataclass(frozen=True)
class ScoreRecord:
    """A single ``levelsStatsData`` entry from the player's save file."""

    level_id: str
    characteristic: str
    difficulty: int  # index into DIFFICULTY_NAMES
    play_count: int
    max_rank: int  # index into RANK_NAMES
    full_combo: bool
    max_combo: int
    high_score: int
    valid_score: bool

    @property
    def difficulty_name(self) -> str:
        return DIFFICULTY_NAMES[self.difficulty]

    @property
    def rank_name(self) -> str:
        return RANK_NAMES[self.max_rank]

    @property
    def combo(self) -> str:
        return FULL_COMBO if self.full_combo else str(self.max_combo)
