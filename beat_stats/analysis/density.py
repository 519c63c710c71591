"""Note-density metrics for one difficulty.

The reported NP10S is the largest number of notes that fit in any window of
ten seconds (``bpm / 6`` beats) starting at a note, scaled by 0.1 and rounded
to two decimals. It is a windowed count, not a rate: a window whose notes
span less than ten seconds is not stretched to a full ten-second rate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from beat_stats.schemas.normalized import BeatmapNote

SECONDS_PER_MINUTE = 60.0
WINDOW_SECONDS = 10.0


@dataclass
class DensityStats:
    note_count: int | None = None
    notes_per_second: float | None = None
    notes_per_10_seconds: float | None = None
    duration_seconds: float = 0.0  # first-to-last note span


def window_beats(bpm: float) -> float:
    """Length of the density window in beats (ten seconds == bpm / 6)."""
    return bpm / (SECONDS_PER_MINUTE / WINDOW_SECONDS)


def max_window_count(beats: np.ndarray, span: float) -> int:
    """Largest number of notes in any ``[beat[i], beat[i] + span]`` window.

    *beats* must be sorted ascending. Equivalent to the two-pointer scan that
    advances the window end while the next note is still within reach of the
    window start, done here as a single searchsorted pass.
    """
    if beats.size == 0:
        return 0
    ends = np.searchsorted(beats, beats + span, side="right")
    return int((ends - np.arange(beats.size)).max())


def analyze_density(notes: Sequence[BeatmapNote], bpm: float) -> DensityStats:
    """Compute note count, NPS, NP10S and the note span for a sorted sequence.

    Args:
        notes: Notes sorted ascending by beat.
        bpm: Beats per minute of the song.

    Returns:
        DensityStats. For an empty sequence every metric stays None and the
        span is 0.0, so "no notes" remains distinguishable from "zero".
    """
    if not notes:
        return DensityStats()

    beats = np.fromiter((n.beat for n in notes), dtype=np.float64, count=len(notes))
    duration = float((beats[-1] - beats[0]) / bpm * SECONDS_PER_MINUTE)
    count = len(notes)

    if duration > 0:
        nps = count / duration
    else:
        nps = math.inf

    largest = max_window_count(beats, window_beats(bpm))
    return DensityStats(
        note_count=count,
        notes_per_second=nps,
        notes_per_10_seconds=round(largest * 10) / 100,
        duration_seconds=duration,
    )
