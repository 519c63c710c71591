"""Tests for note-density metrics."""

import math

import numpy as np
import pytest

from beat_stats.analysis.density import analyze_density, max_window_count, window_beats
from beat_stats.schemas.normalized import BeatmapNote


def _notes(*beats):
    return [BeatmapNote(beat=float(b)) for b in beats]


class TestAnalyzeDensity:
    def test_two_notes_at_120_bpm(self):
        stats = analyze_density(_notes(0, 2), bpm=120.0)
        assert stats.note_count == 2
        assert stats.duration_seconds == 1.0
        assert stats.notes_per_second == 2.0

    def test_empty_sequence_leaves_metrics_unset(self):
        stats = analyze_density([], bpm=120.0)
        assert stats.note_count is None
        assert stats.notes_per_second is None
        assert stats.notes_per_10_seconds is None
        assert stats.duration_seconds == 0.0

    def test_nps_is_count_over_span(self):
        notes = _notes(0, 1, 1.5, 7, 9.25)
        stats = analyze_density(notes, bpm=137.0)
        expected_duration = (9.25 - 0) / 137.0 * 60
        assert stats.duration_seconds == expected_duration
        assert stats.notes_per_second == 5 / expected_duration
        assert stats.duration_seconds >= 0

    def test_single_note(self):
        stats = analyze_density(_notes(4), bpm=120.0)
        assert stats.note_count == 1
        assert stats.duration_seconds == 0.0
        assert stats.notes_per_second == math.inf
        assert stats.notes_per_10_seconds == 0.1

    def test_np10s_is_window_count_scaled_by_a_tenth(self):
        # At 60 BPM a ten-second window is 10 beats. Twelve notes packed into
        # one beat should read 1.2, not a rate normalized to ten seconds.
        beats = [i / 12 for i in range(12)]
        stats = analyze_density(_notes(*beats), bpm=60.0)
        assert stats.notes_per_10_seconds == 1.2

    def test_window_boundary_is_inclusive(self):
        # 120 BPM -> window of 20 beats; a note exactly 20 beats later counts
        assert analyze_density(_notes(0, 20), bpm=120.0).notes_per_10_seconds == 0.2
        assert analyze_density(_notes(0, 20.5), bpm=120.0).notes_per_10_seconds == 0.1

    def test_duplicating_notes_never_lowers_np10s(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            beats = sorted(rng.uniform(0, 400, size=int(rng.integers(1, 60))))
            doubled = sorted(beats + beats)
            base = analyze_density(_notes(*beats), bpm=150.0)
            dense = analyze_density(_notes(*doubled), bpm=150.0)
            assert dense.notes_per_10_seconds >= base.notes_per_10_seconds


class TestWindow:
    def test_window_beats(self):
        assert window_beats(120.0) == 20.0
        assert window_beats(60.0) == 10.0

    def test_matches_two_pointer_scan(self):
        rng = np.random.default_rng(3)
        beats = np.sort(rng.uniform(0, 100, size=200))
        span = 7.5

        best = 0
        end = 0
        for start in range(len(beats)):
            end = max(end, start)
            while end + 1 < len(beats) and beats[end + 1] <= beats[start] + span:
                end += 1
            best = max(best, end - start + 1)

        assert max_window_count(beats, span) == best

    def test_empty(self):
        assert max_window_count(np.array([], dtype=np.float64), 10.0) == 0

    @pytest.mark.parametrize("bpm", [60.0, 120.0, 200.0])
    def test_all_notes_in_one_window(self, bpm):
        stats = analyze_density(_notes(0, 0, 1, 1, 2), bpm=bpm)
        assert stats.notes_per_10_seconds == 0.5
