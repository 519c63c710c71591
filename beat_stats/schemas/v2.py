"""Parse Beat Saber v2 difficulty files into beat sequences.

Legacy v2 maps keep every note (including bombs) in a single ``_notes``
array keyed by ``_time``. The 2.6 revision adds ``_sliders``, whose head and
tail both count as notes.
"""

from beat_stats.schemas.fields import get_first_float, get_float, get_list
from beat_stats.schemas.normalized import BeatmapNote

_NOTE_BEAT_KEYS = ("_time", "b")
_SLIDER_HEAD_KEYS = ("_headTime", "b")
_SLIDER_TAIL_KEYS = ("_tailTime", "tb")


def parse_v2_notes(beatmap: dict, where: object = "beatmap") -> list[BeatmapNote]:
    """Parse notes from a legacy v2 beatmap, sorted by beat."""
    notes = [
        BeatmapNote(beat=get_float(raw, "_time", where))
        for raw in get_list(beatmap, "_notes", where)
    ]
    notes.sort(key=lambda n: n.beat)
    return notes


def parse_v26_notes(beatmap: dict, where: object = "beatmap") -> list[BeatmapNote]:
    """Parse notes and slider endpoints from a v2.6 beatmap, sorted by beat."""
    notes = [
        BeatmapNote(beat=get_first_float(raw, _NOTE_BEAT_KEYS, where))
        for raw in get_list(beatmap, "_notes", where)
    ]

    for raw in get_list(beatmap, "_sliders", where):
        notes.append(BeatmapNote(beat=get_first_float(raw, _SLIDER_HEAD_KEYS, where)))
        notes.append(BeatmapNote(beat=get_first_float(raw, _SLIDER_TAIL_KEYS, where)))

    notes.sort(key=lambda n: n.beat)
    return notes
