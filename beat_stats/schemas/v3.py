"""Parse Beat Saber v3 difficulty files into beat sequences.

V3 maps split playable objects across separate arrays. Color notes, bombs
and burst sliders (chains) count once at their ``b`` beat; arc sliders count
twice, at the head ``b`` and the tail ``tb``.
"""

from beat_stats.schemas.fields import get_float, get_list
from beat_stats.schemas.normalized import BeatmapNote

_SINGLE_BEAT_CATEGORIES = ("colorNotes", "bombNotes", "burstSliders")


def parse_v3_notes(beatmap: dict, where: object = "beatmap") -> list[BeatmapNote]:
    """Parse every note category of a v3 beatmap, sorted by beat.

    Args:
        beatmap: Parsed JSON dict of a v3 difficulty file.
        where: Label used in error messages.

    Returns:
        Notes sorted by beat; ties keep their category order.

    Raises:
        MissingRequiredField: If a category is missing or an entry has no beat.
    """
    notes: list[BeatmapNote] = []

    for category in _SINGLE_BEAT_CATEGORIES:
        for raw in get_list(beatmap, category, where):
            notes.append(BeatmapNote(beat=get_float(raw, "b", where)))

    for raw in get_list(beatmap, "sliders", where):
        notes.append(BeatmapNote(beat=get_float(raw, "b", where)))
        notes.append(BeatmapNote(beat=get_float(raw, "tb", where)))

    notes.sort(key=lambda n: n.beat)
    return notes
