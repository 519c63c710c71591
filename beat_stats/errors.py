"""Exception hierarchy for the beat-stats pipeline.

Every error raised here is fatal to a run: the CLI reports it and exits
without writing a report.
"""


class BeatStatsError(Exception):
    """Base class for all beat-stats errors."""


class MissingOrMalformedFile(BeatStatsError):
    """A manifest, difficulty, save or table file is absent or not valid JSON."""


class UnsupportedSchema(BeatStatsError):
    """A difficulty file declares a schema version that cannot be parsed."""


class DuplicateDifficulty(BeatStatsError):
    """A manifest lists the same characteristic/difficulty slot twice."""


class MissingRequiredField(BeatStatsError):
    """A required key is absent or holds a value of the wrong type."""
