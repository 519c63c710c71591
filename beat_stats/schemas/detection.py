"""Detect the schema variant of a Beat Saber difficulty file.

Only the top-level ``version`` key is consulted. Files without it are
treated as the legacy 2.0 layout, whatever else they contain.
"""

from beat_stats.errors import MissingRequiredField, UnsupportedSchema

LEGACY_VERSION = "2.0.0"


def detect_beatmap_version(beatmap_data: dict, where: object = "beatmap") -> str:
    """Detect the schema variant of a difficulty file.

    Args:
        beatmap_data: Parsed JSON dict of a difficulty file.
        where: Label (usually the file path) used in error messages.

    Returns:
        Variant string: "3", "2.6" or "2".

    Raises:
        UnsupportedSchema: If the major version is neither 2 nor 3.
        MissingRequiredField: If ``version`` is present but not a string.
    """
    version = beatmap_data.get("version", LEGACY_VERSION)
    if not isinstance(version, str):
        raise MissingRequiredField(
            f"{where}: field 'version' must be a string, got {type(version).__name__}"
        )

    if version.startswith("3"):
        return "3"
    if version.startswith("2"):
        # "2.6.0" -> minor digit sits right after the dot
        if version[2:3] == "6":
            return "2.6"
        return "2"

    raise UnsupportedSchema(f"{where}: unrecognized difficulty schema version {version!r}")
