"""Utility to read Beat Saber .dat files with automatic gzip detection."""

import gzip
import json
from pathlib import Path

from beat_stats.errors import MissingOrMalformedFile
from beat_stats.pipeline.identity import ContentIdentity

GZIP_MAGIC = b'\x1f\x8b'


def read_dat_file(filepath: Path, identity: ContentIdentity | None = None) -> dict:
    """Read a .dat file, auto-detecting gzip compression. Returns parsed JSON dict.

    When *identity* is given, the bytes exactly as stored on disk are fed to
    it before anything is decoded.
    """
    try:
        raw = filepath.read_bytes()
    except OSError as exc:
        raise MissingOrMalformedFile(f"{filepath}: cannot read file ({exc})") from exc

    if identity is not None:
        identity.update(raw)

    try:
        if raw[:2] == GZIP_MAGIC:
            raw = gzip.decompress(raw)
        data = json.loads(raw)
    except (OSError, EOFError, ValueError) as exc:
        raise MissingOrMalformedFile(f"{filepath}: not a valid JSON file ({exc})") from exc

    if not isinstance(data, dict):
        raise MissingOrMalformedFile(f"{filepath}: top-level JSON value must be an object")
    return data
