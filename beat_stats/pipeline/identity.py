"""Content-addressed beatmap identity.

The game links a custom level to the player's score history through a SHA-1
over the level's manifest followed by each difficulty file, in the order the
manifest lists them. Feeding the same bytes in the same order always gives
the same id, whatever folder the level lives in.
"""

import hashlib

from beat_stats.schemas.normalized import CUSTOM_LEVEL_PREFIX


class ContentIdentity:
    """Incremental SHA-1 over every file read for one beatmap."""

    def __init__(self):
        self._hasher = hashlib.sha1()
        self.files_hashed = 0

    def update(self, raw: bytes) -> None:
        self._hasher.update(raw)
        self.files_hashed += 1

    @property
    def level_id(self) -> str:
        return CUSTOM_LEVEL_PREFIX + self._hasher.hexdigest().upper()
