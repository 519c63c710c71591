"""Typed accessors for decoded JSON objects.

Each helper either returns a value of the requested type or raises
MissingRequiredField naming the key and where it was looked up, so malformed
files fail with a readable message instead of a KeyError or TypeError.
"""

import math
from typing import Any

from beat_stats.errors import MissingRequiredField


def _fetch(obj: Any, key: str, where: object) -> Any:
    if not isinstance(obj, dict):
        raise MissingRequiredField(f"{where}: expected an object containing {key!r}")
    if key not in obj:
        raise MissingRequiredField(f"{where}: missing required field {key!r}")
    return obj[key]


def _wrong_type(key: str, expected: str, value: Any, where: object) -> MissingRequiredField:
    return MissingRequiredField(
        f"{where}: field {key!r} must be {expected}, got {type(value).__name__}"
    )


def get_str(obj: Any, key: str, where: object) -> str:
    value = _fetch(obj, key, where)
    if not isinstance(value, str):
        raise _wrong_type(key, "a string", value, where)
    return value


def get_float(obj: Any, key: str, where: object) -> float:
    value = _fetch(obj, key, where)
    # bool is an int subclass; true/false is never a valid number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _wrong_type(key, "a number", value, where)
    if not math.isfinite(value):
        raise MissingRequiredField(f"{where}: field {key!r} must be finite, got {value!r}")
    return float(value)


def get_int(obj: Any, key: str, where: object) -> int:
    value = _fetch(obj, key, where)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _wrong_type(key, "an integer", value, where)
    return value


def get_bool(obj: Any, key: str, where: object) -> bool:
    value = _fetch(obj, key, where)
    if not isinstance(value, bool):
        raise _wrong_type(key, "a boolean", value, where)
    return value


def get_list(obj: Any, key: str, where: object) -> list:
    value = _fetch(obj, key, where)
    if not isinstance(value, list):
        raise _wrong_type(key, "an array", value, where)
    return value


def get_first_float(obj: Any, keys: tuple[str, ...], where: object) -> float:
    """Return the first of *keys* present in *obj* as a float."""
    for key in keys:
        if isinstance(obj, dict) and key in obj:
            return get_float(obj, key, where)
    names = " or ".join(repr(k) for k in keys)
    raise MissingRequiredField(f"{where}: missing required field {names}")
