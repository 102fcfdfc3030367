from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Valid:
    value: str


@dataclass(frozen=True)
class Invalid:
    message: str


def validate_filename(value: Any) -> Valid | Invalid:
    """Check the shape of a client-supplied filename.

    The value must be present, a string, non-empty once surrounding whitespace
    is trimmed and free of NUL bytes. ``Valid.value`` holds the trimmed string.
    """
    if value is None:
        return Invalid("filename required")
    if not isinstance(value, str):
        return Invalid("filename must be a string")

    trimmed = value.strip()
    if not trimmed:
        return Invalid("filename must not be empty")
    if "\0" in trimmed:
        return Invalid("null byte not allowed")

    return Valid(trimmed)
