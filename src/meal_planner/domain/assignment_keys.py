"""Codec between (date, slot id) pairs and assignment map keys.

Keys look like ``2024-01-01_breakfast``. The date part never contains an
underscore, so decoding splits on the first one and slot ids may contain
underscores themselves.
"""

import re
from datetime import date

from meal_planner.domain.calendar import as_date
from meal_planner.domain.errors import MalformedKeyError

KEY_SEPARATOR = "_"

_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def encode_key(day: date, slot_id: str) -> str:
    """Return the assignment key for a date and meal slot."""
    if not slot_id:
        raise MalformedKeyError("Slot id cannot be empty")
    day = as_date(day)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}{KEY_SEPARATOR}{slot_id}"


def decode_key(key: str) -> tuple[date, str]:
    """Split an assignment key into its date and slot id."""
    date_part, separator, slot_id = key.partition(KEY_SEPARATOR)
    if not separator:
        raise MalformedKeyError(
            f"Invalid assignment key format: {key}", details={"key": key}
        )
    if not slot_id:
        raise MalformedKeyError(
            f"Assignment key has an empty slot id: {key}", details={"key": key}
        )
    if not _DATE_PATTERN.match(date_part):
        raise MalformedKeyError(
            f"Assignment key has an invalid date: {key}", details={"key": key}
        )
    try:
        day = date.fromisoformat(date_part)
    except ValueError as exc:
        raise MalformedKeyError(
            f"Assignment key has an invalid date: {key}", details={"key": key}
        ) from exc
    return day, slot_id


def try_decode_key(key: str) -> tuple[date, str] | None:
    """Decode a key, returning None instead of raising when it is malformed."""
    try:
        return decode_key(key)
    except MalformedKeyError:
        return None
