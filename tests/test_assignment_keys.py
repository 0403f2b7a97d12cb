"""Tests for the assignment key codec."""

from datetime import date

import pytest

from meal_planner.domain.assignment_keys import decode_key, encode_key, try_decode_key
from meal_planner.domain.errors import MalformedKeyError


def test_encode_zero_pads_month_and_day() -> None:
    assert encode_key(date(2024, 3, 5), "breakfast") == "2024-03-05_breakfast"


def test_decode_round_trip_with_underscored_slot() -> None:
    key = encode_key(date(2025, 11, 30), "late_night_snack")

    assert decode_key(key) == (date(2025, 11, 30), "late_night_snack")


def test_keys_sort_in_date_order() -> None:
    keys = [
        encode_key(date(2024, 10, 1), "dinner"),
        encode_key(date(2024, 2, 9), "dinner"),
        encode_key(date(2023, 12, 31), "dinner"),
    ]

    assert sorted(keys) == [keys[2], keys[1], keys[0]]


@pytest.mark.parametrize(
    "key",
    [
        "2024-01-01",
        "2024-1-1_breakfast",
        "20240101_lunch",
        "2024-13-01_lunch",
        "2024-01-01_",
    ],
)
def test_decode_rejects_malformed_keys(key: str) -> None:
    with pytest.raises(MalformedKeyError) as excinfo:
        decode_key(key)

    assert excinfo.value.code == "MALFORMED_KEY"


def test_encode_rejects_empty_slot() -> None:
    with pytest.raises(MalformedKeyError):
        encode_key(date(2024, 1, 1), "")


def test_try_decode_returns_none_for_bad_keys() -> None:
    assert try_decode_key("not-a-key") is None
    assert try_decode_key("2024-01-02_lunch") == (date(2024, 1, 2), "lunch")
