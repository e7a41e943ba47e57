"""Tests for overlap detection and time helpers"""
import pytest

from backend.conflicts import (
    add_minutes,
    duration_minutes,
    find_conflicts,
    format_duration,
    is_valid_time,
    validate_item,
)
from backend.exceptions import InvalidScheduleItemError


def test_no_items_and_single_item_have_no_conflicts(make_item):
    assert find_conflicts([]) == set()
    assert find_conflicts([make_item("a", "08:00", "09:00")]) == set()


def test_touching_intervals_do_not_conflict(make_item):
    items = [make_item("a", "08:00", "09:00"), make_item("b", "09:00", "10:00")]
    assert find_conflicts(items) == set()


def test_overlapping_intervals_flag_both(make_item):
    items = [make_item("a", "08:00", "09:30"), make_item("b", "09:00", "10:00")]
    assert find_conflicts(items) == {"a", "b"}


def test_conflicts_are_symmetric(make_item):
    a = make_item("a", "10:00", "12:00")
    b = make_item("b", "11:00", "11:30")
    assert find_conflicts([a, b]) == find_conflicts([b, a]) == {"a", "b"}


def test_only_participants_are_flagged(make_item):
    items = [
        make_item("a", "08:00", "09:00"),
        make_item("b", "08:30", "08:45"),
        make_item("c", "13:00", "14:00"),
    ]
    assert find_conflicts(items) == {"a", "b"}


def test_zero_duration_item_never_conflicts(make_item):
    items = [make_item("a", "08:00", "10:00"), make_item("z", "09:00", "09:00")]
    assert find_conflicts(items) == set()


def test_items_without_times_are_ignored(make_item):
    items = [make_item("a", "08:00", "10:00"), make_item("b", None, None)]
    assert find_conflicts(items) == set()


def test_cross_midnight_item_is_not_wrapped(make_item):
    # 23:00-01:00 compares as ending at 01:00 on the same day
    late = make_item("late", "23:00", "01:00")
    early = make_item("early", "00:30", "02:00")
    assert find_conflicts([late, early]) == set()


@pytest.mark.parametrize("value,valid", [
    ("08:00", True),
    ("23:59", True),
    ("8:00", False),
    ("24:00", False),
    ("12:60", False),
    ("", False),
    (None, False),
])
def test_is_valid_time(value, valid):
    assert is_valid_time(value) is valid


def test_duration_and_format(make_item):
    assert duration_minutes(make_item("a", "08:30", "10:00")) == 90
    assert duration_minutes(make_item("b", "23:00", "01:00")) == 0
    assert format_duration(90) == "1h 30m"
    assert format_duration(60) == "1h"
    assert format_duration(0) == "0m"


def test_add_minutes_wraps_at_midnight():
    assert add_minutes("08:00", 60) == "09:00"
    assert add_minutes("23:30", 60) == "00:30"


def test_validate_item_rejects_cross_midnight(make_item):
    with pytest.raises(InvalidScheduleItemError):
        validate_item(make_item("a", "23:00", "01:00"))


def test_validate_item_rejects_bad_format(make_item):
    with pytest.raises(ValueError):
        validate_item(make_item("a", "8am", "09:00"))


def test_validate_item_accepts_normal_item(make_item):
    item = make_item("a", "08:00", "09:00", reminder_minutes=10)
    assert validate_item(item) is item
