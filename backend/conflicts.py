from typing import Iterable, Optional, Set
from backend.exceptions import InvalidScheduleItemError
from backend.schemas import ScheduleItem
import re

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_valid_time(value: Optional[str]) -> bool:
    """True for zero-padded 24-hour HH:MM strings"""
    return bool(value) and _TIME_RE.match(value) is not None


def to_minutes(value: str) -> int:
    """Minutes since midnight for an HH:MM string"""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(value: str, minutes: int) -> str:
    """Shift an HH:MM time, wrapping at midnight"""
    return from_minutes(to_minutes(value) + minutes)


def is_cross_midnight(item: ScheduleItem) -> bool:
    return bool(item.start_time and item.end_time) and item.end_time < item.start_time


def duration_minutes(item: ScheduleItem) -> int:
    """
    Length of an item in minutes.

    Cross-midnight items are rejected when a blueprint is edited, so an
    end before the start only appears in legacy data and counts as zero.
    """
    if not (is_valid_time(item.start_time) and is_valid_time(item.end_time)):
        return 0
    return max(0, to_minutes(item.end_time) - to_minutes(item.start_time))


def format_duration(minutes: int) -> str:
    """e.g. 90 -> '1h 30m', 60 -> '1h', 0 -> '0m'"""
    hours, mins = divmod(minutes, 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def validate_item(item: ScheduleItem) -> ScheduleItem:
    """Reject items the blueprint editor must not save"""
    if not is_valid_time(item.start_time):
        raise InvalidScheduleItemError(f"Invalid start time {item.start_time!r}, use HH:MM")
    if not is_valid_time(item.end_time):
        raise InvalidScheduleItemError(f"Invalid end time {item.end_time!r}, use HH:MM")
    if is_cross_midnight(item):
        raise InvalidScheduleItemError(
            f"'{item.label}' ends before it starts ({item.start_time}-{item.end_time}); "
            "split items that cross midnight"
        )
    if item.reminder_minutes is not None and item.reminder_minutes < 0:
        raise InvalidScheduleItemError("Reminder minutes cannot be negative")
    return item


def overlaps(a: ScheduleItem, b: ScheduleItem) -> bool:
    """Half-open [start, end) overlap on zero-padded HH:MM strings"""
    if not (a.start_time and a.end_time and b.start_time and b.end_time):
        return False
    # Empty intervals contain no minutes
    if a.start_time == a.end_time or b.start_time == b.end_time:
        return False
    return a.start_time < b.end_time and b.start_time < a.end_time


def find_conflicts(items: Iterable[ScheduleItem]) -> Set[str]:
    """Ids of items that overlap at least one other item on the same day"""
    items = list(items)
    conflicting = set()
    for i in range(len(items)):
        for j in range(i + 1, len(items)):
            if overlaps(items[i], items[j]):
                conflicting.add(items[i].id)
                conflicting.add(items[j].id)
    return conflicting
