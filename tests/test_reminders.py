"""Tests for reminder evaluation and de-duplication"""
import pytest
from datetime import datetime

from backend.reminders import ReminderPoller, ReminderTracker, due_reminders
from backend.schemas import empty_schedule


@pytest.fixture
def schedule(make_item):
    """Monday 2024-01-01: a 09:00 class with a 10 minute reminder"""
    week = empty_schedule()
    week["Monday"] = [
        make_item("r1", "09:00", "10:00", label="Algebra", reminder_minutes=10),
        make_item("quiet", "11:00", "12:00"),
    ]
    return week


def test_reminder_fires_at_trigger_minute(schedule):
    alerts = due_reminders(schedule, datetime(2024, 1, 1, 8, 50, 12))

    assert [a.item.id for a in alerts] == ["r1"]
    assert alerts[0].trigger_minute == 8 * 60 + 50
    assert alerts[0].message == '"Algebra" starts soon.'


@pytest.mark.parametrize("hour,minute", [(8, 49), (8, 51), (9, 0)])
def test_reminder_silent_outside_trigger_minute(schedule, hour, minute):
    assert due_reminders(schedule, datetime(2024, 1, 1, hour, minute)) == []


def test_reminder_only_for_todays_weekday(schedule):
    # 2024-01-02 is a Tuesday
    assert due_reminders(schedule, datetime(2024, 1, 2, 8, 50)) == []


def test_tracker_fires_once_per_minute_window(schedule):
    tracker = ReminderTracker()

    first = tracker.check(schedule, datetime(2024, 1, 1, 8, 50, 0))
    second = tracker.check(schedule, datetime(2024, 1, 1, 8, 50, 30))

    assert len(first) == 1
    assert second == []


def test_tracker_fires_again_next_week(schedule):
    tracker = ReminderTracker()
    assert len(tracker.check(schedule, datetime(2024, 1, 1, 8, 50))) == 1
    assert len(tracker.check(schedule, datetime(2024, 1, 8, 8, 50))) == 1


def test_poller_notifies(schedule):
    sent = []
    poller = ReminderPoller(
        lambda: schedule,
        sent.append,
        interval_seconds=30,
        clock=lambda: datetime(2024, 1, 1, 8, 50, 5),
    )

    assert len(poller.poll()) == 1
    assert poller.poll() == []
    assert [a.item.id for a in sent] == ["r1"]
