"""
Reminder evaluation for the weekly template.

An item with reminder_minutes fires once, at start time minus
reminder_minutes, on each day it is scheduled. The poller checks every
`reminder_poll_seconds` seconds, so each trigger minute is seen at least
once and de-duplicated by (item id, date, trigger minute).
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, Set, Tuple
import logging
import threading

from backend.config import settings
from backend.conflicts import is_valid_time, to_minutes
from backend.schemas import ScheduleItem, WeeklySchedule, weekday_name

logger = logging.getLogger(__name__)


@dataclass
class ReminderAlert:
    item: ScheduleItem
    day: date
    trigger_minute: int

    @property
    def key(self) -> Tuple[str, str, int]:
        return (self.item.id, self.day.isoformat(), self.trigger_minute)

    @property
    def message(self) -> str:
        return f'"{self.item.label}" starts soon.'


def due_reminders(schedule: WeeklySchedule, now: datetime) -> List[ReminderAlert]:
    """Reminders whose trigger minute is the current minute"""
    today = now.date()
    current = now.hour * 60 + now.minute
    alerts = []
    for item in schedule.get(weekday_name(today), []):
        if item.reminder_minutes is None or not is_valid_time(item.start_time):
            continue
        trigger = to_minutes(item.start_time) - item.reminder_minutes
        if current == trigger:
            alerts.append(ReminderAlert(item=item, day=today, trigger_minute=trigger))
    return alerts


class ReminderTracker:
    """Remembers which alerts already fired"""

    def __init__(self):
        self._fired: Set[Tuple[str, str, int]] = set()
        self._lock = threading.Lock()

    def check(self, schedule: WeeklySchedule, now: datetime) -> List[ReminderAlert]:
        """Due alerts that have not fired yet; marks them fired"""
        fresh = []
        with self._lock:
            for alert in due_reminders(schedule, now):
                if alert.key in self._fired:
                    continue
                self._fired.add(alert.key)
                fresh.append(alert)
            # Keys from earlier days can never match again
            today = now.date().isoformat()
            self._fired = {k for k in self._fired if k[1] == today}
        return fresh


class ReminderPoller:
    """Runs the reminder check on a background interval job"""

    def __init__(self, schedule_source: Callable[[], WeeklySchedule],
                 notify: Callable[[ReminderAlert], None],
                 interval_seconds: Optional[int] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.schedule_source = schedule_source
        self.notify = notify
        self.interval_seconds = interval_seconds or settings.reminder_poll_seconds
        self.clock = clock
        self.tracker = ReminderTracker()
        self.scheduler = BackgroundScheduler()

    def poll(self) -> List[ReminderAlert]:
        """One check; returns the alerts that were sent"""
        schedule = self.schedule_source()
        alerts = self.tracker.check(schedule, self.clock())
        for alert in alerts:
            logger.info("Reminder for %s on %s", alert.item.label, alert.day)
            self.notify(alert)
        return alerts

    def start(self):
        self.scheduler.add_job(
            self.poll,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id="reminder_poll",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Reminder poller started (every %ss)", self.interval_seconds)

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
