"""
Daily log lifecycle.

One log exists per (user, date). It is created the first time the date is
viewed by snapshotting that weekday's template; later template edits do
not touch an existing snapshot.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple
import logging
import uuid

from backend.conflicts import validate_item
from backend.exceptions import AlreadyFulfilledError, EntryNotFoundError
from backend.reconciler import DayView, build_day_view, fulfilled_ids
from backend.schemas import DailyLog, ScheduleItem, UserAccount, WeeklySchedule, new_id, weekday_name
from backend.xp import XpEvent, award_xp, xp_for

logger = logging.getLogger(__name__)

_LOG_NAMESPACE = uuid.UUID("6f1c2a9e-3d4b-4c8e-9a51-0b7d2e6f8c13")

FULFILLED_NOTE = "Objective accomplished according to plan."


def log_id_for(user_id: str, log_date: date) -> str:
    """Stable log id, so two sessions creating the same day agree on the key"""
    return uuid.uuid5(_LOG_NAMESPACE, f"{user_id}:{log_date.isoformat()}").hex


@dataclass
class XpAward:
    event: XpEvent
    amount: int
    total: int


class DailyLogManager:
    """Creates daily logs and applies user actions to them"""

    def __init__(self, store):
        self.store = store

    def get_log(self, user_id: str, log_date: date) -> Optional[DailyLog]:
        return self.store.get_daily_log(user_id, log_date)

    def get_or_create_log(self, user_id: str, log_date: date, weekly_template: WeeklySchedule) -> DailyLog:
        """Return the day's log, creating it from the template on first access"""
        existing = self.store.get_daily_log(user_id, log_date)
        if existing is not None:
            return existing

        planned = [item.model_copy(update={"status": None}) for item in weekly_template.get(weekday_name(log_date), [])]
        log = DailyLog(
            id=log_id_for(user_id, log_date),
            user_id=user_id,
            date=log_date,
            planned_snapshot=planned,
            actual_activities=[],
        )
        logger.info("Creating log for %s on %s with %d planned items", user_id, log_date, len(planned))
        return self.store.save_daily_log(log)

    def fulfill(self, user_id: str, log: DailyLog, planned_id: str,
                notes: Optional[str] = None, actual_subject: Optional[str] = None) -> Tuple[DailyLog, XpAward]:
        """Log a planned item as done and award XP for it"""
        plan = next((p for p in log.planned_snapshot if p.id == planned_id), None)
        if plan is None:
            raise EntryNotFoundError(planned_id, log.date.isoformat())
        if planned_id in fulfilled_ids(log.actual_activities):
            raise AlreadyFulfilledError(planned_id, log.date.isoformat())

        actual = plan.model_copy(update={
            "id": new_id(),
            "planned_id": plan.id,
            "completed": True,
            "notes": notes or FULFILLED_NOTE,
            "actual_subject": actual_subject or plan.actual_subject,
            "status": None,
        })
        updated = log.model_copy(update={"actual_activities": log.actual_activities + [actual]})
        saved = self.store.save_daily_log(updated)
        total = award_xp(self.store, user_id, XpEvent.PLANNED_FULFILLED)
        return saved, XpAward(XpEvent.PLANNED_FULFILLED, xp_for(XpEvent.PLANNED_FULFILLED), total)

    def log_spontaneous(self, user_id: str, log: DailyLog, item: ScheduleItem) -> Tuple[DailyLog, XpAward]:
        """Record an unplanned activity and award XP for it"""
        existing_ids = {a.id for a in log.actual_activities}
        entry = item.model_copy(update={
            "id": item.id if item.id not in existing_ids else new_id(),
            "planned_id": None,
            "completed": True,
            "label": item.label or "Spontaneous Mission",
            "status": None,
        })
        updated = log.model_copy(update={"actual_activities": log.actual_activities + [entry]})
        saved = self.store.save_daily_log(updated)
        total = award_xp(self.store, user_id, XpEvent.SPONTANEOUS_LOGGED)
        return saved, XpAward(XpEvent.SPONTANEOUS_LOGGED, xp_for(XpEvent.SPONTANEOUS_LOGGED), total)

    def find_entry(self, log: DailyLog, item_id: str) -> ScheduleItem:
        """Actual entry or planned snapshot item with the given id"""
        for item in log.actual_activities + log.planned_snapshot:
            if item.id == item_id:
                return item
        raise EntryNotFoundError(item_id, log.date.isoformat())

    def update_entry(self, log: DailyLog, item: ScheduleItem) -> DailyLog:
        """Replace an actual or planned entry with the same id. No XP change."""
        item = item.model_copy(update={"status": None})
        if item.start_time is not None or item.end_time is not None:
            validate_item(item)
        if any(a.id == item.id for a in log.actual_activities):
            actual = [item if a.id == item.id else a for a in log.actual_activities]
            updated = log.model_copy(update={"actual_activities": actual})
        elif any(p.id == item.id for p in log.planned_snapshot):
            planned = [item if p.id == item.id else p for p in log.planned_snapshot]
            updated = log.model_copy(update={"planned_snapshot": planned})
        else:
            raise EntryNotFoundError(item.id, log.date.isoformat())
        return self.store.save_daily_log(updated)

    def remove_entry(self, log: DailyLog, item_id: str) -> DailyLog:
        """
        Remove a logged entry, or drop a pending item from the day's plan.

        XP already awarded for a removed entry is kept.
        """
        if any(a.id == item_id for a in log.actual_activities):
            actual = [a for a in log.actual_activities if a.id != item_id]
            updated = log.model_copy(update={"actual_activities": actual})
        elif any(p.id == item_id for p in log.planned_snapshot):
            if item_id in fulfilled_ids(log.actual_activities):
                # A fulfilled item shows as its actual entry; remove that instead
                raise EntryNotFoundError(item_id, log.date.isoformat())
            planned = [p for p in log.planned_snapshot if p.id != item_id]
            updated = log.model_copy(update={"planned_snapshot": planned})
        else:
            raise EntryNotFoundError(item_id, log.date.isoformat())
        return self.store.save_daily_log(updated)

    def day_view(self, user: UserAccount, log_date: date, today: Optional[date] = None) -> DayView:
        """Day screen for a user; today's view also lists template items added since the snapshot"""
        log = self.get_or_create_log(user.id, log_date, user.weekly_schedule)
        today = today or date.today()
        live_items = user.day_items(weekday_name(log_date)) if log_date == today else None
        return build_day_view(log, live_items)
