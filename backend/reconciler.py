"""
Plan/actual reconciliation and sync scoring.

A day's log holds a frozen snapshot of the planned items and the actual
entries the user logged. Actual entries with a planned_id fulfil that
planned item; entries without one are spontaneous.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple
import math

from backend.conflicts import find_conflicts
from backend.schemas import DailyLog, ItemStatus, ScheduleItem

DEFAULT_SORT_TIME = "00:00"


def spontaneous_entries(actual: Iterable[ScheduleItem]) -> List[ScheduleItem]:
    """Actual entries with no planned item behind them"""
    return [a for a in actual if not a.planned_id]


def fulfilled_ids(actual: Iterable[ScheduleItem]) -> Set[str]:
    return {a.planned_id for a in actual if a.planned_id}


def reconcile(planned: List[ScheduleItem], actual: List[ScheduleItem]) -> List[ScheduleItem]:
    """
    Merge a day's planned snapshot with its actual entries.

    Every planned item appears exactly once: as the actual entry that
    fulfils it (LOGGED) or as itself (PENDING). Spontaneous entries follow
    as LOGGED. The result is stably sorted by start time; a missing start
    time sorts as 00:00. Inputs are not modified.
    """
    logged_by_plan: Dict[str, ScheduleItem] = {}
    for a in actual:
        if a.planned_id:
            logged_by_plan[a.planned_id] = a  # last one wins

    timeline = []
    for p in planned:
        fulfilment = logged_by_plan.get(p.id)
        if fulfilment is not None:
            timeline.append(fulfilment.model_copy(update={"status": ItemStatus.LOGGED}))
        else:
            timeline.append(p.model_copy(update={"status": ItemStatus.PENDING}))

    for a in spontaneous_entries(actual):
        timeline.append(a.model_copy(update={"status": ItemStatus.LOGGED}))

    return sorted(timeline, key=lambda item: item.start_time or DEFAULT_SORT_TIME)


def sync_score(planned_count: int, fulfilled_count: int) -> int:
    """Percentage of planned items fulfilled, 0-100. No plan means fully synced."""
    if planned_count <= 0:
        return 100
    ratio = min(max(fulfilled_count, 0), planned_count) / planned_count
    # Round half up, not to even
    score = int(math.floor(100 * ratio + 0.5))
    return max(0, min(100, score))


def log_sync_score(log: DailyLog) -> int:
    fulfilled = sum(1 for a in log.actual_activities if a.planned_id)
    return sync_score(len(log.planned_snapshot), fulfilled)


@dataclass
class DayView:
    """Everything a day screen needs, computed from one log"""
    log: DailyLog
    timeline: List[ScheduleItem]
    sync_score: int
    conflicts: Set[str]
    spontaneous: List[ScheduleItem]
    # Live-template items added after the snapshot was frozen (today only)
    unsnapshotted: List[ScheduleItem] = field(default_factory=list)

    @property
    def pending(self) -> List[ScheduleItem]:
        return [item for item in self.timeline if item.status == ItemStatus.PENDING]

    @property
    def logged(self) -> List[ScheduleItem]:
        return [item for item in self.timeline if item.status == ItemStatus.LOGGED]


def build_day_view(log: DailyLog, live_items: Optional[List[ScheduleItem]] = None) -> DayView:
    """
    Build the day view from the frozen snapshot.

    live_items is the current template for the log's weekday; items in it
    that the snapshot does not contain are reported separately and never
    count towards the score.
    """
    snapshot_ids = {p.id for p in log.planned_snapshot}
    unsnapshotted = []
    if live_items:
        unsnapshotted = [item.model_copy() for item in live_items if item.id not in snapshot_ids]
    return DayView(
        log=log,
        timeline=reconcile(log.planned_snapshot, log.actual_activities),
        sync_score=log_sync_score(log),
        conflicts=find_conflicts(log.planned_snapshot),
        spontaneous=spontaneous_entries(log.actual_activities),
        unsnapshotted=unsnapshotted,
    )


def sync_history(logs: Iterable[DailyLog], end_date: date, days: int = 30) -> List[Tuple[date, Optional[int]]]:
    """Oldest-first (date, score) pairs for the last `days` days; None where no log exists"""
    by_date = {log.date: log for log in logs}
    history = []
    for offset in range(days - 1, -1, -1):
        day = end_date - timedelta(days=offset)
        log = by_date.get(day)
        history.append((day, log_sync_score(log) if log else None))
    return history


def average_score(history: Iterable[Tuple[date, Optional[int]]]) -> Optional[int]:
    scores = [score for _, score in history if score is not None]
    if not scores:
        return None
    return round(sum(scores) / len(scores))
