"""Tests for plan/actual reconciliation and sync scoring"""
import pytest
from datetime import date, timedelta

from backend.reconciler import (
    average_score,
    build_day_view,
    log_sync_score,
    reconcile,
    spontaneous_entries,
    sync_history,
    sync_score,
)
from backend.schemas import DailyLog, ItemStatus


@pytest.fixture
def planned(make_item):
    return [
        make_item("p1", "08:00", "09:00"),
        make_item("p2", "10:00", "11:00"),
        make_item("p3", "13:00", "14:00"),
    ]


# ============================================
# reconcile
# ============================================

def test_reconcile_length_is_planned_plus_spontaneous(planned, make_item):
    actual = [
        make_item("a1", "08:05", "09:00", planned_id="p1"),
        make_item("s1", "15:00", "16:00"),
        make_item("s2", "17:00", "18:00"),
    ]
    timeline = reconcile(planned, actual)
    assert len(timeline) == len(planned) + 2


def test_reconcile_with_no_actuals_is_all_pending(planned):
    timeline = reconcile(planned, [])
    assert [i.id for i in timeline] == ["p1", "p2", "p3"]
    assert all(i.status == ItemStatus.PENDING for i in timeline)


def test_fulfilled_planned_item_is_replaced_by_its_actual(planned, make_item):
    actual = [make_item("a2", "10:15", "11:00", planned_id="p2", notes="done")]
    timeline = reconcile(planned, actual)

    ids = [i.id for i in timeline]
    assert "p2" not in ids
    assert "a2" in ids
    logged = next(i for i in timeline if i.id == "a2")
    assert logged.status == ItemStatus.LOGGED
    assert logged.notes == "done"


def test_status_logged_iff_from_actual_or_fulfilled(planned, make_item):
    actual = [make_item("a1", "08:00", "09:00", planned_id="p1"), make_item("s1", "12:00", "12:30")]
    timeline = reconcile(planned, actual)
    actual_ids = {a.id for a in actual}
    for item in timeline:
        assert (item.status == ItemStatus.LOGGED) == (item.id in actual_ids)


def test_duplicate_fulfilment_last_one_wins(planned, make_item):
    actual = [
        make_item("first", "08:00", "09:00", planned_id="p1"),
        make_item("second", "08:10", "09:00", planned_id="p1"),
    ]
    timeline = reconcile(planned, actual)
    ids = [i.id for i in timeline]
    assert "second" in ids
    assert "first" not in ids
    assert len(timeline) == len(planned)


def test_timeline_sorted_by_start_time(planned, make_item):
    actual = [make_item("s1", "07:00", "07:30"), make_item("s2", "12:00", "12:30")]
    timeline = reconcile(planned, actual)
    starts = [i.start_time for i in timeline]
    assert starts == sorted(starts)
    assert [i.id for i in timeline] == ["s1", "p1", "p2", "s2", "p3"]


def test_sort_is_stable_for_equal_start_times(make_item):
    planned = [make_item("p1", "09:00", "10:00"), make_item("p2", "09:00", "09:30")]
    actual = [make_item("s1", "09:00", "09:15")]
    assert [i.id for i in reconcile(planned, actual)] == ["p1", "p2", "s1"]


def test_missing_start_time_sorts_first(planned, make_item):
    actual = [make_item("s1", None, None)]
    timeline = reconcile(planned, actual)
    assert timeline[0].id == "s1"


def test_reconcile_does_not_modify_inputs(planned, make_item):
    actual = [make_item("a1", "08:00", "09:00", planned_id="p1")]
    reconcile(planned, actual)
    assert all(p.status is None for p in planned)
    assert actual[0].status is None


def test_spontaneous_entries(make_item):
    actual = [make_item("a1", "08:00", "09:00", planned_id="p1"), make_item("s1", "12:00", "13:00")]
    assert [a.id for a in spontaneous_entries(actual)] == ["s1"]


# ============================================
# sync score
# ============================================

def test_sync_score_no_plan_is_full():
    assert sync_score(0, 0) == 100
    assert sync_score(0, 5) == 100


def test_sync_score_values():
    assert sync_score(3, 0) == 0
    assert sync_score(3, 1) == 33
    assert sync_score(3, 2) == 67
    assert sync_score(4, 4) == 100


def test_sync_score_rounds_half_up():
    assert sync_score(8, 1) == 13  # 12.5
    assert sync_score(200, 1) == 1  # 0.5


def test_sync_score_clamped_for_duplicate_fulfilment():
    assert sync_score(2, 5) == 100


@pytest.mark.parametrize("n", [1, 2, 3, 7, 9])
def test_sync_score_bounds_and_monotonic(n):
    scores = [sync_score(n, m) for m in range(0, n + 3)]
    assert all(0 <= s <= 100 for s in scores)
    assert scores[:n + 1] == sorted(scores[:n + 1])


def test_log_sync_score(planned, make_item, monday):
    log = DailyLog(
        id="log",
        user_id="u",
        date=monday,
        planned_snapshot=planned,
        actual_activities=[make_item("a1", "08:00", "09:00", planned_id="p1"), make_item("s1", "15:00", "16:00")],
    )
    assert log_sync_score(log) == 33


# ============================================
# day view and history
# ============================================

def test_day_view_reports_conflicts_and_drift(make_item, monday):
    log = DailyLog(
        id="log",
        user_id="u",
        date=monday,
        planned_snapshot=[make_item("p1", "08:00", "09:30"), make_item("p2", "09:00", "10:00")],
    )
    live = [make_item("p1", "08:00", "09:30"), make_item("new", "18:00", "19:00")]
    view = build_day_view(log, live)

    assert view.conflicts == {"p1", "p2"}
    assert [i.id for i in view.unsnapshotted] == ["new"]
    assert len(view.timeline) == 2
    assert view.sync_score == 0
    assert len(view.pending) == 2
    assert view.logged == []


def test_sync_history_fills_missing_days(monday):
    logs = [
        DailyLog(id="a", user_id="u", date=monday),
        DailyLog(id="b", user_id="u", date=monday - timedelta(days=2)),
    ]
    history = sync_history(logs, monday, days=3)
    assert history == [
        (monday - timedelta(days=2), 100),
        (monday - timedelta(days=1), None),
        (monday, 100),
    ]


def test_average_score_ignores_missing_days():
    day = date(2024, 1, 1)
    assert average_score([(day, 50), (day, None), (day, 100)]) == 75
    assert average_score([(day, None)]) is None
