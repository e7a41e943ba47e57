"""Tests for the user and log stores (memory and SQL)"""
import pytest
from datetime import timedelta
from sqlalchemy.exc import OperationalError

import backend.crud.daily_log as daily_log_crud
from backend import database
from backend.config import settings
from backend.exceptions import StoreUnavailableError
from backend.schemas import DailyLog, UserAccount, UserRole
from backend.store import MemoryStore, SqlStore, get_store


def _log(user_id, day, log_id=None, planned=None, actual=None):
    return DailyLog(
        id=log_id or f"log-{day.isoformat()}",
        user_id=user_id,
        date=day,
        planned_snapshot=planned or [],
        actual_activities=actual or [],
    )


# ============================================
# Users
# ============================================

def test_save_and_get_user_round_trips_schedule(store, student):
    loaded = store.get_user_profile(student.id)
    assert loaded.user_id == "ada"
    assert loaded.role == UserRole.STUDENT
    assert [i.id for i in loaded.weekly_schedule["Monday"]] == ["m1"]
    assert loaded.weekly_schedule["Tuesday"] == []


def test_get_missing_user_returns_none(store):
    assert store.get_user_profile("nobody") is None
    assert store.get_user_by_handle("nobody") is None


def test_save_user_upserts_by_id(store, student):
    student.xp = 300
    student.name = "Ada L."
    store.save_user(student)

    users = store.get_users()
    assert len(users) == 1
    assert users[0].xp == 300
    assert users[0].name == "Ada L."


def test_get_user_by_handle(store, student):
    assert store.get_user_by_handle("ada").id == student.id


def test_get_children_sorted_by_name(store, parent):
    for uid, name in [("c2", "Zed"), ("c1", "Bea")]:
        store.save_user(UserAccount(id=uid, user_id=uid, name=name, parent_id=parent.id))
    store.save_user(UserAccount(id="other", user_id="other", name="Al"))

    assert [c.name for c in store.get_children(parent.id)] == ["Bea", "Zed"]


def test_returned_user_is_a_copy(store, student):
    loaded = store.get_user_profile(student.id)
    loaded.xp = 999
    assert store.get_user_profile(student.id).xp == 0


def test_delete_user_removes_logs(store, student, monday):
    store.save_daily_log(_log(student.id, monday))

    assert store.delete_user(student.id) is True
    assert store.get_user_profile(student.id) is None
    assert store.get_daily_logs(student.id) == []
    assert store.delete_user(student.id) is False


# ============================================
# Daily logs
# ============================================

def test_save_daily_log_upserts_by_user_and_date(store, student, monday, make_item):
    store.save_daily_log(_log(student.id, monday, log_id="first"))
    saved = store.save_daily_log(_log(student.id, monday, log_id="second",
                                      actual=[make_item("s1", "12:00", "13:00")]))

    logs = store.get_daily_logs(student.id)
    assert len(logs) == 1
    assert saved.id == "first"
    assert [a.id for a in logs[0].actual_activities] == ["s1"]


def test_daily_logs_newest_first(store, student, monday):
    for offset in [2, 0, 1]:
        store.save_daily_log(_log(student.id, monday + timedelta(days=offset)))

    dates = [log.date for log in store.get_daily_logs(student.id)]
    assert dates == [monday + timedelta(days=2), monday + timedelta(days=1), monday]


def test_get_daily_log_by_date(store, student, monday):
    store.save_daily_log(_log(student.id, monday))
    assert store.get_daily_log(student.id, monday).date == monday
    assert store.get_daily_log(student.id, monday + timedelta(days=1)) is None


def test_snapshot_items_keep_fields(store, student, monday, make_item):
    item = make_item("p1", "08:00", "09:00", planned_subject="Math", reminder_minutes=5)
    store.save_daily_log(_log(student.id, monday, planned=[item]))

    loaded = store.get_daily_log(student.id, monday).planned_snapshot[0]
    assert loaded.planned_subject == "Math"
    assert loaded.reminder_minutes == 5
    assert loaded.status is None


# ============================================
# SQL specifics
# ============================================

def test_concurrent_insert_falls_back_to_update(sql_store, monkeypatch, monday, make_item):
    sql_store.save_user(UserAccount(id="u1", user_id="u1", name="U"))
    sql_store.save_daily_log(_log("u1", monday, log_id="winner"))

    real_get = daily_log_crud.get_daily_log
    calls = []

    def stale_then_real(db, user_id, log_date):
        # First lookup misses the row another session already inserted
        calls.append(log_date)
        if len(calls) == 1:
            return None
        return real_get(db, user_id, log_date)

    monkeypatch.setattr(daily_log_crud, "get_daily_log", stale_then_real)

    saved = sql_store.save_daily_log(_log("u1", monday, log_id="loser",
                                          actual=[make_item("s1", "12:00", "13:00")]))

    assert saved.id == "winner"
    assert [a.id for a in saved.actual_activities] == ["s1"]


def test_sql_errors_are_wrapped():
    def broken_session():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    store = SqlStore(broken_session)
    with pytest.raises(StoreUnavailableError) as exc_info:
        store.get_user_profile("u1")

    assert exc_info.value.operation == "get_user_profile"
    assert isinstance(exc_info.value.cause, OperationalError)


def test_get_store_wraps_schema_creation_failure(monkeypatch):
    def unreachable(bind=None):
        raise OperationalError("CREATE TABLE", {}, Exception("unable to open database file"))

    monkeypatch.setattr(settings, "storage_backend", "sql")
    monkeypatch.setattr(database, "init_db", unreachable)

    with pytest.raises(StoreUnavailableError) as exc_info:
        get_store()
    assert exc_info.value.operation == "init_db"


def test_get_store_memory_backend(monkeypatch):
    monkeypatch.setattr(settings, "storage_backend", "memory")
    assert isinstance(get_store(), MemoryStore)
