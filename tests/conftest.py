"""Shared fixtures for Study Sync tests"""
import pytest
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.database import init_db
from backend.store import MemoryStore, SqlStore
from backend.schemas import ActivityCategory, ScheduleItem, UserAccount, UserRole, empty_schedule


# ============================================================================
# Dates
# ============================================================================

@pytest.fixture
def monday():
    """2024-01-01 was a Monday"""
    return date(2024, 1, 1)


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sql_session_factory():
    """SQLite in-memory database shared across sessions"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def sql_store(sql_session_factory):
    return SqlStore(sql_session_factory)


@pytest.fixture(params=["memory", "sql"])
def store(request, memory_store, sql_store):
    """Runs a test against both store implementations"""
    return memory_store if request.param == "memory" else sql_store


# ============================================================================
# Schedule & User Fixtures
# ============================================================================

def _make_item(item_id, start, end, category=ActivityCategory.STUDYING, label=None, **extra):
    return ScheduleItem(
        id=item_id,
        category=category,
        start_time=start,
        end_time=end,
        label=label or item_id,
        **extra
    )


@pytest.fixture
def make_item():
    """Factory for ScheduleItem with short positional arguments"""
    return _make_item


@pytest.fixture
def monday_template():
    """Template with a single Monday study block"""
    schedule = empty_schedule()
    schedule["Monday"] = [_make_item("m1", "08:00", "09:00")]
    return schedule


@pytest.fixture
def student(store, monday_template):
    user = UserAccount(
        id="stu-1",
        user_id="ada",
        name="Ada",
        role=UserRole.STUDENT,
        weekly_schedule=monday_template,
        xp=0
    )
    return store.save_user(user)


@pytest.fixture
def parent(store):
    user = UserAccount(id="par-1", user_id="mum", name="Mum", role=UserRole.PARENT)
    return store.save_user(user)
