"""Tests for accounts, parent/child links, grade templates and demo data"""
import pytest
from datetime import timedelta

from backend.conflicts import find_conflicts
from backend.exceptions import UserNotFoundError
from backend.family import child_progress, create_account, create_child, list_children, unlink_child
from backend.log_manager import DailyLogManager
from backend.reconciler import log_sync_score
from backend.schemas import DAYS, ActivityCategory, GradeLevel, UserCreate, UserRole
from backend.templates import GRADE_TEMPLATES, generate_schedule_for_grade, seed_demo


# ============================================
# Grade templates
# ============================================

def test_weekday_template_shape():
    schedule = generate_schedule_for_grade(GradeLevel.ELEMENTARY, 1)

    assert set(schedule) == set(DAYS)
    assert len(schedule["Monday"]) == 4
    assert schedule["Tuesday"][2].label == "Park Play"
    assert schedule["Wednesday"][2].category == ActivityCategory.READING
    assert len(schedule["Saturday"]) == 2
    assert schedule["Sunday"][-1].category == ActivityCategory.CHORES


def test_template_has_no_conflicts():
    schedule = generate_schedule_for_grade(GradeLevel.HIGH, 11)
    assert all(find_conflicts(items) == set() for items in schedule.values())


def test_template_ids_are_unique():
    schedule = generate_schedule_for_grade(GradeLevel.MIDDLE, 7)
    ids = [item.id for items in schedule.values() for item in items]
    assert len(ids) == len(set(ids))


@pytest.mark.parametrize("level,name,xp", [
    (GradeLevel.ELEMENTARY, "Junior Scout", 500),
    (GradeLevel.MIDDLE, "Mission Specialist", 1500),
    (GradeLevel.HIGH, "Senior Commander", 4000),
    (GradeLevel.UNIVERSITY, "Elite Strategist", 8000),
])
def test_grade_templates(level, name, xp):
    template = GRADE_TEMPLATES[level](3)
    assert template["name"] == name
    assert template["xp"] == xp


# ============================================
# Accounts
# ============================================

def test_student_with_grade_starts_from_template(store):
    user = create_account(store, UserCreate(user_id="kid", name="Kid", grade=GradeLevel.HIGH, specific_grade=10))
    assert user.xp == 4000
    assert len(user.weekly_schedule["Monday"]) == 4


def test_parent_starts_empty(store):
    user = create_account(store, UserCreate(user_id="mum", name="Mum", role=UserRole.PARENT))
    assert user.xp == 0
    assert all(items == [] for items in user.weekly_schedule.values())


def test_duplicate_handle_rejected(store, student):
    with pytest.raises(ValueError):
        create_account(store, UserCreate(user_id="ada", name="Other Ada"))


def test_create_and_list_children(store, parent):
    create_child(store, parent.id, "Zed", "zed")
    child = create_child(store, parent.id, "Bea", "bea", grade=GradeLevel.ELEMENTARY, specific_grade=2)

    assert child.parent_id == parent.id
    assert child.role == UserRole.STUDENT
    assert [c.name for c in list_children(store, parent.id)] == ["Bea", "Zed"]


def test_children_require_parent_account(store, student):
    with pytest.raises(ValueError):
        create_child(store, student.id, "Kid", "kid")
    with pytest.raises(UserNotFoundError):
        list_children(store, "ghost")


def test_unlink_child(store, parent):
    child = create_child(store, parent.id, "Bea", "bea")
    unlink_child(store, parent.id, child.id)

    assert list_children(store, parent.id) == []
    assert store.get_user_profile(child.id) is not None


def test_child_progress(store, parent, monday_template, monday):
    child = create_child(store, parent.id, "Bea", "bea")
    child.weekly_schedule = monday_template
    child = store.save_user(child)

    manager = DailyLogManager(store)
    log = manager.get_or_create_log(child.id, monday, child.weekly_schedule)
    manager.fulfill(child.id, log, "m1")

    progress = child_progress(store, store.get_user_profile(child.id), today=monday)
    assert progress.today_score == 100
    assert progress.pending_today == 0
    assert progress.week_average == 100
    assert progress.level == 1


# ============================================
# Demo data
# ============================================

def test_seed_demo(store, monday):
    parent, child = seed_demo(store, GradeLevel.MIDDLE, 7, days=14, today=monday)

    assert parent.id == "p-demo"
    assert child.parent_id == "p-demo"
    assert child.xp == 1500

    logs = store.get_daily_logs(child.id)
    assert len(logs) == 14
    assert logs[0].date == monday
    assert logs[-1].date == monday - timedelta(days=13)
    assert all(log_sync_score(log) == 100 for log in logs)
    assert logs[0].actual_activities[0].notes == "Historical data synced."


def test_seed_demo_is_repeatable(store, monday):
    seed_demo(store, today=monday, days=3)
    seed_demo(store, today=monday, days=3)
    assert len(store.get_daily_logs("c-demo")) == 3
    assert len(store.get_users()) == 2
