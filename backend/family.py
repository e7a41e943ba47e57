from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional
import logging

from backend.exceptions import UserNotFoundError
from backend.log_manager import DailyLogManager
from backend.reconciler import average_score, sync_history
from backend.schemas import GradeLevel, UserAccount, UserCreate, UserRole, empty_schedule
from backend.templates import grade_template
from backend.xp import level_for

logger = logging.getLogger(__name__)


def create_account(store, user: UserCreate) -> UserAccount:
    """
    Create a student or parent account.

    Students with a grade start from that grade's template and XP;
    everyone else starts with an empty week.
    """
    if store.get_user_by_handle(user.user_id) is not None:
        raise ValueError(f"Login '{user.user_id}' is already taken")

    account = UserAccount(**user.model_dump())
    if user.role == UserRole.STUDENT and user.grade:
        template = grade_template(user.grade, user.specific_grade or 1)
        account.weekly_schedule = template["schedule"]
        account.xp = template["xp"]
    else:
        account.weekly_schedule = empty_schedule()

    logger.info("Creating %s account %s", account.role.value, account.user_id)
    return store.save_user(account)


def _get_parent(store, parent_id: str) -> UserAccount:
    parent = store.get_user_profile(parent_id)
    if parent is None:
        raise UserNotFoundError(parent_id)
    if parent.role != UserRole.PARENT:
        raise ValueError(f"{parent.name} is not a parent account")
    return parent


def create_child(store, parent_id: str, name: str, handle: str, phone: str = "",
                 grade: Optional[GradeLevel] = None, specific_grade: Optional[int] = None) -> UserAccount:
    """Enrol a student account linked to a parent"""
    _get_parent(store, parent_id)
    return create_account(store, UserCreate(
        user_id=handle,
        name=name,
        phone=phone,
        role=UserRole.STUDENT,
        parent_id=parent_id,
        grade=grade,
        specific_grade=specific_grade,
    ))


def list_children(store, parent_id: str) -> List[UserAccount]:
    _get_parent(store, parent_id)
    return store.get_children(parent_id)


@dataclass
class ChildProgress:
    child: UserAccount
    level: int
    today_score: int
    week_average: Optional[int]
    pending_today: int


def child_progress(store, child: UserAccount, today: Optional[date] = None) -> ChildProgress:
    """Summary a parent sees for one child"""
    today = today or date.today()
    manager = DailyLogManager(store)
    view = manager.day_view(child, today, today=today)
    logs = [log for log in store.get_daily_logs(child.id) if log.date > today - timedelta(days=7)]
    return ChildProgress(
        child=child,
        level=level_for(child.xp),
        today_score=view.sync_score,
        week_average=average_score(sync_history(logs, today, days=7)),
        pending_today=len(view.pending),
    )


def unlink_child(store, parent_id: str, child_id: str) -> UserAccount:
    """Detach a student from a parent without deleting the student"""
    _get_parent(store, parent_id)
    child = store.get_user_profile(child_id)
    if child is None or child.parent_id != parent_id:
        raise UserNotFoundError(child_id)
    child.parent_id = None
    return store.save_user(child)
