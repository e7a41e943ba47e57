from typing import List, Set, Tuple

from backend.conflicts import find_conflicts, validate_item
from backend.exceptions import EntryNotFoundError, InvalidScheduleItemError, UserNotFoundError
from backend.schemas import DAYS, ScheduleItem, UserAccount, new_id


def _check_day(day: str) -> str:
    if day not in DAYS:
        raise InvalidScheduleItemError(f"Unknown day '{day}', use one of: {', '.join(DAYS)}")
    return day


def _load(store, user_id: str) -> UserAccount:
    user = store.get_user_profile(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def set_day_items(store, user_id: str, day: str, items: List[ScheduleItem]) -> Tuple[UserAccount, Set[str]]:
    """Replace a weekday's template; returns the saved user and the conflicting ids"""
    _check_day(day)
    user = _load(store, user_id)
    items = [validate_item(item.model_copy(update={"status": None, "planned_id": None})) for item in items]
    user.weekly_schedule[day] = items
    saved = store.save_user(user)
    return saved, find_conflicts(items)


def add_template_item(store, user_id: str, day: str, item: ScheduleItem) -> Tuple[UserAccount, Set[str]]:
    """Append an item to a weekday's template"""
    _check_day(day)
    user = _load(store, user_id)
    return set_day_items(store, user_id, day, user.day_items(day) + [item])


def update_template_item(store, user_id: str, day: str, item: ScheduleItem) -> Tuple[UserAccount, Set[str]]:
    _check_day(day)
    user = _load(store, user_id)
    items = user.day_items(day)
    if not any(i.id == item.id for i in items):
        raise EntryNotFoundError(item.id, day)
    return set_day_items(store, user_id, day, [item if i.id == item.id else i for i in items])


def remove_template_item(store, user_id: str, day: str, item_id: str) -> UserAccount:
    _check_day(day)
    user = _load(store, user_id)
    items = user.day_items(day)
    remaining = [i for i in items if i.id != item_id]
    if len(remaining) == len(items):
        raise EntryNotFoundError(item_id, day)
    user.weekly_schedule[day] = remaining
    return store.save_user(user)


def clone_day(store, user_id: str, day: str) -> Tuple[UserAccount, str]:
    """Copy a day's items onto the following day (fresh ids); returns the user and the target day"""
    _check_day(day)
    user = _load(store, user_id)
    next_day = DAYS[(DAYS.index(day) + 1) % len(DAYS)]
    user.weekly_schedule[next_day] = [i.model_copy(update={"id": new_id()}) for i in user.day_items(day)]
    return store.save_user(user), next_day
