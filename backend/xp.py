"""
XP ledger.

XP Award Rules:
- Fulfilling a planned item: 50 XP
- Logging a spontaneous activity: 25 XP

Levels are derived, never stored: level = xp // 1000 + 1.
"""

from enum import Enum
from typing import Dict, Optional
import logging

from backend.config import settings
from backend.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


class XpEvent(str, Enum):
    PLANNED_FULFILLED = "PLANNED_FULFILLED"
    SPONTANEOUS_LOGGED = "SPONTANEOUS_LOGGED"


XP_AWARDS = {
    XpEvent.PLANNED_FULFILLED: 50,
    XpEvent.SPONTANEOUS_LOGGED: 25,
}

XP_REASONS = {
    XpEvent.PLANNED_FULFILLED: "Mission Success",
    XpEvent.SPONTANEOUS_LOGGED: "Spontaneous Productivity",
}


def xp_for(event: XpEvent) -> int:
    return XP_AWARDS[event]


def level_for(xp: int, level_xp: Optional[int] = None) -> int:
    level_xp = level_xp or settings.level_xp
    return max(xp, 0) // level_xp + 1


def level_progress(xp: int, level_xp: Optional[int] = None) -> Dict[str, int]:
    """
    Level breakdown for progress bars

    Returns:
        {'level': int, 'xp_in_level': int, 'xp_per_level': int, 'xp_to_next_level': int}
    """
    level_xp = level_xp or settings.level_xp
    in_level = max(xp, 0) % level_xp
    return {
        "level": level_for(xp, level_xp),
        "xp_in_level": in_level,
        "xp_per_level": level_xp,
        "xp_to_next_level": level_xp - in_level,
    }


def award_xp(store, user_id: str, event: XpEvent) -> int:
    """Add the event's XP to the stored total and return the new total"""
    user = store.get_user_profile(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    delta = xp_for(event)
    user.xp = (user.xp or 0) + delta
    store.save_user(user)
    logger.info("Awarded %s XP to %s for %s (total %s)", delta, user_id, event.value, user.xp)
    return user.xp


def reset_xp(store, user_id: str) -> None:
    """Explicit account reset, the only way XP goes down"""
    user = store.get_user_profile(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    user.xp = 0
    store.save_user(user)
    logger.info("Reset XP for %s", user_id)
