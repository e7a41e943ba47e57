"""
Exception hierarchy for Study Sync.

Store failures are wrapped in StoreUnavailableError so callers can show a
"data unavailable" state; they are logged once, where they are raised.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class StudySyncError(Exception):
    """Base exception for all Study Sync errors"""

    def __init__(self, message: str, user_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.user_id = user_id


class StoreUnavailableError(StudySyncError):
    """The storage backend could not complete a request"""

    def __init__(self, message: str, operation: str, cause: Optional[Exception] = None,
                 user_id: Optional[str] = None):
        super().__init__(message, user_id=user_id)
        self.operation = operation
        self.cause = cause
        logger.error("Store operation %s failed: %s", operation, message, exc_info=cause)


class UserNotFoundError(StudySyncError):
    """A flow needed an account that does not exist"""

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found", user_id=user_id)


class EntryNotFoundError(StudySyncError):
    """No planned or actual entry with the given id in the day's log"""

    def __init__(self, item_id: str, log_date: str):
        super().__init__(f"No entry {item_id} in log for {log_date}")
        self.item_id = item_id
        self.log_date = log_date


class AlreadyFulfilledError(StudySyncError):
    """The planned item already has an actual entry for the day"""

    def __init__(self, planned_id: str, log_date: str):
        super().__init__(f"Planned item {planned_id} already fulfilled on {log_date}")
        self.planned_id = planned_id
        self.log_date = log_date


class InvalidScheduleItemError(StudySyncError, ValueError):
    """A schedule item was rejected by the blueprint editor"""
