from backend.models.user import User
from backend.models.daily_log import DailyLogRecord

__all__ = [
    "User",
    "DailyLogRecord"
]
