from backend.crud.user import (
    get_users,
    get_user,
    get_user_by_handle,
    get_children,
    save_user,
    delete_user
)
from backend.crud.daily_log import get_daily_logs, get_daily_log, save_daily_log

__all__ = [
    "get_users",
    "get_user",
    "get_user_by_handle",
    "get_children",
    "save_user",
    "delete_user",
    "get_daily_logs",
    "get_daily_log",
    "save_daily_log",
]
