"""
User Store + Log Store.

Everything that reads or writes accounts and daily logs takes a store
instance; nothing reads a global "is the database available" flag.
"""

import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend import crud
from backend.config import settings
from backend.exceptions import StoreUnavailableError
from backend.schemas import DailyLog, UserAccount

logger = logging.getLogger(__name__)


def get_store():
    """Factory function to return the store selected in config"""
    if settings.storage_backend.lower() == "memory":
        return MemoryStore()
    from backend.database import SessionLocal, init_db
    try:
        init_db()
    except SQLAlchemyError as e:
        raise StoreUnavailableError(str(e), operation="init_db", cause=e) from e
    return SqlStore(SessionLocal)


class BaseStore:
    """Storage interface used by the log manager, XP ledger and family flows"""

    def get_users(self) -> List[UserAccount]:
        raise NotImplementedError

    def get_user_profile(self, user_id: str) -> Optional[UserAccount]:
        raise NotImplementedError

    def get_user_by_handle(self, handle: str) -> Optional[UserAccount]:
        return next((u for u in self.get_users() if u.user_id == handle), None)

    def get_children(self, parent_id: str) -> List[UserAccount]:
        children = [u for u in self.get_users() if u.parent_id == parent_id]
        return sorted(children, key=lambda u: u.name)

    def save_user(self, user: UserAccount) -> UserAccount:
        raise NotImplementedError

    def delete_user(self, user_id: str) -> bool:
        raise NotImplementedError

    def get_daily_logs(self, user_id: str) -> List[DailyLog]:
        raise NotImplementedError

    def get_daily_log(self, user_id: str, log_date: date) -> Optional[DailyLog]:
        return next((log for log in self.get_daily_logs(user_id) if log.date == log_date), None)

    def save_daily_log(self, log: DailyLog) -> DailyLog:
        raise NotImplementedError


class SqlStore(BaseStore):
    """Store backed by the SQLAlchemy CRUD layer"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _run(self, operation: str, fn):
        try:
            with self.session_factory() as db:
                return fn(db)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e), operation=operation, cause=e) from e

    def get_users(self) -> List[UserAccount]:
        return self._run("get_users", lambda db: [
            UserAccount.model_validate(u) for u in crud.get_users(db)
        ])

    def get_user_profile(self, user_id: str) -> Optional[UserAccount]:
        def fetch(db):
            db_user = crud.get_user(db, user_id)
            return UserAccount.model_validate(db_user) if db_user else None
        return self._run("get_user_profile", fetch)

    def get_user_by_handle(self, handle: str) -> Optional[UserAccount]:
        def fetch(db):
            db_user = crud.get_user_by_handle(db, handle)
            return UserAccount.model_validate(db_user) if db_user else None
        return self._run("get_user_by_handle", fetch)

    def get_children(self, parent_id: str) -> List[UserAccount]:
        return self._run("get_children", lambda db: [
            UserAccount.model_validate(u) for u in crud.get_children(db, parent_id)
        ])

    def save_user(self, user: UserAccount) -> UserAccount:
        return self._run("save_user", lambda db: UserAccount.model_validate(crud.save_user(db, user)))

    def delete_user(self, user_id: str) -> bool:
        return self._run("delete_user", lambda db: crud.delete_user(db, user_id))

    def get_daily_logs(self, user_id: str) -> List[DailyLog]:
        return self._run("get_daily_logs", lambda db: [
            DailyLog.model_validate(log) for log in crud.get_daily_logs(db, user_id)
        ])

    def get_daily_log(self, user_id: str, log_date: date) -> Optional[DailyLog]:
        def fetch(db):
            db_log = crud.get_daily_log(db, user_id, log_date)
            return DailyLog.model_validate(db_log) if db_log else None
        return self._run("get_daily_log", fetch)

    def save_daily_log(self, log: DailyLog) -> DailyLog:
        return self._run("save_daily_log", lambda db: DailyLog.model_validate(crud.save_daily_log(db, log)))


class MemoryStore(BaseStore):
    """In-process store for offline mode and tests. Nothing survives a restart."""

    def __init__(self):
        self._users: Dict[str, UserAccount] = {}
        self._logs: Dict[Tuple[str, date], DailyLog] = {}

    def get_users(self) -> List[UserAccount]:
        return [u.model_copy(deep=True) for u in self._users.values()]

    def get_user_profile(self, user_id: str) -> Optional[UserAccount]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    def save_user(self, user: UserAccount) -> UserAccount:
        self._users[user.id] = user.model_copy(deep=True)
        return user.model_copy(deep=True)

    def delete_user(self, user_id: str) -> bool:
        if self._users.pop(user_id, None) is None:
            return False
        for key in [k for k in self._logs if k[0] == user_id]:
            del self._logs[key]
        return True

    def get_daily_logs(self, user_id: str) -> List[DailyLog]:
        logs = [log for (uid, _), log in self._logs.items() if uid == user_id]
        return [log.model_copy(deep=True) for log in sorted(logs, key=lambda l: l.date, reverse=True)]

    def get_daily_log(self, user_id: str, log_date: date) -> Optional[DailyLog]:
        log = self._logs.get((user_id, log_date))
        return log.model_copy(deep=True) if log else None

    def save_daily_log(self, log: DailyLog) -> DailyLog:
        key = (log.user_id, log.date)
        existing = self._logs.get(key)
        stored = log.model_copy(deep=True)
        if existing is not None:
            # Upsert keeps the first row's primary key
            stored.id = existing.id
        self._logs[key] = stored
        logger.debug("Saved log %s for %s on %s", stored.id, log.user_id, log.date)
        return stored.model_copy(deep=True)
