from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from backend.models import DailyLogRecord
from backend.schemas import DailyLog
from datetime import date
from typing import List, Optional

def get_daily_logs(db: Session, user_id: str) -> List[DailyLogRecord]:
    """Get all logs for a user, newest first"""
    return db.query(DailyLogRecord).filter(
        DailyLogRecord.user_id == user_id
    ).order_by(DailyLogRecord.date.desc()).all()

def get_daily_log(db: Session, user_id: str, log_date: date) -> Optional[DailyLogRecord]:
    """Get the log for a specific date"""
    return db.query(DailyLogRecord).filter(
        DailyLogRecord.user_id == user_id,
        DailyLogRecord.date == log_date
    ).first()

def _apply(db_log: DailyLogRecord, log: DailyLog):
    db_log.planned_snapshot = [item.to_storage() for item in log.planned_snapshot]
    db_log.actual_activities = [item.to_storage() for item in log.actual_activities]

def save_daily_log(db: Session, log: DailyLog) -> DailyLogRecord:
    """Insert or update a log, keyed by (user_id, date)"""
    db_log = get_daily_log(db, log.user_id, log.date)
    if db_log is None:
        db_log = DailyLogRecord(id=log.id, user_id=log.user_id, date=log.date)
        _apply(db_log, log)
        db.add(db_log)
        try:
            db.commit()
        except IntegrityError:
            # Another session created the same (user_id, date) row first
            db.rollback()
            db_log = get_daily_log(db, log.user_id, log.date)
            if db_log is None:
                raise
            _apply(db_log, log)
            db.commit()
    else:
        _apply(db_log, log)
        db.commit()
    db.refresh(db_log)
    return db_log
