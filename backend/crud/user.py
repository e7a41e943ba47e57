from sqlalchemy.orm import Session
from backend.models import User, DailyLogRecord
from backend.schemas import UserAccount, schedule_to_storage
from typing import List, Optional

def get_users(db: Session) -> List[User]:
    """Get all accounts"""
    return db.query(User).all()

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get account by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_handle(db: Session, handle: str) -> Optional[User]:
    """Get account by login handle"""
    return db.query(User).filter(User.user_id == handle).first()

def get_children(db: Session, parent_id: str) -> List[User]:
    """Get student accounts linked to a parent"""
    return db.query(User).filter(User.parent_id == parent_id).order_by(User.name).all()

def save_user(db: Session, account: UserAccount) -> User:
    """Insert or update an account, keyed by id"""
    values = {
        "user_id": account.user_id,
        "name": account.name,
        "phone": account.phone,
        "role": account.role.value,
        "parent_id": account.parent_id,
        "grade": account.grade.value if account.grade else None,
        "specific_grade": account.specific_grade,
        "weekly_schedule": schedule_to_storage(account.weekly_schedule),
        "xp": account.xp,
        "onboarding_completed": account.onboarding_completed,
    }
    db_user = get_user(db, account.id)
    if db_user:
        for key, value in values.items():
            setattr(db_user, key, value)
    else:
        db_user = User(id=account.id, **values)
        db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def delete_user(db: Session, user_id: str) -> bool:
    """Delete an account and all of its daily logs"""
    db_user = get_user(db, user_id)
    if not db_user:
        return False
    db.query(DailyLogRecord).filter(DailyLogRecord.user_id == user_id).delete()
    db.delete(db_user)
    db.commit()
    return True
