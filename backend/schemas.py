from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date
from enum import Enum
import uuid

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def new_id() -> str:
    """Fresh unique identifier for users and schedule items"""
    return uuid.uuid4().hex


def weekday_name(day: date) -> str:
    """Weekday key used in a WeeklySchedule, e.g. 'Monday'"""
    return DAYS[day.weekday()]


class ActivityCategory(str, Enum):
    STUDYING = "STUDYING"
    READING = "READING"
    PLAYTIME = "PLAYTIME"
    EXERCISE = "EXERCISE"
    CHORES = "CHORES"
    REST = "REST"
    OTHER = "OTHER"


class ItemStatus(str, Enum):
    LOGGED = "LOGGED"
    PENDING = "PENDING"


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    PARENT = "PARENT"


class GradeLevel(str, Enum):
    ELEMENTARY = "ELEMENTARY"
    MIDDLE = "MIDDLE"
    HIGH = "HIGH"
    UNIVERSITY = "UNIVERSITY"


class ScheduleItem(BaseModel):
    """One planned or logged activity slot"""
    id: str = Field(default_factory=new_id)
    category: ActivityCategory = ActivityCategory.OTHER
    start_time: Optional[str] = None  # HH:MM, 24-hour
    end_time: Optional[str] = None
    label: str = ""
    planned_subject: Optional[str] = None
    actual_subject: Optional[str] = None
    topic: Optional[str] = None
    notes: Optional[str] = None
    completed: Optional[bool] = None
    reminder_minutes: Optional[int] = None
    planned_id: Optional[str] = None  # set on actual entries that fulfil a planned item
    status: Optional[ItemStatus] = None  # derived at reconciliation time, never persisted

    def to_storage(self) -> dict:
        """JSON-ready dict without the derived status"""
        return self.model_dump(mode="json", exclude_none=True, exclude={"status"})


WeeklySchedule = Dict[str, List[ScheduleItem]]


def empty_schedule() -> WeeklySchedule:
    return {day: [] for day in DAYS}


def schedule_to_storage(schedule: WeeklySchedule) -> dict:
    return {day: [item.to_storage() for item in items] for day, items in schedule.items()}


class DailyLog(BaseModel):
    """Planned snapshot and actual activities for one user on one date"""
    id: str
    user_id: str
    date: date
    planned_snapshot: List[ScheduleItem] = Field(default_factory=list)
    actual_activities: List[ScheduleItem] = Field(default_factory=list)

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    """Schema for creating an account"""
    user_id: str  # login handle
    name: str
    phone: str = ""
    role: UserRole = UserRole.STUDENT
    parent_id: Optional[str] = None
    grade: Optional[GradeLevel] = None
    specific_grade: Optional[int] = None


class UserAccount(UserCreate):
    """Schema for a stored account"""
    id: str = Field(default_factory=new_id)
    weekly_schedule: WeeklySchedule = Field(default_factory=empty_schedule)
    xp: int = 0
    onboarding_completed: bool = False

    class Config:
        from_attributes = True

    def day_items(self, day_name: str) -> List[ScheduleItem]:
        return list(self.weekly_schedule.get(day_name, []))
