from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from backend.database import Base

class User(Base):
    """Student or parent account with its weekly blueprint"""
    __tablename__ = "profiles"
    
    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, unique=True, nullable=False)  # login handle
    name = Column(String, nullable=False)
    phone = Column(String, default="")
    role = Column(String, nullable=False)  # "STUDENT" or "PARENT"
    parent_id = Column(String, index=True)  # set on students linked to a parent
    grade = Column(String)  # ELEMENTARY, MIDDLE, HIGH, UNIVERSITY
    specific_grade = Column(Integer)
    weekly_schedule = Column(JSON, nullable=False, default=dict)  # {"Monday": [item, ...], ...}
    xp = Column(Integer, nullable=False, default=0)
    onboarding_completed = Column(Boolean, default=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    daily_logs = relationship("DailyLogRecord", back_populates="user", cascade="all, delete-orphan")
