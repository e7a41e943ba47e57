from sqlalchemy import Column, String, Date, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from backend.database import Base

class DailyLogRecord(Base):
    """Planned snapshot and actual activities for one user on one date"""
    __tablename__ = "daily_logs"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_logs_user_date"),)
    
    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    planned_snapshot = Column(JSON, nullable=False, default=list)  # frozen copy of the weekday template
    actual_activities = Column(JSON, nullable=False, default=list)
    
    user = relationship("User", back_populates="daily_logs")
