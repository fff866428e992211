# app/models/user_activity.py
from sqlalchemy import Column, String, DateTime
from app.database import Base
from app.models.mixins import utcnow

class UserActivity(Base):
    """Global per-user "last seen everything" watermark, independent of any conversation"""
    __tablename__ = "user_activity"

    user_id = Column(String(64), primary_key=True)
    last_seen_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<UserActivity {self.user_id} - {self.last_seen_at}>"
