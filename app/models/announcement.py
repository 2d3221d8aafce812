from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from datetime import datetime

from app.db.base_class import Base

class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, nullable=False, index=True) # Admin who posted it
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, default="General")
    is_active = Column(Boolean, nullable=False, default=True)
    # Refreshed on every edit or (de)activation
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
