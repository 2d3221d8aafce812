from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from datetime import datetime

from app.db.base_class import Base

class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(50), nullable=True) # e.g. 'General', 'Bug Report', 'Suggestion'
    is_addressed = Column(Boolean, nullable=False, default=False, index=True)
    admin_notes = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
