from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String
from datetime import datetime

from app.db.base_class import Base

class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False, index=True)
    capacity = Column(Integer, nullable=False, default=0)
    amenities = Column(JSON, nullable=False, default=list) # e.g. ["Projector", "Whiteboard"]
    is_active = Column(Boolean, nullable=False, default=True) # Inactive rooms are hidden from users
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=True)
