"""Appointment model definitions."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from portal.database import Base


class Appointment(Base):
    """A single-slot room booking written by the booking screens."""
    __tablename__ = "appointments"

    id = Column(String, primary_key=True)
    room_id = Column(String, ForeignKey("meeting_rooms.id"), index=True)
    date = Column(String)  # YYYY-MM-DD
    time = Column(String)  # HH:MM
    duration_minutes = Column(Integer, default=30)
    user_id = Column(String)
    user_name = Column(String)  # snapshot of the name at booking time
    subject = Column(String)
    participants = Column(JSON)
    created_at = Column(String)
