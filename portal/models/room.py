"""Meeting room model definitions."""

from sqlalchemy import JSON, Boolean, Column, Integer, String
from portal.database import Base


class Room(Base):
    """A bookable meeting room and its weekly operating calendar."""
    __tablename__ = "meeting_rooms"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    capacity = Column(Integer, default=0)
    features = Column(JSON)  # e.g. ["TV", "Air conditioning"]
    operating_start = Column(String, default="08:00")
    operating_end = Column(String, default="18:00")
    works_saturday = Column(Boolean, default=False)
    works_sunday = Column(Boolean, default=False)
