"""Shared value types for room availability.

The engine only reads these models; they are built from database rows with
``model_validate(row)`` thanks to ``from_attributes``.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from portal.scheduling.slots import parse_label

DEFAULT_OPERATING_START = '08:00'
DEFAULT_OPERATING_END = '18:00'
APPOINTMENT_DURATION_MINUTES = 30


class SlotState(str, Enum):
    CLOSED = 'CLOSED'
    PAST = 'PAST'
    BOOKED = 'BOOKED'
    FREE = 'FREE'


class RoomConfig(BaseModel):
    """A room's operating calendar.

    Missing or blank hours and weekend flags fall back to the portal defaults
    (08:00 to 18:00, closed on weekends). Hours that are present but not
    "HH:MM" are rejected.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str = ''
    capacity: int = 0
    features: list[str] = Field(default_factory=list)
    operating_start: str = DEFAULT_OPERATING_START
    operating_end: str = DEFAULT_OPERATING_END
    works_saturday: bool = False
    works_sunday: bool = False

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, value: object) -> str:
        if value is None or not str(value).strip():
            raise ValueError('Room identity is required.')
        return str(value)

    @field_validator('name', mode='before')
    @classmethod
    def default_name(cls, value: str | None) -> str:
        return value or ''

    @field_validator('capacity', mode='before')
    @classmethod
    def default_capacity(cls, value: int | None) -> int:
        return value or 0

    @field_validator('features', mode='before')
    @classmethod
    def default_features(cls, value: list[str] | None) -> list[str]:
        return list(value or [])

    @field_validator('operating_start', 'operating_end', mode='before')
    @classmethod
    def validate_hours(cls, value: str | None, info: ValidationInfo) -> str:
        if value is None or not str(value).strip():
            if info.field_name == 'operating_start':
                return DEFAULT_OPERATING_START
            return DEFAULT_OPERATING_END

        normalized = str(value).strip()
        parse_label(normalized)
        return normalized

    @field_validator('works_saturday', 'works_sunday', mode='before')
    @classmethod
    def default_weekend_flags(cls, value: bool | None) -> bool:
        return bool(value)


class AppointmentRecord(BaseModel):
    """A booking as read by the engine.

    ``time`` is kept as the raw stored text: a malformed value is skipped
    by the engine instead of failing validation for the whole day. Records
    without an ``id`` fail validation and are skipped the same way.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    room_id: str | None = None
    date: str | None = None
    time: str | None = None
    duration_minutes: int = APPOINTMENT_DURATION_MINUTES
    subject: str = ''
    user_id: str | None = None
    user_name: str = ''
    participants: list[str] = Field(default_factory=list)
    created_at: str | None = None

    @field_validator('id', 'room_id', mode='before')
    @classmethod
    def stringify_identity(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value)

    @field_validator('time', mode='before')
    @classmethod
    def stringify_time(cls, value: object) -> str | None:
        # Non-string values are kept as text so the engine skips them as malformed.
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator('duration_minutes', mode='before')
    @classmethod
    def fixed_duration(cls, value: int | None) -> int:
        del value
        return APPOINTMENT_DURATION_MINUTES

    @field_validator('subject', 'user_name', mode='before')
    @classmethod
    def default_text(cls, value: str | None) -> str:
        return value or ''

    @field_validator('participants', mode='before')
    @classmethod
    def default_participants(cls, value: list[str] | str | None) -> list[str]:
        if isinstance(value, str):
            return [value] if value.strip() else []
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValueError('Participants must be a list of names.')
        return list(value)


class Slot(BaseModel):
    label: str
    state: SlotState
    appointment: AppointmentRecord | None = None


class OccupancyResult(BaseModel):
    """The occupancy verdict for one room on one date."""

    date: date
    is_occupied: bool
    is_closed: bool
    current_appointment: AppointmentRecord | None = None
    day_schedule: list[Slot]
