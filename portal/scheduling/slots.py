"""Slot grid and calendar helpers shared by every meeting room."""

import re
from collections.abc import Iterator
from datetime import date, timedelta

GRID_START_MINUTES = 8 * 60
LAST_SLOT_START_MINUTES = 17 * 60 + 30
SLOT_INCREMENT_MINUTES = 30
WORK_WEEK_DAYS = 5

_LABEL_PATTERN = re.compile(r'(\d{2}):(\d{2})')


def parse_label(label: str) -> int:
    """Return the minutes since midnight for a zero-padded ``HH:MM`` label."""
    match = _LABEL_PATTERN.fullmatch(label) if isinstance(label, str) else None
    if match is None:
        raise ValueError(f'Invalid time label {label!r}; expected HH:MM.')

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f'Invalid time label {label!r}; hour must be 00-23 and minute 00-59.')

    return hours * 60 + minutes


def format_label(minutes: int) -> str:
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def slot_end(label: str) -> int:
    return parse_label(label) + SLOT_INCREMENT_MINUTES


def time_slots() -> Iterator[str]:
    """Yield the bookable slot labels, 08:00 through 17:30 every 30 minutes.

    Each call returns a fresh iterator. Room operating hours are applied by
    the availability engine, never here.
    """
    current = GRID_START_MINUTES
    while current <= LAST_SLOT_START_MINUTES:
        yield format_label(current)
        current += SLOT_INCREMENT_MINUTES


TIME_SLOTS = tuple(time_slots())


def week_dates(today: date, offset: int = 0) -> list[date]:
    """Monday to Friday of the week containing ``today``, moved by ``offset`` weeks."""
    monday = today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
    return [monday + timedelta(days=index) for index in range(WORK_WEEK_DAYS)]
