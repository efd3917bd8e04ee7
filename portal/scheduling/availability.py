"""
Room availability engine.

Derives, for one room and one date, the state of every slot of the shared grid
and whether the room is occupied at a given instant. Everything is computed
from the arguments: the engine never reads the clock and keeps nothing between
calls, so it is safe to evaluate concurrently for any number of rooms.

Double booking: appointments are assumed not to share a slot. When two
records claim the same slot the first one in input order wins, both for the
slot attachment and for the current meeting. No error is raised; preventing
it belongs to the booking write path.

Malformed records: an appointment that cannot be read (missing fields, wrong
types) or whose ``time`` is not a valid ``HH:MM`` label is skipped and logged
instead of failing the whole room.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from portal.scheduling.slots import SLOT_INCREMENT_MINUTES, parse_label, time_slots
from portal.scheduling.status import (
    AppointmentRecord,
    OccupancyResult,
    RoomConfig,
    Slot,
    SlotState,
)

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6


def as_room(room: Any) -> RoomConfig:
    if room is None:
        raise ValueError('A room is required to compute availability.')
    if isinstance(room, RoomConfig):
        return room
    return RoomConfig.model_validate(room)


def as_appointment(appointment: Any) -> AppointmentRecord:
    if isinstance(appointment, AppointmentRecord):
        return appointment
    return AppointmentRecord.model_validate(appointment)


def _record_id(appointment: Any) -> object:
    if isinstance(appointment, Mapping):
        return appointment.get('id')
    return getattr(appointment, 'id', None)


def as_appointments(appointments: Iterable[Any]) -> list[AppointmentRecord]:
    """Validate each record on its own, dropping the ones that cannot be read."""
    records: list[AppointmentRecord] = []
    for appointment in appointments:
        try:
            records.append(as_appointment(appointment))
        except ValidationError as exc:
            logger.warning(
                'Skipping unreadable appointment %r: %s',
                _record_id(appointment),
                exc.errors(include_url=False),
            )
    return records


def is_weekend_closed(room: RoomConfig, day: date) -> bool:
    weekday = day.weekday()
    if weekday == SATURDAY:
        return not room.works_saturday
    if weekday == SUNDAY:
        return not room.works_sunday
    return False


def wall_clock_minutes(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def _valid_appointments(appointments: Iterable[AppointmentRecord]) -> list[tuple[int, AppointmentRecord]]:
    """Pair each well-formed appointment with its start minute, keeping input order."""
    valid: list[tuple[int, AppointmentRecord]] = []
    for appointment in appointments:
        try:
            start = parse_label(appointment.time)
        except ValueError:
            logger.warning(
                'Skipping appointment %s with malformed time %r.',
                appointment.id,
                appointment.time,
            )
            continue
        valid.append((start, appointment))
    return valid


def _index_by_label(valid: list[tuple[int, AppointmentRecord]]) -> dict[str, AppointmentRecord]:
    index: dict[str, AppointmentRecord] = {}
    for _, appointment in valid:
        index.setdefault(appointment.time, appointment)
    return index


def _find_current_appointment(
    valid: list[tuple[int, AppointmentRecord]],
    now_minutes: int,
) -> AppointmentRecord | None:
    for start, appointment in valid:
        if start <= now_minutes < start + SLOT_INCREMENT_MINUTES:
            return appointment
    return None


def classify_slot(
    label: str,
    *,
    opens: int,
    closes: int,
    closed_for_weekend: bool,
    appointment: AppointmentRecord | None,
    schedule_day: date,
    now: datetime,
) -> SlotState:
    start = parse_label(label)
    if closed_for_weekend or not opens <= start < closes:
        return SlotState.CLOSED
    if appointment is not None:
        return SlotState.BOOKED

    today = now.date()
    if schedule_day < today:
        return SlotState.PAST
    if schedule_day == today and start + SLOT_INCREMENT_MINUTES <= wall_clock_minutes(now):
        return SlotState.PAST
    return SlotState.FREE


def compute_room_status(
    room: Any,
    appointments: Iterable[Any],
    now: datetime,
    day: date | None = None,
) -> OccupancyResult:
    """Classify a room's day and decide whether it is occupied at ``now``.

    ``appointments`` must already be limited to this room and date. ``day``
    defaults to the date of ``now``; for any other date the room cannot be
    occupied and only the weekend rule decides whether it is closed.
    """
    if now is None:
        raise ValueError('The current time must be supplied explicitly.')

    room = as_room(room)
    records = as_appointments(appointments)
    schedule_day = day or now.date()
    is_today = schedule_day == now.date()

    opens = parse_label(room.operating_start)
    closes = parse_label(room.operating_end)
    now_minutes = wall_clock_minutes(now)

    closed_for_weekend = is_weekend_closed(room, schedule_day)
    outside_hours_now = is_today and not opens <= now_minutes < closes
    is_closed = closed_for_weekend or outside_hours_now

    valid = _valid_appointments(records)
    by_label = _index_by_label(valid)

    day_schedule: list[Slot] = []
    for label in time_slots():
        state = classify_slot(
            label,
            opens=opens,
            closes=closes,
            closed_for_weekend=closed_for_weekend,
            appointment=by_label.get(label),
            schedule_day=schedule_day,
            now=now,
        )
        attached = by_label[label] if state is SlotState.BOOKED else None
        day_schedule.append(Slot(label=label, state=state, appointment=attached))

    current_appointment = _find_current_appointment(valid, now_minutes) if is_today else None

    return OccupancyResult(
        date=schedule_day,
        is_occupied=current_appointment is not None and not is_closed,
        is_closed=is_closed,
        current_appointment=current_appointment,
        day_schedule=day_schedule,
    )


def agenda(appointments: Iterable[Any]) -> list[AppointmentRecord]:
    """A room's appointments in start-time order, malformed ones left out."""
    valid = _valid_appointments(as_appointments(appointments))
    return [appointment for _, appointment in sorted(valid, key=lambda pair: pair[0])]


def compute_rooms_status(
    rooms: Iterable[Any],
    appointments: Iterable[Any],
    now: datetime,
) -> Mapping[str, OccupancyResult]:
    """Evaluate every room for the date of ``now``.

    ``appointments`` may span rooms and dates; only those of ``now``'s date
    are routed to their room.
    """
    if now is None:
        raise ValueError('The current time must be supplied explicitly.')

    today = now.date().isoformat()
    by_room: dict[str, list[AppointmentRecord]] = {}
    for record in as_appointments(appointments):
        if record.date == today and record.room_id is not None:
            by_room.setdefault(record.room_id, []).append(record)

    results: dict[str, OccupancyResult] = {}
    for room in rooms:
        config = as_room(room)
        results[config.id] = compute_room_status(config, by_room.get(config.id, []), now)
    return results
