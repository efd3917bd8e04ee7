import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.core import config
from portal.database import SessionLocal, ensure_appointment_schema, ensure_room_schema
from portal.models.appointment import Appointment
from portal.models.room import Room
from portal.scheduling.availability import agenda, as_appointments, compute_room_status, compute_rooms_status
from portal.scheduling.slots import week_dates
from portal.scheduling.status import AppointmentRecord, OccupancyResult, RoomConfig

router = APIRouter(tags=['rooms'])

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'
ROOM_MISCONFIGURED_DETAIL = 'Room configuration is invalid. Check its operating hours.'


class RoomResponse(BaseModel):
    id: str
    name: str
    capacity: int
    features: list[str]
    operating_start: str
    operating_end: str
    works_saturday: bool
    works_sunday: bool


class RoomStatusResponse(BaseModel):
    room: RoomResponse
    status: OccupancyResult
    agenda: list[AppointmentRecord]
    refresh_seconds: int


class WeekResponse(BaseModel):
    offset: int
    dates: list[date]


def ensure_database_ready() -> None:
    try:
        ensure_room_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def resolve_now(at: datetime | None) -> datetime:
    # Wall-clock only; an aware timestamp is reduced to its local fields.
    moment = at or datetime.now()
    return moment.replace(tzinfo=None)


def parse_schedule_date(value: str | None, now: datetime) -> date:
    if value is None:
        return now.date()

    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Dates must use the YYYY-MM-DD format.',
        ) from exc


def load_room_configs(rows) -> list[RoomConfig]:
    rooms: list[RoomConfig] = []
    for row in rows:
        try:
            rooms.append(RoomConfig.model_validate(row))
        except ValidationError as exc:
            logger.warning(
                'Skipping room %r with invalid configuration: %s',
                getattr(row, 'id', None),
                exc.errors(include_url=False),
            )
    return rooms


def build_room_status(
    room: RoomConfig,
    result: OccupancyResult,
    appointments: list[AppointmentRecord],
) -> RoomStatusResponse:
    return RoomStatusResponse(
        room=RoomResponse(**room.model_dump()),
        status=result,
        agenda=agenda(appointments),
        refresh_seconds=config.STATUS_REFRESH_SECONDS,
    )


@router.get('/status', response_model=list[RoomStatusResponse])
def list_room_statuses(
    at: datetime | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        now = resolve_now(at)
        rooms = load_room_configs(db.query(Room).order_by(Room.name.asc()).all())
        appointments = as_appointments(
            db.query(Appointment).filter(
                Appointment.date == now.date().isoformat(),
            ).all()
        )

        results = compute_rooms_status(rooms, appointments, now)

        return [
            build_room_status(
                room,
                results[room.id],
                [appointment for appointment in appointments if appointment.room_id == room.id],
            )
            for room in rooms
        ]
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.get('/week', response_model=WeekResponse)
def get_week(
    offset: int = Query(default=0, ge=-52, le=52),
    at: datetime | None = Query(default=None),
):
    now = resolve_now(at)
    return WeekResponse(offset=offset, dates=week_dates(now.date(), offset))


@router.get('/{room_id}/schedule', response_model=RoomStatusResponse)
def get_room_schedule(
    room_id: str,
    schedule_date: str | None = Query(default=None, alias='date'),
    at: datetime | None = Query(default=None),
    db: Session = Depends(get_db),
):
    now = resolve_now(at)
    day = parse_schedule_date(schedule_date, now)

    ensure_database_ready()

    try:
        room = db.query(Room).filter(Room.id == room_id).first()
        if not room:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Room not found.',
            )

        try:
            room_config = RoomConfig.model_validate(room)
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=ROOM_MISCONFIGURED_DETAIL,
            ) from exc

        appointments = as_appointments(
            db.query(Appointment).filter(
                Appointment.room_id == room_id,
                Appointment.date == day.isoformat(),
            ).all()
        )

        result = compute_room_status(room_config, appointments, now, day=day)
        return build_room_status(room_config, result, appointments)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc
