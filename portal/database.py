from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from portal.core import config


engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_room_schema_checked = False
_appointment_schema_checked = False


def ensure_room_schema() -> None:
    """Add the operating-calendar columns to room tables created before they existed."""
    global _room_schema_checked

    if _room_schema_checked:
        return

    with _schema_lock:
        if _room_schema_checked:
            return

        inspector = inspect(engine)

        if 'meeting_rooms' not in inspector.get_table_names():
            _room_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('meeting_rooms')}
        migration_steps = [
            ('operating_start', "ALTER TABLE meeting_rooms ADD COLUMN operating_start VARCHAR DEFAULT '08:00'"),
            ('operating_end', "ALTER TABLE meeting_rooms ADD COLUMN operating_end VARCHAR DEFAULT '18:00'"),
            ('works_saturday', 'ALTER TABLE meeting_rooms ADD COLUMN works_saturday BOOLEAN DEFAULT FALSE'),
            ('works_sunday', 'ALTER TABLE meeting_rooms ADD COLUMN works_sunday BOOLEAN DEFAULT FALSE'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))

        _room_schema_checked = True


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('participants', 'ALTER TABLE appointments ADD COLUMN participants JSON'),
            ('duration_minutes', 'ALTER TABLE appointments ADD COLUMN duration_minutes INTEGER DEFAULT 30'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_room_date ON appointments(room_id, date)')
            )

        _appointment_schema_checked = True
