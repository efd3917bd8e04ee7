import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from portal.core import config
from portal.database import engine, ensure_appointment_schema, ensure_room_schema
from portal.models import appointment, room
from portal.routes import room_routes

logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='Intranet Portal API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['GET'],
    allow_headers=['*'],
)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        room.Base.metadata.create_all(bind=engine)
        appointment.Base.metadata.create_all(bind=engine)
        ensure_room_schema()
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Intranet Portal API Running', 'environment': config.APP_ENV}


app.include_router(room_routes.router, prefix='/rooms')
