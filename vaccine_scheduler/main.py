import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from vaccine_scheduler.core import config
from vaccine_scheduler.core.logging_config import setup_logging
from vaccine_scheduler.database import ensure_scheduler_schema
from vaccine_scheduler.routes import appointment_routes, availability_routes, vaccine_routes

app = FastAPI(title='Vaccine Reservation Scheduler')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_application() -> None:
    setup_logging(
        log_level=config.LOG_LEVEL,
        use_json_format=config.LOG_JSON,
        log_file=config.LOG_FILE or None,
        enable_sql_echo=config.DATABASE_ECHO,
    )
    config.validate_runtime_config()

    try:
        ensure_scheduler_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Vaccine Scheduler API Running'}


app.include_router(vaccine_routes.router, prefix='/vaccines')
app.include_router(availability_routes.router, prefix='/availability')
app.include_router(appointment_routes.router, prefix='/appointments')
