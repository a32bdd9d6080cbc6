from threading import Lock

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from vaccine_scheduler.core import config


def build_engine(database_url: str, echo: bool = False) -> Engine:
    connect_args = {}
    if database_url.startswith('sqlite'):
        connect_args['check_same_thread'] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


engine = build_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

# Largest value a BIGINT column holds on every supported backend.
MAX_BIGINT = 2**63 - 1

_schema_lock = Lock()
_scheduler_schema_checked = False

SCHEDULER_INDEXES = (
    'CREATE INDEX IF NOT EXISTS idx_availabilities_date ON availabilities(date)',
    'CREATE INDEX IF NOT EXISTS idx_appointments_patient ON appointments(patient_username, cancelled)',
    'CREATE INDEX IF NOT EXISTS idx_appointments_caregiver ON appointments(caregiver_username, cancelled)',
)


def create_scheduler_tables(bind: Engine) -> None:
    # Imported here so every model is registered on Base.metadata.
    from vaccine_scheduler.models import appointment, availability, sequence, vaccine  # noqa: F401

    Base.metadata.create_all(bind=bind)

    with bind.begin() as connection:
        for statement in SCHEDULER_INDEXES:
            connection.execute(text(statement))


def ensure_scheduler_schema() -> None:
    global _scheduler_schema_checked

    if _scheduler_schema_checked:
        return

    with _schema_lock:
        if _scheduler_schema_checked:
            return

        create_scheduler_tables(engine)

        _scheduler_schema_checked = True
