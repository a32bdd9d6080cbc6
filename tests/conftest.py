import os
import random
from threading import Lock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

from vaccine_scheduler.database import Base, create_scheduler_tables  # noqa: E402
from vaccine_scheduler.services.reservation_coordinator import ReservationCoordinator  # noqa: E402


@pytest.fixture
def scheduler_engine():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    create_scheduler_tables(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(scheduler_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=scheduler_engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def coordinator(session_factory) -> ReservationCoordinator:
    return ReservationCoordinator(session_factory=session_factory, rng=random.Random(486), lock=Lock())
