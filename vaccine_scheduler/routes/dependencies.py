from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from vaccine_scheduler.core.exceptions import (
    AlreadyCancelledError,
    ConflictError,
    InsufficientDosesError,
    InternalConsistencyError,
    NoCaregiverAvailableError,
    NotAuthorizedError,
    NotFoundError,
    SchedulerError,
    StorageUnavailableError,
    ValidationError,
)
from vaccine_scheduler.database import ensure_scheduler_schema
from vaccine_scheduler.services.reservation_coordinator import ReservationCoordinator

ERROR_STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AlreadyCancelledError, status.HTTP_409_CONFLICT),
    (InsufficientDosesError, status.HTTP_409_CONFLICT),
    (NoCaregiverAvailableError, status.HTTP_409_CONFLICT),
    (StorageUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (InternalConsistencyError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def to_http_exception(exc: SchedulerError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)


def ensure_database_ready() -> None:
    try:
        ensure_scheduler_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def get_coordinator() -> ReservationCoordinator:
    ensure_database_ready()
    return ReservationCoordinator()
