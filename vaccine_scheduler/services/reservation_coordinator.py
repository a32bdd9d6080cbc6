"""
Reservation coordinator.

The only entry point that mutates the appointment ledger, caregiver
availability and vaccine inventory. Each public operation runs as one database
transaction entered under a process-wide lock: either every store change of the
operation commits, or the session is rolled back and none of them do.
"""

import logging
import random
from contextlib import AbstractContextManager, contextmanager
from dataclasses import replace
from datetime import date, datetime
from threading import Lock
from typing import Callable, Iterator, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vaccine_scheduler.core.exceptions import (
    CaregiverBookedError,
    InsufficientDosesError,
    InternalConsistencyError,
    NoCaregiverAvailableError,
    NotAuthorizedError,
    SchedulerError,
    SlotConflictError,
    SlotNotFoundError,
    StorageUnavailableError,
    VaccineNotFoundError,
    ValidationError,
)
from vaccine_scheduler.database import MAX_BIGINT, SessionLocal
from vaccine_scheduler.domain.entities import (
    Appointment,
    AppointmentListing,
    AppointmentRole,
    AppointmentStatus,
    AvailabilitySlot,
    Reservation,
    ScheduleSearch,
    VaccineDoseCount,
)
from vaccine_scheduler.repositories.appointment_repository import AppointmentLedger
from vaccine_scheduler.repositories.availability_repository import AvailabilityStore
from vaccine_scheduler.repositories.id_allocator import IDAllocator
from vaccine_scheduler.repositories.vaccine_repository import VaccineInventory

logger = logging.getLogger(__name__)

_transaction_lock = Lock()


def parse_slot_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError(f'Please enter a valid date (YYYY-MM-DD), got {value!r}.') from exc
    raise ValidationError(f'Please enter a valid date (YYYY-MM-DD), got {value!r}.')


def parse_positive_int(value: int | str, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f'{field_name} must be a positive integer.')
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise ValidationError(f'{field_name} must be a positive integer.') from exc
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f'{field_name} must be a positive integer.')
    if value > MAX_BIGINT:
        raise ValidationError(f'{field_name} must be no larger than {MAX_BIGINT}.')
    return value


def require_name(value: str, field_name: str) -> str:
    normalized = value.strip() if isinstance(value, str) else ''
    if not normalized:
        raise ValidationError(f'{field_name} is required.')
    return normalized


class ReservationCoordinator:
    """Reserve, cancel, publish availability and add doses as atomic operations.

    Callers pass the acting username explicitly on every call; the coordinator
    keeps no notion of a logged-in user.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        rng: random.Random | None = None,
        lock: AbstractContextManager | None = None,
    ):
        self.session_factory = session_factory
        self.rng = rng or random.SystemRandom()
        self.lock = lock or _transaction_lock

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        with self.lock:
            db = self.session_factory()
            try:
                yield db
                db.commit()
            except InternalConsistencyError:
                db.rollback()
                logger.exception(
                    'Invariant violation, %s rolled back', operation,
                    extra={'context': {'operation': operation}},
                )
                raise
            except SchedulerError as exc:
                db.rollback()
                logger.info(
                    '%s rejected: %s', operation, exc.message,
                    extra={'context': {'operation': operation, 'error': type(exc).__name__}},
                )
                raise
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception(
                    'Database failure, %s rolled back', operation,
                    extra={'context': {'operation': operation}},
                )
                raise StorageUnavailableError(
                    'Database unavailable. Verify DATABASE_URL and database credentials.'
                ) from exc
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

    def reserve(self, slot_date: date | str, vaccine_name: str, patient_username: str) -> Reservation:
        slot_date = parse_slot_date(slot_date)
        vaccine_name = require_name(vaccine_name, 'Vaccine name')
        patient_username = require_name(patient_username, 'Patient username')

        with self._transaction('reserve') as db:
            inventory = VaccineInventory(db)
            availability = AvailabilityStore(db)

            # Read check only; the conditional debit below is authoritative.
            stock = inventory.get(vaccine_name)
            if stock.doses < 1:
                raise InsufficientDosesError(vaccine_name, available=stock.doses)

            candidates = availability.find_candidates(slot_date)
            if not candidates:
                raise NoCaregiverAvailableError(slot_date)

            appointment_id = IDAllocator(db).next_id()
            caregiver_username = self._claim_slot(availability, slot_date, candidates)
            inventory.decrease(vaccine_name, 1)
            AppointmentLedger(db).insert(
                Appointment(
                    id=appointment_id,
                    date=slot_date,
                    vaccine_name=vaccine_name,
                    patient_username=patient_username,
                    caregiver_username=caregiver_username,
                )
            )

        logger.info(
            'Appointment reserved',
            extra={
                'context': {
                    'appointment_id': appointment_id,
                    'date': slot_date.isoformat(),
                    'vaccine': vaccine_name,
                    'patient': patient_username,
                    'caregiver': caregiver_username,
                }
            },
        )
        return Reservation(
            appointment_id=appointment_id,
            caregiver_username=caregiver_username,
            date=slot_date,
            vaccine_name=vaccine_name,
        )

    def _claim_slot(self, availability: AvailabilityStore, slot_date: date, candidates: List[str]) -> str:
        remaining = list(candidates)
        while remaining:
            candidate = self.rng.choice(remaining)
            try:
                availability.remove(slot_date, candidate)
            except SlotNotFoundError:
                logger.info(
                    'Slot taken by a concurrent reservation, trying another caregiver',
                    extra={'context': {'date': slot_date.isoformat(), 'caregiver': candidate}},
                )
                remaining.remove(candidate)
                continue
            return candidate

        raise NoCaregiverAvailableError(slot_date)

    def cancel(self, appointment_id: int | str, requesting_username: str | None = None) -> Appointment:
        appointment_id = parse_positive_int(appointment_id, 'Appointment id')
        if requesting_username is not None:
            requesting_username = require_name(requesting_username, 'Username')

        with self._transaction('cancel') as db:
            ledger = AppointmentLedger(db)
            appointment = ledger.get_active(appointment_id)

            if requesting_username is not None and not appointment.involves(requesting_username):
                raise NotAuthorizedError(
                    'Only the patient or caregiver of this appointment can cancel it.'
                )

            try:
                AvailabilityStore(db).add(appointment.date, appointment.caregiver_username)
            except SlotConflictError as exc:
                raise InternalConsistencyError(
                    f'{appointment.caregiver_username} already has an open slot on '
                    f'{appointment.date} while appointment {appointment_id} holds it.'
                ) from exc

            try:
                VaccineInventory(db).increase(appointment.vaccine_name, 1)
            except VaccineNotFoundError as exc:
                raise InternalConsistencyError(
                    f'Appointment {appointment_id} references unknown vaccine {appointment.vaccine_name}.'
                ) from exc

            ledger.mark_cancelled(appointment_id)

        logger.info(
            'Appointment cancelled',
            extra={
                'context': {
                    'appointment_id': appointment_id,
                    'requested_by': requesting_username,
                    'caregiver': appointment.caregiver_username,
                    'vaccine': appointment.vaccine_name,
                }
            },
        )
        return replace(appointment, status=AppointmentStatus.CANCELLED)

    def upload_availability(self, caregiver_username: str, slot_date: date | str) -> AvailabilitySlot:
        caregiver_username = require_name(caregiver_username, 'Caregiver username')
        slot_date = parse_slot_date(slot_date)

        with self._transaction('upload_availability') as db:
            # Serialized by the process lock only; multi-process writers can race here.
            if AppointmentLedger(db).is_booked(slot_date, caregiver_username):
                raise CaregiverBookedError(slot_date, caregiver_username)
            slot = AvailabilityStore(db).add(slot_date, caregiver_username)

        logger.info(
            'Availability uploaded',
            extra={'context': {'caregiver': caregiver_username, 'date': slot_date.isoformat()}},
        )
        return slot

    def add_doses(self, vaccine_name: str, count: int | str) -> VaccineDoseCount:
        vaccine_name = require_name(vaccine_name, 'Vaccine name')
        count = parse_positive_int(count, 'Number of doses')

        with self._transaction('add_doses') as db:
            inventory = VaccineInventory(db)
            try:
                inventory.get(vaccine_name)
            except VaccineNotFoundError:
                stock = inventory.create(vaccine_name, count)
            else:
                stock = VaccineDoseCount(vaccine_name=vaccine_name, doses=inventory.increase(vaccine_name, count))

        logger.info(
            'Doses updated',
            extra={'context': {'vaccine': vaccine_name, 'added': count, 'total': stock.doses}},
        )
        return stock

    def list_appointments(self, username: str, role: AppointmentRole | str) -> List[AppointmentListing]:
        username = require_name(username, 'Username')
        try:
            role = AppointmentRole(role.strip().lower() if isinstance(role, str) else role)
        except ValueError as exc:
            raise ValidationError('Role must be either patient or caregiver.') from exc

        with self._transaction('list_appointments') as db:
            ledger = AppointmentLedger(db)
            if role == AppointmentRole.CAREGIVER:
                appointments = ledger.list_for_caregiver(username)
            else:
                appointments = ledger.list_for_patient(username)

        return [
            AppointmentListing(
                id=appointment.id,
                date=appointment.date,
                vaccine_name=appointment.vaccine_name,
                counterparty_username=(
                    appointment.patient_username
                    if role == AppointmentRole.CAREGIVER
                    else appointment.caregiver_username
                ),
            )
            for appointment in appointments
        ]

    def list_vaccines(self) -> List[VaccineDoseCount]:
        with self._transaction('list_vaccines') as db:
            return VaccineInventory(db).list_all()

    def search_schedule(self, slot_date: date | str) -> ScheduleSearch:
        slot_date = parse_slot_date(slot_date)

        with self._transaction('search_schedule') as db:
            return ScheduleSearch(
                date=slot_date,
                caregivers=AvailabilityStore(db).find_candidates(slot_date),
                vaccines=VaccineInventory(db).list_all(),
            )
