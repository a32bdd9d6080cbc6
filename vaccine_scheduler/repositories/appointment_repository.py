from datetime import date
from typing import List

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vaccine_scheduler.core.exceptions import (
    AlreadyCancelledError,
    AppointmentNotFoundError,
    DuplicateAppointmentIDError,
    InternalConsistencyError,
)
from vaccine_scheduler.domain.entities import Appointment as DomainAppointment
from vaccine_scheduler.domain.entities import AppointmentStatus
from vaccine_scheduler.models.appointment import Appointment


class AppointmentLedger:
    """Appointment records. Rows are inserted active and only ever flipped to cancelled."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def insert(self, appointment: DomainAppointment) -> DomainAppointment:
        if self.db.query(Appointment.id).filter(Appointment.id == appointment.id).first():
            raise DuplicateAppointmentIDError(appointment.id)

        self.db.add(
            Appointment(
                id=appointment.id,
                date=appointment.date,
                vaccine_name=appointment.vaccine_name,
                patient_username=appointment.patient_username,
                caregiver_username=appointment.caregiver_username,
                cancelled=not appointment.is_active,
            )
        )
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise DuplicateAppointmentIDError(appointment.id) from exc

        return appointment

    def get_active(self, appointment_id: int) -> DomainAppointment:
        db_appointment = self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
        ).with_for_update().first()

        if db_appointment is None:
            raise AppointmentNotFoundError(appointment_id)
        if db_appointment.cancelled:
            raise AlreadyCancelledError(appointment_id)

        return self._to_domain(db_appointment)

    def mark_cancelled(self, appointment_id: int) -> None:
        result = self.db.execute(
            update(Appointment)
            .where(Appointment.id == appointment_id, Appointment.cancelled.is_(False))
            .values(cancelled=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InternalConsistencyError(
                f'Appointment {appointment_id} could not be marked cancelled.'
            )

    def list_for_caregiver(self, username: str) -> List[DomainAppointment]:
        appointments = self.db.query(Appointment).filter(
            Appointment.caregiver_username == username,
            Appointment.cancelled.is_(False),
        ).order_by(Appointment.id.asc()).all()
        return [self._to_domain(appointment) for appointment in appointments]

    def list_for_patient(self, username: str) -> List[DomainAppointment]:
        appointments = self.db.query(Appointment).filter(
            Appointment.patient_username == username,
            Appointment.cancelled.is_(False),
        ).order_by(Appointment.id.asc()).all()
        return [self._to_domain(appointment) for appointment in appointments]

    def is_booked(self, slot_date: date, caregiver_username: str) -> bool:
        found = self.db.query(Appointment.id).filter(
            Appointment.date == slot_date,
            Appointment.caregiver_username == caregiver_username,
            Appointment.cancelled.is_(False),
        ).first()
        return found is not None

    def count_active(self, vaccine_name: str) -> int:
        return self.db.query(func.count(Appointment.id)).filter(
            Appointment.vaccine_name == vaccine_name,
            Appointment.cancelled.is_(False),
        ).scalar()

    def max_id(self) -> int:
        return self.db.query(func.max(Appointment.id)).scalar() or 0

    def _to_domain(self, db_appointment: Appointment) -> DomainAppointment:
        return DomainAppointment(
            id=db_appointment.id,
            date=db_appointment.date,
            vaccine_name=db_appointment.vaccine_name,
            patient_username=db_appointment.patient_username,
            caregiver_username=db_appointment.caregiver_username,
            status=AppointmentStatus.CANCELLED if db_appointment.cancelled else AppointmentStatus.ACTIVE,
        )
