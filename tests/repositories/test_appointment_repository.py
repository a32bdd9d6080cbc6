from datetime import date

import pytest

from vaccine_scheduler.core.exceptions import (
    AlreadyCancelledError,
    AppointmentNotFoundError,
    DuplicateAppointmentIDError,
    InternalConsistencyError,
)
from vaccine_scheduler.domain.entities import Appointment, AppointmentStatus
from vaccine_scheduler.repositories.appointment_repository import AppointmentLedger


def _appointment(appointment_id: int, patient: str = 'alice', caregiver: str = 'carol', vaccine: str = 'Pfizer') -> Appointment:
    return Appointment(
        id=appointment_id,
        date=date(2024, 3, appointment_id),
        vaccine_name=vaccine,
        patient_username=patient,
        caregiver_username=caregiver,
    )


def test_insert_then_get_active_round_trips(db_session) -> None:
    ledger = AppointmentLedger(db_session)

    ledger.insert(_appointment(1))
    stored = ledger.get_active(1)

    assert stored == _appointment(1)
    assert stored.status == AppointmentStatus.ACTIVE


def test_insert_duplicate_id_is_an_internal_consistency_error(db_session) -> None:
    ledger = AppointmentLedger(db_session)
    ledger.insert(_appointment(1))

    with pytest.raises(InternalConsistencyError) as exception_info:
        ledger.insert(_appointment(1, patient='bob'))

    assert isinstance(exception_info.value, DuplicateAppointmentIDError)


def test_get_active_unknown_id_raises_not_found(db_session) -> None:
    with pytest.raises(AppointmentNotFoundError):
        AppointmentLedger(db_session).get_active(42)


def test_mark_cancelled_is_terminal(db_session) -> None:
    ledger = AppointmentLedger(db_session)
    ledger.insert(_appointment(1))

    ledger.mark_cancelled(1)

    with pytest.raises(AlreadyCancelledError):
        ledger.get_active(1)
    with pytest.raises(InternalConsistencyError):
        ledger.mark_cancelled(1)


def test_lists_only_include_active_appointments_in_id_order(db_session) -> None:
    ledger = AppointmentLedger(db_session)
    ledger.insert(_appointment(3, patient='alice', caregiver='carol'))
    ledger.insert(_appointment(1, patient='alice', caregiver='dave'))
    ledger.insert(_appointment(2, patient='bob', caregiver='carol'))
    ledger.mark_cancelled(2)

    assert [appointment.id for appointment in ledger.list_for_patient('alice')] == [1, 3]
    assert [appointment.id for appointment in ledger.list_for_caregiver('carol')] == [3]
    assert ledger.list_for_patient('bob') == []


def test_count_active_and_max_id(db_session) -> None:
    ledger = AppointmentLedger(db_session)
    assert ledger.max_id() == 0

    ledger.insert(_appointment(1))
    ledger.insert(_appointment(4, vaccine='Moderna'))
    ledger.insert(_appointment(2))
    ledger.mark_cancelled(2)

    assert ledger.max_id() == 4
    assert ledger.count_active('Pfizer') == 1
    assert ledger.count_active('Moderna') == 1


def test_is_booked_ignores_cancelled_appointments(db_session) -> None:
    ledger = AppointmentLedger(db_session)
    ledger.insert(_appointment(1))

    assert ledger.is_booked(date(2024, 3, 1), 'carol')
    assert not ledger.is_booked(date(2024, 3, 1), 'dave')

    ledger.mark_cancelled(1)

    assert not ledger.is_booked(date(2024, 3, 1), 'carol')
