from datetime import date

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from vaccine_scheduler.routes.availability_routes import (
    AvailabilitySlotResponse,
    CreateAvailabilityRequest,
    search_caregiver_schedule,
    upload_availability,
)

MARCH_FIRST = date(2024, 3, 1)


def test_create_availability_request_parses_iso_date() -> None:
    request = CreateAvailabilityRequest(caregiver_username=' carol ', date='2024-03-01')

    assert request.caregiver_username == 'carol'
    assert request.date == MARCH_FIRST


@pytest.mark.parametrize(
    ('caregiver_username', 'slot_date'),
    [
        ('', '2024-03-01'),
        ('carol', '2024-02-30'),
        ('carol', 'tomorrow'),
    ],
)
def test_create_availability_request_rejects_invalid_fields(caregiver_username: str, slot_date: str) -> None:
    with pytest.raises(ValidationError):
        CreateAvailabilityRequest(caregiver_username=caregiver_username, date=slot_date)


def test_upload_availability_returns_created_slot(coordinator) -> None:
    response = upload_availability(
        CreateAvailabilityRequest(caregiver_username='carol', date=MARCH_FIRST),
        coordinator=coordinator,
    )

    assert response == AvailabilitySlotResponse(date=MARCH_FIRST, caregiver_username='carol')


def test_upload_availability_rejects_duplicate_slot_with_conflict(coordinator) -> None:
    request = CreateAvailabilityRequest(caregiver_username='carol', date=MARCH_FIRST)
    upload_availability(request, coordinator=coordinator)

    with pytest.raises(HTTPException) as exception_info:
        upload_availability(request, coordinator=coordinator)

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'carol is already available on 2024-03-01.'


def test_search_caregiver_schedule_lists_caregivers_and_doses(coordinator) -> None:
    coordinator.add_doses('Pfizer', 4)
    coordinator.upload_availability('dave', MARCH_FIRST)
    coordinator.upload_availability('carol', MARCH_FIRST)
    coordinator.upload_availability('erin', date(2024, 3, 2))

    response = search_caregiver_schedule(slot_date=MARCH_FIRST, coordinator=coordinator)

    assert response.date == MARCH_FIRST
    assert response.caregivers == ['carol', 'dave']
    assert [(stock.vaccine_name, stock.doses) for stock in response.vaccines] == [('Pfizer', 4)]


def test_search_caregiver_schedule_returns_empty_lists_for_quiet_day(coordinator) -> None:
    response = search_caregiver_schedule(slot_date=MARCH_FIRST, coordinator=coordinator)

    assert response.caregivers == []
    assert response.vaccines == []
