import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from vaccine_scheduler.core.exceptions import SchedulerError, StorageUnavailableError
from vaccine_scheduler.routes.vaccine_routes import (
    AddDosesRequest,
    VaccineStockResponse,
    add_doses,
    list_vaccines,
)


def test_add_doses_request_strips_vaccine_name() -> None:
    request = AddDosesRequest(vaccine_name=' Pfizer ', doses=5)

    assert request.vaccine_name == 'Pfizer'


@pytest.mark.parametrize(
    ('vaccine_name', 'doses'),
    [
        ('   ', 5),
        ('Pfizer', 0),
        ('Pfizer', -2),
        ('Pfizer', 2**63),
    ],
)
def test_add_doses_request_rejects_invalid_fields(vaccine_name: str, doses: int) -> None:
    with pytest.raises(ValidationError):
        AddDosesRequest(vaccine_name=vaccine_name, doses=doses)


def test_add_doses_creates_and_accumulates_stock(coordinator) -> None:
    first = add_doses(AddDosesRequest(vaccine_name='Pfizer', doses=5), coordinator=coordinator)
    second = add_doses(AddDosesRequest(vaccine_name='Pfizer', doses=3), coordinator=coordinator)

    assert first == VaccineStockResponse(vaccine_name='Pfizer', doses=5)
    assert second == VaccineStockResponse(vaccine_name='Pfizer', doses=8)


def test_list_vaccines_returns_stock_ordered_by_name(coordinator) -> None:
    coordinator.add_doses('Pfizer', 5)
    coordinator.add_doses('Moderna', 1)

    response = list_vaccines(coordinator=coordinator)

    assert [stock.vaccine_name for stock in response] == ['Moderna', 'Pfizer']
    assert [stock.doses for stock in response] == [1, 5]


def test_add_doses_maps_storage_failure_to_503() -> None:
    class BrokenCoordinator:
        def add_doses(self, vaccine_name, count):
            raise StorageUnavailableError('Database unavailable. Verify DATABASE_URL and database credentials.')

    with pytest.raises(HTTPException) as exception_info:
        add_doses(AddDosesRequest(vaccine_name='Pfizer', doses=1), coordinator=BrokenCoordinator())

    assert exception_info.value.status_code == 503
    assert isinstance(exception_info.value.__cause__, SchedulerError)
