from datetime import date

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator

from vaccine_scheduler.core.exceptions import SchedulerError
from vaccine_scheduler.routes.dependencies import get_coordinator, to_http_exception
from vaccine_scheduler.routes.vaccine_routes import VaccineStockResponse
from vaccine_scheduler.services.reservation_coordinator import ReservationCoordinator

router = APIRouter(tags=['availability'])


class CreateAvailabilityRequest(BaseModel):
    caregiver_username: str
    date: date

    @field_validator('caregiver_username')
    @classmethod
    def validate_caregiver_username(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Caregiver username is required.')
        return normalized


class AvailabilitySlotResponse(BaseModel):
    date: date
    caregiver_username: str

    class Config:
        from_attributes = True


class ScheduleSearchResponse(BaseModel):
    date: date
    caregivers: list[str]
    vaccines: list[VaccineStockResponse]


@router.post('/slots', response_model=AvailabilitySlotResponse, status_code=status.HTTP_201_CREATED)
def upload_availability(
    data: CreateAvailabilityRequest,
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    try:
        slot = coordinator.upload_availability(data.caregiver_username, data.date)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return AvailabilitySlotResponse.model_validate(slot)


@router.get('/search', response_model=ScheduleSearchResponse)
def search_caregiver_schedule(
    slot_date: date = Query(..., alias='date'),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    try:
        result = coordinator.search_schedule(slot_date)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return ScheduleSearchResponse(
        date=result.date,
        caregivers=result.caregivers,
        vaccines=[VaccineStockResponse.model_validate(stock) for stock in result.vaccines],
    )
