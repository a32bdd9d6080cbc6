from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from vaccine_scheduler.core.exceptions import SchedulerError
from vaccine_scheduler.database import MAX_BIGINT
from vaccine_scheduler.routes.dependencies import get_coordinator, to_http_exception
from vaccine_scheduler.services.reservation_coordinator import ReservationCoordinator

router = APIRouter(tags=['vaccines'])


class AddDosesRequest(BaseModel):
    vaccine_name: str
    doses: int

    @field_validator('vaccine_name')
    @classmethod
    def validate_vaccine_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Vaccine name is required.')
        return normalized

    @field_validator('doses')
    @classmethod
    def validate_doses(cls, value: int) -> int:
        if value <= 0:
            raise ValueError('Number of doses must be positive.')
        if value > MAX_BIGINT:
            raise ValueError(f'Number of doses must be no larger than {MAX_BIGINT}.')
        return value


class VaccineStockResponse(BaseModel):
    vaccine_name: str
    doses: int

    class Config:
        from_attributes = True


@router.post('/doses', response_model=VaccineStockResponse)
def add_doses(data: AddDosesRequest, coordinator: ReservationCoordinator = Depends(get_coordinator)):
    try:
        stock = coordinator.add_doses(data.vaccine_name, data.doses)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return VaccineStockResponse.model_validate(stock)


@router.get('', response_model=list[VaccineStockResponse])
def list_vaccines(coordinator: ReservationCoordinator = Depends(get_coordinator)):
    try:
        vaccines = coordinator.list_vaccines()
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return [VaccineStockResponse.model_validate(stock) for stock in vaccines]
