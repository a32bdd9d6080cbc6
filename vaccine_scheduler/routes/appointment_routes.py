from datetime import date

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator

from vaccine_scheduler.core.exceptions import SchedulerError
from vaccine_scheduler.domain.entities import AppointmentRole
from vaccine_scheduler.routes.dependencies import get_coordinator, to_http_exception
from vaccine_scheduler.services.reservation_coordinator import ReservationCoordinator

router = APIRouter(tags=['appointments'])


class CreateAppointmentRequest(BaseModel):
    patient_username: str
    vaccine_name: str
    date: date

    @field_validator('patient_username')
    @classmethod
    def validate_patient_username(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Patient username is required.')
        return normalized

    @field_validator('vaccine_name')
    @classmethod
    def validate_vaccine_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Vaccine name is required.')
        return normalized


class ReservationResponse(BaseModel):
    appointment_id: int
    caregiver_username: str
    date: date
    vaccine_name: str

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    date: date
    vaccine_name: str
    patient_username: str
    caregiver_username: str
    status: str


class AppointmentListingResponse(BaseModel):
    id: int
    date: date
    vaccine_name: str
    counterparty_username: str

    class Config:
        from_attributes = True


@router.post('', response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def reserve_appointment(
    data: CreateAppointmentRequest,
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    try:
        reservation = coordinator.reserve(data.date, data.vaccine_name, data.patient_username)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return ReservationResponse.model_validate(reservation)


@router.delete('/{appointment_id}', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    username: str = Query(...),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    try:
        appointment = coordinator.cancel(appointment_id, requesting_username=username)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return AppointmentResponse(
        id=appointment.id,
        date=appointment.date,
        vaccine_name=appointment.vaccine_name,
        patient_username=appointment.patient_username,
        caregiver_username=appointment.caregiver_username,
        status=appointment.status.value,
    )


@router.get('', response_model=list[AppointmentListingResponse])
def list_appointments(
    username: str = Query(...),
    role: AppointmentRole = Query(...),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    try:
        listings = coordinator.list_appointments(username, role)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return [AppointmentListingResponse.model_validate(listing) for listing in listings]
