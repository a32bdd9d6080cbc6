"""
Domain entities for the reservation engine.

Plain dataclasses with no SQLAlchemy or FastAPI dependency; repositories map
rows to these and the coordinator hands them to callers.
"""

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import List


class AppointmentStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class AppointmentRole(str, enum.Enum):
    PATIENT = "patient"
    CAREGIVER = "caregiver"


@dataclass
class Appointment:
    """A reserved vaccination linking one patient, one caregiver and one dose."""

    id: int
    date: date
    vaccine_name: str
    patient_username: str
    caregiver_username: str
    status: AppointmentStatus = AppointmentStatus.ACTIVE

    def __post_init__(self):
        if self.id < 1:
            raise ValueError("Appointment id must be positive")
        if not self.vaccine_name:
            raise ValueError("Vaccine name is required")
        if not self.patient_username or not self.caregiver_username:
            raise ValueError("Patient and caregiver are required")

    @property
    def is_active(self) -> bool:
        return self.status == AppointmentStatus.ACTIVE

    def involves(self, username: str) -> bool:
        return username in (self.patient_username, self.caregiver_username)


@dataclass(frozen=True)
class AvailabilitySlot:
    date: date
    caregiver_username: str


@dataclass
class VaccineDoseCount:
    vaccine_name: str
    doses: int = 0

    def __post_init__(self):
        if self.doses < 0:
            raise ValueError("Doses cannot be negative")


@dataclass(frozen=True)
class Reservation:
    """Result of a successful reserve call."""

    appointment_id: int
    caregiver_username: str
    date: date
    vaccine_name: str


@dataclass(frozen=True)
class AppointmentListing:
    """One row of a user's appointment list, seen from that user's side."""

    id: int
    date: date
    vaccine_name: str
    counterparty_username: str


@dataclass
class ScheduleSearch:
    date: date
    caregivers: List[str] = field(default_factory=list)
    vaccines: List[VaccineDoseCount] = field(default_factory=list)
