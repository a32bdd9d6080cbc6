"""
Scheduler exceptions.

Every error the reservation engine raises derives from SchedulerError so that
callers (the HTTP routes, scripts) can translate them in one place.
"""


class SchedulerError(Exception):
    """Base class for reservation engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulerError):
    """Malformed date, blank name or non-positive dose count."""


class NotFoundError(SchedulerError):
    pass


class VaccineNotFoundError(NotFoundError):
    def __init__(self, vaccine_name: str):
        super().__init__(f"Vaccine {vaccine_name} is not offered.")
        self.vaccine_name = vaccine_name


class AppointmentNotFoundError(NotFoundError):
    def __init__(self, appointment_id: int):
        super().__init__(f"Appointment {appointment_id} was not found.")
        self.appointment_id = appointment_id


class SlotNotFoundError(NotFoundError):
    def __init__(self, slot_date, caregiver_username: str):
        super().__init__(f"{caregiver_username} has no open slot on {slot_date}.")
        self.slot_date = slot_date
        self.caregiver_username = caregiver_username


class ConflictError(SchedulerError):
    pass


class SlotConflictError(ConflictError):
    def __init__(self, slot_date, caregiver_username: str):
        super().__init__(f"{caregiver_username} is already available on {slot_date}.")
        self.slot_date = slot_date
        self.caregiver_username = caregiver_username


class CaregiverBookedError(ConflictError):
    def __init__(self, slot_date, caregiver_username: str):
        super().__init__(f"{caregiver_username} already has an appointment on {slot_date}.")
        self.slot_date = slot_date
        self.caregiver_username = caregiver_username


class VaccineAlreadyExistsError(ConflictError):
    def __init__(self, vaccine_name: str):
        super().__init__(f"Vaccine {vaccine_name} already exists.")
        self.vaccine_name = vaccine_name


class AlreadyCancelledError(SchedulerError):
    def __init__(self, appointment_id: int):
        super().__init__(f"Appointment {appointment_id} is already cancelled.")
        self.appointment_id = appointment_id


class InsufficientDosesError(SchedulerError):
    def __init__(self, vaccine_name: str, available: int, requested: int = 1):
        super().__init__(
            f"Not enough doses of {vaccine_name}: {available} available, {requested} requested."
        )
        self.vaccine_name = vaccine_name
        self.available = available
        self.requested = requested


class NoCaregiverAvailableError(SchedulerError):
    def __init__(self, slot_date):
        super().__init__(f"No caregiver is available on {slot_date}.")
        self.slot_date = slot_date


class NotAuthorizedError(SchedulerError):
    """The requesting user is not a party to the appointment."""


class InternalConsistencyError(SchedulerError):
    """
    An invariant between the ledger, availability and inventory was found
    broken at runtime. Never expected in correct operation.
    """


class DuplicateAppointmentIDError(InternalConsistencyError):
    def __init__(self, appointment_id: int):
        super().__init__(f"Appointment id {appointment_id} is already in use.")
        self.appointment_id = appointment_id


class StorageUnavailableError(SchedulerError):
    """The database rejected or failed a statement; the transaction was rolled back."""
