from datetime import date
from typing import List

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vaccine_scheduler.core.exceptions import SlotConflictError, SlotNotFoundError
from vaccine_scheduler.domain.entities import AvailabilitySlot
from vaccine_scheduler.models.availability import Availability


class AvailabilityStore:
    """Open (date, caregiver) slots.

    Removal is a conditional DELETE: when two reservations race for the same
    slot, only the one whose statement actually deletes the row wins.
    """

    def __init__(self, db_session: Session):
        self.db = db_session

    def add(self, slot_date: date, caregiver_username: str) -> AvailabilitySlot:
        if self.exists(slot_date, caregiver_username):
            raise SlotConflictError(slot_date, caregiver_username)

        self.db.add(Availability(date=slot_date, caregiver_username=caregiver_username))
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise SlotConflictError(slot_date, caregiver_username) from exc

        return AvailabilitySlot(date=slot_date, caregiver_username=caregiver_username)

    def exists(self, slot_date: date, caregiver_username: str) -> bool:
        found = self.db.query(Availability.id).filter(
            Availability.date == slot_date,
            Availability.caregiver_username == caregiver_username,
        ).first()
        return found is not None

    def find_candidates(self, slot_date: date) -> List[str]:
        rows = self.db.query(Availability.caregiver_username).filter(
            Availability.date == slot_date,
        ).order_by(Availability.caregiver_username.asc()).all()
        return [caregiver_username for (caregiver_username,) in rows]

    def remove(self, slot_date: date, caregiver_username: str) -> None:
        result = self.db.execute(
            delete(Availability)
            .where(
                Availability.date == slot_date,
                Availability.caregiver_username == caregiver_username,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise SlotNotFoundError(slot_date, caregiver_username)
