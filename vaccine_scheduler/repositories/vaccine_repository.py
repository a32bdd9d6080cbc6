from typing import List

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vaccine_scheduler.core.exceptions import (
    InsufficientDosesError,
    VaccineAlreadyExistsError,
    VaccineNotFoundError,
    ValidationError,
)
from vaccine_scheduler.database import MAX_BIGINT
from vaccine_scheduler.domain.entities import VaccineDoseCount
from vaccine_scheduler.models.vaccine import Vaccine


def _require_positive(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or not 0 < amount <= MAX_BIGINT:
        raise ValidationError(f'Dose amount must be a positive integer no larger than {MAX_BIGINT}.')


class VaccineInventory:
    """Dose counters per vaccine name.

    Increase and decrease are single UPDATE statements with the arithmetic done
    by the database, so concurrent writers never lose a delta and the count can
    never be observed below zero or above MAX_BIGINT.
    """

    def __init__(self, db_session: Session):
        self.db = db_session

    def get(self, name: str) -> VaccineDoseCount:
        doses = self._current_doses(name)
        if doses is None:
            raise VaccineNotFoundError(name)
        return VaccineDoseCount(vaccine_name=name, doses=doses)

    def list_all(self) -> List[VaccineDoseCount]:
        rows = self.db.query(Vaccine.name, Vaccine.doses).order_by(Vaccine.name.asc()).all()
        return [VaccineDoseCount(vaccine_name=name, doses=doses) for name, doses in rows]

    def create(self, name: str, initial_doses: int) -> VaccineDoseCount:
        if (
            isinstance(initial_doses, bool)
            or not isinstance(initial_doses, int)
            or not 0 <= initial_doses <= MAX_BIGINT
        ):
            raise ValidationError(f'Initial doses must be an integer between 0 and {MAX_BIGINT}.')

        if self._current_doses(name) is not None:
            raise VaccineAlreadyExistsError(name)

        self.db.add(Vaccine(name=name, doses=initial_doses))
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise VaccineAlreadyExistsError(name) from exc

        return VaccineDoseCount(vaccine_name=name, doses=initial_doses)

    def increase(self, name: str, amount: int) -> int:
        _require_positive(amount)

        result = self.db.execute(
            update(Vaccine)
            .where(Vaccine.name == name, Vaccine.doses <= MAX_BIGINT - amount)
            .values(doses=Vaccine.doses + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if self._current_doses(name) is None:
                raise VaccineNotFoundError(name)
            raise ValidationError(
                f'Adding {amount} doses of {name} would exceed the maximum stock of {MAX_BIGINT}.'
            )

        return self._current_doses(name)

    def decrease(self, name: str, amount: int) -> int:
        _require_positive(amount)

        result = self.db.execute(
            update(Vaccine)
            .where(Vaccine.name == name, Vaccine.doses >= amount)
            .values(doses=Vaccine.doses - amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            available = self._current_doses(name)
            if available is None:
                raise VaccineNotFoundError(name)
            raise InsufficientDosesError(name, available=available, requested=amount)

        return self._current_doses(name)

    def _current_doses(self, name: str) -> int | None:
        return self.db.query(Vaccine.doses).filter(Vaccine.name == name).scalar()
