import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vaccine_scheduler.core import config
from vaccine_scheduler.core.exceptions import InternalConsistencyError
from vaccine_scheduler.models.sequence import AppointmentSequence
from vaccine_scheduler.repositories.appointment_repository import AppointmentLedger

logger = logging.getLogger(__name__)


class IDAllocator:
    """Hands out appointment ids from a persisted counter row.

    The counter is advanced with an UPDATE in the caller's transaction, so the
    row stays locked until that transaction ends and a rollback returns the id.
    """

    def __init__(self, db_session: Session, sequence_name: str = config.APPOINTMENT_SEQUENCE_NAME):
        self.db = db_session
        self.sequence_name = sequence_name

    def next_id(self) -> int:
        if not self._advance():
            self._seed()
            if not self._advance():
                raise InternalConsistencyError(
                    f'Appointment sequence {self.sequence_name} could not be advanced.'
                )

        next_value = self.db.query(AppointmentSequence.last_value).filter(
            AppointmentSequence.name == self.sequence_name,
        ).scalar()

        stored_max = AppointmentLedger(self.db).max_id()
        if next_value is None or next_value <= stored_max:
            raise InternalConsistencyError(
                f'Appointment sequence {self.sequence_name} is behind stored id {stored_max}.'
            )

        return next_value

    def _advance(self) -> bool:
        result = self.db.execute(
            update(AppointmentSequence)
            .where(AppointmentSequence.name == self.sequence_name)
            .values(last_value=AppointmentSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _seed(self) -> None:
        start = AppointmentLedger(self.db).max_id()
        self.db.add(AppointmentSequence(name=self.sequence_name, last_value=start))
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise InternalConsistencyError(
                f'Appointment sequence {self.sequence_name} was seeded concurrently.'
            ) from exc

        logger.info(
            'Seeded appointment sequence',
            extra={'context': {'sequence': self.sequence_name, 'start': start}},
        )
