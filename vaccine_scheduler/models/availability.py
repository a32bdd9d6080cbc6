"""Availability model definitions."""

from sqlalchemy import Column, Date, Integer, String, UniqueConstraint
from vaccine_scheduler.database import Base


class Availability(Base):
    """Represents an open caregiver slot on a given date."""
    __tablename__ = "availabilities"
    __table_args__ = (
        UniqueConstraint("date", "caregiver_username", name="uq_availabilities_date_caregiver"),
    )

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    caregiver_username = Column(String, nullable=False)
