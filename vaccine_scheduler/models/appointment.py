"""Appointment model definitions."""

from sqlalchemy import BigInteger, Boolean, Column, Date, String
from vaccine_scheduler.database import Base


class Appointment(Base):
    """A reserved vaccination; cancelled rows are kept, never deleted."""
    __tablename__ = "appointments"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    date = Column(Date, nullable=False)
    vaccine_name = Column(String, nullable=False)
    patient_username = Column(String, nullable=False)
    caregiver_username = Column(String, nullable=False)
    cancelled = Column(Boolean, nullable=False, default=False)
