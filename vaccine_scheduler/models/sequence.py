"""Appointment id sequence definitions."""

from sqlalchemy import BigInteger, Column, String
from vaccine_scheduler.database import Base


class AppointmentSequence(Base):
    """Last appointment id handed out, one row per sequence name."""
    __tablename__ = "appointment_sequence"

    name = Column(String, primary_key=True)
    last_value = Column(BigInteger, nullable=False, default=0)
