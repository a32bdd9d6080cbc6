"""Vaccine inventory model definitions."""

from sqlalchemy import BigInteger, CheckConstraint, Column, String
from vaccine_scheduler.database import Base


class Vaccine(Base):
    """Remaining doses for one vaccine brand."""
    __tablename__ = "vaccines"
    __table_args__ = (
        CheckConstraint("doses >= 0", name="ck_vaccines_doses_non_negative"),
    )

    name = Column(String, primary_key=True)
    doses = Column(BigInteger, nullable=False, default=0)
