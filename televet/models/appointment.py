"""Appointment model definitions."""

import uuid

from sqlalchemy import Column, Date, DateTime, String, Text, Time

from televet.core.clock import utc_now
from televet.database import Base

APPOINTMENT_PENDING = 'pending'
APPOINTMENT_CONFIRMED = 'confirmed'
APPOINTMENT_COMPLETED = 'completed'
APPOINTMENT_CANCELLED = 'cancelled'


class Appointment(Base):
    """Represents a requested visit on a preferred date and time."""
    __tablename__ = "appointments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, index=True, nullable=False)
    pet_name = Column(String, nullable=False)
    reason = Column(Text, nullable=False)
    preferred_date = Column(Date, nullable=False)
    preferred_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default=APPOINTMENT_PENDING)
    doctor_id = Column(String, nullable=True)
    assigned_at = Column(DateTime, nullable=True)
    prescription = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
