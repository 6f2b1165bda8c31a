"""Consultation model definitions."""

import uuid

from sqlalchemy import JSON, Column, DateTime, String, Text

from televet.core.clock import utc_now
from televet.database import Base

CONSULTATION_PENDING = 'pending'
CONSULTATION_IN_PROGRESS = 'in_progress'
CONSULTATION_COMPLETED = 'completed'


class Consultation(Base):
    """Represents an asynchronous consultation request about a pet."""
    __tablename__ = "consultations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, index=True, nullable=False)
    pet_name = Column(String, nullable=False)
    symptoms = Column(Text, nullable=False)
    status = Column(String, nullable=False, default=CONSULTATION_PENDING)
    doctor_id = Column(String, nullable=True)
    assigned_at = Column(DateTime, nullable=True)
    prescription = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
