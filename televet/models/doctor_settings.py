"""Doctor availability settings."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, Time

from televet.core.clock import utc_now
from televet.database import Base


class DoctorSettings(Base):
    """Daily caps and working hours a doctor configures on the settings form."""
    __tablename__ = "doctor_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, unique=True, index=True, nullable=False)
    max_consultations_per_day = Column(Integer, nullable=False, default=0)
    max_appointments_per_day = Column(Integer, nullable=False, default=0)
    consultation_start_time = Column(Time, nullable=False)
    consultation_end_time = Column(Time, nullable=False)
    appointment_start_time = Column(Time, nullable=False)
    appointment_end_time = Column(Time, nullable=False)
    days_available = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)
