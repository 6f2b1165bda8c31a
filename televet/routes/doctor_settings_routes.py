from datetime import datetime, time

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.orm import Session

from televet.assignment.availability import WEEKDAY_NAMES
from televet.assignment.errors import SettingsNotFound, StoreError
from televet.assignment.orchestrator import get_doctor_settings
from televet.assignment.store import RecordStore
from televet.core.clock import utc_now
from televet.models.doctor_settings import DoctorSettings
from televet.routes.dependencies import database_unavailable, ensure_database_ready, get_db

router = APIRouter(tags=['doctor-settings'])

MAX_DAILY_CAPACITY = 200


class DoctorSettingsRequest(BaseModel):
    max_consultations_per_day: int
    max_appointments_per_day: int
    consultation_start_time: time
    consultation_end_time: time
    appointment_start_time: time
    appointment_end_time: time
    days_available: list[str]

    @field_validator('max_consultations_per_day', 'max_appointments_per_day')
    @classmethod
    def validate_capacity(cls, value: int) -> int:
        if value < 0 or value > MAX_DAILY_CAPACITY:
            raise ValueError(f'Daily limits must be between 0 and {MAX_DAILY_CAPACITY}.')
        return value

    @field_validator('days_available')
    @classmethod
    def validate_days_available(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for day in value:
            name = day.strip().capitalize()
            if name not in WEEKDAY_NAMES:
                raise ValueError(f'Unknown weekday: {day}.')
            if name not in normalized:
                normalized.append(name)

        return sorted(normalized, key=WEEKDAY_NAMES.index)

    @model_validator(mode='after')
    def validate_hours(self) -> 'DoctorSettingsRequest':
        if self.consultation_start_time > self.consultation_end_time:
            raise ValueError('Consultation start time must not be after the end time.')
        if self.appointment_start_time > self.appointment_end_time:
            raise ValueError('Appointment start time must not be after the end time.')
        return self


class DoctorSettingsResponse(BaseModel):
    user_id: str
    max_consultations_per_day: int
    max_appointments_per_day: int
    consultation_start_time: time
    consultation_end_time: time
    appointment_start_time: time
    appointment_end_time: time
    days_available: list[str]
    updated_at: datetime

    class Config:
        from_attributes = True


@router.get('/{doctor_id}/settings', response_model=DoctorSettingsResponse)
def read_doctor_settings(doctor_id: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return get_doctor_settings(RecordStore(db), doctor_id)
    except SettingsNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Doctor settings not found.',
        ) from exc
    except StoreError as exc:
        raise database_unavailable() from exc


@router.put('/{doctor_id}/settings', response_model=DoctorSettingsResponse)
def save_doctor_settings(doctor_id: str, data: DoctorSettingsRequest, db: Session = Depends(get_db)):
    normalized_doctor_id = doctor_id.strip()
    if not normalized_doctor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Doctor id is required.',
        )

    ensure_database_ready()
    store = RecordStore(db)

    try:
        settings = store.first(DoctorSettings, DoctorSettings.user_id == normalized_doctor_id)
        if settings is None:
            return store.insert(DoctorSettings(user_id=normalized_doctor_id, **data.model_dump()))

        store.update(DoctorSettings, settings.id, {**data.model_dump(), 'updated_at': utc_now()})
        return store.get(DoctorSettings, settings.id)
    except StoreError as exc:
        raise database_unavailable() from exc
