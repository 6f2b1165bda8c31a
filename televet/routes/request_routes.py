from datetime import date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from televet.assignment.errors import StoreError
from televet.assignment.orchestrator import assign_after_submission
from televet.assignment.store import RecordStore
from televet.core.clock import to_scheduling_time, utc_now
from televet.models.appointment import Appointment
from televet.models.consultation import Consultation
from televet.routes.dependencies import database_unavailable, ensure_database_ready, get_db

router = APIRouter(tags=['requests'])

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 2000


def _required_text(value: str, field_name: str, max_length: int) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{field_name} is required.')
    if len(normalized) > max_length:
        raise ValueError(f'{field_name} must be {max_length} characters or fewer.')
    return normalized


class CreateConsultationRequest(BaseModel):
    user_id: str
    pet_name: str
    symptoms: str
    attachments: list[str] | None = None

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, value: str) -> str:
        return _required_text(value, 'Patient id', MAX_NAME_LENGTH)

    @field_validator('pet_name')
    @classmethod
    def validate_pet_name(cls, value: str) -> str:
        return _required_text(value, 'Pet name', MAX_NAME_LENGTH)

    @field_validator('symptoms')
    @classmethod
    def validate_symptoms(cls, value: str) -> str:
        return _required_text(value, 'Symptoms', MAX_DESCRIPTION_LENGTH)


class CreateAppointmentRequest(BaseModel):
    user_id: str
    pet_name: str
    reason: str
    preferred_date: date
    preferred_time: time

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, value: str) -> str:
        return _required_text(value, 'Patient id', MAX_NAME_LENGTH)

    @field_validator('pet_name')
    @classmethod
    def validate_pet_name(cls, value: str) -> str:
        return _required_text(value, 'Pet name', MAX_NAME_LENGTH)

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        return _required_text(value, 'Reason', MAX_DESCRIPTION_LENGTH)


class ConsultationResponse(BaseModel):
    id: str
    user_id: str
    pet_name: str
    symptoms: str
    status: str
    doctor_id: str | None = None
    assigned_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: str
    user_id: str
    pet_name: str
    reason: str
    preferred_date: date
    preferred_time: time
    status: str
    doctor_id: str | None = None
    assigned_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class ConsultationSubmissionResponse(BaseModel):
    consultation: ConsultationResponse
    assignment_message: str


class AppointmentSubmissionResponse(BaseModel):
    appointment: AppointmentResponse
    assignment_message: str


@router.post('/consultations', response_model=ConsultationSubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_consultation(data: CreateConsultationRequest, db: Session = Depends(get_db)):
    ensure_database_ready()
    store = RecordStore(db)

    try:
        consultation = store.insert(
            Consultation(
                user_id=data.user_id,
                pet_name=data.pet_name,
                symptoms=data.symptoms,
                attachments=data.attachments,
            )
        )
    except StoreError as exc:
        raise database_unavailable() from exc

    assignment = assign_after_submission(store)
    try:
        consultation = store.get(Consultation, consultation.id)
    except StoreError as exc:
        raise database_unavailable() from exc

    return ConsultationSubmissionResponse(
        consultation=ConsultationResponse.model_validate(consultation),
        assignment_message=assignment.message,
    )


@router.post('/appointments', response_model=AppointmentSubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_appointment(data: CreateAppointmentRequest, db: Session = Depends(get_db)):
    if data.preferred_date < to_scheduling_time(utc_now()).date():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Appointments must be requested for today or a future date.',
        )

    ensure_database_ready()
    store = RecordStore(db)

    try:
        appointment = store.insert(
            Appointment(
                user_id=data.user_id,
                pet_name=data.pet_name,
                reason=data.reason,
                preferred_date=data.preferred_date,
                preferred_time=data.preferred_time.replace(second=0, microsecond=0),
            )
        )
    except StoreError as exc:
        raise database_unavailable() from exc

    assignment = assign_after_submission(store)
    try:
        appointment = store.get(Appointment, appointment.id)
    except StoreError as exc:
        raise database_unavailable() from exc

    return AppointmentSubmissionResponse(
        appointment=AppointmentResponse.model_validate(appointment),
        assignment_message=assignment.message,
    )
