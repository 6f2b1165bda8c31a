from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from televet.assignment.diagnostics import DiagnosisReport, diagnose, explain
from televet.assignment.errors import ConsultationNotFound, SettingsNotFound, StoreError
from televet.assignment.orchestrator import assign_all_pending, assign_for_doctor
from televet.assignment.store import RecordStore
from televet.routes.dependencies import database_unavailable, ensure_database_ready, get_db

router = APIRouter(tags=['assignments'])


class AssignmentSummaryResponse(BaseModel):
    consultations: int
    appointments: int
    message: str


@router.post('/doctors/{doctor_id}', response_model=AssignmentSummaryResponse)
def assign_doctor(doctor_id: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        summary = assign_for_doctor(RecordStore(db), doctor_id)
    except SettingsNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Doctor settings not found.',
        ) from exc
    except StoreError as exc:
        raise database_unavailable() from exc

    return AssignmentSummaryResponse(
        consultations=summary.consultations,
        appointments=summary.appointments,
        message=summary.message,
    )


@router.post('/run', response_model=AssignmentSummaryResponse)
def assign_pending(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        summary = assign_all_pending(RecordStore(db))
    except StoreError as exc:
        raise database_unavailable() from exc

    return AssignmentSummaryResponse(
        consultations=summary.consultations,
        appointments=summary.appointments,
        message=summary.message,
    )


@router.get('/consultations/{consultation_id}/explanation', response_model=DiagnosisReport)
def explain_consultation(consultation_id: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return explain(RecordStore(db), consultation_id)
    except ConsultationNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Consultation not found.',
        ) from exc
    except StoreError as exc:
        raise database_unavailable() from exc


@router.post('/consultations/{consultation_id}/diagnosis', response_model=DiagnosisReport)
def diagnose_consultation(consultation_id: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return diagnose(RecordStore(db), consultation_id)
    except ConsultationNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Consultation not found.',
        ) from exc
    except StoreError as exc:
        raise database_unavailable() from exc
