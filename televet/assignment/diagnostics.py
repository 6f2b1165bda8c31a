"""Troubleshooting reports for consultations stuck in the pending queue.

``explain`` only reads. ``diagnose`` explains and then runs one real
assignment pass, so it can assign the consultation as a side effect; the
report's ``assignment_attempted`` flag says when that happened.
"""

import logging
from datetime import datetime

from pydantic import BaseModel, Field

from televet.assignment.availability import (
    CONSULTATION,
    remaining_consultation_slots,
    unavailability_reason,
)
from televet.assignment.consultations import count_consultations_assigned_on
from televet.assignment.errors import ConsultationNotFound
from televet.assignment.orchestrator import AssignmentSummary, assign_all_pending
from televet.assignment.store import RecordStore
from televet.assignment.urgency import urgency_level
from televet.core.clock import to_scheduling_time, utc_now
from televet.models.consultation import CONSULTATION_PENDING, Consultation
from televet.models.doctor_settings import DoctorSettings

logger = logging.getLogger(__name__)


class DiagnosisReport(BaseModel):
    consultation_id: str
    status: str
    success: bool
    message: str
    reasons: list[str] = Field(default_factory=list)
    eligible_doctors: list[str] = Field(default_factory=list)
    urgency: str | None = None
    assignment_attempted: bool = False


def doctor_ineligibility(store: RecordStore, settings: DoctorSettings, now: datetime) -> str | None:
    closed_reason = unavailability_reason(settings, to_scheduling_time(now), CONSULTATION)
    if closed_reason is not None:
        return closed_reason

    assigned_today = count_consultations_assigned_on(store, settings.user_id, now.date())
    if remaining_consultation_slots(settings, assigned_today) == 0:
        return f'daily consultation limit reached ({assigned_today}/{settings.max_consultations_per_day})'

    return None


def explain(store: RecordStore, consultation_id: str, now: datetime | None = None) -> DiagnosisReport:
    now = now or utc_now()

    consultation = store.get(Consultation, consultation_id)
    if consultation is None:
        raise ConsultationNotFound(consultation_id)

    if consultation.doctor_id:
        return DiagnosisReport(
            consultation_id=consultation.id,
            status=consultation.status,
            success=True,
            message=f'Consultation is already assigned to doctor {consultation.doctor_id}.',
        )

    if consultation.status != CONSULTATION_PENDING:
        return DiagnosisReport(
            consultation_id=consultation.id,
            status=consultation.status,
            success=False,
            message=f"Consultation has status '{consultation.status}'; only pending consultations are assigned.",
        )

    reasons: list[str] = []
    eligible_doctors: list[str] = []
    for settings in store.query(DoctorSettings, order_by=DoctorSettings.id.asc()):
        reason = doctor_ineligibility(store, settings, now)
        if reason is None:
            eligible_doctors.append(settings.user_id)
        else:
            reasons.append(f'Doctor {settings.user_id}: {reason}')

    if not reasons and not eligible_doctors:
        reasons.append('No doctors have configured their availability settings.')

    if eligible_doctors:
        message = (
            f'{len(eligible_doctors)} doctor(s) can take consultations right now; '
            'the consultation is waiting for the next assignment run.'
        )
    else:
        message = 'No doctor can take this consultation right now.'

    return DiagnosisReport(
        consultation_id=consultation.id,
        status=consultation.status,
        success=False,
        message=message,
        reasons=reasons,
        eligible_doctors=eligible_doctors,
        urgency=urgency_level(consultation.symptoms, consultation.created_at, now),
    )


def retry_assign(store: RecordStore, now: datetime | None = None) -> AssignmentSummary:
    return assign_all_pending(store, now)


def diagnose(store: RecordStore, consultation_id: str, now: datetime | None = None) -> DiagnosisReport:
    """Explain a consultation and, if it is still pending, run one assignment pass."""
    now = now or utc_now()

    report = explain(store, consultation_id, now)
    if report.success or report.status != CONSULTATION_PENDING:
        return report

    summary = retry_assign(store, now)
    logger.info('Diagnosis of consultation %s triggered assignment: %s', consultation_id, summary.message)

    consultation = store.get(Consultation, consultation_id)
    if consultation is None:
        raise ConsultationNotFound(consultation_id)

    if consultation.doctor_id:
        return report.model_copy(
            update={
                'assignment_attempted': True,
                'status': consultation.status,
                'success': True,
                'message': f'Consultation was assigned to doctor {consultation.doctor_id} during diagnosis.',
            }
        )

    # Re-read doctor state; the pass may have filled their daily capacity.
    return explain(store, consultation_id, now).model_copy(update={'assignment_attempted': True})
