"""Entry points that run the consultation and appointment allocators."""

import logging
from datetime import datetime

from pydantic import BaseModel

from televet.assignment.appointments import assign_appointments
from televet.assignment.availability import CONSULTATION, unavailability_reason
from televet.assignment.consultations import assign_consultations
from televet.assignment.errors import SettingsNotFound, StoreError
from televet.assignment.store import RecordStore
from televet.core import config
from televet.core.clock import to_scheduling_time, utc_now
from televet.models.doctor_settings import DoctorSettings

logger = logging.getLogger(__name__)

ASSIGNED_MESSAGE = 'Successfully assigned to an available doctor.'
NO_DOCTOR_MESSAGE = 'No available doctors at the moment. An admin will review and assign soon.'
ASSIGNMENT_FAILED_MESSAGE = 'Failed to assign to doctor. It will be reviewed by admin.'
AUTO_ASSIGNMENT_DISABLED_MESSAGE = 'Automatic assignment is disabled. An admin will review and assign soon.'


class AssignmentSummary(BaseModel):
    consultations: int = 0
    appointments: int = 0

    @property
    def total(self) -> int:
        return self.consultations + self.appointments

    @property
    def message(self) -> str:
        if self.total == 0:
            return 'No new assignments needed'
        return f'Assigned {self.consultations} consultations and {self.appointments} appointments'

    def __add__(self, other: 'AssignmentSummary') -> 'AssignmentSummary':
        return AssignmentSummary(
            consultations=self.consultations + other.consultations,
            appointments=self.appointments + other.appointments,
        )


class SubmissionAssignment(BaseModel):
    success: bool
    message: str


def get_doctor_settings(store: RecordStore, doctor_id: str) -> DoctorSettings:
    settings = store.first(DoctorSettings, DoctorSettings.user_id == doctor_id)
    if settings is None:
        raise SettingsNotFound(doctor_id)
    return settings


def run_allocators(store: RecordStore, settings: DoctorSettings, now: datetime) -> AssignmentSummary:
    doctor_id = settings.user_id

    # Consultations are handled live, so the doctor must be open right now.
    # Appointments are checked against their requested time instead.
    closed_reason = unavailability_reason(settings, to_scheduling_time(now), CONSULTATION)
    if closed_reason is None:
        consultations = assign_consultations(store, doctor_id, settings, now)
    else:
        logger.info('Skipping consultations for doctor %s: %s', doctor_id, closed_reason)
        consultations = 0

    appointments = assign_appointments(store, doctor_id, settings, now)

    return AssignmentSummary(consultations=consultations, appointments=appointments)


def assign_for_doctor(store: RecordStore, doctor_id: str, now: datetime | None = None) -> AssignmentSummary:
    """Assign pending work to one doctor, e.g. when their dashboard loads.

    Raises SettingsNotFound if the doctor has not configured availability and
    StoreError if the store fails outside a single record update.
    """
    now = now or utc_now()
    settings = get_doctor_settings(store, doctor_id)

    summary = run_allocators(store, settings, now)
    logger.info('Doctor %s: %s', doctor_id, summary.message)
    return summary


def assign_all_pending(store: RecordStore, now: datetime | None = None) -> AssignmentSummary:
    """Sweep every configured doctor in store order and assign pending work.

    Doctors listed first can take all the pending work before later doctors
    are considered.
    """
    now = now or utc_now()
    all_settings = store.query(DoctorSettings, order_by=DoctorSettings.id.asc())

    total = AssignmentSummary()
    for settings in all_settings:
        doctor_id = settings.user_id
        try:
            total += run_allocators(store, settings, now)
        except StoreError:
            logger.exception('Assignment run failed for doctor %s, continuing with the next doctor', doctor_id)

    logger.info('Bulk assignment over %s doctors: %s', len(all_settings), total.message)
    return total


def assign_after_submission(store: RecordStore, now: datetime | None = None) -> SubmissionAssignment:
    """Try to place a freshly submitted consultation or appointment.

    Never raises: a failure here must not fail the patient's submission.
    """
    if not config.AUTO_ASSIGNMENT_ENABLED:
        logger.info('Automatic assignment is disabled')
        return SubmissionAssignment(success=False, message=AUTO_ASSIGNMENT_DISABLED_MESSAGE)

    try:
        summary = assign_all_pending(store, now)
    except StoreError:
        logger.exception('Automatic assignment after submission failed')
        return SubmissionAssignment(success=False, message=ASSIGNMENT_FAILED_MESSAGE)

    if summary.total > 0:
        return SubmissionAssignment(success=True, message=ASSIGNED_MESSAGE)
    return SubmissionAssignment(success=True, message=NO_DOCTOR_MESSAGE)
