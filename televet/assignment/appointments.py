import logging
from datetime import date, datetime

from televet.assignment.availability import APPOINTMENT, is_within_window, working_window
from televet.assignment.errors import StoreError
from televet.assignment.store import RecordStore
from televet.core.clock import utc_now
from televet.models.appointment import APPOINTMENT_CONFIRMED, APPOINTMENT_PENDING, Appointment

logger = logging.getLogger(__name__)


def count_appointments_on(store: RecordStore, doctor_id: str, preferred_date: date) -> int:
    return store.count(
        Appointment,
        Appointment.doctor_id == doctor_id,
        Appointment.preferred_date == preferred_date,
    )


def claim_appointment(store: RecordStore, appointment_id: str, doctor_id: str, now: datetime) -> bool:
    return store.update(
        Appointment,
        appointment_id,
        {
            'doctor_id': doctor_id,
            'assigned_at': now,
            'status': APPOINTMENT_CONFIRMED,
        },
        Appointment.doctor_id.is_(None),
        Appointment.status == APPOINTMENT_PENDING,
    )


def assign_appointments(store: RecordStore, doctor_id: str, settings, now: datetime | None = None) -> int:
    """Give pending appointments to ``doctor_id``, oldest first.

    An appointment is taken only if its requested time falls inside the
    doctor's appointment hours and the doctor still has room on the requested
    date. Each date is capped separately, so one pass may fill many dates.
    """
    now = now or utc_now()
    start, end = working_window(settings, APPOINTMENT)

    unassigned = store.query(
        Appointment,
        Appointment.doctor_id.is_(None),
        Appointment.status == APPOINTMENT_PENDING,
        order_by=Appointment.created_at.asc(),
    )
    if not unassigned:
        return 0

    assigned = 0
    for appointment in unassigned:
        if not is_within_window(appointment.preferred_time, start, end):
            logger.debug(
                'Appointment %s at %s is outside doctor %s hours',
                appointment.id,
                appointment.preferred_time,
                doctor_id,
            )
            continue

        try:
            date_count = count_appointments_on(store, doctor_id, appointment.preferred_date)
        except StoreError:
            logger.exception('Could not count appointments for doctor %s', doctor_id)
            continue

        if date_count >= settings.max_appointments_per_day:
            logger.debug('Doctor %s is full on %s', doctor_id, appointment.preferred_date)
            continue

        try:
            claimed = claim_appointment(store, appointment.id, doctor_id, now)
        except StoreError:
            logger.exception('Could not assign appointment %s to doctor %s', appointment.id, doctor_id)
            continue

        if claimed:
            assigned += 1
            logger.info(
                'Assigned appointment %s on %s to doctor %s',
                appointment.id,
                appointment.preferred_date,
                doctor_id,
            )

    return assigned
