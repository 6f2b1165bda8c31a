import logging
from datetime import date, datetime

from televet.assignment.availability import remaining_consultation_slots
from televet.assignment.errors import StoreError
from televet.assignment.store import RecordStore
from televet.core.clock import day_bounds, utc_now
from televet.models.consultation import (
    CONSULTATION_IN_PROGRESS,
    CONSULTATION_PENDING,
    Consultation,
)

logger = logging.getLogger(__name__)


def count_consultations_assigned_on(store: RecordStore, doctor_id: str, day: date) -> int:
    day_start, day_end = day_bounds(day)
    return store.count(
        Consultation,
        Consultation.doctor_id == doctor_id,
        Consultation.assigned_at >= day_start,
        Consultation.assigned_at <= day_end,
    )


def claim_consultation(store: RecordStore, consultation_id: str, doctor_id: str, now: datetime) -> bool:
    return store.update(
        Consultation,
        consultation_id,
        {
            'doctor_id': doctor_id,
            'assigned_at': now,
            'status': CONSULTATION_IN_PROGRESS,
        },
        Consultation.doctor_id.is_(None),
        Consultation.status == CONSULTATION_PENDING,
    )


def assign_consultations(store: RecordStore, doctor_id: str, settings, now: datetime | None = None) -> int:
    """Give the oldest pending consultations to ``doctor_id`` up to today's cap.

    The caller is responsible for checking that the doctor is currently open
    for consultations. Returns the number of consultations claimed.
    """
    now = now or utc_now()

    current_count = count_consultations_assigned_on(store, doctor_id, now.date())
    available_slots = remaining_consultation_slots(settings, current_count)
    logger.debug(
        'Doctor %s has %s consultations today, max %s',
        doctor_id,
        current_count,
        settings.max_consultations_per_day,
    )

    if available_slots <= 0:
        logger.info('Doctor %s has reached the daily consultation limit', doctor_id)
        return 0

    unassigned = store.query(
        Consultation,
        Consultation.doctor_id.is_(None),
        Consultation.status == CONSULTATION_PENDING,
        order_by=Consultation.created_at.asc(),
        limit=available_slots,
    )
    if not unassigned:
        return 0

    assigned = 0
    for consultation in unassigned:
        try:
            claimed = claim_consultation(store, consultation.id, doctor_id, now)
        except StoreError:
            logger.exception('Could not assign consultation %s to doctor %s', consultation.id, doctor_id)
            continue

        if claimed:
            assigned += 1
            logger.info('Assigned consultation %s to doctor %s', consultation.id, doctor_id)
        else:
            logger.debug('Consultation %s was claimed by another doctor', consultation.id)

    return assigned
