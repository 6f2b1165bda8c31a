from datetime import date, datetime, time

import pytest

from televet.assignment.appointments import assign_appointments
from televet.assignment.errors import StoreError
from televet.models.appointment import APPOINTMENT_CANCELLED, APPOINTMENT_COMPLETED, APPOINTMENT_CONFIRMED, Appointment

NOW = datetime(2026, 1, 5, 10, 0)
WEDNESDAY = date(2026, 1, 7)
THURSDAY = date(2026, 1, 8)


def test_assigns_appointment_within_doctor_hours(store, make_settings, make_appointment) -> None:
    settings = make_settings()
    appointment = make_appointment(preferred_time=time(11, 30))

    assigned = assign_appointments(store, 'dr-ana', settings, NOW)

    refreshed = store.get(Appointment, appointment.id)
    assert assigned == 1
    assert refreshed.doctor_id == 'dr-ana'
    assert refreshed.status == APPOINTMENT_CONFIRMED
    assert refreshed.assigned_at == NOW


@pytest.mark.parametrize('preferred_time', [time(8, 59), time(17, 1), time(22, 0)])
def test_never_assigns_appointment_outside_doctor_hours(
    store,
    make_settings,
    make_appointment,
    preferred_time: time,
) -> None:
    settings = make_settings(max_appointments_per_day=50)
    appointment = make_appointment(preferred_time=preferred_time)

    assert assign_appointments(store, 'dr-ana', settings, NOW) == 0
    assert store.get(Appointment, appointment.id).doctor_id is None


def test_window_boundaries_are_inclusive(store, make_settings, make_appointment) -> None:
    settings = make_settings(max_appointments_per_day=5)
    make_appointment(preferred_time=time(9, 0))
    make_appointment(preferred_time=time(17, 0))

    assert assign_appointments(store, 'dr-ana', settings, NOW) == 2


def test_requested_time_is_checked_independently_of_the_clock(store, make_settings, make_appointment) -> None:
    settings = make_settings()
    make_appointment(preferred_time=time(15, 0))

    late_evening = datetime(2026, 1, 5, 23, 30)

    assert assign_appointments(store, 'dr-ana', settings, late_evening) == 1


def test_full_date_is_skipped_but_next_date_is_still_assigned(store, make_settings, make_appointment) -> None:
    settings = make_settings(max_appointments_per_day=2)
    make_appointment(preferred_date=WEDNESDAY, doctor_id='dr-ana', status=APPOINTMENT_CONFIRMED)
    make_appointment(preferred_date=WEDNESDAY, doctor_id='dr-ana', status=APPOINTMENT_CONFIRMED)
    same_day = make_appointment(preferred_date=WEDNESDAY)
    next_day = make_appointment(preferred_date=THURSDAY)

    assigned = assign_appointments(store, 'dr-ana', settings, NOW)

    assert assigned == 1
    assert store.get(Appointment, same_day.id).doctor_id is None
    assert store.get(Appointment, next_day.id).doctor_id == 'dr-ana'


def test_each_date_has_its_own_capacity_within_one_pass(store, make_settings, make_appointment) -> None:
    settings = make_settings(max_appointments_per_day=1)
    for offset in range(3):
        make_appointment(preferred_date=date(2026, 1, 7 + offset))
    make_appointment(preferred_date=date(2026, 1, 7))

    assert assign_appointments(store, 'dr-ana', settings, NOW) == 3


@pytest.mark.parametrize('status', [APPOINTMENT_CANCELLED, APPOINTMENT_COMPLETED])
def test_skips_appointments_that_are_not_pending(store, make_settings, make_appointment, status: str) -> None:
    settings = make_settings()
    closed = make_appointment(status=status)

    assert assign_appointments(store, 'dr-ana', settings, NOW) == 0
    assert store.get(Appointment, closed.id).doctor_id is None


def test_count_failure_skips_only_that_appointment(
    store,
    make_settings,
    make_appointment,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    settings = make_settings()
    make_appointment(preferred_date=WEDNESDAY)
    make_appointment(preferred_date=THURSDAY)
    original_count = store.count
    calls = {'count': 0}

    def flaky_count(model, *criteria):
        calls['count'] += 1
        if calls['count'] == 1:
            raise StoreError('count failed')
        return original_count(model, *criteria)

    monkeypatch.setattr(store, 'count', flaky_count)

    assert assign_appointments(store, 'dr-ana', settings, NOW) == 1


@pytest.mark.parametrize('preferred_time', [time(17, 0, 30), time(8, 59, 59)])
def test_requested_seconds_past_the_window_are_not_rounded_away(
    store,
    make_settings,
    make_appointment,
    preferred_time: time,
) -> None:
    settings = make_settings(max_appointments_per_day=5)
    appointment = make_appointment(preferred_time=preferred_time)

    assert assign_appointments(store, 'dr-ana', settings, NOW) == 0
    assert store.get(Appointment, appointment.id).doctor_id is None
