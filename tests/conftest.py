import os
from datetime import date, datetime, time, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ['SCHEDULING_TIMEZONE'] = 'UTC'

from televet.assignment.store import RecordStore  # noqa: E402
from televet.database import Base  # noqa: E402
from televet.models.appointment import Appointment  # noqa: E402
from televet.models.consultation import Consultation  # noqa: E402
from televet.models.doctor_settings import DoctorSettings  # noqa: E402

# 2026-01-05 is a Monday.
MONDAY_10AM = datetime(2026, 1, 5, 10, 0)
WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday']


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    tables = [Consultation.__table__, Appointment.__table__, DoctorSettings.__table__]
    Base.metadata.create_all(bind=engine, tables=tables)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=tables)


@pytest.fixture
def store(db) -> RecordStore:
    return RecordStore(db)


@pytest.fixture
def make_settings(store):
    def _make(user_id: str = 'dr-ana', **overrides) -> DoctorSettings:
        values = {
            'max_consultations_per_day': 2,
            'max_appointments_per_day': 2,
            'consultation_start_time': time(9, 0),
            'consultation_end_time': time(17, 0),
            'appointment_start_time': time(9, 0),
            'appointment_end_time': time(17, 0),
            'days_available': WEEKDAYS,
        }
        values.update(overrides)
        return store.insert(DoctorSettings(user_id=user_id, **values))

    return _make


@pytest.fixture
def make_consultation(store):
    created = {'count': 0}

    def _make(created_at: datetime | None = None, **overrides) -> Consultation:
        created['count'] += 1
        values = {
            'user_id': 'patient-1',
            'pet_name': 'Biscuit',
            'symptoms': 'Not eating since yesterday',
            'created_at': created_at or MONDAY_10AM - timedelta(hours=24 - created['count']),
        }
        values.update(overrides)
        return store.insert(Consultation(**values))

    return _make


@pytest.fixture
def make_appointment(store):
    created = {'count': 0}

    def _make(
        preferred_date: date = date(2026, 1, 7),
        preferred_time: time = time(10, 0),
        **overrides,
    ) -> Appointment:
        created['count'] += 1
        values = {
            'user_id': 'patient-1',
            'pet_name': 'Biscuit',
            'reason': 'Annual vaccination',
            'preferred_date': preferred_date,
            'preferred_time': preferred_time,
            'created_at': MONDAY_10AM - timedelta(hours=24 - created['count']),
        }
        values.update(overrides)
        return store.insert(Appointment(**values))

    return _make
