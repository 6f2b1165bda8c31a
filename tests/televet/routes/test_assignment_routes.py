from datetime import datetime

import pytest
from fastapi import HTTPException

from televet.assignment import orchestrator
from televet.assignment.errors import StoreError
from televet.routes.assignment_routes import (
    assign_doctor,
    assign_pending,
    diagnose_consultation,
    explain_consultation,
)

MONDAY_10AM = datetime(2026, 1, 5, 10, 0)


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('televet.routes.assignment_routes.ensure_database_ready', lambda: None)
    monkeypatch.setattr('televet.assignment.orchestrator.utc_now', lambda: MONDAY_10AM)
    monkeypatch.setattr('televet.assignment.diagnostics.utc_now', lambda: MONDAY_10AM)


def test_assign_doctor_returns_counts_and_message(db, make_settings, make_consultation, make_appointment) -> None:
    make_settings('dr-ana')
    make_consultation()
    make_appointment()

    response = assign_doctor(doctor_id='dr-ana', db=db)

    assert response.consultations == 1
    assert response.appointments == 1
    assert response.message == 'Assigned 1 consultations and 1 appointments'


def test_assign_doctor_returns_not_found_without_settings(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        assign_doctor(doctor_id='dr-nobody', db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Doctor settings not found.'


def test_assign_doctor_maps_store_errors_to_service_unavailable(
    db,
    make_settings,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    make_settings('dr-ana')

    def failing_run(store, settings, now):
        raise StoreError('count failed')

    monkeypatch.setattr(orchestrator, 'run_allocators', failing_run)

    with pytest.raises(HTTPException) as exception_info:
        assign_doctor(doctor_id='dr-ana', db=db)

    assert exception_info.value.status_code == 503


def test_assign_pending_reports_nothing_to_do(db, make_settings) -> None:
    make_settings('dr-ana')

    response = assign_pending(db=db)

    assert response.consultations == 0
    assert response.appointments == 0
    assert response.message == 'No new assignments needed'


def test_explain_consultation_returns_not_found(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        explain_consultation(consultation_id='missing', db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Consultation not found.'


def test_explain_consultation_does_not_assign(db, make_settings, make_consultation) -> None:
    make_settings('dr-ana')
    consultation = make_consultation()

    report = explain_consultation(consultation_id=consultation.id, db=db)

    assert report.success is False
    assert report.eligible_doctors == ['dr-ana']
    db.refresh(consultation)
    assert consultation.doctor_id is None


def test_diagnose_consultation_flags_the_assignment_attempt(db, make_settings, make_consultation) -> None:
    make_settings('dr-ana')
    consultation = make_consultation()

    report = diagnose_consultation(consultation_id=consultation.id, db=db)

    assert report.success is True
    assert report.assignment_attempted is True
