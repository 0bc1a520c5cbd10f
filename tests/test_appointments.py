"""Tests for appointment endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.core.security import create_access_token
from app.schemas.appointments import AppointmentStatus
from app.schemas.users import Role


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_ping(client: AsyncClient) -> None:
    """Test ping endpoint."""
    response = await client.get("/api/v1/ping")
    assert response.status_code == 200
    assert response.json() == {"message": "pong"}


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client: AsyncClient) -> None:
    """Test that a supplied correlation id comes back on the response."""
    response = await client.get("/api/v1/ping", headers={"X-Correlation-ID": "abc-123"})
    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_correlation_id_is_generated(client: AsyncClient) -> None:
    """Test that a correlation id is generated when absent."""
    response = await client.get("/api/v1/ping")
    assert response.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_create_appointment(client, auth_headers, patient, doctor) -> None:
    """Test booking an appointment."""
    response = await client.post(
        "/api/v1/appointments/",
        json={
            "doctorId": str(doctor["id"]),
            "dateTime": "2024-01-20T09:00:00Z",
            "reason": "Regular checkup",
        },
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["doctorId"] == str(doctor["id"])
    assert data["patientId"] == str(patient["id"])
    assert data["dateTime"] == "2024-01-20T09:00:00Z"
    assert data["cancelledAt"] is None
    assert "id" in data


@pytest.mark.asyncio
async def test_double_booking_returns_conflict(
    client, store, auth_headers, patient, doctor
) -> None:
    """Test that booking a taken instant is rejected."""
    store.add_appointment(patient, doctor, datetime(2024, 1, 20, 9, tzinfo=UTC))
    other = store.add_patient()

    response = await client.post(
        "/api/v1/appointments/",
        json={"doctorId": str(doctor["id"]), "dateTime": "2024-01-20T09:00:00Z"},
        headers=auth_headers(other["user_id"], Role.PATIENT),
    )
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictException"
    assert "already has an appointment" in response.json()["message"]


@pytest.mark.asyncio
async def test_doctor_cannot_book(client, auth_headers, doctor) -> None:
    """Test that only patients may book."""
    response = await client.post(
        "/api/v1/appointments/",
        json={"doctorId": str(doctor["id"]), "dateTime": "2024-01-20T09:00:00Z"},
        headers=auth_headers(doctor["user_id"], Role.DOCTOR),
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Only patients can book appointments"


@pytest.mark.asyncio
async def test_unknown_doctor_returns_not_found(client, auth_headers, patient) -> None:
    """Test booking with a doctor id that does not exist."""
    response = await client.post(
        "/api/v1/appointments/",
        json={"doctorId": str(uuid4()), "dateTime": "2024-01-20T09:00:00Z"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Doctor not found"


@pytest.mark.asyncio
async def test_unauthorized_access(client: AsyncClient) -> None:
    """Test that endpoints require authentication."""
    response = await client.get("/api/v1/appointments/")
    assert response.status_code == 401  # No auth header - Unauthorized


@pytest.mark.asyncio
async def test_invalid_token(client: AsyncClient) -> None:
    """Test that a malformed token is rejected."""
    response = await client.get(
        "/api/v1/appointments/",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_appointment_data(client, auth_headers, patient) -> None:
    """Test creating appointment with invalid data."""
    invalid_data = {
        "doctorId": "not-a-uuid",
        "dateTime": "tomorrow",
    }

    response = await client.post(
        "/api/v1/appointments/",
        json=invalid_data,
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 422  # Validation error
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_list_appointments(client, store, auth_headers, patient, doctor) -> None:
    """Test listing the caller's appointments with notes."""
    appt = store.add_appointment(patient, doctor, datetime(2024, 1, 20, 9, tzinfo=UTC))
    await store.create_note(appt["id"], doctor["id"], "Bring previous results")

    response = await client.get(
        "/api/v1/appointments/",
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == str(appt["id"])
    assert data[0]["notes"][0]["content"] == "Bring previous results"


@pytest.mark.asyncio
async def test_available_slots_mark_booking_and_buffer(
    client, store, auth_headers, patient, doctor
) -> None:
    """Test the slot listing around a 10:00 booking."""
    store.add_appointment(patient, doctor, datetime(2024, 1, 15, 10, tzinfo=UTC))

    response = await client.get(
        "/api/v1/appointments/available-slots",
        params={"doctorId": str(doctor["id"]), "startDate": "2024-01-15", "endDate": "2024-01-15"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 200
    slots = response.json()
    assert [s["dateTime"] for s in slots][:3] == [
        "2024-01-15T09:00:00Z",
        "2024-01-15T10:00:00Z",
        "2024-01-15T11:00:00Z",
    ]
    unavailable = [s["dateTime"] for s in slots if not s["available"]]
    assert unavailable == ["2024-01-15T10:00:00Z", "2024-01-15T11:00:00Z"]


@pytest.mark.asyncio
async def test_available_slots_default_to_a_week(client, auth_headers, patient, doctor) -> None:
    """Test the default end date."""
    response = await client.get(
        "/api/v1/appointments/available-slots",
        params={"doctorId": str(doctor["id"]), "startDate": "2024-01-15"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 200
    assert len(response.json()) == 56


@pytest.mark.asyncio
async def test_available_slots_require_doctor_id(client, auth_headers, patient) -> None:
    """Test that doctorId is mandatory."""
    response = await client.get(
        "/api/v1/appointments/available-slots",
        params={"startDate": "2024-01-15"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_cancel_appointment_with_reason(
    client, store, clock, auth_headers, patient, doctor
) -> None:
    """Test cancelling well ahead of time."""
    appt = store.add_appointment(patient, doctor, clock.now() + timedelta(days=2))

    response = await client.patch(
        f"/api/v1/appointments/{appt['id']}/cancel",
        json={"cancellationReason": "Travelling"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "CANCELLED"
    assert data["cancelledAt"] is not None
    assert [n["content"] for n in store.notes] == ["Cancellation reason: Travelling"]


@pytest.mark.asyncio
async def test_cancel_without_body(client, store, clock, auth_headers, patient, doctor) -> None:
    """Test that the cancellation body is optional."""
    appt = store.add_appointment(patient, doctor, clock.now() + timedelta(days=2))

    response = await client.patch(
        f"/api/v1/appointments/{appt['id']}/cancel",
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 200
    assert store.notes == []


@pytest.mark.asyncio
async def test_cancel_inside_window_is_bad_request(
    client, store, clock, auth_headers, patient, doctor
) -> None:
    """Test the 24 hour policy over HTTP."""
    appt = store.add_appointment(patient, doctor, clock.now() + timedelta(hours=3))

    response = await client.patch(
        f"/api/v1/appointments/{appt['id']}/cancel",
        json={},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "PolicyViolationException"
    assert store.appointments[appt["id"]]["status"] == AppointmentStatus.PENDING.value


@pytest.mark.asyncio
async def test_cancel_missing_appointment(client, auth_headers, patient) -> None:
    """Test cancelling an unknown appointment."""
    response = await client.patch(
        f"/api/v1/appointments/{uuid4()}/cancel",
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cancel_other_patients_appointment(
    client, store, clock, auth_headers, patient, doctor
) -> None:
    """Test patient ownership over HTTP."""
    appt = store.add_appointment(patient, doctor, clock.now() + timedelta(days=2))

    response = await client.patch(
        f"/api/v1/appointments/{appt['id']}/cancel",
        headers=auth_headers(uuid4(), Role.PATIENT),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_reschedule_appointment(client, store, auth_headers, patient, doctor) -> None:
    """Test moving an appointment to the next day."""
    appt = store.add_appointment(
        patient, doctor, datetime(2024, 1, 20, 9, tzinfo=UTC), reason="Back pain"
    )

    response = await client.patch(
        f"/api/v1/appointments/{appt['id']}/reschedule",
        json={"newDateTime": "2024-01-21T09:00:00Z"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] != str(appt["id"])
    assert data["dateTime"] == "2024-01-21T09:00:00Z"
    assert data["status"] == "PENDING"
    assert data["reason"] == "Back pain"
    assert store.appointments[appt["id"]]["status"] == AppointmentStatus.CANCELLED.value


@pytest.mark.asyncio
async def test_reschedule_onto_taken_slot(client, store, auth_headers, patient, doctor) -> None:
    """Test rescheduling onto a booked instant."""
    appt = store.add_appointment(patient, doctor, datetime(2024, 1, 20, 9, tzinfo=UTC))
    store.add_appointment(store.add_patient(), doctor, datetime(2024, 1, 21, 9, tzinfo=UTC))

    response = await client.patch(
        f"/api/v1/appointments/{appt['id']}/reschedule",
        json={"newDateTime": "2024-01-21T09:00:00Z"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 409
    assert response.json()["message"] == "New time slot is not available"


@pytest.mark.asyncio
async def test_doctor_adds_note(client, store, auth_headers, patient, doctor) -> None:
    """Test adding a note to the doctor's own appointment."""
    appt = store.add_appointment(patient, doctor, datetime(2024, 1, 20, 9, tzinfo=UTC))

    response = await client.post(
        f"/api/v1/appointments/{appt['id']}/notes",
        json={"content": "Blood pressure normal"},
        headers=auth_headers(doctor["user_id"], Role.DOCTOR),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["content"] == "Blood pressure normal"
    assert data["appointmentId"] == str(appt["id"])
    assert data["doctorId"] == str(doctor["id"])


@pytest.mark.asyncio
async def test_patient_cannot_add_note(client, store, auth_headers, patient, doctor) -> None:
    """Test that notes are doctor-only."""
    appt = store.add_appointment(patient, doctor, datetime(2024, 1, 20, 9, tzinfo=UTC))

    response = await client.post(
        f"/api/v1/appointments/{appt['id']}/notes",
        json={"content": "Self diagnosis"},
        headers=auth_headers(patient["user_id"], Role.PATIENT),
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Only doctors can add notes"


@pytest.mark.asyncio
async def test_missing_token_challenges_for_bearer(client: AsyncClient) -> None:
    """Test the 401 body and bearer challenge for a request without credentials."""
    response = await client.get("/api/v1/appointments/")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["error"] == "UnauthorizedException"
    assert response.json()["message"] == "Authentication required"


@pytest.mark.asyncio
async def test_token_with_malformed_claims(client: AsyncClient) -> None:
    """Test that a signed token with an unusable subject is rejected."""
    token = create_access_token(data={"sub": "not-a-uuid", "role": "PATIENT"})

    response = await client.get(
        "/api/v1/appointments/",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token claims"
    assert response.headers["WWW-Authenticate"] == "Bearer"
