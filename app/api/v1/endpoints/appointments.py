"""Appointment endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import AppointmentServiceDep, CurrentUser, require_role
from app.schemas.appointments import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentWithNotesResponse,
    NoteCreate,
    NoteResponse,
    SlotResponse,
)
from app.schemas.users import CurrentUser as CurrentUserModel
from app.schemas.users import Role

router = APIRouter()

PatientUser = Annotated[
    CurrentUserModel,
    Depends(require_role(Role.PATIENT, detail="Only patients can book appointments")),
]
DoctorUser = Annotated[
    CurrentUserModel,
    Depends(require_role(Role.DOCTOR, detail="Only doctors can add notes")),
]


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    current_user: PatientUser,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Book an appointment for the authenticated patient.

    Args:
        data: Doctor, start time and optional reason
        current_user: Authenticated patient
        service: Appointment service

    Returns:
        Created appointment
    """
    return await service.create_appointment(current_user.id, data)


@router.get(
    "/",
    response_model=list[AppointmentWithNotesResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    current_user: CurrentUser,
    service: AppointmentServiceDep,
) -> list[AppointmentWithNotesResponse]:
    """
    List the authenticated patient's or doctor's appointments.

    Args:
        current_user: Authenticated user
        service: Appointment service

    Returns:
        Appointments with notes, oldest first
    """
    return await service.list_appointments(current_user.id, current_user.role)


@router.get(
    "/available-slots",
    response_model=list[SlotResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get available time slots for a doctor",
)
async def get_available_slots(
    current_user: CurrentUser,
    service: AppointmentServiceDep,
    doctor_id: UUID = Query(..., alias="doctorId"),
    start_date: date = Query(..., alias="startDate"),
    end_date: date | None = Query(
        None,
        alias="endDate",
        description="Last day to include (defaults to 7 days from startDate)",
    ),
) -> list[SlotResponse]:
    """
    Get one-hour slots between 09:00 and 16:00 for each day in range.

    Args:
        current_user: Authenticated user
        service: Appointment service
        doctor_id: Doctor ID
        start_date: First day
        end_date: Last day

    Returns:
        Future slots with availability flags
    """
    return await service.get_available_slots(doctor_id, start_date, end_date)


@router.patch(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Cancel an appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    service: AppointmentServiceDep,
    data: AppointmentCancel | None = None,
) -> AppointmentResponse:
    """
    Cancel an appointment at least 24 hours before it starts.

    Args:
        appointment_id: Appointment ID
        current_user: Authenticated user
        service: Appointment service
        data: Optional cancellation reason

    Returns:
        Cancelled appointment
    """
    return await service.cancel_appointment(
        current_user.id,
        appointment_id,
        current_user.role,
        data.cancellation_reason if data else None,
    )


@router.patch(
    "/{appointment_id}/reschedule",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Reschedule an appointment",
)
async def reschedule_appointment(
    appointment_id: UUID,
    data: AppointmentReschedule,
    current_user: CurrentUser,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Move an appointment to a new start time.

    Args:
        appointment_id: Appointment ID
        data: New start time
        current_user: Authenticated user
        service: Appointment service

    Returns:
        The replacement appointment
    """
    return await service.reschedule_appointment(
        current_user.id,
        appointment_id,
        data.new_date_time,
        current_user.role,
    )


@router.post(
    "/{appointment_id}/notes",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Add a note to an appointment (doctor only)",
)
async def add_note(
    appointment_id: UUID,
    data: NoteCreate,
    current_user: DoctorUser,
    service: AppointmentServiceDep,
) -> NoteResponse:
    """
    Add a clinical note to one of the doctor's appointments.

    Args:
        appointment_id: Appointment ID
        data: Note content
        current_user: Authenticated doctor
        service: Appointment service

    Returns:
        Created note
    """
    return await service.add_note(current_user.id, appointment_id, data.content)
