"""Appointment scheduling service for business logic."""

from datetime import date, datetime, tzinfo
from uuid import UUID

import structlog

from app.config import settings
from app.core.clock import Clock, as_utc
from app.core.exceptions import ConflictException, ForbiddenException, NotFoundException
from app.middleware.logging import log_service_call
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentWithNotesResponse,
    NoteResponse,
    SlotResponse,
)
from app.schemas.doctors import DoctorResponse
from app.schemas.users import Role
from app.services.appointment_store import AppointmentStore
from app.services.conflicts import build_booked_index, ensure_slot_free
from app.services.policy import check_can_modify, check_timing_window
from app.services.slots import generate_slots, resolve_range

logger = structlog.get_logger()


class AppointmentService:
    """Service for booking, cancelling and rescheduling appointments."""

    def __init__(
        self,
        store: AppointmentStore,
        clock: Clock,
        tz: tzinfo | None = None,
        window_hours: int | None = None,
    ):
        """Initialize service with its store and clock."""
        self.store = store
        self.clock = clock
        self.tz = tz or settings.scheduling_tz
        self.window_hours = (
            window_hours if window_hours is not None else settings.cancellation_window_hours
        )

    @log_service_call
    async def create_appointment(
        self,
        patient_user_id: UUID,
        data: AppointmentCreate,
    ) -> AppointmentResponse:
        """
        Book a new appointment for a patient.

        Args:
            patient_user_id: User ID of the booking patient
            data: Appointment creation data

        Returns:
            Created appointment

        Raises:
            NotFoundException: If patient or doctor does not exist
            ConflictException: If the doctor is already booked at that instant
        """
        patient = await self.store.get_patient_by_user_id(patient_user_id)
        if not patient:
            raise NotFoundException("Patient not found")

        doctor = await self.store.get_doctor(data.doctor_id)
        if not doctor:
            raise NotFoundException("Doctor not found")

        date_time = as_utc(data.date_time)
        await ensure_slot_free(
            self.store,
            data.doctor_id,
            date_time,
            "Doctor already has an appointment at this time. "
            "Please choose a different time slot.",
        )

        row = await self.store.create_appointment(
            {
                "patient_id": patient["id"],
                "doctor_id": data.doctor_id,
                "date_time": date_time,
                "reason": data.reason,
                "status": AppointmentStatus.PENDING.value,
            }
        )

        logger.info("appointment_created", appointment_id=str(row["id"]))
        return AppointmentResponse.model_validate(row)

    @log_service_call
    async def get_available_slots(
        self,
        doctor_id: UUID,
        start_date: date,
        end_date: date | None = None,
    ) -> list[SlotResponse]:
        """
        List bookable one-hour slots for a doctor.

        Args:
            doctor_id: Doctor ID
            start_date: First day of the range
            end_date: Last day of the range, defaults to a week from start_date

        Returns:
            Future slots in chronological order with availability flags
        """
        range_start, range_end = resolve_range(start_date, end_date, self.tz)

        booked_rows = await self.store.find_active_in_range(
            doctor_id,
            as_utc(range_start),
            as_utc(range_end),
        )
        booked = build_booked_index(row["date_time"] for row in booked_rows)

        return generate_slots(range_start, range_end, booked, self.clock.now(), self.tz)

    async def _load_modifiable(
        self,
        user_id: UUID,
        appointment_id: UUID,
        role: Role,
        action: str,
    ) -> dict:
        appointment = await self.store.get_appointment(appointment_id)
        if not appointment:
            raise NotFoundException("Appointment not found")

        if appointment["status"] == AppointmentStatus.CANCELLED.value:
            raise ConflictException("Appointment is already cancelled")

        check_can_modify(appointment, user_id, role, action)
        check_timing_window(
            appointment["date_time"], self.clock.now(), action, self.window_hours
        )
        return appointment

    @log_service_call
    async def cancel_appointment(
        self,
        user_id: UUID,
        appointment_id: UUID,
        role: Role,
        cancellation_reason: str | None = None,
    ) -> AppointmentResponse:
        """
        Cancel an appointment.

        A cancellation reason, when given, is recorded as a note attributed
        to the appointment's doctor.

        Args:
            user_id: Acting user ID
            appointment_id: Appointment ID
            role: Acting user's role
            cancellation_reason: Optional free-text reason

        Returns:
            Cancelled appointment

        Raises:
            NotFoundException: If appointment not found
            ConflictException: If appointment is already cancelled
            ForbiddenException: If a patient cancels someone else's appointment
            PolicyViolationException: If less than 24 hours remain
        """
        await self._load_modifiable(user_id, appointment_id, role, "cancel")

        note = f"Cancellation reason: {cancellation_reason}" if cancellation_reason else None
        async with self.store.transaction():
            row = await self.store.update_status(
                appointment_id, AppointmentStatus.CANCELLED, note=note
            )

        logger.info(
            "appointment_cancelled",
            appointment_id=str(appointment_id),
            reason=cancellation_reason,
        )
        return AppointmentResponse.model_validate(row)

    @log_service_call
    async def reschedule_appointment(
        self,
        user_id: UUID,
        appointment_id: UUID,
        new_date_time: datetime,
        role: Role,
    ) -> AppointmentResponse:
        """
        Move an appointment by cancelling it and booking a replacement.

        Both writes happen in one store transaction. The 24 hour window
        applies to the existing appointment only.

        Args:
            user_id: Acting user ID
            appointment_id: Appointment ID
            new_date_time: New start instant
            role: Acting user's role

        Returns:
            The newly created appointment
        """
        appointment = await self._load_modifiable(user_id, appointment_id, role, "reschedule")

        new_date_time = as_utc(new_date_time)
        await ensure_slot_free(
            self.store,
            appointment["doctor_id"],
            new_date_time,
            "New time slot is not available",
        )

        async with self.store.transaction():
            await self.store.update_status(appointment_id, AppointmentStatus.CANCELLED)
            new_row = await self.store.create_appointment(
                {
                    "patient_id": appointment["patient_id"],
                    "doctor_id": appointment["doctor_id"],
                    "date_time": new_date_time,
                    "reason": appointment["reason"],
                    "status": AppointmentStatus.PENDING.value,
                }
            )

        logger.info(
            "appointment_rescheduled",
            appointment_id=str(appointment_id),
            new_appointment_id=str(new_row["id"]),
        )
        return AppointmentResponse.model_validate(new_row)

    @log_service_call
    async def list_appointments(
        self,
        user_id: UUID,
        role: Role,
    ) -> list[AppointmentWithNotesResponse]:
        """List the caller's appointments, with notes, oldest first."""
        if role == Role.PATIENT:
            patient = await self.store.get_patient_by_user_id(user_id)
            if not patient:
                return []
            rows = await self.store.list_for_patient(patient["id"])
        elif role == Role.DOCTOR:
            doctor = await self.store.get_doctor_by_user_id(user_id)
            if not doctor:
                return []
            rows = await self.store.list_for_doctor(doctor["id"])
        else:
            return []

        return [AppointmentWithNotesResponse.model_validate(row) for row in rows]

    @log_service_call
    async def list_doctors(self) -> list[DoctorResponse]:
        """List bookable doctors ordered by name."""
        rows = await self.store.list_doctors()
        return [DoctorResponse.model_validate(row) for row in rows]

    @log_service_call
    async def add_note(
        self,
        doctor_user_id: UUID,
        appointment_id: UUID,
        content: str,
    ) -> NoteResponse:
        """
        Attach a clinical note to one of the doctor's appointments.

        Raises:
            NotFoundException: If doctor or appointment not found
            ForbiddenException: If the appointment belongs to another doctor
        """
        doctor = await self.store.get_doctor_by_user_id(doctor_user_id)
        if not doctor:
            raise NotFoundException("Doctor not found")

        appointment = await self.store.get_appointment(appointment_id)
        if not appointment:
            raise NotFoundException("Appointment not found")

        if appointment["doctor_id"] != doctor["id"]:
            raise ForbiddenException("Not authorized to add note to this appointment")

        row = await self.store.create_note(appointment_id, doctor["id"], content)

        logger.info("note_added", appointment_id=str(appointment_id))
        return NoteResponse.model_validate(row)
