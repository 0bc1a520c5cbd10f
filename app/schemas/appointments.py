"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.core.clock import as_utc


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


# Statuses that occupy a slot
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)


class CamelModel(BaseModel):
    """Base schema exchanging camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AppointmentCreate(CamelModel):
    """Schema for booking a new appointment."""

    doctor_id: UUID
    date_time: datetime
    reason: str | None = Field(None, max_length=500)

    @field_validator("date_time")
    @classmethod
    def normalize_date_time(cls, v: datetime) -> datetime:
        """Store every instant as aware UTC."""
        return as_utc(v)


class AppointmentCancel(CamelModel):
    """Schema for cancelling an appointment."""

    cancellation_reason: str | None = Field(None, max_length=500)


class AppointmentReschedule(CamelModel):
    """Schema for moving an appointment to a new start time."""

    new_date_time: datetime

    @field_validator("new_date_time")
    @classmethod
    def normalize_new_date_time(cls, v: datetime) -> datetime:
        """Store every instant as aware UTC."""
        return as_utc(v)


class NoteCreate(CamelModel):
    """Schema for adding a clinical note."""

    content: str = Field(..., min_length=1, max_length=5000)


class NoteResponse(CamelModel):
    """Schema for note response."""

    id: UUID
    appointment_id: UUID
    doctor_id: UUID
    content: str
    created_at: datetime


class AppointmentResponse(CamelModel):
    """Schema for appointment response."""

    id: UUID
    patient_id: UUID
    doctor_id: UUID
    date_time: datetime
    status: AppointmentStatus
    reason: str | None = None
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None


class AppointmentWithNotesResponse(AppointmentResponse):
    """Appointment along with its clinical notes."""

    notes: list[NoteResponse] = Field(default_factory=list)


class SlotResponse(CamelModel):
    """A candidate one-hour start time and whether it can be booked."""

    date_time: datetime
    available: bool
