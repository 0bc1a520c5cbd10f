"""Admin-specific schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import Field

from app.schemas.appointments import CamelModel


class DashboardStatsResponse(CamelModel):
    """Response schema for admin dashboard statistics."""

    patients: int
    doctors: int
    appointments: int
    appointments_by_status: dict[str, int] = Field(
        ...,
        description="Appointment counts keyed by status",
        examples=[{"PENDING": 12, "CONFIRMED": 4, "CANCELLED": 3}],
    )


class AccountSummary(CamelModel):
    """Login account details attached to a profile."""

    email: str
    created_at: datetime


class AdminPatientResponse(CamelModel):
    """Patient profile as shown to administrators."""

    id: UUID
    user_id: UUID
    first_name: str
    last_name: str
    date_of_birth: date | None = None
    gender: str | None = None
    phone: str | None = None
    user: AccountSummary


class AdminDoctorResponse(CamelModel):
    """Doctor profile as shown to administrators."""

    id: UUID
    user_id: UUID
    first_name: str
    last_name: str
    specialization: str | None = None
    license_number: str | None = None
    user: AccountSummary
