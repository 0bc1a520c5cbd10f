"""Admin service for dashboard data."""

from typing import Any

from app.middleware.logging import log_service_call
from app.schemas.admin import AdminDoctorResponse, AdminPatientResponse, DashboardStatsResponse
from app.schemas.appointments import AppointmentResponse
from app.services.appointment_store import AppointmentStore


def _with_account(row: dict[str, Any]) -> dict[str, Any]:
    """Nest the joined account columns under ``user``."""
    profile = dict(row)
    profile["user"] = {
        "email": profile.pop("email"),
        "created_at": profile.pop("user_created_at"),
    }
    return profile


class AdminService:
    """Service for administrator views."""

    def __init__(self, store: AppointmentStore):
        """Initialize service with appointment store."""
        self.store = store

    @log_service_call
    async def get_dashboard_stats(self) -> DashboardStatsResponse:
        """Get aggregate counts of patients, doctors and appointments."""
        totals = await self.store.count_totals()
        return DashboardStatsResponse.model_validate(totals)

    @log_service_call
    async def list_doctors(self) -> list[AdminDoctorResponse]:
        """List all doctors by last name, with account email and creation date."""
        rows = await self.store.list_doctors_with_users()
        return [AdminDoctorResponse.model_validate(_with_account(row)) for row in rows]

    @log_service_call
    async def list_patients(self) -> list[AdminPatientResponse]:
        """List all patients by last name, with account email and creation date."""
        rows = await self.store.list_patients_with_users()
        return [AdminPatientResponse.model_validate(_with_account(row)) for row in rows]

    @log_service_call
    async def list_recent_appointments(self, limit: int = 100) -> list[AppointmentResponse]:
        """List the latest appointments by start time."""
        rows = await self.store.list_recent(limit)
        return [AppointmentResponse.model_validate(row) for row in rows]
