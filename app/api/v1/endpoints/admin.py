"""Admin-only endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.dependencies import AdminServiceDep, require_role
from app.schemas.admin import (
    AdminDoctorResponse,
    AdminPatientResponse,
    DashboardStatsResponse,
)
from app.schemas.appointments import AppointmentResponse
from app.schemas.users import CurrentUser, Role

router = APIRouter(prefix="/admin", tags=["Admin"])

AdminUser = Annotated[
    CurrentUser,
    Depends(require_role(Role.ADMIN, detail="Admin access required")),
]


@router.get(
    "/stats",
    response_model=DashboardStatsResponse,
    summary="Dashboard statistics (admin only)",
)
async def get_dashboard_stats(
    admin_user: AdminUser,
    service: AdminServiceDep,
) -> DashboardStatsResponse:
    """
    Get counts of patients, doctors and appointments.

    Requires admin role.
    """
    return await service.get_dashboard_stats()


@router.get(
    "/doctors",
    response_model=list[AdminDoctorResponse],
    summary="List all doctors (admin only)",
)
async def list_doctors(
    admin_user: AdminUser,
    service: AdminServiceDep,
) -> list[AdminDoctorResponse]:
    """
    List doctor profiles by last name with account email and creation date.

    Requires admin role.
    """
    return await service.list_doctors()


@router.get(
    "/patients",
    response_model=list[AdminPatientResponse],
    summary="List all patients (admin only)",
)
async def list_patients(
    admin_user: AdminUser,
    service: AdminServiceDep,
) -> list[AdminPatientResponse]:
    """
    List patient profiles by last name with account email and creation date.

    Requires admin role.
    """
    return await service.list_patients()


@router.get(
    "/appointments",
    response_model=list[AppointmentResponse],
    summary="List latest appointments (admin only)",
)
async def list_recent_appointments(
    admin_user: AdminUser,
    service: AdminServiceDep,
    limit: int = Query(100, ge=1, le=500, description="Maximum number of appointments"),
) -> list[AppointmentResponse]:
    """
    List the most recent appointments by start time.

    Requires admin role.
    """
    return await service.list_recent_appointments(limit)
