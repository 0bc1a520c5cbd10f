"""Doctor directory endpoints."""

from fastapi import APIRouter, status

from app.dependencies import AppointmentServiceDep, CurrentUser
from app.schemas.doctors import DoctorResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[DoctorResponse],
    status_code=status.HTTP_200_OK,
    tags=["Doctors"],
    summary="List doctors",
)
async def list_doctors(
    current_user: CurrentUser,
    service: AppointmentServiceDep,
) -> list[DoctorResponse]:
    """
    List doctors that can be booked.

    Returns:
        Doctor id, name and specialization, ordered by last name
    """
    return await service.list_doctors()
