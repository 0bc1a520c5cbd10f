"""Doctor directory schemas."""

from uuid import UUID

from app.schemas.appointments import CamelModel


class DoctorResponse(CamelModel):
    """Public doctor listing entry used to pick a doctor for booking."""

    id: UUID
    first_name: str
    last_name: str
    specialization: str | None = None
