"""User schemas for request identity."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class Role(str, Enum):
    """User role enumeration."""

    PATIENT = "PATIENT"
    DOCTOR = "DOCTOR"
    ADMIN = "ADMIN"


class CurrentUser(BaseModel):
    """Authenticated identity taken from the access token."""

    id: UUID
    email: str | None = None
    role: Role
