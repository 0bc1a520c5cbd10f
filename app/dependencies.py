"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, SystemClock
from app.core.exceptions import UnauthorizedException
from app.core.security import decode_access_token
from app.database import get_db
from app.schemas.users import CurrentUser as CurrentUserModel
from app.schemas.users import Role
from app.services.admin_service import AdminService
from app.services.appointment_service import AppointmentService
from app.services.appointment_store import AppointmentStore, SQLAlchemyAppointmentStore

# Security
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUserModel:
    """
    Extract the authenticated identity from the bearer token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID, email and role from token claims

    Raises:
        UnauthorizedException: If token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException()

    try:
        return CurrentUserModel(
            id=UUID(str(payload.get("sub"))),
            email=payload.get("email"),
            role=payload.get("role"),
        )
    except (ValueError, ValidationError):
        raise UnauthorizedException("Invalid token claims") from None


def get_clock() -> Clock:
    """Get the clock used for scheduling decisions."""
    return SystemClock()


async def get_appointment_store(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppointmentStore:
    """Get a request-scoped appointment store."""
    return SQLAlchemyAppointmentStore(db)


async def get_appointment_service(
    store: Annotated[AppointmentStore, Depends(get_appointment_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AppointmentService:
    """Get appointment scheduling service."""
    return AppointmentService(store, clock)


async def get_admin_service(
    store: Annotated[AppointmentStore, Depends(get_appointment_store)],
) -> AdminService:
    """Get admin service."""
    return AdminService(store)


def require_role(*roles: Role, detail: str = "Access denied"):
    """
    Build a dependency that admits only the given roles.

    Args:
        roles: Allowed roles
        detail: Message returned to other roles

    Returns:
        Dependency returning the current user
    """

    async def dependency(
        current_user: Annotated[CurrentUserModel, Depends(get_current_user)],
    ) -> CurrentUserModel:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail,
            )
        return current_user

    return dependency


# Type aliases for dependency injection
CurrentUser = Annotated[CurrentUserModel, Depends(get_current_user)]
AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
