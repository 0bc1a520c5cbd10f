"""Cancellation and reschedule policy checks."""

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from app.core.clock import as_utc
from app.core.exceptions import ForbiddenException, PolicyViolationException
from app.schemas.users import Role

DEFAULT_WINDOW_HOURS = 24


def check_can_modify(
    appointment: dict[str, Any],
    acting_user_id: UUID,
    role: Role,
    action: str,
) -> None:
    """
    Gate cancel/reschedule on ownership.

    Only patients are restricted to their own appointments; doctors and
    admins may act on any appointment.

    Raises:
        ForbiddenException: If a patient acts on someone else's appointment
    """
    if role == Role.PATIENT and str(appointment["patient_user_id"]) != str(acting_user_id):
        raise ForbiddenException(f"Not authorized to {action} this appointment")


def check_timing_window(
    date_time: datetime,
    now: datetime,
    action: str,
    window_hours: int = DEFAULT_WINDOW_HOURS,
) -> None:
    """
    Require the appointment to start at least ``window_hours`` from now.

    Raises:
        PolicyViolationException: If the appointment is too close
    """
    hours_diff = (as_utc(date_time) - as_utc(now)) / timedelta(hours=1)
    if hours_diff < window_hours:
        raise PolicyViolationException(
            f"Cannot {action} appointment less than {window_hours} hours before scheduled time"
        )
