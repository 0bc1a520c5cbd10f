"""Booking conflict detection."""

from collections.abc import Iterable
from datetime import datetime, timedelta
from uuid import UUID

from app.core.clock import as_utc
from app.core.exceptions import ConflictException
from app.services.appointment_store import AppointmentStore

APPOINTMENT_DURATION = timedelta(hours=1)
BUFFER_MINUTES = 15


def build_booked_index(date_times: Iterable[datetime]) -> set[datetime]:
    """
    Build the set of occupied instants used for slot listing.

    Each booking occupies its start instant plus one instant per minute for
    the 15 minutes following its nominal end (start + 60 .. start + 74 min).

    Args:
        date_times: Start instants of active appointments

    Returns:
        Occupied instants in UTC
    """
    booked: set[datetime] = set()
    for start in date_times:
        start = as_utc(start)
        booked.add(start)
        buffer_start = start + APPOINTMENT_DURATION
        for minute in range(BUFFER_MINUTES):
            booked.add(buffer_start + timedelta(minutes=minute))
    return booked


async def ensure_slot_free(
    store: AppointmentStore,
    doctor_id: UUID,
    date_time: datetime,
    message: str,
) -> None:
    """
    Reject a booking when the doctor already has an active appointment
    starting at exactly the same instant.

    The listing buffer is not applied here.

    Raises:
        ConflictException: If the instant is taken
    """
    existing = await store.find_active_at(doctor_id, as_utc(date_time))
    if existing is not None:
        raise ConflictException(message)
