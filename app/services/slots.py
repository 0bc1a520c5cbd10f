"""Available slot generation.

Slots are one-hour appointment start times laid out on the hour from 09:00
through 16:00 (the last appointment ends at 17:00) in the scheduling
timezone.
"""

from collections.abc import Collection
from datetime import UTC, date, datetime, time, timedelta, tzinfo

from app.schemas.appointments import SlotResponse

FIRST_SLOT_HOUR = 9
LAST_SLOT_HOUR = 16

# Range length when no end date is supplied (start day included)
DEFAULT_RANGE_DAYS = 7


def resolve_range(
    start_date: date,
    end_date: date | None,
    tz: tzinfo,
) -> tuple[datetime, datetime]:
    """
    Resolve the inclusive instant range covered by a slot lookup.

    Args:
        start_date: First calendar day
        end_date: Last calendar day, defaults to start_date + 6 days
        tz: Scheduling timezone

    Returns:
        (midnight of the first day, last microsecond of the last day)
    """
    if end_date is None:
        end_date = start_date + timedelta(days=DEFAULT_RANGE_DAYS - 1)

    range_start = datetime.combine(start_date, time.min, tzinfo=tz)
    range_end = datetime.combine(end_date, time.max, tzinfo=tz)
    return range_start, range_end


def generate_slots(
    range_start: datetime,
    range_end: datetime,
    booked: Collection[datetime],
    now: datetime,
    tz: tzinfo,
) -> list[SlotResponse]:
    """
    Produce the ordered slot grid for a date range.

    Past slots are omitted rather than marked unavailable.

    Args:
        range_start: Start of range (any time on the first day)
        range_end: End of range (any time on the last day)
        booked: Occupied instants in UTC
        now: Current instant
        tz: Scheduling timezone

    Returns:
        Slots in ascending order, day-major and hour-minor
    """
    today = now.astimezone(tz).date()
    current_day = range_start.astimezone(tz).date()
    last_day = range_end.astimezone(tz).date()

    slots: list[SlotResponse] = []
    while current_day <= last_day:
        if current_day >= today:
            for hour in range(FIRST_SLOT_HOUR, LAST_SLOT_HOUR + 1):
                slot_time = datetime.combine(current_day, time(hour), tzinfo=tz).astimezone(UTC)
                if slot_time <= now:
                    continue
                slots.append(
                    SlotResponse(date_time=slot_time, available=slot_time not in booked)
                )
        current_day += timedelta(days=1)

    return slots
