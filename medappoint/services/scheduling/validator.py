# medappoint/services/scheduling/validator.py
"""
Booking validation.

Decides whether one requested start instant can be booked. This is the
optimistic pre-check; the write path still relies on the store constraint
for exclusivity.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Iterable

from .errors import Reason, Reject
from .overlap import BookedInterval, overlaps_any
from .time_window import (
    AvailabilityWindow,
    add_minutes,
    day_start,
    iso_weekday,
    resolve_window,
    resolve_zone,
    to_local,
    to_utc,
)


@dataclass(frozen=True)
class BookingRequest:
    provider_id: int
    service_id: int
    start: datetime


@dataclass(frozen=True)
class Accept:
    """Positive decision, carrying everything the write needs."""
    provider_id: int
    service_id: int
    clinic_id: int | None
    start: datetime
    end: datetime


def validate_booking(
    request: BookingRequest,
    duration_minutes: int,
    windows: Iterable[AvailabilityWindow],
    booked: Iterable[BookedInterval],
    now: datetime,
    zone: tzinfo | str | None,
    clinic_id: int | None = None,
) -> Accept | Reject:
    """
    Validate a booking request against availability and existing bookings.

    Checks, in order: explicit offset, duration, not in the past, fully
    inside an availability window of that weekday, no overlap.

    Malformed windows raise SchedulingError, same as in slot generation.
    """
    start = request.start

    if start.tzinfo is None or start.utcoffset() is None:
        return Reject(
            Reason.AMBIGUOUS_TIMESTAMP,
            "start time must include a timezone offset",
        )

    if duration_minutes is None or duration_minutes <= 0:
        return Reject(Reason.INVALID_SERVICE_DURATION, "invalid service duration")

    if not to_utc(start) > to_utc(now):
        return Reject(Reason.PAST_BOOKING, "cannot book a past time")

    tz = resolve_zone(zone)
    local_start = start.astimezone(tz)
    weekday = iso_weekday(local_start)
    start_of_day = day_start(local_start.date(), tz)

    start_utc = to_utc(start)
    end_utc = add_minutes(start_utc, duration_minutes)

    within_window = False
    for window in windows:
        if window.weekday != weekday:
            continue
        window_start, window_end = resolve_window(start_of_day, window)
        # [start, end) must sit inside [window_start, window_end]
        if start_utc >= window_start and end_utc <= window_end:
            within_window = True
            break

    if not within_window:
        return Reject(
            Reason.OUTSIDE_AVAILABILITY,
            "requested time is outside provider availability",
        )

    booked_utc = [BookedInterval(to_utc(b.start), to_utc(b.end)) for b in booked]
    if overlaps_any(start_utc, end_utc, booked_utc):
        return Reject(
            Reason.BOOKING_CONFLICT,
            "time overlaps an existing appointment",
        )

    return Accept(
        provider_id=request.provider_id,
        service_id=request.service_id,
        clinic_id=clinic_id,
        start=to_local(start_utc, tz),
        end=to_local(end_utc, tz),
    )
