# medappoint/services/scheduling/generator.py
"""
Slot generation.

Produces the bookable start instants of a fixed-duration service for
one provider on one calendar date.

Takes into account:
✓ weekly availability windows of the provider
✓ already-booked intervals (snapshot read by the caller)
✓ same-day cutoff: nothing at or before "now" on today's date

Does NOT:
✗ read the clock (now is injected)
✗ guarantee exclusivity (the store constraint does)
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from .errors import Reason, SchedulingError
from .overlap import BookedInterval, overlaps_any
from .time_window import (
    AvailabilityWindow,
    day_start,
    iso_weekday,
    local_date,
    resolve_window,
    resolve_zone,
    to_local,
    to_utc,
)


def generate_slots(
    target_date: date | datetime,
    zone: tzinfo | str | None,
    duration_minutes: int,
    windows: Iterable[AvailabilityWindow],
    booked: Iterable[BookedInterval],
    now: datetime,
) -> list[datetime]:
    """
    Generate bookable start instants for a day.

    Args:
        target_date: the calendar date (a datetime is converted into `zone`)
        zone: clinic timezone (tzinfo or IANA name)
        duration_minutes: service duration, > 0
        windows: availability windows for the date's weekday
        booked: booked intervals of the provider on that date
        now: current instant, timezone-aware

    Returns:
        Strictly ascending start instants, each at its own UTC offset in
        `zone`.
        Empty list = nothing bookable that day.
    """
    if zone is None or zone == "":
        raise SchedulingError(Reason.MISSING_TIMEZONE, "timezone is required")
    tz = resolve_zone(zone)

    if duration_minutes is None or duration_minutes <= 0:
        raise SchedulingError(
            Reason.INVALID_DURATION,
            f"duration must be > 0 minutes, got {duration_minutes}",
        )

    # Step 1: Normalize to the clinic zone
    day = local_date(target_date, tz)
    now_local = now.astimezone(tz)
    is_today = now_local.date() == day
    now_utc = to_utc(now)
    start_of_day = day_start(day, tz)
    weekday = iso_weekday(day)

    booked = [BookedInterval(to_utc(b.start), to_utc(b.end)) for b in booked]
    step = timedelta(minutes=duration_minutes)

    # Step 2: Walk every window of that weekday
    candidates: list[datetime] = []
    for window in windows:
        if window.weekday != weekday:
            continue

        window_start, window_end = resolve_window(start_of_day, window)

        t = window_start
        while t + step <= window_end:
            t_end = t + step

            if is_today and t <= now_utc:
                t = t_end
                continue

            if not overlaps_any(t, t_end, booked):
                candidates.append(t)

            t = t_end

    # Step 3: Sort and dedupe (adjacent/overlapping windows)
    candidates.sort()
    slots: list[datetime] = []
    for t in candidates:
        if not slots or t != slots[-1]:
            slots.append(t)

    return [to_local(t, tz) for t in slots]
