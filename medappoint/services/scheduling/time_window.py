# medappoint/services/scheduling/time_window.py
"""
Weekly availability windows resolved to absolute instants.

An availability record says "on ISO weekday N, from HH:MM to HH:MM".
Resolving it for a calendar date means finding the instants of those
wall-clock times on that date in the clinic's timezone. Offsets are
looked up by zoneinfo per wall-clock time, so a daylight-saving change
on that date shifts the window the same way a wall clock would.

Resolved instants are returned in UTC: aware datetimes that share one
tzinfo compare by wall clock, UTC instants compare absolutely.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import Reason, SchedulingError


_HHMM_RE = re.compile(r"([0-9]{2}):([0-9]{2})")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock time with minute precision, "HH:MM" on the wire."""
    hour: int
    minute: int

    def __post_init__(self):
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise SchedulingError(
                Reason.INVALID_TIME_OF_DAY,
                f"{self.hour:02d}:{self.minute:02d} is out of range",
            )

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        match = _HHMM_RE.fullmatch(value) if isinstance(value, str) else None
        if not match:
            raise SchedulingError(
                Reason.INVALID_TIME_OF_DAY,
                f"expected HH:MM, got {value!r}",
            )
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def minutes(self) -> int:
        """Minutes since midnight."""
        return self.hour * 60 + self.minute

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def format(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class AvailabilityWindow:
    """Opening window of a provider on one ISO weekday (1=Mon ... 7=Sun)."""
    weekday: int
    start: TimeOfDay
    end: TimeOfDay

    @classmethod
    def from_strings(cls, weekday: int, start: str, end: str) -> "AvailabilityWindow":
        return cls(weekday, TimeOfDay.parse(start), TimeOfDay.parse(end))


def resolve_zone(zone: tzinfo | str | None) -> tzinfo:
    """Return a tzinfo for a zone or an IANA zone name."""
    if isinstance(zone, tzinfo):
        return zone
    if not zone:
        raise SchedulingError(Reason.MISSING_TIMEZONE, "timezone is required")
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError):
        raise SchedulingError(
            Reason.MISSING_TIMEZONE, f"unknown timezone {zone!r}"
        ) from None


def iso_weekday(value: date | datetime) -> int:
    """ISO weekday of a date: 1 = Monday ... 7 = Sunday."""
    return value.isoweekday()


def local_date(value: date | datetime, zone: tzinfo) -> date:
    """Calendar date of `value` in `zone`. Plain dates are taken as-is."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(zone).date()
    return value


def day_start(target_date: date, zone: tzinfo) -> datetime:
    """Midnight of `target_date` in `zone`."""
    return datetime.combine(target_date, time.min, tzinfo=zone)


def resolve_window(
    start_of_day: datetime,
    window: AvailabilityWindow,
) -> tuple[datetime, datetime]:
    """
    Resolve a window to (window_start, window_end) UTC instants.

    Args:
        start_of_day: midnight of the target date, aware, in the clinic zone
        window: availability window for that date's weekday

    Raises:
        SchedulingError(InvalidWindow) if the end is not after the start.
    """
    zone = start_of_day.tzinfo
    if zone is None:
        raise SchedulingError(Reason.MISSING_TIMEZONE, "day start must be timezone-aware")

    day = start_of_day.date()
    window_start = _wall_clock_instant(day, window.start, zone)
    window_end = _wall_clock_instant(day, window.end, zone)

    if window.end.minutes <= window.start.minutes or window_end <= window_start:
        raise SchedulingError(
            Reason.INVALID_WINDOW,
            f"window {window.start}-{window.end} must end after it starts",
        )
    return window_start, window_end


def to_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


def to_local(instant: datetime, zone: tzinfo) -> datetime:
    """
    Express `instant` in `zone` with a fixed-offset tzinfo.

    Values sharing a ZoneInfo compare by wall clock and ignore `fold`, so
    01:30 EDT and 01:30 EST would be equal on a fall-back day.
    """
    local = instant.astimezone(zone)
    return local.replace(tzinfo=timezone(local.utcoffset()))


def add_minutes(instant: datetime, minutes: int) -> datetime:
    """Absolute addition: the result is `minutes` of elapsed time later."""
    return to_utc(instant) + timedelta(minutes=minutes)


# ── Helpers ──────────────────────────────────────────────────────────────


def _wall_clock_instant(day: date, tod: TimeOfDay, zone) -> datetime:
    return to_utc(datetime.combine(day, tod.to_time(), tzinfo=zone))
