# medappoint/services/scheduling/__init__.py
"""
Scheduling engine.

Pure functions over caller-supplied snapshots:
- time_window: HH:MM parsing, weekday windows resolved to instants
- overlap: half-open interval overlap
- generator: bookable slots for a day
- validator: accept/reject a booking request
- cancellation: status transitions and cancel permissions
"""

from .errors import Reason, Reject, SchedulingError
from .time_window import (
    AvailabilityWindow,
    TimeOfDay,
    day_start,
    iso_weekday,
    resolve_window,
    resolve_zone,
)
from .overlap import BookedInterval, overlaps, overlaps_any
from .generator import generate_slots
from .validator import Accept, BookingRequest, validate_booking
from .cancellation import (
    Actor,
    AppointmentSnapshot,
    AppointmentStatus,
    authorize_cancellation,
    can_transition,
)

__all__ = [
    "Reason",
    "Reject",
    "SchedulingError",
    "AvailabilityWindow",
    "TimeOfDay",
    "day_start",
    "iso_weekday",
    "resolve_window",
    "resolve_zone",
    "BookedInterval",
    "overlaps",
    "overlaps_any",
    "generate_slots",
    "Accept",
    "BookingRequest",
    "validate_booking",
    "Actor",
    "AppointmentSnapshot",
    "AppointmentStatus",
    "authorize_cancellation",
    "can_transition",
]
