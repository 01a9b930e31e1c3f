# medappoint/services/scheduling/errors.py
"""
Rejection taxonomy for the scheduling engine.

Engine functions either raise SchedulingError (bad input or corrupt
availability data) or return a Reject value (a booking/cancellation
decision). Mapping reasons to transport responses is done by the API layer.
"""

from dataclasses import dataclass
from enum import Enum


class Reason(str, Enum):
    INVALID_TIME_OF_DAY = "InvalidTimeOfDay"
    INVALID_WINDOW = "InvalidWindow"
    INVALID_DURATION = "InvalidDuration"
    INVALID_SERVICE_DURATION = "InvalidServiceDuration"
    MISSING_TIMEZONE = "MissingTimezone"
    AMBIGUOUS_TIMESTAMP = "AmbiguousTimestamp"
    PAST_BOOKING = "PastBooking"
    OUTSIDE_AVAILABILITY = "OutsideAvailability"
    BOOKING_CONFLICT = "BookingConflict"
    NOT_CANCELLABLE = "NotCancellable"
    FORBIDDEN = "Forbidden"
    UNAUTHENTICATED = "Unauthenticated"
    NOT_FOUND = "NotFound"
    INVALID_REQUEST = "InvalidRequest"


class SchedulingError(Exception):
    """Raised when a scheduling operation cannot produce a result."""

    def __init__(self, reason: Reason, detail: str = ""):
        self.reason = reason
        self.detail = detail or reason.value
        super().__init__(f"{reason.value}: {self.detail}")


@dataclass(frozen=True)
class Reject:
    """Negative decision of the booking validator or cancellation policy."""
    reason: Reason
    detail: str = ""

    def error(self) -> SchedulingError:
        return SchedulingError(self.reason, self.detail)
