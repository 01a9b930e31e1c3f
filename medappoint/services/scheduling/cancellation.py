# medappoint/services/scheduling/cancellation.py
"""
Appointment status transitions and who may cancel.

    scheduled ──► cancelled   (this policy)
    scheduled ──► completed   (external, time-based)

Both targets are terminal. The decision here is advisory: the store
update re-checks the status atomically.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .errors import Reason, Reject
from .time_window import to_utc


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ROLE_PATIENT = "patient"
ROLE_PROVIDER = "provider"
ROLE_ADMIN = "admin"

# Roles allowed to cancel any appointment
STAFF_ROLES = frozenset({ROLE_PROVIDER, ROLE_ADMIN})

TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}
    ),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


@dataclass(frozen=True)
class Actor:
    """Caller identity as forwarded by the gateway."""
    user_id: int | None
    role: str | None = None
    patient_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None and self.user_id > 0


@dataclass(frozen=True)
class AppointmentSnapshot:
    """The parts of a persisted appointment the policy looks at."""
    patient_id: int
    start: datetime
    status: str


def can_transition(current: str, target: AppointmentStatus) -> bool:
    try:
        status = AppointmentStatus(current)
    except ValueError:
        return False
    return target in TRANSITIONS[status]


def authorize_cancellation(
    appointment: AppointmentSnapshot,
    actor: Actor | None,
    now: datetime,
) -> Reject | None:
    """
    Check whether `actor` may cancel `appointment` at `now`.

    Returns:
        None when the cancellation may proceed, a Reject otherwise.
    """
    if actor is None or not actor.is_authenticated:
        return Reject(Reason.UNAUTHENTICATED, "unauthorized")

    if actor.role == ROLE_PATIENT:
        if actor.patient_id is None:
            return Reject(Reason.FORBIDDEN, "patient profile not found")
        if actor.patient_id != appointment.patient_id:
            return Reject(Reason.FORBIDDEN, "forbidden")
    elif actor.role not in STAFF_ROLES:
        return Reject(Reason.FORBIDDEN, "forbidden")

    if not can_transition(appointment.status, AppointmentStatus.CANCELLED):
        return Reject(
            Reason.NOT_CANCELLABLE,
            f"appointment is {appointment.status}",
        )

    if not to_utc(appointment.start) > to_utc(now):
        return Reject(
            Reason.NOT_CANCELLABLE,
            "cannot cancel past or ongoing appointment",
        )

    return None
