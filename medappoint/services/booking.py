# medappoint/services/booking.py
"""
Booking service: the database-facing side of the scheduling engine.

Loads snapshots (availability, booked intervals, service duration),
asks the engine for a decision and performs the write. The store is
authoritative for exclusivity:

- booking: an exclusion constraint (PostgreSQL) or trigger (SQLite)
  rejects overlapping scheduled appointments; that rejection is mapped
  to BookingConflict, same as the pre-check.
- cancellation: compare-and-set on status; zero matched rows is
  NotCancellable.
"""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import (
    Appointments,
    Availabilities,
    Clinics,
    OVERLAP_CONSTRAINT,
    OVERLAP_TRIGGER_MARKER,
    Patients,
    Providers,
    Services,
)
from .events import APPOINTMENT_CANCELLED, APPOINTMENT_CREATED, emit_event
from .scheduling import (
    Accept,
    Actor,
    AppointmentSnapshot,
    AppointmentStatus,
    AvailabilityWindow,
    BookedInterval,
    BookingRequest,
    Reason,
    SchedulingError,
    authorize_cancellation,
    day_start,
    generate_slots,
    iso_weekday,
    resolve_zone,
    validate_booking,
)
from .scheduling.cancellation import ROLE_ADMIN, ROLE_PROVIDER
from .scheduling.time_window import local_date

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for exclusion_violation
EXCLUSION_VIOLATION = "23P01"


# ── Slots ────────────────────────────────────────────────────────────────


def list_slots(
    db: Session,
    provider_id: int,
    service_id: int,
    target_date: date,
    now: datetime,
) -> list[datetime]:
    """
    Bookable start instants for a provider/service on a date.

    Dates before the clinic's today are rejected as PastBooking; an
    empty list means nothing is bookable that day.
    """
    service = _get_service(db, service_id)
    provider = _get_provider(db, provider_id)
    tz = resolve_zone(provider.clinic.timezone)

    if target_date < now.astimezone(tz).date():
        raise SchedulingError(Reason.PAST_BOOKING, "date cannot be in the past")

    windows = _get_windows(db, provider_id, iso_weekday(target_date))
    booked = _get_booked(db, provider_id, target_date, tz)

    return generate_slots(
        target_date,
        tz,
        service.duration_minutes,
        windows,
        booked,
        now,
    )


# ── Booking ──────────────────────────────────────────────────────────────


def book_appointment(
    db: Session,
    patient_id: int,
    provider_id: int,
    service_id: int,
    start: datetime,
    now: datetime,
    notes: str | None = None,
) -> Appointments:
    """
    Validate and create an appointment.

    Raises:
        SchedulingError with the validator's reason, NotFound for unknown
        references, or BookingConflict when the store rejects the insert.
    """
    service = _get_service(db, service_id)
    provider = _get_provider(db, provider_id)
    if db.get(Patients, patient_id) is None:
        raise SchedulingError(Reason.NOT_FOUND, "patient not found")

    tz = resolve_zone(provider.clinic.timezone)

    windows: list[AvailabilityWindow] = []
    booked: list[BookedInterval] = []
    if start.tzinfo is not None and start.utcoffset() is not None:
        day = local_date(start, tz)
        windows = _get_windows(db, provider_id, iso_weekday(day))
        booked = _get_booked(db, provider_id, day, tz)

    decision = validate_booking(
        BookingRequest(provider_id=provider_id, service_id=service_id, start=start),
        service.duration_minutes,
        windows,
        booked,
        now,
        tz,
        clinic_id=provider.clinic_id,
    )
    if not isinstance(decision, Accept):
        raise decision.error()

    return _insert_appointment(db, decision, patient_id, notes, now)


def _insert_appointment(
    db: Session,
    decision: Accept,
    patient_id: int,
    notes: str | None,
    now: datetime,
) -> Appointments:
    obj = Appointments(
        clinic_id=decision.clinic_id,
        provider_id=decision.provider_id,
        patient_id=patient_id,
        service_id=decision.service_id,
        start_time=decision.start,
        end_time=decision.end,
        status=AppointmentStatus.SCHEDULED.value,
        notes=notes or None,
        created_at=now,
        updated_at=now,
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if is_overlap_violation(exc):
            logger.warning(
                f"Store rejected overlapping appointment for provider="
                f"{decision.provider_id} at {decision.start.isoformat()}"
            )
            raise SchedulingError(
                Reason.BOOKING_CONFLICT,
                "time overlaps an existing appointment",
            ) from exc
        raise
    db.refresh(obj)

    logger.info(
        f"Appointment {obj.id} created: provider={obj.provider_id} "
        f"patient={obj.patient_id} start={decision.start.isoformat()}"
    )
    emit_event(APPOINTMENT_CREATED, {
        "appointment_id": obj.id,
        "provider_id": obj.provider_id,
        "patient_id": obj.patient_id,
        "start_time": decision.start.isoformat(),
    })
    return obj


def is_overlap_violation(exc: IntegrityError) -> bool:
    """True if the store rejected an insert for overlapping a booking."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == EXCLUSION_VIOLATION:
        return True
    message = str(orig)
    return OVERLAP_CONSTRAINT in message or OVERLAP_TRIGGER_MARKER in message


# ── Cancellation ─────────────────────────────────────────────────────────


def cancel_appointment(
    db: Session,
    appointment_id: int,
    actor: Actor | None,
    now: datetime,
) -> Appointments:
    """Cancel a scheduled appointment on behalf of `actor`."""
    if actor is None or not actor.is_authenticated:
        raise SchedulingError(Reason.UNAUTHENTICATED, "unauthorized")

    obj = db.get(Appointments, appointment_id)
    if obj is None:
        raise SchedulingError(Reason.NOT_FOUND, "appointment not found")

    snapshot = AppointmentSnapshot(
        patient_id=obj.patient_id,
        start=obj.start_time,
        status=obj.status,
    )
    reject = authorize_cancellation(snapshot, actor, now)
    if reject is not None:
        raise reject.error()

    # Compare-and-set: only a still-scheduled row transitions
    result = db.execute(
        update(Appointments)
        .where(
            Appointments.id == appointment_id,
            Appointments.status == AppointmentStatus.SCHEDULED.value,
        )
        .values(status=AppointmentStatus.CANCELLED.value, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise SchedulingError(
            Reason.NOT_CANCELLABLE,
            "cannot cancel appointment (already cancelled or completed)",
        )
    db.commit()
    db.refresh(obj)

    logger.info(f"Appointment {obj.id} cancelled by user={actor.user_id} role={actor.role}")
    emit_event(APPOINTMENT_CANCELLED, {
        "appointment_id": obj.id,
        "provider_id": obj.provider_id,
        "patient_id": obj.patient_id,
        "cancelled_by": actor.user_id,
    })
    return obj


# ── Schedules ────────────────────────────────────────────────────────────


def list_provider_day(
    db: Session,
    provider_id: int,
    target_date: date | None,
    actor: Actor | None,
    now: datetime,
) -> tuple[date, list[Appointments]]:
    """Appointments of one provider on a date (default: clinic's today)."""
    if actor is None or not actor.is_authenticated:
        raise SchedulingError(Reason.UNAUTHENTICATED, "unauthorized")

    provider = _get_provider(db, provider_id)
    if actor.role == ROLE_PROVIDER and provider.user_id != actor.user_id:
        raise SchedulingError(Reason.FORBIDDEN, "forbidden")
    if actor.role not in (ROLE_PROVIDER, ROLE_ADMIN):
        raise SchedulingError(Reason.FORBIDDEN, "forbidden")

    tz = resolve_zone(provider.clinic.timezone)
    day = target_date or now.astimezone(tz).date()
    return day, _get_day_appointments(db, day, tz, provider_id=provider_id)


def list_clinic_day(
    db: Session,
    clinic_id: int,
    target_date: date | None,
    actor: Actor | None,
    now: datetime,
) -> tuple[date, list[Appointments]]:
    """All appointments of a clinic on a date (admin only)."""
    if actor is None or not actor.is_authenticated:
        raise SchedulingError(Reason.UNAUTHENTICATED, "unauthorized")
    if actor.role != ROLE_ADMIN:
        raise SchedulingError(Reason.FORBIDDEN, "forbidden")

    clinic = db.get(Clinics, clinic_id)
    if clinic is None:
        raise SchedulingError(Reason.NOT_FOUND, "clinic not found")

    tz = resolve_zone(clinic.timezone)
    day = target_date or now.astimezone(tz).date()
    return day, _get_day_appointments(db, day, tz, clinic_id=clinic_id)


def list_upcoming_for_patient(
    db: Session,
    actor: Actor | None,
    now: datetime,
    limit: int = 20,
    offset: int = 0,
) -> list[Appointments]:
    """Upcoming appointments of the calling patient, soonest first."""
    if actor is None or not actor.is_authenticated:
        raise SchedulingError(Reason.UNAUTHENTICATED, "unauthorized")
    if actor.patient_id is None:
        raise SchedulingError(Reason.NOT_FOUND, "patient profile not found")

    return (
        db.query(Appointments)
        .filter(
            Appointments.patient_id == actor.patient_id,
            Appointments.start_time >= now,
        )
        .order_by(Appointments.start_time)
        .limit(limit)
        .offset(offset)
        .all()
    )


# ── Database helpers ─────────────────────────────────────────────────────


def _get_service(db: Session, service_id: int) -> Services:
    service = db.get(Services, service_id)
    if service is None:
        raise SchedulingError(Reason.NOT_FOUND, "service not found")
    return service


def _get_provider(db: Session, provider_id: int) -> Providers:
    provider = db.get(Providers, provider_id)
    if provider is None:
        raise SchedulingError(Reason.NOT_FOUND, "provider not found")
    return provider


def _get_windows(db: Session, provider_id: int, weekday: int) -> list[AvailabilityWindow]:
    """Availability windows of a provider for an ISO weekday."""
    rows = (
        db.query(Availabilities)
        .filter(
            Availabilities.provider_id == provider_id,
            Availabilities.weekday == weekday,
        )
        .order_by(Availabilities.start_hhmm)
        .all()
    )
    return [
        AvailabilityWindow.from_strings(row.weekday, row.start_hhmm, row.end_hhmm)
        for row in rows
    ]


def _get_booked(db: Session, provider_id: int, target_date: date, tz) -> list[BookedInterval]:
    """Scheduled intervals of a provider touching a local calendar date."""
    start = day_start(target_date, tz)
    end = day_start(target_date + timedelta(days=1), tz)

    # Same half-open overlap rule as the engine, so an appointment
    # running across midnight still blocks the next morning
    rows = (
        db.query(Appointments)
        .filter(
            Appointments.provider_id == provider_id,
            Appointments.status == AppointmentStatus.SCHEDULED.value,
            Appointments.start_time < end,
            Appointments.end_time > start,
        )
        .order_by(Appointments.start_time)
        .all()
    )
    return [BookedInterval(start=row.start_time, end=row.end_time) for row in rows]


def _get_day_appointments(
    db: Session,
    target_date: date,
    tz,
    provider_id: int | None = None,
    clinic_id: int | None = None,
) -> list[Appointments]:
    """Appointments starting on a local calendar date, any status."""
    start = day_start(target_date, tz)
    end = day_start(target_date + timedelta(days=1), tz)

    query = db.query(Appointments).filter(
        Appointments.start_time >= start,
        Appointments.start_time < end,
    )
    if provider_id is not None:
        query = query.filter(Appointments.provider_id == provider_id)
    if clinic_id is not None:
        query = query.filter(Appointments.clinic_id == clinic_id)

    return query.order_by(Appointments.start_time).all()
