# medappoint/routers/appointments.py
# POST = validate + create, DELETE = cancel (status → cancelled), no PATCH

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.appointments import (
    AppointmentCreate,
    AppointmentRead,
    DayAppointmentsResponse,
)
from ..services.booking import (
    book_appointment,
    cancel_appointment,
    list_clinic_day,
    list_provider_day,
    list_upcoming_for_patient,
)
from ..services.scheduling import Actor
from .deps import get_actor, get_now

router = APIRouter(tags=["appointments"])


@router.post("/appointments", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return book_appointment(
        db,
        patient_id=data.patient_id,
        provider_id=data.provider_id,
        service_id=data.service_id,
        start=data.start_time,
        now=now,
        notes=data.notes,
    )


@router.delete("/appointments/{id}", response_model=AppointmentRead)
def delete_appointment(
    id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    now: datetime = Depends(get_now),
):
    return cancel_appointment(db, id, actor, now)


@router.patch("/appointments/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


# ---------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------

@router.get("/me/appointments", response_model=list[AppointmentRead])
def list_my_appointments(
    limit: int = Query(20, gt=0, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    now: datetime = Depends(get_now),
):
    return list_upcoming_for_patient(db, actor, now, limit=limit, offset=offset)


@router.get("/providers/{id}/appointments", response_model=DayAppointmentsResponse)
def list_provider_appointments(
    id: int,
    target_date: date | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    now: datetime = Depends(get_now),
):
    day, rows = list_provider_day(db, id, target_date, actor, now)
    return DayAppointmentsResponse(date=day, provider_id=id, appointments=_read(rows))


@router.get("/admin/appointments", response_model=DayAppointmentsResponse)
def list_clinic_appointments(
    clinic_id: int = Query(..., gt=0),
    target_date: date | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    now: datetime = Depends(get_now),
):
    day, rows = list_clinic_day(db, clinic_id, target_date, actor, now)
    return DayAppointmentsResponse(date=day, clinic_id=clinic_id, appointments=_read(rows))


def _read(rows) -> list[AppointmentRead]:
    return [AppointmentRead.model_validate(r) for r in rows]
