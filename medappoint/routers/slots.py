# medappoint/routers/slots.py
"""
Slots API endpoints.

GET /slots?provider_id=1&service_id=1&date=2025-08-25
"""

from datetime import date, datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import SlotsDayResponse
from ..services.booking import list_slots
from .deps import get_now


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("", response_model=SlotsDayResponse)
def get_slots_day(
    provider_id: int = Query(..., gt=0),
    service_id: int = Query(..., gt=0),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Bookable start times for a provider and service on a day."""
    slot_times = list_slots(db, provider_id, service_id, target_date, now)

    return SlotsDayResponse(
        date=target_date,
        provider_id=provider_id,
        service_id=service_id,
        slots=[t.isoformat() for t in slot_times],
        count=len(slot_times),
    )
