# medappoint/routers/deps.py
"""
Shared FastAPI dependencies.

Identity: the gateway authenticates the caller and forwards
X-User-Id / X-User-Role. A missing or malformed id yields an
unauthenticated Actor; endpoints that need one reject it.
"""

from datetime import datetime, timezone

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Patients
from ..services.scheduling import Actor
from ..services.scheduling.cancellation import ROLE_PATIENT


def get_now() -> datetime:
    """Current instant; overridden in tests."""
    return datetime.now(timezone.utc)


def get_actor(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
    db: Session = Depends(get_db),
) -> Actor:
    try:
        user_id = int(x_user_id) if x_user_id else None
    except ValueError:
        user_id = None

    if user_id is None or user_id <= 0:
        return Actor(user_id=None)

    role = (x_user_role or "").strip().lower() or None
    patient_id = None
    if role == ROLE_PATIENT:
        patient = db.query(Patients).filter(Patients.user_id == user_id).first()
        patient_id = patient.id if patient else None

    return Actor(user_id=user_id, role=role, patient_id=patient_id)
