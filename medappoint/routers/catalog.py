# medappoint/routers/catalog.py
# Read-only listings: clinics, providers, services, availabilities

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import (
    Availabilities as DBAvailabilities,
    Clinics as DBClinics,
    Providers as DBProviders,
    Services as DBServices,
)
from ..schemas.catalog import (
    AvailabilityRead,
    ClinicRead,
    ProviderRead,
    ServiceRead,
)

router = APIRouter(tags=["catalog"])


@router.get("/clinics", response_model=list[ClinicRead])
def list_clinics(db: Session = Depends(get_db)):
    return db.query(DBClinics).order_by(DBClinics.id).all()


@router.get("/providers", response_model=list[ProviderRead])
def list_providers(db: Session = Depends(get_db)):
    return db.query(DBProviders).order_by(DBProviders.id).all()


@router.get("/services", response_model=list[ServiceRead])
def list_services(db: Session = Depends(get_db)):
    return db.query(DBServices).order_by(DBServices.id).all()


@router.get("/availabilities", response_model=list[AvailabilityRead])
def list_availabilities(
    provider_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    return (
        db.query(DBAvailabilities)
        .filter(DBAvailabilities.provider_id == provider_id)
        .order_by(DBAvailabilities.weekday, DBAvailabilities.start_hhmm)
        .all()
    )
