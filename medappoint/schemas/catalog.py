# medappoint/schemas/catalog.py

from typing import Optional
from pydantic import BaseModel


class ClinicRead(BaseModel):
    id: int
    name: str
    timezone: str
    address: Optional[str] = None

    model_config = {"from_attributes": True}


class ProviderRead(BaseModel):
    id: int
    clinic_id: int
    full_name: str
    specialty: Optional[str] = None

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration_minutes: int

    model_config = {"from_attributes": True}


class AvailabilityRead(BaseModel):
    id: int
    provider_id: int
    weekday: int
    start_hhmm: str
    end_hhmm: str

    model_config = {"from_attributes": True}
