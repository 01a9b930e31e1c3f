# medappoint/schemas/appointments.py

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class AppointmentCreate(BaseModel):
    provider_id: int = Field(gt=0)
    patient_id: int = Field(gt=0)
    service_id: int = Field(gt=0)
    start_time: datetime = Field(description="ISO-8601 with offset, e.g. 2025-08-25T09:00:00+08:00")
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class AppointmentRead(BaseModel):
    id: int

    clinic_id: int
    provider_id: int
    patient_id: int
    service_id: int

    start_time: datetime
    end_time: datetime

    status: str
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DayAppointmentsResponse(BaseModel):
    """Appointments of one day (provider schedule / admin view)."""
    date: date
    provider_id: Optional[int] = None
    clinic_id: Optional[int] = None
    appointments: list[AppointmentRead]

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    error: str
    detail: str
