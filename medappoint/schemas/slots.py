# medappoint/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from pydantic import BaseModel, Field


class SlotsDayResponse(BaseModel):
    """Bookable start times of a provider/service on one day."""
    date: date
    provider_id: int
    service_id: int
    slots: list[str] = Field(description="ISO-8601 start instants in the clinic timezone")
    count: int

    model_config = {"from_attributes": True}
