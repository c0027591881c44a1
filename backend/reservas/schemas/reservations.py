"""
Pydantic schemas for the reservations API.
"""

from pydantic import BaseModel


class SlotInfo(BaseModel):
    """A bookable start time."""
    time: str  # "HH:MM"
    available: bool

    model_config = {"from_attributes": True}


class ShiftSlots(BaseModel):
    name: str
    slots: list[SlotInfo]

    model_config = {"from_attributes": True}


class NextAvailable(BaseModel):
    date: str  # YYYY-MM-DD
    shift: str
    time: str  # "HH:MM"

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    ok: bool = True
    date: str
    party: int
    timezone: str
    shifts: list[ShiftSlots]
    available_count: int
    next_available: NextAvailable | None = None

    model_config = {"from_attributes": True}


class BookingRequest(BaseModel):
    """Raw booking body; fields are validated in the router (400 on error)."""
    date: str | None = None
    time: str | None = None
    party: int | str | None = None
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None
    restaurant: str | None = None


class BookingResponse(BaseModel):
    ok: bool = True
    event_id: str | None


class HealthResponse(BaseModel):
    ok: bool
    time: str
