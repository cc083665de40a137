from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, Field

from .common import UTCDateTime

class BatchUpdate(BaseModel):
    """Partial batch update; capacity fields use the admin client's camelCase names"""
    reserved_slots: Optional[int] = Field(None, alias="reservedSlots")
    max_participants: Optional[int] = Field(None, alias="maxParticipants")
    start_date: Optional[UTCDateTime] = Field(None, alias="startDate")
    end_date: Optional[UTCDateTime] = Field(None, alias="endDate")
    price: Optional[Decimal] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    model_config = {
        "populate_by_name": True,
    }

class ReserveSlotsIn(BaseModel):
    reserved_slots: int = Field(..., alias="reservedSlots")

    model_config = {
        "populate_by_name": True,
    }


class CapacityOut(BaseModel):
    """Capacity snapshot of a batch"""
    batch_id: int
    max_participants: int
    current_participants: int
    reserved_slots: int
    total_available: int
    available_slots: int
    is_full: bool
    was_marked_as_full: bool
