from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from .common import UTCDateTime

class TrekIn(BaseModel):
    """Schema for creating treks"""
    name: str = Field(..., min_length=1, max_length=200)
    region: Optional[str] = None
    difficulty: Optional[str] = Field(None, pattern="^(easy|moderate|difficult|challenging)$")
    duration_days: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None
    is_enabled: bool = True

class TrekOut(BaseModel):
    """Schema for trek responses"""
    id: int
    name: str
    region: Optional[str] = None
    difficulty: Optional[str] = None
    duration_days: Optional[int] = None
    description: Optional[str] = None
    is_enabled: bool

    model_config = {
        "from_attributes": True,
    }

class BatchIn(BaseModel):
    """Schema for adding a batch to a trek"""
    start_date: UTCDateTime = Field(..., alias="startDate")
    end_date: UTCDateTime = Field(..., alias="endDate")
    price: Decimal = Field(..., ge=0)
    max_participants: int = Field(..., alias="maxParticipants", ge=1)

    model_config = {
        "populate_by_name": True,
    }

class BatchOut(BaseModel):
    """Schema for batch responses, with derived capacity figures"""
    id: int
    trek_id: int
    start_date: datetime
    end_date: datetime
    price: Decimal
    max_participants: int
    current_participants: int
    reserved_slots: int
    available_slots: int = 0
    is_full: bool = False
    was_marked_as_full: bool = False
    status: str
    is_active: bool

    model_config = {
        "from_attributes": True,
    }

class TrekDetailOut(TrekOut):
    batches: List[BatchOut] = []
