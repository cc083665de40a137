from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class BookingStatusUpdate(BaseModel):
    """Schema for updating booking status"""
    status: str = Field(..., pattern="^(confirmed|completed)$")


class ParticipantOut(BaseModel):
    id: int
    name: str
    age: int
    gender: Optional[str] = None
    medical_conditions: Optional[str] = None
    is_cancelled: bool
    cancelled_at: Optional[datetime] = None
    refund_status: str
    refund_amount: Decimal

    model_config = {
        "from_attributes": True,
    }


class BookingOut(BaseModel):
    """Schema for booking responses"""
    id: int
    trek_id: int
    batch_id: int
    user_id: int
    number_of_participants: int
    total_price: Decimal
    payment_status: str
    status: str
    user_name: str
    user_email: str
    user_phone: str
    emergency_name: Optional[str] = None
    emergency_phone: Optional[str] = None
    emergency_relation: Optional[str] = None
    additional_requests: Optional[str] = None
    created_by_admin: bool
    created_at: datetime
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    refund_status: str
    refund_amount: Decimal
    refund_date: Optional[datetime] = None
    participants: List[ParticipantOut] = []

    model_config = {
        "from_attributes": True,
    }


class CancelBookingIn(BaseModel):
    """Admin cancellation request; omit participantIds to cancel the whole booking"""
    booking_id: int = Field(..., alias="bookingId", gt=0)
    refund: bool = True
    refund_type: str = Field("auto", alias="refundType", pattern="^(auto|full|custom)$")
    custom_refund_amount: Optional[Decimal] = Field(None, alias="customRefundAmount", ge=0)
    cancellation_reason: Optional[str] = Field(None, alias="cancellationReason", max_length=500)
    participant_ids: Optional[List[int]] = Field(None, alias="participantIds")

    model_config = {
        "populate_by_name": True,
    }


class RefundQuoteIn(BaseModel):
    refund_type: str = Field("auto", alias="refundType", pattern="^(auto|full|custom)$")
    custom_refund_amount: Optional[Decimal] = Field(None, alias="customRefundAmount", ge=0)

    model_config = {
        "populate_by_name": True,
    }


class RefundQuoteOut(BaseModel):
    booking_id: int
    total_price: Decimal
    refund_type: str
    refund_amount: Decimal
    days_until_start: int
    percentage: int
    label: str
