from .trek_schemas import TrekIn, TrekOut, TrekDetailOut, BatchIn, BatchOut
from .batch_schemas import BatchUpdate, ReserveSlotsIn, CapacityOut
from .booking_schemas import (
    BookingStatusUpdate, BookingOut, ParticipantOut, CancelBookingIn, RefundQuoteIn, RefundQuoteOut
)
from .manual_booking_schemas import (
    UserCreateIn, UserOut, PhoneLookupOut, ParticipantIn, EmergencyContactIn, ContactDetailsIn,
    ManualBookingIn, PhoneStepIn, UserDetailsStepIn, BookingStepIn, NotificationOut, FlowRequest, FlowResponse
)

__all__ = [
    # Trek schemas
    "TrekIn",
    "TrekOut",
    "TrekDetailOut",
    "BatchIn",
    "BatchOut",

    # Batch schemas
    "BatchUpdate",
    "ReserveSlotsIn",
    "CapacityOut",

    # Booking schemas
    "BookingStatusUpdate",
    "BookingOut",
    "ParticipantOut",
    "CancelBookingIn",
    "RefundQuoteIn",
    "RefundQuoteOut",

    # Manual booking schemas
    "UserCreateIn",
    "UserOut",
    "PhoneLookupOut",
    "ParticipantIn",
    "EmergencyContactIn",
    "ContactDetailsIn",
    "ManualBookingIn",
    "PhoneStepIn",
    "UserDetailsStepIn",
    "BookingStepIn",
    "NotificationOut",
    "FlowRequest",
    "FlowResponse",
]
