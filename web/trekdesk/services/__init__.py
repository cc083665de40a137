from .trek_service import TrekService
from .batch_service import BatchService
from .booking_service import BookingService
from .manual_booking_service import ManualBookingService
from .manual_booking_flow import ManualBookingFlow, ManualBookingState, ManualBookingStep
from .notification_service import Notifier, LoggingNotifier, CollectingNotifier

__all__ = [
    "TrekService",
    "BatchService",
    "BookingService",
    "ManualBookingService",
    "ManualBookingFlow",
    "ManualBookingState",
    "ManualBookingStep",
    "Notifier",
    "LoggingNotifier",
    "CollectingNotifier",
]
