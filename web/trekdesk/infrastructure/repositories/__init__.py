from .trek_repository import TrekRepository
from .batch_repository import BatchRepository
from .booking_repository import BookingRepository
from .user_repository import UserRepository

__all__ = [
    "TrekRepository",
    "BatchRepository",
    "BookingRepository",
    "UserRepository",
]
