from .capacity import BatchCapacity, participants_from_bookings
from .refunds import (
    calculate_refund,
    describe_refund_tier,
    refund_percentage,
    split_refund_per_participant,
    REFUND_TYPES,
)

__all__ = [
    "BatchCapacity",
    "participants_from_bookings",
    "calculate_refund",
    "describe_refund_tier",
    "refund_percentage",
    "split_refund_per_participant",
    "REFUND_TYPES",
]
