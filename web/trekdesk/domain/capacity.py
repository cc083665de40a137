"""Batch capacity arithmetic.

A batch has ``max_participants`` seats. ``current_participants`` of them are
held by real bookings and ``reserved_slots`` are withheld by an administrator
(offline allocation, or "marked as full"). What remains is publicly bookable::

    available_slots = max_participants - current_participants - reserved_slots

Invariant kept by every operation here::

    0 <= reserved_slots <= max_participants - current_participants
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable

from ..core.exceptions import ValidationError, BusinessLogicError

ACTIVE_BOOKING_STATUSES = ("pending", "confirmed")


@dataclass(frozen=True)
class BatchCapacity:
    max_participants: int
    current_participants: int = 0
    reserved_slots: int = 0

    @classmethod
    def of(cls, batch: Any) -> "BatchCapacity":
        """Snapshot the capacity fields of a Batch row (or any look-alike)."""
        return cls(
            max_participants=batch.max_participants or 0,
            current_participants=batch.current_participants or 0,
            reserved_slots=batch.reserved_slots or 0,
        )

    @property
    def total_available(self) -> int:
        """Seats not held by real bookings, reserved ones included."""
        return self.max_participants - self.current_participants

    @property
    def available_slots(self) -> int:
        return self.total_available - self.reserved_slots

    @property
    def is_full(self) -> bool:
        return self.available_slots <= 0

    @property
    def was_marked_as_full(self) -> bool:
        # Heuristic: a reservation that exactly consumes what is left is
        # read as "marked as full", whatever the reason it was made.
        return self.reserved_slots == self.total_available

    def can_accommodate(self, participants: int) -> bool:
        return 0 < participants <= self.available_slots

    def mark_as_full(self) -> "BatchCapacity":
        return replace(self, reserved_slots=max(self.total_available, 0))

    def unmark_as_full(self) -> "BatchCapacity":
        if not self.was_marked_as_full:
            raise BusinessLogicError("Batch was not marked as full", rule="batch_capacity")
        return replace(self, reserved_slots=0)

    def reserve_slots(self, slots: int) -> "BatchCapacity":
        if slots < 0:
            raise ValidationError("Reserved slots cannot be negative", field="reservedSlots")
        if slots > self.total_available:
            raise ValidationError(
                f"Cannot reserve {slots} slots, only {self.total_available} available",
                field="reservedSlots",
            )
        return replace(self, reserved_slots=slots)

    def update_max_participants(self, new_max: int) -> "BatchCapacity":
        if new_max < 1:
            raise ValidationError("Max participants must be at least 1", field="maxParticipants")
        if new_max < self.current_participants:
            raise ValidationError(
                "Max participants cannot be less than current participants",
                field="maxParticipants",
            )
        # Shrinking may leave less room than was reserved; keep the reservation within bounds.
        reserved = min(self.reserved_slots, new_max - self.current_participants)
        return replace(self, max_participants=new_max, reserved_slots=reserved)

    def as_dict(self) -> dict:
        return {
            "max_participants": self.max_participants,
            "current_participants": self.current_participants,
            "reserved_slots": self.reserved_slots,
            "total_available": self.total_available,
            "available_slots": self.available_slots,
            "is_full": self.is_full,
            "was_marked_as_full": self.was_marked_as_full,
        }


def participants_from_bookings(bookings: Iterable[Any]) -> int:
    """Count seats held by active bookings.

    Pending and confirmed bookings hold seats; within a booking, cancelled
    participants are released. A booking without participant rows counts
    its ``number_of_participants``.
    """
    total = 0
    for booking in bookings:
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            continue
        participants = booking.participants or []
        if participants:
            total += sum(1 for p in participants if not p.is_cancelled)
        else:
            total += booking.number_of_participants or 0
    return total
