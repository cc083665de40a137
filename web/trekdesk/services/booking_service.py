import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from trekdesk.core import (
    BaseService, NotFoundError, ValidationError, ConflictError,
    CapacityExceededError, BusinessLogicError
)
from trekdesk.domain.capacity import BatchCapacity
from trekdesk.domain.refunds import (
    REFUND_TYPES, calculate_refund, describe_refund_tier, split_refund_per_participant
)
from trekdesk.infrastructure.repositories import BookingRepository
from trekdesk.models import Booking
from .batch_service import BatchService

logger = logging.getLogger(__name__)

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")

# Allowed manual status changes; cancellation goes through admin_cancel_booking
STATUS_TRANSITIONS = {
    "pending": ("confirmed",),
    "confirmed": ("completed",),
}


def _refund_status(amount: Decimal, refund: bool) -> str:
    return "pending" if refund and amount > 0 else "not_applicable"


class BookingService(BaseService):
    """Admin-side booking management: listing, status, cancellation, refunds"""

    def __init__(self, session, booking_repo: Optional[BookingRepository] = None,
                 batch_service: Optional[BatchService] = None):
        super().__init__(session)
        self.repository = booking_repo or BookingRepository(session)
        self.batch_service = batch_service or BatchService(session)

    async def get_booking(self, booking_id: int) -> Booking:
        booking = await self.repository.get_with_details(booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    async def list_bookings(
        self,
        status: Optional[str] = None,
        trek_id: Optional[int] = None,
        batch_id: Optional[int] = None,
        user_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Booking]:
        if status and status not in BOOKING_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of {', '.join(BOOKING_STATUSES)}", field="status")
        return await self.repository.search(
            status=status,
            trek_id=trek_id,
            batch_id=batch_id,
            user_id=user_id,
            skip=skip,
            limit=limit
        )

    async def update_booking_status(self, booking_id: int, status: str) -> Booking:
        """Move a booking forward (pending -> confirmed -> completed)"""
        booking = await self.get_booking(booking_id)

        allowed = STATUS_TRANSITIONS.get(booking.status, ())
        if status not in allowed:
            raise BusinessLogicError(
                f"Cannot change booking status from {booking.status} to {status}",
                rule="booking_status_transition"
            )

        await self.repository.update_status(booking_id, status)
        if status == "confirmed":
            booking.payment_status = "payment_completed"
        await self.session.flush()
        logger.info("Booking %s status changed to %s", booking_id, status)
        return booking

    async def quote_refund(
        self,
        booking_id: int,
        refund_type: str = "auto",
        custom_refund_amount: Optional[Decimal] = None,
        now: Optional[datetime] = None
    ) -> dict:
        """Preview the refund a cancellation would produce, without changing anything"""
        booking = await self.get_booking(booking_id)
        now = now or datetime.utcnow()
        start = booking.batch.start_date

        amount = calculate_refund(booking.total_price, start, now, refund_type, custom_refund_amount)
        return {
            "booking_id": booking.id,
            "total_price": booking.total_price,
            "refund_type": refund_type,
            "refund_amount": amount,
            **describe_refund_tier(start, now),
        }

    async def admin_cancel_booking(
        self,
        booking_id: int,
        refund: bool = True,
        refund_type: str = "auto",
        custom_refund_amount: Optional[Decimal] = None,
        cancellation_reason: Optional[str] = None,
        participant_ids: Optional[Sequence[int]] = None,
        now: Optional[datetime] = None
    ) -> Booking:
        """Cancel a whole booking or selected participants and record the refund.

        The refund is only recorded (``refund_status = 'pending'``); paying it
        out is the payment provider's job.
        """
        if refund_type not in REFUND_TYPES:
            raise ValidationError(f"Invalid refund type. Must be one of {', '.join(REFUND_TYPES)}", field="refundType")

        booking = await self.get_booking(booking_id)
        now = now or datetime.utcnow()
        reason = cancellation_reason or "Admin cancelled"

        if participant_ids:
            self._cancel_participants(booking, participant_ids, refund, refund_type, custom_refund_amount, reason, now)
        else:
            self._cancel_entire(booking, refund, refund_type, custom_refund_amount, reason, now)

        await self.session.flush()
        await self.batch_service.recalculate_participants(booking.batch_id)
        logger.info("Booking %s cancelled by admin (refund %s, type %s)",
                    booking_id, booking.refund_amount, refund_type)
        return booking

    def _cancel_entire(self, booking, refund, refund_type, custom_amount, reason, now):
        if booking.status == "cancelled":
            raise ConflictError("Booking is already cancelled")

        amount = Decimal("0")
        if refund:
            amount = calculate_refund(booking.total_price, booking.batch.start_date, now, refund_type, custom_amount)

        booking.status = "cancelled"
        booking.cancelled_at = now
        booking.cancellation_reason = reason
        booking.refund_amount = amount
        booking.refund_status = _refund_status(amount, refund)
        booking.refund_date = now if amount > 0 and refund else None

        for participant in booking.participants:
            if not participant.is_cancelled:
                participant.is_cancelled = True
                participant.cancelled_at = now

    def _cancel_participants(self, booking, participant_ids, refund, refund_type, custom_amount, reason, now):
        if booking.status == "cancelled":
            raise ConflictError("Booking is already cancelled")

        by_id = {p.id: p for p in booking.participants}
        missing = [pid for pid in participant_ids if pid not in by_id]
        if missing:
            raise NotFoundError("Participant", missing[0])

        selected = [by_id[pid] for pid in dict.fromkeys(participant_ids) if not by_id[pid].is_cancelled]
        if not selected:
            raise ConflictError("Selected participants are already cancelled")

        per_participant = Decimal("0")
        if refund:
            per_participant = split_refund_per_participant(
                booking.total_price,
                len(booking.participants),
                len(selected),
                booking.batch.start_date,
                now,
                refund_type,
                custom_amount,
            )

        for participant in selected:
            participant.is_cancelled = True
            participant.cancelled_at = now
            participant.refund_amount = per_participant
            participant.refund_status = _refund_status(per_participant, refund)

        booking.refund_amount = sum(
            (Decimal(str(p.refund_amount or 0)) for p in booking.participants), Decimal("0")
        )
        if booking.refund_amount > 0:
            booking.refund_status = "pending"
            booking.refund_date = now

        if all(p.is_cancelled for p in booking.participants):
            booking.status = "cancelled"
            booking.cancelled_at = now
            booking.cancellation_reason = reason

    async def restore_booking(self, booking_id: int) -> Booking:
        """Bring a cancelled booking back if the batch still has room for it"""
        booking = await self.get_booking(booking_id)
        if booking.status != "cancelled":
            raise ConflictError("Only cancelled bookings can be restored")

        batch = await self.batch_service.batch_repo.lock_for_update(booking.batch_id)
        needed = len(booking.participants) or booking.number_of_participants
        capacity = BatchCapacity.of(batch)
        if not capacity.can_accommodate(needed):
            raise CapacityExceededError(batch.id, needed, capacity.available_slots)

        booking.status = "confirmed"
        booking.cancelled_at = None
        booking.cancellation_reason = None
        booking.refund_amount = 0
        booking.refund_status = "not_applicable"
        booking.refund_date = None
        for participant in booking.participants:
            participant.is_cancelled = False
            participant.cancelled_at = None
            participant.refund_amount = 0
            participant.refund_status = "not_applicable"

        await self.session.flush()
        await self.batch_service.recalculate_participants(booking.batch_id)
        logger.info("Booking %s restored", booking_id)
        return booking
