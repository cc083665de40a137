import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from trekdesk.core import BaseService, NotFoundError, ValidationError, BusinessLogicError
from trekdesk.domain.capacity import BatchCapacity, participants_from_bookings
from trekdesk.infrastructure.repositories import BatchRepository
from trekdesk.models import Batch

logger = logging.getLogger(__name__)


class BatchService(BaseService):
    """Capacity management for a trek's batches.

    Every write locks the batch row first, derives the new capacity through
    :class:`BatchCapacity` and only then copies the numbers back onto the row,
    so an invalid request never touches the database.
    """

    def __init__(self, session, batch_repo: Optional[BatchRepository] = None):
        super().__init__(session)
        self.batch_repo = batch_repo or BatchRepository(session)

    async def _get_batch(self, trek_id: int, batch_id: int, *, lock: bool = False) -> Batch:
        batch = await self.batch_repo.get_for_trek(trek_id, batch_id, lock=lock)
        if not batch:
            raise NotFoundError("Batch", batch_id)
        return batch

    async def _apply(self, batch: Batch, capacity: BatchCapacity) -> Batch:
        batch.max_participants = capacity.max_participants
        batch.current_participants = capacity.current_participants
        batch.reserved_slots = capacity.reserved_slots
        await self.session.flush()
        return batch

    async def get_capacity(self, trek_id: int, batch_id: int) -> BatchCapacity:
        batch = await self._get_batch(trek_id, batch_id)
        return BatchCapacity.of(batch)

    async def mark_as_full(self, trek_id: int, batch_id: int) -> Batch:
        """Reserve every remaining slot so the batch stops taking bookings"""
        batch = await self._get_batch(trek_id, batch_id, lock=True)
        capacity = BatchCapacity.of(batch)
        if capacity.is_full:
            raise BusinessLogicError("Batch is already full", rule="batch_capacity")

        batch = await self._apply(batch, capacity.mark_as_full())
        logger.info("Batch %s marked as full (%s slots reserved)", batch_id, batch.reserved_slots)
        return batch

    async def unmark_as_full(self, trek_id: int, batch_id: int) -> Batch:
        batch = await self._get_batch(trek_id, batch_id, lock=True)
        batch = await self._apply(batch, BatchCapacity.of(batch).unmark_as_full())
        logger.info("Batch %s unmarked as full", batch_id)
        return batch

    async def reserve_slots(self, trek_id: int, batch_id: int, slots: int) -> Batch:
        batch = await self._get_batch(trek_id, batch_id, lock=True)
        batch = await self._apply(batch, BatchCapacity.of(batch).reserve_slots(slots))
        logger.info("Batch %s now has %s reserved slots", batch_id, slots)
        return batch

    async def update_max_participants(self, trek_id: int, batch_id: int, max_participants: int) -> Batch:
        batch = await self._get_batch(trek_id, batch_id, lock=True)
        batch = await self._apply(batch, BatchCapacity.of(batch).update_max_participants(max_participants))
        logger.info("Batch %s max participants set to %s", batch_id, max_participants)
        return batch

    async def update_batch(
        self,
        trek_id: int,
        batch_id: int,
        reserved_slots: Optional[int] = None,
        max_participants: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        price: Optional[Decimal] = None,
        is_active: Optional[bool] = None
    ) -> Batch:
        """Apply a partial batch update.

        A new maximum is applied before a new reservation, so both can be
        changed in one request and the reservation is checked against the
        new capacity.
        """
        batch = await self._get_batch(trek_id, batch_id, lock=True)

        capacity = BatchCapacity.of(batch)
        if max_participants is not None:
            capacity = capacity.update_max_participants(max_participants)
        if reserved_slots is not None:
            capacity = capacity.reserve_slots(reserved_slots)

        new_start = start_date or batch.start_date
        new_end = end_date or batch.end_date
        if new_end < new_start:
            raise ValidationError("End date cannot be before start date", field="endDate")
        if price is not None and price < 0:
            raise ValidationError("Price cannot be negative", field="price")

        batch.start_date = new_start
        batch.end_date = new_end
        if price is not None:
            batch.price = price
        if is_active is not None:
            batch.is_active = is_active

        return await self._apply(batch, capacity)

    async def recalculate_participants(self, batch_id: int) -> Batch:
        """Recount current participants from the bookings holding seats.

        Reserved slots are trimmed when real bookings now occupy part of the
        reservation, which keeps ``available_slots`` non-negative.
        """
        batch = await self.batch_repo.lock_for_update(batch_id)
        if not batch:
            raise NotFoundError("Batch", batch_id)

        bookings = await self.batch_repo.get_active_bookings(batch_id)
        count = participants_from_bookings(bookings)
        reserved = max(0, min(batch.reserved_slots or 0, batch.max_participants - count))

        if count != batch.current_participants:
            logger.info("Batch %s participants recalculated: %s -> %s",
                        batch_id, batch.current_participants, count)
        batch.current_participants = count
        batch.reserved_slots = reserved
        await self.session.flush()
        return batch

    async def refresh_statuses(self, now: Optional[datetime] = None) -> int:
        """Move batches along upcoming -> ongoing -> completed by their dates"""
        now = now or datetime.utcnow()
        batches = await self.batch_repo.get_with_status(["upcoming", "ongoing"])

        changed = 0
        for batch in batches:
            if batch.end_date < now:
                status = "completed"
            elif batch.start_date <= now:
                status = "ongoing"
            else:
                status = "upcoming"
            if status != batch.status:
                batch.status = status
                changed += 1

        if changed:
            await self.session.flush()
            logger.info("Updated status of %s batches", changed)
        return changed
