from typing import Optional, List
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trekdesk.core import BaseRepository
from trekdesk.domain.capacity import ACTIVE_BOOKING_STATUSES
from trekdesk.models import Batch, Booking


class BatchRepository(BaseRepository[Batch]):
    """Batch repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Batch, session)

    async def get_by_trek(
        self,
        trek_id: int,
        *,
        from_date: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Batch]:
        """Get batches of a trek ordered by start date"""
        query = select(Batch).where(Batch.trek_id == trek_id)

        if from_date:
            query = query.where(Batch.start_date >= from_date)

        query = query.order_by(Batch.start_date).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_for_trek(self, trek_id: int, batch_id: int, *, lock: bool = False) -> Optional[Batch]:
        """Get a batch only if it belongs to *trek_id*; optionally lock the row"""
        query = select(Batch).where(Batch.id == batch_id, Batch.trek_id == trek_id)
        if lock:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def lock_for_update(self, batch_id: int) -> Optional[Batch]:
        """Get batch with exclusive lock for updates"""
        query = (
            select(Batch)
            .where(Batch.id == batch_id)
            .with_for_update()
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_active_bookings(self, batch_id: int) -> List[Booking]:
        """Bookings that hold seats on the batch, participants loaded"""
        query = (
            select(Booking)
            .options(selectinload(Booking.participants))
            .where(
                Booking.batch_id == batch_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES)
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_with_status(self, statuses: List[str]) -> List[Batch]:
        """Batches whose status is one of *statuses*"""
        query = select(Batch).where(Batch.status.in_(statuses))
        result = await self.session.execute(query)
        return list(result.scalars().all())
