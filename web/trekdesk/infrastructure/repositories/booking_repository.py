from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trekdesk.core import BaseRepository
from trekdesk.models import Booking


class BookingRepository(BaseRepository[Booking]):
    """Booking repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Booking, session)

    async def get_with_details(self, booking_id: int) -> Optional[Booking]:
        """Get booking with participants, batch, trek and user loaded"""
        query = (
            select(Booking)
            .options(
                selectinload(Booking.participants),
                selectinload(Booking.batch),
                selectinload(Booking.trek),
                selectinload(Booking.user),
            )
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        status: Optional[str] = None,
        trek_id: Optional[int] = None,
        batch_id: Optional[int] = None,
        user_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Booking]:
        """List bookings newest first with optional filters"""
        query = select(Booking).options(selectinload(Booking.participants))

        if status:
            query = query.where(Booking.status == status)
        if trek_id:
            query = query.where(Booking.trek_id == trek_id)
        if batch_id:
            query = query.where(Booking.batch_id == batch_id)
        if user_id:
            query = query.where(Booking.user_id == user_id)

        query = query.order_by(Booking.created_at.desc(), Booking.id.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update_status(self, booking_id: int, status: str) -> Optional[Booking]:
        return await self.update(id=booking_id, obj_in={"status": status})
