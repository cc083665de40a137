from sqlalchemy.ext.asyncio import AsyncSession

from trekdesk.infrastructure.repositories import (
    BatchRepository, BookingRepository, TrekRepository, UserRepository
)


class UnitOfWork:
    """Repositories sharing one session, committed or rolled back together."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.treks = TrekRepository(session)
        self.batches = BatchRepository(session)
        self.bookings = BookingRepository(session)

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
