from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trekdesk.core import BaseRepository
from trekdesk.models import User


class UserRepository(BaseRepository[User]):
    """User repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_phone(self, phone: str) -> Optional[User]:
        """Get user by E.164 phone number"""
        query = select(User).where(User.phone == phone)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        query = select(User.id).where(User.email == email)
        result = await self.session.execute(query)
        return result.scalar() is not None
