from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trekdesk.core import BaseRepository
from trekdesk.models import Trek


class TrekRepository(BaseRepository[Trek]):
    """Trek repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Trek, session)

    async def get_with_batches(self, trek_id: int) -> Optional[Trek]:
        """Get trek with its batches loaded"""
        query = (
            select(Trek)
            .options(selectinload(Trek.batches))
            .where(Trek.id == trek_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_treks(
        self,
        *,
        enabled: Optional[bool] = None,
        region: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Trek]:
        query = select(Trek)

        if enabled is not None:
            query = query.where(Trek.is_enabled == enabled)
        if region:
            query = query.where(Trek.region == region)

        query = query.order_by(Trek.name).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
