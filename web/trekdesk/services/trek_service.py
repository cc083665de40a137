import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from trekdesk.core import BaseService, NotFoundError, ValidationError, ConflictError
from trekdesk.infrastructure.repositories import TrekRepository, BatchRepository, BookingRepository
from trekdesk.models import Trek, Batch

logger = logging.getLogger(__name__)


class TrekService(BaseService):
    """Trek catalogue and batch scheduling"""

    def __init__(self, session, trek_repo: Optional[TrekRepository] = None,
                 batch_repo: Optional[BatchRepository] = None,
                 booking_repo: Optional[BookingRepository] = None):
        super().__init__(session)
        self.trek_repo = trek_repo or TrekRepository(session)
        self.batch_repo = batch_repo or BatchRepository(session)
        self.booking_repo = booking_repo or BookingRepository(session)

    async def create_trek(
        self,
        name: str,
        region: Optional[str] = None,
        difficulty: Optional[str] = None,
        duration_days: Optional[int] = None,
        description: Optional[str] = None,
        is_enabled: bool = True
    ) -> Trek:
        if not name or not name.strip():
            raise ValidationError("Trek name is required", field="name")
        if duration_days is not None and duration_days < 1:
            raise ValidationError("Duration must be at least one day", field="duration_days")

        trek = await self.trek_repo.create(obj_in={
            "name": name.strip(),
            "region": region,
            "difficulty": difficulty,
            "duration_days": duration_days,
            "description": description,
            "is_enabled": is_enabled,
        })
        logger.info("Created trek %s (%s)", trek.id, trek.name)
        return trek

    async def list_treks(
        self,
        enabled: Optional[bool] = None,
        region: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Trek]:
        return await self.trek_repo.list_treks(enabled=enabled, region=region, skip=skip, limit=limit)

    async def get_trek(self, trek_id: int) -> Trek:
        trek = await self.trek_repo.get_with_batches(trek_id)
        if not trek:
            raise NotFoundError("Trek", trek_id)
        return trek

    async def toggle_trek_status(self, trek_id: int) -> Trek:
        """Enable a disabled trek or disable an enabled one"""
        trek = await self.trek_repo.get(trek_id)
        if not trek:
            raise NotFoundError("Trek", trek_id)

        trek.is_enabled = not trek.is_enabled
        await self.session.flush()
        logger.info("Trek %s is now %s", trek_id, "enabled" if trek.is_enabled else "disabled")
        return trek

    async def list_batches(self, trek_id: int, from_date: Optional[datetime] = None) -> List[Batch]:
        if not await self.trek_repo.get(trek_id):
            raise NotFoundError("Trek", trek_id)
        return await self.batch_repo.get_by_trek(trek_id, from_date=from_date)

    async def add_batch(
        self,
        trek_id: int,
        start_date: datetime,
        end_date: datetime,
        price: Decimal,
        max_participants: int
    ) -> Batch:
        """Schedule a new batch for a trek"""
        if not await self.trek_repo.get(trek_id):
            raise NotFoundError("Trek", trek_id)

        if end_date < start_date:
            raise ValidationError("End date cannot be before start date", field="endDate")
        if price < 0:
            raise ValidationError("Price cannot be negative", field="price")
        if max_participants < 1:
            raise ValidationError("Max participants must be at least 1", field="maxParticipants")

        batch = await self.batch_repo.create(obj_in={
            "trek_id": trek_id,
            "start_date": start_date,
            "end_date": end_date,
            "price": price,
            "max_participants": max_participants,
            "current_participants": 0,
            "reserved_slots": 0,
            "status": "upcoming",
            "is_active": True,
        })
        logger.info("Added batch %s to trek %s starting %s", batch.id, trek_id, start_date.isoformat())
        return batch

    async def delete_batch(self, trek_id: int, batch_id: int) -> bool:
        batch = await self.batch_repo.get_for_trek(trek_id, batch_id)
        if not batch:
            raise NotFoundError("Batch", batch_id)

        if await self.booking_repo.count(filters={"batch_id": batch_id}) > 0:
            raise ConflictError("Cannot delete batch with existing bookings")

        return await self.batch_repo.delete(id=batch_id)
