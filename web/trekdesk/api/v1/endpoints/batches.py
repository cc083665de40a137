from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Query, status

from trekdesk.api.v1.schemas import BatchIn, BatchOut, BatchUpdate, ReserveSlotsIn, CapacityOut
from trekdesk.deps import SessionDep
from trekdesk.domain import BatchCapacity
from trekdesk.services import TrekService, BatchService
from .helpers import batch_out, capacity_out


router = APIRouter()


@router.get("/", response_model=List[BatchOut])
async def list_batches(
    trek_id: int,
    sess: SessionDep,
    from_date: Optional[datetime] = Query(None, description="Only batches starting at or after this time"),
):
    service = TrekService(sess)
    batches = await service.list_batches(trek_id, from_date=from_date)
    return [batch_out(b) for b in batches]


@router.post("/", response_model=BatchOut, status_code=status.HTTP_201_CREATED)
async def add_batch(trek_id: int, payload: BatchIn, sess: SessionDep):
    service = TrekService(sess)
    batch = await service.add_batch(
        trek_id=trek_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        price=payload.price,
        max_participants=payload.max_participants
    )
    await sess.commit()
    return batch_out(batch)


@router.patch("/{batch_id}", response_model=BatchOut)
async def update_batch(trek_id: int, batch_id: int, payload: BatchUpdate, sess: SessionDep):
    """Update dates, price or capacity of a batch"""
    service = BatchService(sess)
    batch = await service.update_batch(trek_id, batch_id, **payload.model_dump())
    await sess.commit()
    return batch_out(batch)


@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_batch(trek_id: int, batch_id: int, sess: SessionDep):
    service = TrekService(sess)
    await service.delete_batch(trek_id, batch_id)
    await sess.commit()


@router.get("/{batch_id}/capacity", response_model=CapacityOut)
async def get_capacity(trek_id: int, batch_id: int, sess: SessionDep):
    service = BatchService(sess)
    capacity = await service.get_capacity(trek_id, batch_id)
    return capacity_out(batch_id, capacity)


@router.post("/{batch_id}/mark-full", response_model=CapacityOut)
async def mark_as_full(trek_id: int, batch_id: int, sess: SessionDep):
    """Reserve all remaining slots so no further bookings are accepted"""
    service = BatchService(sess)
    batch = await service.mark_as_full(trek_id, batch_id)
    await sess.commit()
    return capacity_out(batch_id, BatchCapacity.of(batch))


@router.post("/{batch_id}/unmark-full", response_model=CapacityOut)
async def unmark_as_full(trek_id: int, batch_id: int, sess: SessionDep):
    service = BatchService(sess)
    batch = await service.unmark_as_full(trek_id, batch_id)
    await sess.commit()
    return capacity_out(batch_id, BatchCapacity.of(batch))


@router.post("/{batch_id}/reserve", response_model=CapacityOut)
async def reserve_slots(trek_id: int, batch_id: int, payload: ReserveSlotsIn, sess: SessionDep):
    service = BatchService(sess)
    batch = await service.reserve_slots(trek_id, batch_id, payload.reserved_slots)
    await sess.commit()
    return capacity_out(batch_id, BatchCapacity.of(batch))


@router.post("/{batch_id}/recalculate", response_model=CapacityOut)
async def recalculate_participants(trek_id: int, batch_id: int, sess: SessionDep):
    """Recount participants from the bookings currently holding seats"""
    service = BatchService(sess)
    await service.get_capacity(trek_id, batch_id)
    batch = await service.recalculate_participants(batch_id)
    await sess.commit()
    return capacity_out(batch_id, BatchCapacity.of(batch))
