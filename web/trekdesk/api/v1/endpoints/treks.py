from typing import List, Optional
from fastapi import APIRouter, Query, status

from trekdesk.api.v1.schemas import TrekIn, TrekOut, TrekDetailOut
from trekdesk.deps import SessionDep
from trekdesk.services import TrekService
from .helpers import batch_out


router = APIRouter()


@router.get("/", response_model=List[TrekOut])
async def list_treks(
    sess: SessionDep,
    enabled: Optional[bool] = Query(None),
    region: Optional[str] = Query(None),
    limit: int = Query(50, gt=0, le=100),
    offset: int = Query(0, ge=0),
):
    """List treks, optionally filtered by status or region"""
    service = TrekService(sess)
    treks = await service.list_treks(enabled=enabled, region=region, skip=offset, limit=limit)
    return [TrekOut.model_validate(t) for t in treks]


@router.post("/", response_model=TrekOut, status_code=status.HTTP_201_CREATED)
async def create_trek(payload: TrekIn, sess: SessionDep):
    service = TrekService(sess)
    trek = await service.create_trek(**payload.model_dump())
    await sess.commit()
    return TrekOut.model_validate(trek)


@router.get("/{trek_id}", response_model=TrekDetailOut)
async def get_trek(trek_id: int, sess: SessionDep):
    """Trek with its batches and their current capacity"""
    service = TrekService(sess)
    trek = await service.get_trek(trek_id)
    detail = TrekDetailOut.model_validate(trek)
    return detail.model_copy(update={"batches": [batch_out(b) for b in trek.batches]})


@router.patch("/{trek_id}/toggle-status", response_model=TrekOut)
async def toggle_trek_status(trek_id: int, sess: SessionDep):
    service = TrekService(sess)
    trek = await service.toggle_trek_status(trek_id)
    await sess.commit()
    return TrekOut.model_validate(trek)
