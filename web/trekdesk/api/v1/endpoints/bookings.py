from typing import List, Optional
from fastapi import APIRouter, Query

from trekdesk.api.v1.schemas import (
    BookingOut, BookingStatusUpdate, CancelBookingIn, RefundQuoteIn, RefundQuoteOut
)
from trekdesk.deps import SessionDep
from trekdesk.services import BookingService


router = APIRouter()


@router.get("/", response_model=List[BookingOut])
async def list_bookings(
    sess: SessionDep,
    status: Optional[str] = Query(None, description="pending, confirmed, cancelled or completed"),
    trek_id: Optional[int] = Query(None, gt=0),
    batch_id: Optional[int] = Query(None, gt=0),
    user_id: Optional[int] = Query(None, gt=0),
    limit: int = Query(50, gt=0, le=100),
    offset: int = Query(0, ge=0),
):
    """List bookings newest first"""
    service = BookingService(sess)
    bookings = await service.list_bookings(
        status=status,
        trek_id=trek_id,
        batch_id=batch_id,
        user_id=user_id,
        skip=offset,
        limit=limit
    )
    return [BookingOut.model_validate(b) for b in bookings]


@router.post("/cancel", response_model=BookingOut)
async def admin_cancel_booking(payload: CancelBookingIn, sess: SessionDep):
    """Cancel a booking, or some of its participants, and record the refund"""
    service = BookingService(sess)
    booking = await service.admin_cancel_booking(
        booking_id=payload.booking_id,
        refund=payload.refund,
        refund_type=payload.refund_type,
        custom_refund_amount=payload.custom_refund_amount,
        cancellation_reason=payload.cancellation_reason,
        participant_ids=payload.participant_ids
    )
    await sess.commit()
    return BookingOut.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: int, sess: SessionDep):
    service = BookingService(sess)
    booking = await service.get_booking(booking_id)
    return BookingOut.model_validate(booking)


@router.patch("/{booking_id}/status", response_model=BookingOut)
async def update_booking_status(booking_id: int, payload: BookingStatusUpdate, sess: SessionDep):
    service = BookingService(sess)
    booking = await service.update_booking_status(booking_id, payload.status)
    await sess.commit()
    return BookingOut.model_validate(booking)


@router.post("/{booking_id}/refund-quote", response_model=RefundQuoteOut)
async def quote_refund(booking_id: int, payload: RefundQuoteIn, sess: SessionDep):
    """Preview the refund for cancelling the booking now"""
    service = BookingService(sess)
    quote = await service.quote_refund(
        booking_id,
        refund_type=payload.refund_type,
        custom_refund_amount=payload.custom_refund_amount
    )
    return RefundQuoteOut(**quote)


@router.post("/{booking_id}/restore", response_model=BookingOut)
async def restore_booking(booking_id: int, sess: SessionDep):
    service = BookingService(sess)
    booking = await service.restore_booking(booking_id)
    await sess.commit()
    return BookingOut.model_validate(booking)
