from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from trekdesk.core import (
    NotFoundError, ValidationError, ConflictError, CapacityExceededError, BusinessLogicError
)
from trekdesk.core.unit_of_work import UnitOfWork
from trekdesk.domain.capacity import BatchCapacity
from trekdesk.domain import validation
from trekdesk.models import Booking, BookingParticipant, User
from trekdesk.roles import Role
from .batch_service import BatchService

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ("pending", "payment_completed")

USER_ADDRESS_FIELDS = ("address", "city", "state", "zip_code", "country")


class ManualBookingService:
    """Bookings an administrator creates on behalf of a customer.

    Mirrors the three intake steps: find the customer by phone, create the
    customer when missing, then book seats on a batch.
    """

    def __init__(self, uow: UnitOfWork, default_region: str = "IN"):
        self.uow = uow
        self.default_region = default_region
        self.batch_service = BatchService(uow.session, batch_repo=uow.batches)

    async def lookup_user_by_phone(self, phone: str) -> Optional[User]:
        normalized = validation.normalize_phone(phone, self.default_region)
        return await self.uow.users.get_by_phone(normalized)

    async def create_user(self, details: Dict[str, Any]) -> User:
        cleaned = validation.validate_user_details(details, self.default_region)

        if await self.uow.users.get_by_phone(cleaned["phone"]):
            raise ConflictError("A user with this phone number already exists")
        if await self.uow.users.exists_by_email(cleaned["email"]):
            raise ConflictError("A user with this email already exists")

        user = await self.uow.users.create(obj_in={
            "name": cleaned["name"],
            "email": cleaned["email"],
            "phone": cleaned["phone"],
            "role": Role.user.value,
            "created_by_admin": True,
            **{field: cleaned.get(field) or None for field in USER_ADDRESS_FIELDS},
        })
        logger.info("Created user %s for manual booking", user.id)
        return user

    async def create_booking(
        self,
        user_id: int,
        trek_id: int,
        batch_id: int,
        number_of_participants: int,
        user_details: Dict[str, Any],
        participants: List[Dict[str, Any]],
        emergency_contact: Optional[Dict[str, Any]] = None,
        total_price: Optional[Decimal] = None,
        payment_status: str = "payment_completed",
        additional_requests: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Booking:
        """Validate the request, admit it against batch capacity and store it"""
        cleaned = validation.validate_booking_request({
            "trek_id": trek_id,
            "batch_id": batch_id,
            "number_of_participants": number_of_participants,
            "user_details": user_details,
            "participants": participants,
            "emergency_contact": emergency_contact,
        }, self.default_region)

        if payment_status not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid payment status. Must be one of {', '.join(PAYMENT_STATUSES)}", field="paymentStatus")
        if total_price is not None and total_price < 0:
            raise ValidationError("Total price cannot be negative", field="totalPrice")

        user = await self.uow.users.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        trek = await self.uow.treks.get(trek_id)
        if not trek:
            raise NotFoundError("Trek", trek_id)
        if not trek.is_enabled:
            raise BusinessLogicError("Trek is disabled", rule="trek_enabled")

        batch = await self.uow.batches.get_for_trek(trek_id, batch_id, lock=True)
        if not batch:
            raise NotFoundError("Batch", batch_id)
        now = now or datetime.utcnow()
        if batch.start_date <= now or batch.status == "cancelled" or not batch.is_active:
            raise BusinessLogicError("Batch is no longer open for booking", rule="batch_open")

        capacity = BatchCapacity.of(batch)
        if not capacity.can_accommodate(number_of_participants):
            raise CapacityExceededError(batch.id, number_of_participants, capacity.available_slots)

        price = total_price if total_price is not None else Decimal(str(batch.price)) * number_of_participants
        contact = cleaned["user_details"]
        emergency = cleaned["emergency_contact"] or {}

        booking = Booking(
            trek_id=trek_id,
            batch_id=batch_id,
            user_id=user.id,
            number_of_participants=number_of_participants,
            total_price=price,
            payment_status=payment_status,
            status="confirmed" if payment_status == "payment_completed" else "pending",
            user_name=contact["name"],
            user_email=contact["email"],
            user_phone=contact["phone"],
            emergency_name=emergency.get("name"),
            emergency_phone=emergency.get("phone"),
            emergency_relation=emergency.get("relation"),
            additional_requests=additional_requests,
            created_by_admin=True,
            participants=[BookingParticipant(**p) for p in cleaned["participants"]],
        )
        self.uow.session.add(booking)
        await self.uow.session.flush()

        await self.batch_service.recalculate_participants(batch_id)
        logger.info("Manual booking %s created for user %s on batch %s (%s participants)",
                    booking.id, user.id, batch_id, number_of_participants)
        return booking
