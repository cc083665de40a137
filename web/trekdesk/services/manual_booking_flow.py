"""Step-by-step intake for manual bookings.

    phone_lookup --(user found)--------------------> booking_details --> completed
         |                                                ^
         +--(not found)--> user_details --(created)-------+

The flow holds no state of its own: every step takes a
:class:`ManualBookingState` and returns the next one. A failed step reports
through the notifier and returns the state it was given, so the operator
stays on the same step and can retry.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from trekdesk.core import BaseError
from trekdesk.domain import validation
from .manual_booking_service import ManualBookingService
from .notification_service import Notifier

logger = logging.getLogger(__name__)


class ManualBookingStep(str, Enum):
    phone_lookup = "phone_lookup"
    user_details = "user_details"
    booking_details = "booking_details"
    completed = "completed"


class FlowUser(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class ManualBookingState(BaseModel):
    step: ManualBookingStep = ManualBookingStep.phone_lookup
    phone: Optional[str] = None
    user_exists: Optional[bool] = None
    user: Optional[FlowUser] = None
    booking_id: Optional[int] = None

    def prefilled_user_details(self) -> Dict[str, Any]:
        """Contact fields for the booking step, taken from the selected user"""
        if not self.user:
            return {"name": "", "email": "", "phone": self.phone or ""}
        return {"name": self.user.name, "email": self.user.email, "phone": self.user.phone or self.phone}


class ManualBookingFlow:
    def __init__(self, service: ManualBookingService, notifier: Notifier, default_region: str = "IN"):
        self.service = service
        self.notifier = notifier
        self.default_region = default_region

    def _wrong_step(self, state: ManualBookingState, expected: ManualBookingStep) -> bool:
        if state.step != expected:
            self.notifier.notify("Please complete the previous step first", "error")
            return True
        return False

    async def _fail(self, exc: Exception, fallback: str) -> None:
        """Report a failed persisting step and discard its partial writes"""
        await self.service.uow.rollback()
        if isinstance(exc, BaseError):
            self.notifier.notify(exc.message, "error")
        else:
            logger.exception("Manual booking step failed: %s", exc)
            self.notifier.notify(fallback, "error")

    async def submit_phone(self, state: ManualBookingState, phone: str) -> ManualBookingState:
        if self._wrong_step(state, ManualBookingStep.phone_lookup):
            return state

        try:
            normalized = validation.normalize_phone(phone, self.default_region)
        except BaseError as exc:
            self.notifier.notify(exc.message, "error")
            return state

        try:
            user = await self.service.lookup_user_by_phone(normalized)
        except Exception as exc:
            await self._fail(exc, "Error validating user")
            return state

        if user:
            return state.model_copy(update={
                "step": ManualBookingStep.booking_details,
                "phone": normalized,
                "user_exists": True,
                "user": FlowUser.model_validate(user),
            })

        return state.model_copy(update={
            "step": ManualBookingStep.user_details,
            "phone": normalized,
            "user_exists": False,
            "user": None,
        })

    async def submit_user_details(self, state: ManualBookingState, details: Dict[str, Any]) -> ManualBookingState:
        if self._wrong_step(state, ManualBookingStep.user_details):
            return state

        details = {**details, "phone": details.get("phone") or state.phone}
        try:
            validation.validate_user_details(details, self.default_region)
        except BaseError as exc:
            self.notifier.notify(exc.message, "error")
            return state

        try:
            user = await self.service.create_user(details)
        except Exception as exc:
            await self._fail(exc, "Error creating user")
            return state

        self.notifier.notify("User created successfully", "success")
        return state.model_copy(update={
            "step": ManualBookingStep.booking_details,
            "phone": user.phone,
            "user": FlowUser.model_validate(user),
        })

    async def submit_booking(self, state: ManualBookingState, details: Dict[str, Any]) -> ManualBookingState:
        if self._wrong_step(state, ManualBookingStep.booking_details):
            return state
        if not state.user:
            self.notifier.notify("Please select all required fields", "error")
            return state

        request = {
            "trek_id": details.get("trek_id"),
            "batch_id": details.get("batch_id"),
            "number_of_participants": details.get("number_of_participants") or 0,
            "user_details": details.get("user_details") or state.prefilled_user_details(),
            "participants": details.get("participants") or [],
            "emergency_contact": details.get("emergency_contact"),
        }
        try:
            validation.validate_booking_request(request, self.default_region)
        except BaseError as exc:
            self.notifier.notify(exc.message, "error")
            return state

        try:
            booking = await self.service.create_booking(
                user_id=state.user.id,
                total_price=details.get("total_price"),
                payment_status=details.get("payment_status") or "payment_completed",
                additional_requests=details.get("additional_requests"),
                **request,
            )
        except Exception as exc:
            await self._fail(exc, "Error creating booking")
            return state

        self.notifier.notify("Manual booking created successfully", "success")
        return state.model_copy(update={
            "step": ManualBookingStep.completed,
            "booking_id": booking.id,
        })

    def back(self, state: ManualBookingState) -> ManualBookingState:
        if state.step == ManualBookingStep.booking_details and state.user_exists is False:
            return state.model_copy(update={"step": ManualBookingStep.user_details})
        if state.step in (ManualBookingStep.booking_details, ManualBookingStep.user_details):
            return ManualBookingState(phone=state.phone)
        return state
