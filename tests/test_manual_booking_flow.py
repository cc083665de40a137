from decimal import Decimal

import pytest

from trekdesk.core import CapacityExceededError, ConflictError, BusinessLogicError
from trekdesk.services import (
    CollectingNotifier, ManualBookingFlow, ManualBookingService, ManualBookingState, ManualBookingStep
)


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def flow(uow, notifier):
    return ManualBookingFlow(ManualBookingService(uow), notifier)


def _booking_details(trek, batch, participant_details, **overrides):
    details = {
        "trek_id": trek.id,
        "batch_id": batch.id,
        "number_of_participants": len(participant_details),
        "participants": participant_details,
    }
    details.update(overrides)
    return details


async def test_existing_user_skips_to_booking_details(flow, user, notifier):
    state = await flow.submit_phone(ManualBookingState(), "9123456789")

    assert state.step == ManualBookingStep.booking_details
    assert state.user_exists is True
    assert state.user.id == user.id
    assert state.prefilled_user_details() == {
        "name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "+919123456789"
    }
    assert notifier.messages == []


async def test_unknown_phone_asks_for_user_details(flow):
    state = await flow.submit_phone(ManualBookingState(), "+91 98765 43210")

    assert state.step == ManualBookingStep.user_details
    assert state.user_exists is False
    assert state.phone == "+919876543210"


async def test_invalid_phone_keeps_step(flow, notifier):
    initial = ManualBookingState()

    state = await flow.submit_phone(initial, "12345")

    assert state == initial
    assert notifier.messages[-1][1] == "error"


async def test_new_user_then_booking(flow, notifier, trek, batch, participant_details, session):
    state = await flow.submit_phone(ManualBookingState(), "9876543210")
    state = await flow.submit_user_details(state, {"name": "Meera Iyer", "email": "meera.iyer@gmail.com"})

    assert state.step == ManualBookingStep.booking_details
    assert state.user.phone == "+919876543210"
    assert ("User created successfully", "success") in notifier.messages

    state = await flow.submit_booking(state, _booking_details(trek, batch, participant_details))

    assert state.step == ManualBookingStep.completed
    assert state.booking_id is not None
    assert notifier.messages[-1] == ("Manual booking created successfully", "success")
    assert batch.current_participants == 2


async def test_duplicate_email_is_reported(flow, notifier, user):
    state = await flow.submit_phone(ManualBookingState(), "9876543210")

    state = await flow.submit_user_details(state, {"name": "Someone", "email": "asha.rao@gmail.com"})

    assert state.step == ManualBookingStep.user_details
    assert notifier.messages[-1] == ("A user with this email already exists", "error")


async def test_booking_over_capacity_is_reported(flow, notifier, user, trek, make_batch, participant_details):
    batch = await make_batch(trek, max_participants=3, reserved_slots=2)
    state = await flow.submit_phone(ManualBookingState(), "9123456789")

    after = await flow.submit_booking(state, _booking_details(trek, batch, participant_details))

    assert after == state
    assert notifier.messages[-1][1] == "error"
    assert "1 slots available, 2 requested" in notifier.messages[-1][0]


async def test_booking_validation_error_keeps_step(flow, notifier, user, trek, batch, participant_details):
    state = await flow.submit_phone(ManualBookingState(), "9123456789")

    after = await flow.submit_booking(
        state, _booking_details(trek, batch, participant_details, number_of_participants=3)
    )

    assert after.step == ManualBookingStep.booking_details
    assert notifier.messages[-1][1] == "error"


async def test_steps_must_run_in_order(flow, notifier):
    state = await flow.submit_booking(ManualBookingState(), {})

    assert state.step == ManualBookingStep.phone_lookup
    assert notifier.messages == [("Please complete the previous step first", "error")]


def test_back_navigation(flow):
    new_user = ManualBookingState(step=ManualBookingStep.booking_details, phone="+919876543210", user_exists=False)
    existing = ManualBookingState(step=ManualBookingStep.booking_details, phone="+919123456789", user_exists=True)

    assert flow.back(new_user).step == ManualBookingStep.user_details
    assert flow.back(existing) == ManualBookingState(phone="+919123456789")


async def test_service_creates_confirmed_booking_with_batch_price(uow, user, trek, batch, participant_details):
    service = ManualBookingService(uow)

    booking = await service.create_booking(
        user_id=user.id,
        trek_id=trek.id,
        batch_id=batch.id,
        number_of_participants=2,
        user_details={"name": user.name, "email": user.email, "phone": "9123456789"},
        participants=participant_details,
        emergency_contact={"name": "Ravi", "phone": "9876543210", "relation": "Brother"},
    )

    assert booking.status == "confirmed"
    assert booking.created_by_admin is True
    assert booking.total_price == Decimal("10000")
    assert booking.emergency_phone == "+919876543210"
    assert [p.age for p in booking.participants] == [29, 31]


async def test_service_pending_payment_leaves_booking_pending(uow, user, trek, batch, participant_details):
    booking = await ManualBookingService(uow).create_booking(
        user_id=user.id,
        trek_id=trek.id,
        batch_id=batch.id,
        number_of_participants=2,
        user_details={"name": user.name, "email": user.email, "phone": user.phone},
        participants=participant_details,
        total_price=Decimal("8000"),
        payment_status="pending",
    )

    assert booking.status == "pending"
    assert booking.total_price == Decimal("8000")


async def test_service_rejects_over_capacity(uow, user, trek, make_batch, participant_details):
    batch = await make_batch(trek, max_participants=2, current_participants=1)

    with pytest.raises(CapacityExceededError):
        await ManualBookingService(uow).create_booking(
            user_id=user.id,
            trek_id=trek.id,
            batch_id=batch.id,
            number_of_participants=2,
            user_details={"name": user.name, "email": user.email, "phone": user.phone},
            participants=participant_details,
        )


async def test_service_rejects_past_batch(uow, user, trek, make_batch, participant_details):
    batch = await make_batch(trek, days_ahead=-1)

    with pytest.raises(BusinessLogicError):
        await ManualBookingService(uow).create_booking(
            user_id=user.id,
            trek_id=trek.id,
            batch_id=batch.id,
            number_of_participants=2,
            user_details={"name": user.name, "email": user.email, "phone": user.phone},
            participants=participant_details,
        )


async def test_service_rejects_duplicate_phone(uow, user):
    with pytest.raises(ConflictError):
        await ManualBookingService(uow).create_user(
            {"name": "Other", "email": "other@gmail.com", "phone": "+91 91234 56789"}
        )
