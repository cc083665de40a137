from fastapi import APIRouter, Query, status
from pydantic import ValidationError as SchemaError

from trekdesk.api.v1.schemas import (
    UserCreateIn, UserOut, PhoneLookupOut, ManualBookingIn, BookingOut, FlowRequest, FlowResponse,
    PhoneStepIn, UserDetailsStepIn, BookingStepIn,
)
from trekdesk.core import get_settings
from trekdesk.deps import UowDep
from trekdesk.services import (
    ManualBookingService, ManualBookingFlow, CollectingNotifier, LoggingNotifier
)


router = APIRouter()


def _service(uow) -> ManualBookingService:
    return ManualBookingService(uow, default_region=get_settings().DEFAULT_PHONE_REGION)


@router.get("/users/by-phone", response_model=PhoneLookupOut)
async def lookup_user_by_phone(uow: UowDep, phone: str = Query(..., min_length=1)):
    """Find an existing customer by phone number"""
    user = await _service(uow).lookup_user_by_phone(phone)
    if not user:
        return PhoneLookupOut(exists=False)
    return PhoneLookupOut(exists=True, user=UserOut.model_validate(user))


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreateIn, uow: UowDep):
    user = await _service(uow).create_user(payload.model_dump())
    await uow.commit()
    return UserOut.model_validate(user)


@router.post("/", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_manual_booking(payload: ManualBookingIn, uow: UowDep):
    """Book seats on a batch on behalf of a customer"""
    booking = await _service(uow).create_booking(**payload.service_kwargs())
    await uow.commit()
    return BookingOut.model_validate(booking)


STEP_MODELS = {
    "submit_phone": PhoneStepIn,
    "submit_user_details": UserDetailsStepIn,
    "submit_booking": BookingStepIn,
}


def _describe(exc: SchemaError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    return f"Invalid {field}: {error['msg']}" if field else error["msg"]


@router.post("/flow", response_model=FlowResponse)
async def manual_booking_flow(payload: FlowRequest, uow: UowDep):
    """Apply one intake step to the state the client sent.

    Failures do not raise: the unchanged state comes back together with the
    error notifications, so the client stays on the same step.
    """
    settings = get_settings()
    notifier = CollectingNotifier(forward_to=LoggingNotifier())
    flow = ManualBookingFlow(_service(uow), notifier, default_region=settings.DEFAULT_PHONE_REGION)

    state = payload.state
    if payload.action == "back":
        return FlowResponse(state=flow.back(state), notifications=notifier.as_list())

    try:
        step = STEP_MODELS[payload.action].model_validate(payload.data)
    except SchemaError as exc:
        notifier.notify(_describe(exc), "error")
        return FlowResponse(state=state, notifications=notifier.as_list())

    if payload.action == "submit_phone":
        state = await flow.submit_phone(state, step.phone)
    elif payload.action == "submit_user_details":
        state = await flow.submit_user_details(state, step.flow_data())
    else:
        state = await flow.submit_booking(state, step.flow_data())

    await uow.commit()
    return FlowResponse(state=state, notifications=notifier.as_list())
