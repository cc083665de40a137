from typing import Optional, List, Dict, Any, Union
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field

from trekdesk.services.manual_booking_flow import ManualBookingState


class UserCreateIn(BaseModel):
    """Customer created by an administrator during manual booking"""
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(..., max_length=32)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, alias="zipCode")
    country: Optional[str] = None

    model_config = {
        "populate_by_name": True,
    }


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    created_by_admin: bool

    model_config = {
        "from_attributes": True,
    }


class PhoneLookupOut(BaseModel):
    exists: bool
    user: Optional[UserOut] = None


class ParticipantIn(BaseModel):
    name: str
    # digit strings are accepted and checked by the booking validator
    age: Union[int, str]
    gender: Optional[str] = None
    medical_conditions: Optional[str] = Field(None, alias="medicalConditions")

    model_config = {
        "populate_by_name": True,
    }


class EmergencyContactIn(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relation: Optional[str] = None


class ContactDetailsIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ManualBookingIn(BaseModel):
    """Final intake step: seats on a batch for an existing customer"""
    user_id: int = Field(..., alias="userId", gt=0)
    trek_id: int = Field(..., alias="trekId", gt=0)
    batch_id: int = Field(..., alias="batchId", gt=0)
    number_of_participants: int = Field(..., alias="numberOfParticipants")
    user_details: ContactDetailsIn = Field(..., alias="userDetails")
    participants: List[ParticipantIn] = Field(default_factory=list, alias="participantDetails")
    emergency_contact: Optional[EmergencyContactIn] = Field(None, alias="emergencyContact")
    total_price: Optional[Decimal] = Field(None, alias="totalPrice")
    payment_status: str = Field("payment_completed", alias="paymentStatus")
    additional_requests: Optional[str] = Field(None, alias="additionalRequests", max_length=1000)

    model_config = {
        "populate_by_name": True,
    }

    def service_kwargs(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "trek_id": self.trek_id,
            "batch_id": self.batch_id,
            "number_of_participants": self.number_of_participants,
            "user_details": self.user_details.model_dump(),
            "participants": [p.model_dump() for p in self.participants],
            "emergency_contact": self.emergency_contact.model_dump() if self.emergency_contact else None,
            "total_price": self.total_price,
            "payment_status": self.payment_status,
            "additional_requests": self.additional_requests,
        }


class PhoneStepIn(BaseModel):
    phone: Optional[str] = Field(None, max_length=32)


class UserDetailsStepIn(BaseModel):
    """Like UserCreateIn, but the phone may come from the lookup step"""
    name: Optional[str] = Field(None, max_length=120)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, alias="zipCode")
    country: Optional[str] = None

    model_config = {
        "populate_by_name": True,
    }

    def flow_data(self) -> Dict[str, Any]:
        return self.model_dump()


class BookingStepIn(BaseModel):
    """Booking details step; the customer comes from the wizard state"""
    trek_id: Optional[int] = Field(None, alias="trekId")
    batch_id: Optional[int] = Field(None, alias="batchId")
    number_of_participants: Optional[int] = Field(None, alias="numberOfParticipants")
    user_details: Optional[ContactDetailsIn] = Field(None, alias="userDetails")
    participants: List[ParticipantIn] = Field(default_factory=list, alias="participantDetails")
    emergency_contact: Optional[EmergencyContactIn] = Field(None, alias="emergencyContact")
    total_price: Optional[Decimal] = Field(None, alias="totalPrice")
    payment_status: str = Field("payment_completed", alias="paymentStatus")
    additional_requests: Optional[str] = Field(None, alias="additionalRequests", max_length=1000)

    model_config = {
        "populate_by_name": True,
    }

    def flow_data(self) -> Dict[str, Any]:
        return {
            "trek_id": self.trek_id,
            "batch_id": self.batch_id,
            "number_of_participants": self.number_of_participants,
            "user_details": self.user_details.model_dump() if self.user_details else None,
            "participants": [p.model_dump() for p in self.participants],
            "emergency_contact": self.emergency_contact.model_dump() if self.emergency_contact else None,
            "total_price": self.total_price,
            "payment_status": self.payment_status,
            "additional_requests": self.additional_requests,
        }


class NotificationOut(BaseModel):
    message: str
    level: str


class FlowRequest(BaseModel):
    """One wizard step: the state the client holds plus the action to apply"""
    state: ManualBookingState = Field(default_factory=ManualBookingState)
    action: str = Field(..., pattern="^(submit_phone|submit_user_details|submit_booking|back)$")
    data: Dict[str, Any] = Field(default_factory=dict)


class FlowResponse(BaseModel):
    state: ManualBookingState
    notifications: List[NotificationOut] = []
