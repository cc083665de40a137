"""Validation rules for the manual booking intake.

Each check raises :class:`ValidationError` naming the offending field, so the
caller can report it before anything is sent to the database.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

import phonenumbers

from ..core.exceptions import ValidationError

EMAIL_RE = re.compile(r"^\w+([.+-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,})+$")
INDIAN_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
AGE_RE = re.compile(r"^\d{1,3}$")

MIN_AGE = 1
MAX_AGE = 120
GENDERS = ("Male", "Female", "Other")
EMERGENCY_FIELDS = ("name", "phone", "relation")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_phone(phone: Optional[str], default_region: str = "IN", field: str = "phone") -> str:
    """Return *phone* in E.164 form or raise.

    Numbers without a country code are read in *default_region*. Indian
    numbers must be 10-digit mobiles starting with 6-9.
    """
    if _blank(phone):
        raise ValidationError("Please enter a phone number", field=field)
    if not isinstance(phone, str):
        raise ValidationError("Invalid phone number format", field=field)

    try:
        parsed = phonenumbers.parse(phone.strip(), default_region)
    except phonenumbers.NumberParseException:
        raise ValidationError("Invalid phone number format", field=field)

    if parsed.country_code == 91:
        if not INDIAN_MOBILE_RE.match(str(parsed.national_number)):
            raise ValidationError("Phone number must be a 10-digit mobile number", field=field)
    elif not phonenumbers.is_valid_number(parsed):
        raise ValidationError("Invalid phone number format", field=field)

    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def validate_email(email: Optional[str], field: str = "email") -> str:
    if _blank(email):
        raise ValidationError("Email is required", field=field)
    if not isinstance(email, str):
        raise ValidationError("Invalid email format", field=field)
    email = email.strip()
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format", field=field)
    return email.lower()


def validate_age(age: Any, field: str = "age") -> int:
    """Accept ints or digit strings between MIN_AGE and MAX_AGE."""
    if isinstance(age, bool) or _blank(age):
        raise ValidationError("Age is required", field=field)
    if isinstance(age, int):
        value = age
    elif isinstance(age, str) and AGE_RE.match(age.strip()):
        value = int(age.strip())
    else:
        raise ValidationError("Age must be a whole number", field=field)
    if not MIN_AGE <= value <= MAX_AGE:
        raise ValidationError(f"Age must be between {MIN_AGE} and {MAX_AGE}", field=field)
    return value


def validate_gender(gender: Optional[str], field: str = "gender") -> Optional[str]:
    if _blank(gender):
        return None
    if gender not in GENDERS:
        raise ValidationError(f"Gender must be one of {', '.join(GENDERS)}", field=field)
    return gender


def validate_user_details(details: Dict[str, Any], default_region: str = "IN") -> Dict[str, Any]:
    """Name, email and phone are required; address fields pass through."""
    if not isinstance(details.get("name"), str) or _blank(details["name"]):
        raise ValidationError("Please fill in all required fields", field="name")
    cleaned = dict(details)
    cleaned["name"] = details["name"].strip()
    cleaned["email"] = validate_email(details.get("email"))
    cleaned["phone"] = normalize_phone(details.get("phone"), default_region)
    return cleaned


def validate_participants(participants: Iterable[Dict[str, Any]], expected: int) -> List[Dict[str, Any]]:
    participants = list(participants)
    if isinstance(expected, bool) or not isinstance(expected, int):
        raise ValidationError("Number of participants must be a whole number", field="numberOfParticipants")
    if expected < 1:
        raise ValidationError("At least one participant is required", field="numberOfParticipants")
    if len(participants) != expected:
        raise ValidationError(
            f"Expected details for {expected} participants, got {len(participants)}",
            field="participantDetails",
        )

    cleaned = []
    for index, participant in enumerate(participants):
        prefix = f"participantDetails[{index}]"
        if not isinstance(participant, Mapping):
            raise ValidationError(f"Participant {index + 1} details are invalid", field=prefix)
        if not isinstance(participant.get("name"), str) or _blank(participant["name"]):
            raise ValidationError(f"Participant {index + 1} name is required", field=f"{prefix}.name")
        cleaned.append({
            "name": participant["name"].strip(),
            "age": validate_age(participant.get("age"), field=f"{prefix}.age"),
            "gender": validate_gender(participant.get("gender"), field=f"{prefix}.gender"),
            "medical_conditions": (participant.get("medical_conditions") or None),
        })
    return cleaned


def validate_emergency_contact(contact: Optional[Dict[str, Any]], default_region: str = "IN") -> Optional[Dict[str, Any]]:
    """All-or-nothing: an empty contact is fine, a partial one is not."""
    contact = contact or {}
    if not isinstance(contact, Mapping):
        raise ValidationError("Invalid emergency contact", field="emergencyContact")
    filled = [f for f in EMERGENCY_FIELDS if not _blank(contact.get(f))]
    if not filled:
        return None
    for field in EMERGENCY_FIELDS:
        if not isinstance(contact.get(field), str) or _blank(contact[field]):
            raise ValidationError(
                "Emergency contact name, phone and relation are all required once one is given",
                field=f"emergencyContact.{field}",
            )
    return {
        "name": contact["name"].strip(),
        "phone": normalize_phone(contact["phone"], default_region, field="emergencyContact.phone"),
        "relation": contact["relation"].strip(),
    }


def validate_booking_request(request: Dict[str, Any], default_region: str = "IN") -> Dict[str, Any]:
    """Validate the final intake step and return a cleaned copy."""
    for field in ("trek_id", "batch_id"):
        if not request.get(field):
            raise ValidationError("Please select all required fields", field=field)

    user_details = request.get("user_details") or {}
    if not isinstance(user_details, Mapping):
        raise ValidationError("Please fill in all user details", field="userDetails")
    for field in ("name", "email", "phone"):
        if _blank(user_details.get(field)):
            raise ValidationError("Please fill in all user details", field=f"userDetails.{field}")

    count = request.get("number_of_participants") or 0
    cleaned = dict(request)
    cleaned["user_details"] = validate_user_details(user_details, default_region)
    participants = request.get("participants") or []
    if isinstance(participants, (str, Mapping)) or not isinstance(participants, Iterable):
        raise ValidationError("Participant details must be a list", field="participantDetails")
    cleaned["participants"] = validate_participants(participants, count)
    cleaned["emergency_contact"] = validate_emergency_contact(request.get("emergency_contact"), default_region)
    return cleaned
