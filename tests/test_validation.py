import pytest

from trekdesk.core import ValidationError
from trekdesk.domain import validation


@pytest.mark.parametrize("raw", ["9123456789", "+91 91234 56789", "+919123456789"])
def test_normalize_indian_mobile(raw):
    assert validation.normalize_phone(raw) == "+919123456789"


@pytest.mark.parametrize("raw", ["5123456789", "12345", "not a phone", "+91 12345 67890"])
def test_normalize_rejects_invalid_indian_numbers(raw):
    with pytest.raises(ValidationError) as exc_info:
        validation.normalize_phone(raw)

    assert exc_info.value.field == "phone"


def test_normalize_accepts_foreign_numbers():
    assert validation.normalize_phone("+1 650 253 0000") == "+16502530000"


def test_normalize_requires_a_value():
    with pytest.raises(ValidationError):
        validation.normalize_phone("  ")


def test_validate_email():
    assert validation.validate_email(" Asha.Rao@Gmail.com ") == "asha.rao@gmail.com"
    with pytest.raises(ValidationError):
        validation.validate_email("asha@")


@pytest.mark.parametrize("age, expected", [(1, 1), ("45", 45), (120, 120)])
def test_validate_age(age, expected):
    assert validation.validate_age(age) == expected


@pytest.mark.parametrize("age", [0, 121, "4.5", "", None, True])
def test_validate_age_rejects(age):
    with pytest.raises(ValidationError):
        validation.validate_age(age)


def test_validate_participants_count_must_match(participant_details):
    with pytest.raises(ValidationError) as exc_info:
        validation.validate_participants(participant_details, 3)

    assert exc_info.value.field == "participantDetails"


def test_validate_participants_cleans_rows(participant_details):
    cleaned = validation.validate_participants(participant_details, 2)

    assert cleaned[1] == {"name": "Vikram Rao", "age": 31, "gender": "Male", "medical_conditions": "Asthma"}
    assert cleaned[0]["medical_conditions"] is None


def test_validate_participants_reports_the_failing_row(participant_details):
    participant_details[1]["gender"] = "Unknown"

    with pytest.raises(ValidationError) as exc_info:
        validation.validate_participants(participant_details, 2)

    assert exc_info.value.field == "participantDetails[1].gender"


def test_emergency_contact_is_all_or_nothing():
    assert validation.validate_emergency_contact(None) is None
    assert validation.validate_emergency_contact({"name": "", "phone": "", "relation": ""}) is None

    with pytest.raises(ValidationError):
        validation.validate_emergency_contact({"name": "Ravi", "phone": "", "relation": ""})

    contact = validation.validate_emergency_contact({"name": "Ravi", "phone": "9876543210", "relation": "Brother"})
    assert contact == {"name": "Ravi", "phone": "+919876543210", "relation": "Brother"}


def test_validate_booking_request(participant_details):
    cleaned = validation.validate_booking_request({
        "trek_id": 1,
        "batch_id": 2,
        "number_of_participants": 2,
        "user_details": {"name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "9123456789"},
        "participants": participant_details,
        "emergency_contact": None,
    })

    assert cleaned["user_details"]["phone"] == "+919123456789"
    assert len(cleaned["participants"]) == 2
    assert cleaned["emergency_contact"] is None


def test_validate_booking_request_requires_selection(participant_details):
    with pytest.raises(ValidationError) as exc_info:
        validation.validate_booking_request({
            "trek_id": 1,
            "batch_id": None,
            "number_of_participants": 2,
            "user_details": {"name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "9123456789"},
            "participants": participant_details,
        })

    assert exc_info.value.field == "batch_id"


@pytest.mark.parametrize("raw", [9123456789, ["9123456789"], {"number": "9123456789"}])
def test_normalize_rejects_non_string_phone(raw):
    with pytest.raises(ValidationError) as exc_info:
        validation.normalize_phone(raw)

    assert exc_info.value.field == "phone"


def test_validate_email_rejects_non_string():
    with pytest.raises(ValidationError) as exc_info:
        validation.validate_email(42)

    assert exc_info.value.field == "email"


@pytest.mark.parametrize("expected", ["1", 1.0, True, None])
def test_validate_participants_count_must_be_an_int(participant_details, expected):
    with pytest.raises(ValidationError) as exc_info:
        validation.validate_participants(participant_details[:1], expected)

    assert exc_info.value.field == "numberOfParticipants"


@pytest.mark.parametrize("row", ["Asha", ["Asha", 29], 29])
def test_validate_participants_rejects_rows_that_are_not_objects(participant_details, row):
    with pytest.raises(ValidationError) as exc_info:
        validation.validate_participants([participant_details[0], row], 2)

    assert exc_info.value.field == "participantDetails[1]"


def test_validate_participants_rejects_non_string_name():
    with pytest.raises(ValidationError) as exc_info:
        validation.validate_participants([{"name": 7, "age": 30}], 1)

    assert exc_info.value.field == "participantDetails[0].name"


@pytest.mark.parametrize("changes, field", [
    ({"number_of_participants": "2"}, "numberOfParticipants"),
    ({"participants": "Asha, Vikram"}, "participantDetails"),
    ({"user_details": "Asha Rao"}, "userDetails"),
    ({"emergency_contact": ["Ravi"]}, "emergencyContact"),
])
def test_validate_booking_request_rejects_mistyped_values(participant_details, changes, field):
    request = {
        "trek_id": 1,
        "batch_id": 2,
        "number_of_participants": 2,
        "user_details": {"name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "9123456789"},
        "participants": participant_details,
        "emergency_contact": None,
        **changes,
    }
    with pytest.raises(ValidationError) as exc_info:
        validation.validate_booking_request(request)

    assert exc_info.value.field == field
