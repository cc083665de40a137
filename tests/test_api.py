from datetime import datetime, timedelta
from decimal import Decimal

from trekdesk.security import create_token

API = "/api/v1/admin"


def _batch_payload(days_ahead=30, max_participants=10):
    start = datetime.utcnow() + timedelta(days=days_ahead)
    return {
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=5)).isoformat(),
        "price": "5000",
        "maxParticipants": max_participants,
    }


async def _create_trek_and_batch(client, **batch_kwargs):
    resp = await client.post(f"{API}/treks/", json={"name": "Hampta Pass", "difficulty": "moderate"})
    assert resp.status_code == 201
    trek_id = resp.json()["id"]

    resp = await client.post(f"{API}/treks/{trek_id}/batches/", json=_batch_payload(**batch_kwargs))
    assert resp.status_code == 201
    return trek_id, resp.json()["id"]


async def test_healthz(client):
    resp = await client.get("/healthz")

    assert resp.json() == {"db": "ok"}


async def test_requires_credentials(client):
    resp = await client.get(f"{API}/treks/", headers={"Authorization": ""})

    assert resp.status_code == 401
    assert resp.json()["error"] == "Missing credentials"


async def test_requires_admin_role(client):
    token = create_token(7, "user")

    resp = await client.get(f"{API}/treks/", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 403


async def test_request_validation_errors(client):
    resp = await client.post(f"{API}/treks/", json={"name": "Hampta Pass", "difficulty": "extreme"})

    assert resp.status_code == 422
    assert resp.json()["error"] == "Validation error"


async def test_trek_detail_includes_batch_capacity(client):
    trek_id, batch_id = await _create_trek_and_batch(client)

    resp = await client.get(f"{API}/treks/{trek_id}")

    assert resp.status_code == 200
    batch = resp.json()["batches"][0]
    assert batch["id"] == batch_id
    assert batch["available_slots"] == 10
    assert batch["is_full"] is False


async def test_mark_full_and_unmark(client):
    trek_id, batch_id = await _create_trek_and_batch(client)
    base = f"{API}/treks/{trek_id}/batches/{batch_id}"

    resp = await client.post(f"{base}/mark-full")
    assert resp.status_code == 200
    assert resp.json()["reserved_slots"] == 10
    assert resp.json()["was_marked_as_full"] is True

    resp = await client.post(f"{base}/mark-full")
    assert resp.status_code == 422

    resp = await client.post(f"{base}/unmark-full")
    assert resp.json()["available_slots"] == 10

    resp = await client.get(f"{base}/capacity")
    assert resp.json()["reserved_slots"] == 0


async def test_update_batch_capacity(client):
    trek_id, batch_id = await _create_trek_and_batch(client)
    base = f"{API}/treks/{trek_id}/batches/{batch_id}"

    resp = await client.patch(base, json={"maxParticipants": 20, "reservedSlots": 15})
    assert resp.status_code == 200
    assert resp.json()["available_slots"] == 5

    resp = await client.patch(base, json={"reservedSlots": 21})
    assert resp.status_code == 400
    assert resp.json()["details"] == {"field": "reservedSlots"}

    resp = await client.post(f"{base}/reserve", json={"reservedSlots": 4})
    assert resp.json()["available_slots"] == 16


async def test_unknown_batch_is_404(client):
    trek_id, _ = await _create_trek_and_batch(client)

    resp = await client.get(f"{API}/treks/{trek_id}/batches/999/capacity")

    assert resp.status_code == 404
    assert resp.json()["details"]["entity"] == "Batch"


async def test_manual_booking_cancel_and_restore(client):
    trek_id, batch_id = await _create_trek_and_batch(client)

    resp = await client.get(f"{API}/manual-bookings/users/by-phone", params={"phone": "9123456789"})
    assert resp.json() == {"exists": False, "user": None}

    resp = await client.post(f"{API}/manual-bookings/users", json={
        "name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "9123456789", "city": "Pune",
    })
    assert resp.status_code == 201
    user_id = resp.json()["id"]
    assert resp.json()["phone"] == "+919123456789"

    resp = await client.post(f"{API}/manual-bookings/", json={
        "userId": user_id,
        "trekId": trek_id,
        "batchId": batch_id,
        "numberOfParticipants": 2,
        "userDetails": {"name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "9123456789"},
        "participantDetails": [
            {"name": "Asha Rao", "age": 29, "gender": "Female"},
            {"name": "Vikram Rao", "age": "31", "gender": "Male", "medicalConditions": "Asthma"},
        ],
    })
    assert resp.status_code == 201
    booking = resp.json()
    assert booking["status"] == "confirmed"
    assert Decimal(booking["total_price"]) == Decimal("10000")
    assert booking["participants"][1]["medical_conditions"] == "Asthma"

    resp = await client.get(f"{API}/treks/{trek_id}/batches/{batch_id}/capacity")
    assert resp.json()["current_participants"] == 2

    resp = await client.post(f"{API}/bookings/{booking['id']}/refund-quote", json={})
    assert Decimal(resp.json()["refund_amount"]) == Decimal("9000")

    resp = await client.post(f"{API}/bookings/cancel", json={"bookingId": booking["id"], "refundType": "full"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    assert Decimal(resp.json()["refund_amount"]) == Decimal("10000")

    resp = await client.get(f"{API}/treks/{trek_id}/batches/{batch_id}/capacity")
    assert resp.json()["current_participants"] == 0

    resp = await client.post(f"{API}/bookings/{booking['id']}/restore")
    assert resp.json()["status"] == "confirmed"

    resp = await client.get(f"{API}/bookings/", params={"status": "confirmed"})
    assert [b["id"] for b in resp.json()] == [booking["id"]]


async def test_manual_booking_over_capacity(client):
    trek_id, batch_id = await _create_trek_and_batch(client, max_participants=1)
    resp = await client.post(f"{API}/manual-bookings/users", json={
        "name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "9123456789",
    })
    user_id = resp.json()["id"]

    resp = await client.post(f"{API}/manual-bookings/", json={
        "userId": user_id,
        "trekId": trek_id,
        "batchId": batch_id,
        "numberOfParticipants": 2,
        "userDetails": {"name": "Asha Rao", "email": "asha.rao@gmail.com", "phone": "9123456789"},
        "participantDetails": [{"name": "A", "age": 20}, {"name": "B", "age": 21}],
    })

    assert resp.status_code == 409
    assert resp.json()["details"] == {"batch_id": batch_id, "requested": 2, "available": 1}


async def test_flow_endpoint_walks_the_steps(client):
    trek_id, batch_id = await _create_trek_and_batch(client)

    resp = await client.post(f"{API}/manual-bookings/flow", json={
        "action": "submit_phone", "data": {"phone": "9876543210"},
    })
    body = resp.json()
    assert body["state"]["step"] == "user_details"
    assert body["notifications"] == []

    resp = await client.post(f"{API}/manual-bookings/flow", json={
        "state": body["state"],
        "action": "submit_user_details",
        "data": {"name": "Meera Iyer", "email": "meera.iyer@gmail.com"},
    })
    body = resp.json()
    assert body["state"]["step"] == "booking_details"
    assert body["notifications"] == [{"message": "User created successfully", "level": "success"}]

    resp = await client.post(f"{API}/manual-bookings/flow", json={
        "state": body["state"],
        "action": "submit_booking",
        "data": {
            "trek_id": trek_id,
            "batch_id": batch_id,
            "number_of_participants": 1,
            "participants": [{"name": "Meera Iyer", "age": 34, "gender": "Female"}],
        },
    })
    body = resp.json()
    assert body["state"]["step"] == "completed"
    assert body["notifications"][-1]["message"] == "Manual booking created successfully"

    resp = await client.get(f"{API}/bookings/{body['state']['booking_id']}")
    assert resp.json()["user_phone"] == "+919876543210"


async def test_flow_endpoint_reports_errors_without_advancing(client):
    resp = await client.post(f"{API}/manual-bookings/flow", json={
        "action": "submit_phone", "data": {"phone": "12"},
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["state"]["step"] == "phone_lookup"
    assert body["notifications"][0]["level"] == "error"


async def _flow(client, action, data=None, state=None):
    payload = {"action": action, "data": data or {}}
    if state is not None:
        payload["state"] = state
    resp = await client.post(f"{API}/manual-bookings/flow", json=payload)
    assert resp.status_code == 200
    return resp.json()


async def _state_at_booking_details(client):
    body = await _flow(client, "submit_phone", {"phone": "9876543210"})
    body = await _flow(client, "submit_user_details",
                       {"name": "Meera Iyer", "email": "meera.iyer@gmail.com"}, state=body["state"])
    assert body["state"]["step"] == "booking_details"
    return body["state"]


async def test_flow_endpoint_rejects_mistyped_step_data(client):
    trek_id, batch_id = await _create_trek_and_batch(client)

    body = await _flow(client, "submit_phone", {"phone": 9123456789})
    assert body["state"]["step"] == "phone_lookup"
    assert body["state"]["phone"] is None
    assert [n["level"] for n in body["notifications"]] == ["error"]

    state = await _state_at_booking_details(client)
    bad_steps = [
        {"trek_id": trek_id, "batch_id": batch_id, "number_of_participants": "two",
         "participants": [{"name": "Meera Iyer", "age": 34}]},
        {"trek_id": trek_id, "batch_id": batch_id, "number_of_participants": 1,
         "participants": ["Asha"]},
        {"trekId": trek_id, "batchId": batch_id, "numberOfParticipants": 1,
         "participantDetails": [{"name": "Meera Iyer", "age": 34}], "userDetails": "Meera"},
    ]
    for data in bad_steps:
        body = await _flow(client, "submit_booking", data, state=state)
        assert body["state"] == state
        assert [n["level"] for n in body["notifications"]] == ["error"]

    resp = await client.get(f"{API}/treks/{trek_id}/batches/{batch_id}/capacity")
    assert resp.json()["current_participants"] == 0


async def test_flow_endpoint_coerces_numeric_participant_count(client):
    trek_id, batch_id = await _create_trek_and_batch(client)
    state = await _state_at_booking_details(client)

    body = await _flow(client, "submit_booking", {
        "trek_id": trek_id,
        "batch_id": batch_id,
        "number_of_participants": "1",
        "participants": [{"name": "Meera Iyer", "age": "34"}],
    }, state=state)

    assert body["state"]["step"] == "completed"


async def test_flow_endpoint_accepts_camel_case_booking_fields(client):
    trek_id, batch_id = await _create_trek_and_batch(client)
    state = await _state_at_booking_details(client)

    body = await _flow(client, "submit_booking", {
        "trekId": trek_id,
        "batchId": batch_id,
        "numberOfParticipants": 2,
        "participantDetails": [
            {"name": "Meera Iyer", "age": 34, "gender": "Female"},
            {"name": "Ravi Iyer", "age": 36, "medicalConditions": "Asthma"},
        ],
        "emergencyContact": {"name": "Lata Iyer", "phone": "9988776655", "relation": "Mother"},
        "paymentStatus": "pending",
    }, state=state)

    assert body["state"]["step"] == "completed"
    resp = await client.get(f"{API}/bookings/{body['state']['booking_id']}")
    booking = resp.json()
    assert booking["number_of_participants"] == 2
    assert booking["payment_status"] == "pending"
    assert booking["status"] == "pending"
