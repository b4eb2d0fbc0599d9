"""Calendar API — identity headers, role checks, and error mapping over HTTP.

Invariants:
    - Missing or unknown identity headers -> 401 UNAUTHENTICATED
    - Role violations -> 403 FORBIDDEN, before any engine call
    - Engine errors keep their code and status in the JSON body
    - Health endpoints need no identity
"""

SYSTEM = {"x-user-id": "system", "x-role": "SYSTEM"}
EXEC_1 = {"x-user-id": "exec-1", "x-role": "EXECUTIVE"}
EXEC_2 = {"x-user-id": "exec-2", "x-role": "EXECUTIVE"}
OWNER_1 = {"x-user-id": "owner-1", "x-role": "OWNER"}
OWNER_2 = {"x-user-id": "owner-2", "x-role": "OWNER"}

SCHEDULE_BODY = {
    "executive_id": "exec-1",
    "owner_id": "owner-1",
    "contract_id": "contract-ok",
    "auction_end_date": "2026-02-16",
    "tier_offset_days": 2,
    "tier_duration_days": 3,
    "contract_deadline_date": "2026-02-21",
}


async def _schedule(client, slot_id="slot-1", **overrides):
    return await client.post(
        f"/api/v1/calendar/schedule/{slot_id}",
        json={**SCHEDULE_BODY, **overrides},
        headers=SYSTEM,
    )


# -- Identity ---------------------------------------------------------------------

async def test_missing_headers_is_401(client):
    res = await client.get("/api/v1/calendar/executive/exec-1")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHENTICATED"


async def test_unknown_role_is_401(client):
    res = await client.get(
        "/api/v1/calendar/executive/exec-1",
        headers={"x-user-id": "exec-1", "x-role": "ADMIN"},
    )
    assert res.status_code == 401


# -- Availability -----------------------------------------------------------------

async def test_executive_updates_own_availability(client):
    res = await client.post(
        "/api/v1/calendar/executive/exec-1",
        json={"availability": [
            {"date": "2026-02-10", "status": "AVAILABLE"},
            {"date": "2026-02-10", "status": "BLOCKED"},
        ]},
        headers=EXEC_1,
    )
    assert res.status_code == 200
    assert res.json()["availability"] == [{"date": "2026-02-10", "status": "BLOCKED"}]


async def test_executive_cannot_update_other_calendar(client):
    res = await client.post(
        "/api/v1/calendar/executive/exec-1",
        json={"availability": []},
        headers=EXEC_2,
    )
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


async def test_owner_cannot_update_availability(client):
    res = await client.post(
        "/api/v1/calendar/executive/exec-1", json={"availability": []}, headers=OWNER_1,
    )
    assert res.status_code == 403


async def test_bad_date_is_400(client):
    res = await client.post(
        "/api/v1/calendar/executive/exec-1",
        json={"availability": [{"date": "2026/02/10", "status": "AVAILABLE"}]},
        headers=EXEC_1,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_DATE_FORMAT"


async def test_unknown_status_is_validation_error(client):
    res = await client.post(
        "/api/v1/calendar/executive/exec-1",
        json={"availability": [{"date": "2026-02-10", "status": "MAYBE"}]},
        headers=EXEC_1,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_available_on_scheduled_day_is_409(client):
    await _schedule(client)
    res = await client.post(
        "/api/v1/calendar/executive/exec-1",
        json={"availability": [{"date": "2026-02-19", "status": "AVAILABLE"}]},
        headers=EXEC_1,
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "AVAILABILITY_CONFLICT"


# -- Scheduling -------------------------------------------------------------------

async def test_system_schedules_slot(client):
    res = await _schedule(client)

    assert res.status_code == 201
    body = res.json()
    assert (body["start_date"], body["end_date"]) == ("2026-02-18", "2026-02-20")
    assert body["status"] == "SCHEDULED"


async def test_only_system_schedules(client):
    res = await client.post(
        "/api/v1/calendar/schedule/slot-1", json=SCHEDULE_BODY, headers=OWNER_1,
    )
    assert res.status_code == 403


async def test_duplicate_and_overlap_are_409(client):
    await _schedule(client)

    duplicate = await _schedule(client)
    overlap = await _schedule(client, slot_id="slot-2", tier_offset_days=3)

    assert duplicate.json()["error"]["code"] == "DUPLICATE_SLOT"
    assert overlap.status_code == 409
    assert overlap.json()["error"]["code"] == "SLOT_OVERLAP"


async def test_zero_duration_rejected(client):
    res = await _schedule(client, tier_duration_days=0)
    assert res.status_code == 400


async def test_provisioning_failure_is_502(client, meet):
    meet.fail = True
    res = await _schedule(client)
    assert res.status_code == 502
    assert res.json()["error"]["code"] == "EXTERNAL_PROVISIONING_FAILURE"


# -- Calendar view ----------------------------------------------------------------

async def test_owner_sees_only_own_slots(client):
    await _schedule(client)
    await _schedule(client, slot_id="slot-2", owner_id="owner-2", tier_offset_days=10)

    mine = await client.get("/api/v1/calendar/executive/exec-1", headers=OWNER_2)
    everything = await client.get("/api/v1/calendar/executive/exec-1", headers=EXEC_1)

    assert [s["slot_id"] for s in mine.json()["scheduled_slots"]] == ["slot-2"]
    assert len(everything.json()["scheduled_slots"]) == 2


async def test_executive_cannot_view_other_calendar(client):
    res = await client.get("/api/v1/calendar/executive/exec-1", headers=EXEC_2)
    assert res.status_code == 403


# -- Cancellation -----------------------------------------------------------------

async def test_cancel_before_start(client):
    await _schedule(client)
    res = await client.post(
        "/api/v1/calendar/schedule/slot-1/cancel",
        json={"now_date": "2026-02-17"}, headers=SYSTEM,
    )
    assert res.status_code == 200
    assert res.json()["status"] == "CANCELED"


async def test_cancel_after_start_is_409(client):
    await _schedule(client)
    res = await client.post(
        "/api/v1/calendar/schedule/slot-1/cancel",
        json={"now_date": "2026-02-18"}, headers=SYSTEM,
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "ALREADY_STARTED"


async def test_cancel_unknown_slot_is_404(client):
    res = await client.post(
        "/api/v1/calendar/schedule/nope/cancel",
        json={"now_date": "2026-02-17"}, headers=SYSTEM,
    )
    assert res.status_code == 404


# -- Notifications and sweep ------------------------------------------------------

async def test_push_then_mark_read(client):
    pushed = await client.post(
        "/api/v1/calendar/notify/owner-1",
        json={"notifications": [
            {"type": "DEADLINE_ALERT", "reference_id": "slot-1", "message": "heads up"},
        ]},
        headers=SYSTEM,
    )
    notification_id = pushed.json()[0]["id"]

    read = await client.post(
        "/api/v1/calendar/notify/owner-1",
        json={"mark_read_ids": [notification_id]},
        headers=OWNER_1,
    )

    assert read.status_code == 200
    assert read.json()[0]["read"] is True


async def test_only_system_pushes(client):
    res = await client.post(
        "/api/v1/calendar/notify/owner-1",
        json={"notifications": [
            {"type": "DEADLINE_ALERT", "reference_id": "slot-1", "message": "x"},
        ]},
        headers=OWNER_1,
    )
    assert res.status_code == 403


async def test_cannot_mark_other_users_notifications(client):
    res = await client.post(
        "/api/v1/calendar/notify/owner-1",
        json={"mark_read_ids": ["anything"]},
        headers=OWNER_2,
    )
    assert res.status_code == 403


async def test_manual_sweep(client):
    await _schedule(client)
    res = await client.post(
        "/api/v1/calendar/sweep",
        json={"now": "2026-02-17T03:00:00Z"},
        headers=SYSTEM,
    )
    assert res.status_code == 200
    assert res.json() == {"created_notifications": 2, "transitioned": 0}


async def test_sweep_requires_system(client):
    res = await client.post("/api/v1/calendar/sweep", headers=EXEC_1)
    assert res.status_code == 403


# -- Health -----------------------------------------------------------------------

async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json() == {"status": "ready", "persistence": "in-memory"}


async def test_dates_outside_supported_calendar_are_400(client):
    year_zero = await _schedule(client, auction_end_date="0000-01-01")
    overflow = await _schedule(client, auction_end_date="9999-12-31", tier_offset_days=1)

    assert year_zero.status_code == 400
    assert year_zero.json()["error"]["code"] == "INVALID_DATE_FORMAT"
    assert overflow.status_code == 400
    assert overflow.json()["error"]["code"] == "INVALID_RANGE"
