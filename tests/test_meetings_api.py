# tests/test_meetings_api.py
from datetime import timedelta
from http import HTTPStatus
from typing import Any

from board_meetings.db.session import get_db

BASE_PAYLOAD: dict[str, Any] = {
    "board_id": "main-board",
    "title": "Q1 Board Meeting",
    "meeting_type": "regular",
    "location_type": "hybrid",
    "schedule": {
        "scheduled_date": "2026-03-10",
        "start_time": "10:00:00",
        "duration_minutes": 120,
    },
    "setup": {
        "agenda_item_count": 3,
        "document_count": 1,
        "has_chairman": True,
        "has_secretary": True,
    },
    "created_by": "17",
}


def _create(client, **overrides) -> dict:
    resp = client.post("/meetings", json={**BASE_PAYLOAD, **overrides})
    assert resp.status_code == HTTPStatus.CREATED, resp.text
    return resp.json()["meetings"][0]


def test_create_meeting_returns_201_and_pending_approval(client):
    """
    POST /meetings for a complete main-board meeting returns the meeting
    already waiting for approval.
    """
    resp = client.post("/meetings", json=BASE_PAYLOAD)

    assert resp.status_code == HTTPStatus.CREATED
    data = resp.json()
    assert data["series_id"] is None
    assert data["truncated"] is False
    meeting = data["meetings"][0]
    assert meeting["status"] == "scheduled"
    assert meeting["sub_status"] == "pending_approval"
    assert meeting["end_time"] == "12:00:00"
    assert data["occurrences"][0]["status"] == "created"


def test_full_lifecycle_over_http(client, clock):
    meeting = _create(client)
    meeting_id = meeting["id"]

    resp = client.post(f"/meetings/{meeting_id}/approve", json={"approver_id": "5"})
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["sub_status"] == "approved"

    clock.advance(timedelta(days=9, hours=1))
    resp = client.post(f"/meetings/{meeting_id}/start", json={"actor_id": "3"})
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["status"] == "in_progress"

    clock.advance(timedelta(hours=2))
    resp = client.post(f"/meetings/{meeting_id}/end", json={"actor_id": "3"})
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["sub_status"] == "recent"

    resp = client.post(f"/meetings/{meeting_id}/archive", json={"actor_id": "17"})
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["sub_status"] == "archived"

    events = client.get(f"/meetings/{meeting_id}/events").json()
    assert [e["event_type"] for e in events] == [
        "meeting_created",
        "submitted_for_approval",
        "approved",
        "meeting_started",
        "meeting_ended",
        "archived",
    ]
    assert [e["sequence"] for e in events] == [1, 2, 3, 4, 5, 6]


def test_invalid_transition_returns_409_with_state(client):
    meeting = _create(client)

    resp = client.post(f"/meetings/{meeting['id']}/start", json={"actor_id": "3"})

    assert resp.status_code == HTTPStatus.CONFLICT
    body = resp.json()
    assert body["error"] == "InvalidTransitionError"
    assert body["current_state"] == "scheduled.pending_approval"
    assert body["requested"] == "start"


def test_unauthorized_approver_returns_403(client):
    meeting = _create(client)

    resp = client.post(f"/meetings/{meeting['id']}/approve", json={"approver_id": "99"})

    assert resp.status_code == HTTPStatus.FORBIDDEN
    assert resp.json()["error"] == "AuthorizationError"


def test_reject_with_empty_reason_returns_422(client):
    meeting = _create(client)

    resp = client.post(
        f"/meetings/{meeting['id']}/reject",
        json={"approver_id": "5", "reason": "   "},
    )

    assert resp.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert resp.json()["error"] == "ValidationError"


def test_unknown_meeting_returns_404(client):
    resp = client.get("/meetings/does-not-exist")

    assert resp.status_code == HTTPStatus.NOT_FOUND
    assert resp.json()["error"] == "NotFoundError"


def test_series_with_past_occurrence_returns_207(client):
    """
    Occurrences before 'now' fail individually; the rest are created and the
    response uses 207 Multi-Status.
    """
    payload = {
        **BASE_PAYLOAD,
        "schedule": {"scheduled_date": "2026-02-23", "start_time": "09:00:00", "duration_minutes": 60},
        "recurrence": {"frequency": "weekly", "weekdays": ["monday"], "occurrence_count": 3},
    }

    resp = client.post("/meetings", json=payload)

    assert resp.status_code == HTTPStatus.MULTI_STATUS
    data = resp.json()
    assert [o["status"] for o in data["occurrences"]] == ["failed", "created", "created"]
    assert data["occurrences"][0]["error"] == "ValidationError"

    series = client.get(f"/meetings/series/{data['series_id']}").json()
    assert [m["scheduled_date"] for m in series] == ["2026-03-02", "2026-03-09"]


def test_reschedule_cancel_and_confirmation_over_http(client):
    meeting = _create(client)
    meeting_id = meeting["id"]
    client.post(f"/meetings/{meeting_id}/approve", json={"approver_id": "5"})

    confirmation = client.get(f"/meetings/{meeting_id}/confirmation").json()
    assert confirmation["status"] == "approved"
    assert confirmation["decided_by"] == "Peter Otieno"

    resp = client.post(
        f"/meetings/{meeting_id}/reschedule",
        json={"actor_id": "17", "scheduled_date": "2026-03-12", "start_time": "14:00:00"},
    )
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["sub_status"] == "pending_approval"
    assert client.get(f"/meetings/{meeting_id}/confirmation").json()["status"] == "pending"

    resp = client.post(f"/meetings/{meeting_id}/cancel", json={"actor_id": "17", "reason": "Clash"})
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["sub_status"] is None


def test_setup_then_submit_over_http(client):
    meeting = _create(client, setup={"agenda_item_count": 0}, auto_submit=False)
    assert meeting["sub_status"] == "incomplete"

    resp = client.post(
        f"/meetings/{meeting['id']}/setup",
        json={
            "actor_id": "17",
            "setup": {
                "agenda_item_count": 3,
                "document_count": 0,
                "has_chairman": True,
                "has_secretary": True,
            },
        },
    )
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["sub_status"] == "complete"

    resp = client.post(f"/meetings/{meeting['id']}/submit", json={"actor_id": "17"})
    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["sub_status"] == "pending_approval"


def test_record_activity_event(client):
    meeting = _create(client)

    resp = client.post(
        f"/meetings/{meeting['id']}/events",
        json={"actor_id": "17", "payload": {"event_type": "agenda_published", "item_count": 4}},
    )
    assert resp.status_code == HTTPStatus.CREATED
    assert resp.json()["sequence"] == 3
    assert resp.json()["payload"]["item_count"] == 4

    resp = client.post(
        f"/meetings/{meeting['id']}/events",
        json={"actor_id": "17", "payload": {"event_type": "meeting_cancelled", "reason": "sneaky"}},
    )
    assert resp.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_quorum_endpoint(client):
    meeting = _create(client)

    resp = client.get(f"/meetings/{meeting['id']}/quorum")

    assert resp.status_code == HTTPStatus.OK
    assert resp.json() == {
        "participant_count": 10,
        "guest_count": 2,
        "non_guest_count": 8,
        "quorum_percentage": 50.0,
        "required_count": 4,
        "can_meet_quorum": True,
    }


def test_recurrence_preview(client):
    resp = client.post(
        "/recurrence/preview",
        json={
            "start_date": "2026-01-01",
            "pattern": {
                "frequency": "monthly",
                "monthly_rule": "day_of_week",
                "week_of_month": -1,
                "day_of_week": "friday",
                "occurrence_count": 3,
                "exclude_dates": ["2026-02-27"],
            },
        },
    )

    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["occurrences"] == [
        {"position": 1, "date": "2026-01-30", "excluded": False},
        {"position": 2, "date": "2026-02-27", "excluded": True},
        {"position": 3, "date": "2026-03-27", "excluded": False},
    ]
    assert data["truncated"] is False


def test_recurrence_preview_does_not_touch_the_database(client):
    def _no_db():
        raise AssertionError("preview opened a database session")

    client.app.dependency_overrides[get_db] = _no_db
    try:
        resp = client.post(
            "/recurrence/preview",
            json={
                "start_date": "2026-03-02",
                "pattern": {"frequency": "weekly", "weekdays": ["monday"], "occurrence_count": 2},
            },
        )
    finally:
        client.app.dependency_overrides.pop(get_db)

    assert resp.status_code == HTTPStatus.OK
    assert [o["date"] for o in resp.json()["occurrences"]] == ["2026-03-02", "2026-03-09"]


def test_recurrence_preview_rejects_empty_pattern(client):
    resp = client.post(
        "/recurrence/preview",
        json={"start_date": "2026-01-05", "pattern": {"frequency": "weekly"}},
    )

    assert resp.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert resp.json()["error"] == "RecurrenceBoundsError"


def test_archive_run_over_http(client, clock):
    meeting = _create(client, board_id="factory-board")

    clock.advance(timedelta(days=9, hours=1))
    client.post(f"/meetings/{meeting['id']}/start", json={"actor_id": "3"})
    client.post(f"/meetings/{meeting['id']}/end", json={"actor_id": "3"})

    resp = client.post("/internal/run-archive?as_of=2026-04-15T00:00:00Z")

    assert resp.status_code == HTTPStatus.OK
    assert resp.json()["archived_ids"] == [meeting["id"]]
    assert client.get(f"/meetings/{meeting['id']}").json()["sub_status"] == "archived"
