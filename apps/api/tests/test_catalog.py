from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.models.user import UserRole
from tests.test_auth_identity import auth_headers, token_for

HUB = {"name": "Lagos Hub", "city": "Lagos", "country": "Nigeria", "address": "1 Marina Rd"}


def _starts(days: int = 7) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def create_hub(client: TestClient, token: str, **overrides):
    return client.post("/api/hubs", json={**HUB, **overrides}, headers=auth_headers(token))


def create_event(client: TestClient, token: str, **overrides):
    payload = {
        "title": "AI Product Night",
        "description": "Demos and talks",
        "startDateTime": _starts(),
        "eventType": "meetup",
        "focusAreas": ["product", "engineering"],
        "isPublished": True,
    }
    payload.update(overrides)
    return client.post("/api/events", json=payload, headers=auth_headers(token))


def test_hub_creation_requires_admin(client: TestClient, db_session):
    assert client.post("/api/hubs", json=HUB).status_code == 401

    member = token_for(db_session, "member@example.com")
    resp = create_hub(client, member)
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "FORBIDDEN"

    ambassador = token_for(db_session, "amb@example.com", UserRole.AMBASSADOR)
    assert create_hub(client, ambassador).status_code == 403

    admin = token_for(db_session, "admin@example.com", UserRole.ADMIN)
    resp = create_hub(client, admin)
    assert resp.status_code == 201
    assert resp.json()["name"] == "Lagos Hub"


def test_hubs_are_public(client: TestClient, db_session):
    admin = token_for(db_session, "admin@example.com", UserRole.ADMIN)
    hub_id = create_hub(client, admin).json()["id"]

    listed = client.get("/api/hubs")
    assert listed.status_code == 200
    assert [h["id"] for h in listed.json()] == [hub_id]
    assert client.get(f"/api/hubs/{hub_id}").json()["city"] == "Lagos"


def test_unknown_hub_is_404(client: TestClient):
    resp = client.get("/api/hubs/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "HUB_NOT_FOUND"


def test_create_event_links_hubs_with_first_primary(client: TestClient, db_session):
    admin = token_for(db_session, "admin@example.com", UserRole.ADMIN)
    first = create_hub(client, admin, name="Accra Hub").json()["id"]
    second = create_hub(client, admin, name="Lagos Hub").json()["id"]

    resp = create_event(client, admin, hubIds=[first, second])
    assert resp.status_code == 201
    body = resp.json()
    assert body["focusAreas"] == ["product", "engineering"]
    primary = {he["hubId"]: he["isPrimary"] for he in body["hubEvents"]}
    assert primary == {first: True, second: False}


def test_event_listing_hides_unpublished_and_filters_by_hub(client: TestClient, db_session):
    admin = token_for(db_session, "admin@example.com", UserRole.ADMIN)
    accra = create_hub(client, admin, name="Accra Hub").json()["id"]
    lagos = create_hub(client, admin, name="Lagos Hub").json()["id"]

    create_event(client, admin, title="Accra Meetup", hubIds=[accra])
    create_event(client, admin, title="Lagos Meetup", hubIds=[lagos])
    draft = create_event(client, admin, title="Draft", isPublished=False, hubIds=[lagos]).json()

    listed = client.get("/api/events").json()
    assert listed["total"] == 2
    assert {e["title"] for e in listed["items"]} == {"Accra Meetup", "Lagos Meetup"}

    filtered = client.get("/api/events", params={"hubId": lagos}).json()
    assert [e["title"] for e in filtered["items"]] == ["Lagos Meetup"]

    assert client.get(f"/api/events/{draft['id']}").status_code == 404


def test_event_rejects_end_before_start(client: TestClient, db_session):
    admin = token_for(db_session, "admin@example.com", UserRole.ADMIN)
    start = datetime.now(timezone.utc) + timedelta(days=3)
    resp = create_event(
        client,
        admin,
        startDateTime=start.isoformat(),
        endDateTime=(start - timedelta(hours=1)).isoformat(),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_patch_event(client: TestClient, db_session):
    admin = token_for(db_session, "admin@example.com", UserRole.ADMIN)
    event = create_event(client, admin).json()

    resp = client.patch(
        f"/api/events/{event['id']}",
        json={"title": "Renamed", "capacity": 40},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Renamed"
    assert resp.json()["capacity"] == 40

    bad = client.patch(
        f"/api/events/{event['id']}",
        json={"endDateTime": (datetime.now(timezone.utc) - timedelta(days=30)).isoformat()},
        headers=auth_headers(admin),
    )
    assert bad.status_code == 400


def test_hub_event_link_conflict(client: TestClient, db_session):
    admin = token_for(db_session, "admin@example.com", UserRole.ADMIN)
    hub_id = create_hub(client, admin).json()["id"]
    event_id = create_event(client, admin).json()["id"]

    payload = {"hubId": hub_id, "eventId": event_id, "capacity": 25}
    first = client.post("/api/hub-events", json=payload, headers=auth_headers(admin))
    assert first.status_code == 201
    assert first.json()["capacity"] == 25

    second = client.post("/api/hub-events", json=payload, headers=auth_headers(admin))
    assert second.status_code == 409
    assert second.json()["detail"]["code"] == "HUB_EVENT_EXISTS"
