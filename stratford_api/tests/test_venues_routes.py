from datetime import datetime, timedelta

from stratford_api.database.models import Event, Venue

VENUE_PAYLOAD = {
    "name": "Revival House",
    "address": "70 Brunswick St, Stratford, ON",
    "website": "https://revivalhouse.example.com",
    "capacity": 250,
    "amenities": ["Bar", "Parking"],
}


def add_event(db, venue, title, status="PUBLISHED", day=1):
    start = datetime(2025, 9, day, 20, 0)
    with db.session() as session:
        session.add(Event(
            venue_id=venue.id,
            title=title,
            description="Live",
            start_time=start,
            end_time=start + timedelta(hours=2),
            category="LIVE_MUSIC",
            status=status,
        ))
        session.commit()


def test_create_venue(client, auth_header, make_user):
    user, token = make_user(role="VENUE", name="Venue Owner")

    response = client.post("/api/venues", json=VENUE_PAYLOAD, headers=auth_header(token))

    assert response.status_code == 201
    venue = response.get_json()["data"]["venue"]
    assert venue["userId"] == user.id
    assert venue["capacity"] == 250
    assert venue["amenities"] == ["Bar", "Parking"]
    assert venue["website"] == "https://revivalhouse.example.com"
    assert venue["user"] == {"id": user.id, "name": "Venue Owner", "email": user.email}


def test_create_venue_requires_token(client):
    response = client.post("/api/venues", json=VENUE_PAYLOAD)
    assert response.status_code == 401


def test_create_second_venue_rejected(client, auth_header, make_user, make_venue):
    user, token = make_user(role="VENUE")
    make_venue(user)

    response = client.post("/api/venues", json=VENUE_PAYLOAD, headers=auth_header(token))
    assert response.status_code == 400
    assert response.get_json()["error"] == "User can only have one venue"


def test_create_venue_validation(client, auth_header, make_user):
    _, token = make_user(role="VENUE")

    response = client.post(
        "/api/venues",
        json={"name": "", "website": "not a url", "capacity": 0},
        headers=auth_header(token),
    )
    assert response.status_code == 400
    paths = {d["path"] for d in response.get_json()["details"]}
    assert {"name", "address", "website", "capacity"} <= paths


def test_list_venues_with_search_and_counts(client, db, make_user, make_venue):
    first_owner, _ = make_user(role="VENUE")
    second_owner, _ = make_user(role="VENUE")
    avon = make_venue(first_owner, name="Avon Theatre", address="99 Downie St")
    make_venue(second_owner, name="Bentley's", address="99 Ontario St")
    add_event(db, avon, "Hamlet")
    add_event(db, avon, "Macbeth", day=2)

    response = client.get("/api/venues")
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert [v["name"] for v in data["venues"]] == ["Avon Theatre", "Bentley's"]
    assert data["venues"][0]["_count"] == {"events": 2}
    assert data["venues"][1]["_count"] == {"events": 0}
    assert data["venues"][0]["user"]["id"] == first_owner.id
    assert data["pagination"]["total"] == 2

    response = client.get("/api/venues?search=ontario")
    assert [v["name"] for v in response.get_json()["data"]["venues"]] == ["Bentley's"]

    # Wildcard characters are matched literally
    for term in ("%25", "_", "%25_%25"):
        response = client.get(f"/api/venues?search={term}")
        assert response.get_json()["data"]["venues"] == []
    response = client.get("/api/venues?search=bentley's")
    assert [v["name"] for v in response.get_json()["data"]["venues"]] == ["Bentley's"]

    response = client.get("/api/venues?limit=1&page=2")
    data = response.get_json()["data"]
    assert [v["name"] for v in data["venues"]] == ["Bentley's"]
    assert data["pagination"]["pages"] == 2


def test_get_venue_shows_published_events_only(client, db, make_user, make_venue):
    owner, _ = make_user(role="VENUE")
    venue = make_venue(owner)
    add_event(db, venue, "Public Show")
    add_event(db, venue, "Draft Show", status="DRAFT")

    response = client.get(f"/api/venues/{venue.id}")
    assert response.status_code == 200
    data = response.get_json()["data"]["venue"]
    assert [e["title"] for e in data["events"]] == ["Public Show"]

    assert client.get("/api/venues/missing").status_code == 404


def test_get_my_venue(client, db, auth_header, make_user, make_venue):
    owner, token = make_user(role="VENUE")
    venue = make_venue(owner)
    add_event(db, venue, "Draft Show", status="DRAFT")

    response = client.get("/api/venues/mine", headers=auth_header(token))
    assert response.status_code == 200
    data = response.get_json()["data"]["venue"]
    assert data["id"] == venue.id
    assert [e["title"] for e in data["events"]] == ["Draft Show"]


def test_get_my_venue_without_one(client, auth_header, make_user):
    _, token = make_user(role="VENUE")

    response = client.get("/api/venues/mine", headers=auth_header(token))
    assert response.status_code == 403
    assert response.get_json()["error"] == "Venue access required"

    assert client.get("/api/venues/mine").status_code == 401


def test_update_venue(client, auth_header, make_user, make_venue):
    owner, token = make_user(role="VENUE")
    venue = make_venue(owner)
    _, other_token = make_user(role="VENUE")

    response = client.put(
        f"/api/venues/{venue.id}", json={"capacity": 120}, headers=auth_header(other_token)
    )
    assert response.status_code == 403
    assert response.get_json()["error"] == "You can only update your own venue"

    response = client.put(
        f"/api/venues/{venue.id}",
        json={"capacity": 120, "description": " Cosy room "},
        headers=auth_header(token),
    )
    assert response.status_code == 200
    data = response.get_json()["data"]["venue"]
    assert data["capacity"] == 120
    assert data["description"] == "Cosy room"
    assert data["name"] == venue.name


def test_delete_venue_removes_its_events(client, db, auth_header, make_user, make_venue):
    owner, token = make_user(role="VENUE")
    venue = make_venue(owner)
    add_event(db, venue, "Hamlet")
    _, other_token = make_user(role="VENUE")

    response = client.delete(f"/api/venues/{venue.id}", headers=auth_header(other_token))
    assert response.status_code == 403
    assert response.get_json()["error"] == "You can only delete your own venue"

    response = client.delete(f"/api/venues/{venue.id}", headers=auth_header(token))
    assert response.status_code == 200
    assert response.get_json()["message"] == "Venue deleted successfully"

    with db.session() as session:
        assert session.get(Venue, venue.id) is None
        assert session.query(Event).count() == 0
