"""
Tests for trip creation, editing, listing, collections and deletion.
"""
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from travel_planner.application.trip_service import TripService
from travel_planner.auth.models import UserModel
from travel_planner.config import settings
from travel_planner.domain.errors import NotFoundError
from travel_planner.domain.schemas import TripCreateRequest, TripUpdateRequest
from travel_planner.infrastructure.models import ActivityModel, DayModel

from conftest import create_trip


async def _delete(client, user, kind, target_id):
    response = await client.post(
        "/api/deletions",
        json={"target": {"kind": kind, "id": target_id}},
        headers=user["headers"],
    )
    assert response.status_code == 200, response.text
    return await client.post(
        "/api/deletions/confirm",
        json={"token": response.json()["token"]},
        headers=user["headers"],
    )


async def test_create_trip_generates_days(client, alice):
    """Trip "Rome Trip" 06-01..06-03 gets days 1, 2, 3."""
    response = await client.post(
        "/api/trips",
        json={
            "title": "Rome Trip",
            "destination": "Rome",
            "start_date": "2025-06-01",
            "end_date": "2025-06-03",
            "lodging_name": "Hotel Artemide",
            "arrival_info": "FCO",
        },
        headers=alice["headers"],
    )

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Rome Trip"
    assert data["role"] == "owner"
    assert data["owner_id"] == alice["user"]["id"]
    assert data["lodging_name"] == "Hotel Artemide"
    assert data["collection_id"] is None
    assert [(d["day_number"], d["date"]) for d in data["days"]] == [
        (1, "2025-06-01"),
        (2, "2025-06-02"),
        (3, "2025-06-03"),
    ]
    # No Unsplash key in tests: placeholder cover
    assert data["image_url"] == settings.default_cover_image_url


async def test_create_trip_requires_auth(client):
    response = await client.post(
        "/api/trips",
        json={"title": "X", "destination": "Rome", "start_date": "2025-06-01", "end_date": "2025-06-02"},
    )
    assert response.status_code in (401, 403)


@pytest.mark.parametrize("start,end", [
    ("2025-06-03", "2025-06-01"),
    ("2025-06-01", "2025-07-02"),
])
async def test_invalid_date_ranges_rejected(client, alice, start, end):
    response = await client.post(
        "/api/trips",
        json={"title": "Bad", "destination": "Rome", "start_date": start, "end_date": end},
        headers=alice["headers"],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_DATE_RANGE"

    listing = await client.get("/api/trips", headers=alice["headers"])
    assert listing.json()["total"] == 0


async def test_blank_title_rejected(client, alice):
    response = await client.post(
        "/api/trips",
        json={"title": "   ", "destination": "Rome", "start_date": "2025-06-01", "end_date": "2025-06-02"},
        headers=alice["headers"],
    )
    assert response.status_code == 400
    assert response.json() == {"code": "VALIDATION_ERROR", "message": "Title is required."}


async def test_trip_is_private_to_its_owner(client, alice, bob):
    trip = await create_trip(client, alice)

    response = await client.get(f"/api/trips/{trip['id']}", headers=bob["headers"])
    assert response.status_code == 404

    listing = await client.get("/api/trips", headers=bob["headers"])
    assert listing.json() == {"trips": [], "total": 0}


async def test_list_is_ordered_by_start_date(client, alice):
    await create_trip(client, alice, title="Later", start_date="2025-08-01", end_date="2025-08-02")
    await create_trip(client, alice, title="Sooner", start_date="2025-06-01", end_date="2025-06-02")

    response = await client.get("/api/trips", headers=alice["headers"])

    assert [t["title"] for t in response.json()["trips"]] == ["Sooner", "Later"]


async def test_extending_dates_adds_days(client, alice):
    trip = await create_trip(client, alice)

    response = await client.patch(
        f"/api/trips/{trip['id']}",
        json={"end_date": "2025-06-05", "title": "Rome & Naples"},
        headers=alice["headers"],
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Rome & Naples"
    assert [d["day_number"] for d in data["days"]] == [1, 2, 3, 4, 5]
    assert data["days"][0]["id"] == trip["days"][0]["id"]


async def test_shrinking_dates_blocked_by_activities(client, alice):
    trip = await create_trip(client, alice)
    last_day = trip["days"][-1]["id"]
    await client.post(
        f"/api/trips/{trip['id']}/days/{last_day}/activities",
        json={"title": "Colosseum", "start_time": "09:00", "duration_minutes": 120},
        headers=alice["headers"],
    )

    response = await client.patch(
        f"/api/trips/{trip['id']}",
        json={"end_date": "2025-06-02"},
        headers=alice["headers"],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    detail = await client.get(f"/api/trips/{trip['id']}", headers=alice["headers"])
    assert len(detail.json()["days"]) == 3


async def test_patch_rejects_inverted_dates(client, alice):
    trip = await create_trip(client, alice)

    response = await client.patch(
        f"/api/trips/{trip['id']}",
        json={"start_date": "2025-06-10"},
        headers=alice["headers"],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_DATE_RANGE"


async def test_delete_trip_cascades(client, db, alice):
    trip = await create_trip(client, alice)
    await client.post(
        f"/api/trips/{trip['id']}/days/{trip['days'][0]['id']}/activities",
        json={"title": "Pantheon", "start_time": "10:00"},
        headers=alice["headers"],
    )

    response = await _delete(client, alice, "trip", trip["id"])

    assert response.status_code == 200
    assert response.json() == {"target": {"kind": "trip", "id": trip["id"]}, "deleted": True}
    assert (await client.get(f"/api/trips/{trip['id']}", headers=alice["headers"])).status_code == 404
    assert (await db.execute(select(func.count(DayModel.id)))).scalar_one() == 0
    assert (await db.execute(select(func.count(ActivityModel.id)))).scalar_one() == 0


class TestCollections:

    async def _collection(self, client, user, title="Summer"):
        response = await client.post("/api/collections", json={"title": title}, headers=user["headers"])
        assert response.status_code == 201
        return response.json()

    async def test_move_into_collection_checks_overlap(self, client, alice):
        """X (06-01..06-05) is in Summer; Y (06-04..06-06) is refused, Z (06-06..06-08) fits."""
        summer = await self._collection(client, alice)
        trip_x = await create_trip(
            client, alice, title="Trip X", start_date="2025-06-01", end_date="2025-06-05",
            collection_id=summer["id"],
        )
        trip_y = await create_trip(client, alice, title="Trip Y", start_date="2025-06-04", end_date="2025-06-06")
        trip_z = await create_trip(client, alice, title="Trip Z", start_date="2025-06-06", end_date="2025-06-08")

        rejected = await client.put(
            f"/api/trips/{trip_y['id']}/collection",
            json={"collection_id": summer["id"]},
            headers=alice["headers"],
        )
        accepted = await client.put(
            f"/api/trips/{trip_z['id']}/collection",
            json={"collection_id": summer["id"]},
            headers=alice["headers"],
        )

        assert rejected.status_code == 409
        assert rejected.json()["code"] == "OVERLAP_CONFLICT"
        assert "Trip X" in rejected.json()["message"]
        assert accepted.status_code == 200
        assert accepted.json()["collection_id"] == summer["id"]

        detail = await client.get(f"/api/collections/{summer['id']}", headers=alice["headers"])
        assert [t["id"] for t in detail.json()["trips"]] == [trip_x["id"], trip_z["id"]]
        assert detail.json()["trip_count"] == 2

    async def test_create_inside_collection_checks_overlap(self, client, alice):
        summer = await self._collection(client, alice)
        await create_trip(
            client, alice, title="Trip X", start_date="2025-06-01", end_date="2025-06-05",
            collection_id=summer["id"],
        )

        response = await client.post(
            "/api/trips",
            json={
                "title": "Trip Y",
                "destination": "Naples",
                "start_date": "2025-06-04",
                "end_date": "2025-06-07",
                "collection_id": summer["id"],
            },
            headers=alice["headers"],
        )

        assert response.status_code == 409
        assert response.json()["code"] == "OVERLAP_CONFLICT"
        listed = await client.get("/api/trips", params={"collection_id": summer["id"]}, headers=alice["headers"])
        assert [t["title"] for t in listed.json()["trips"]] == ["Trip X"]

    async def test_date_edit_inside_collection_ignores_itself(self, client, alice):
        summer = await self._collection(client, alice)
        await create_trip(
            client, alice, title="Trip X", start_date="2025-06-01", end_date="2025-06-05",
            collection_id=summer["id"],
        )
        trip_z = await create_trip(
            client, alice, title="Trip Z", start_date="2025-06-10", end_date="2025-06-12",
            collection_id=summer["id"],
        )

        clash = await client.patch(
            f"/api/trips/{trip_z['id']}",
            json={"start_date": "2025-06-04"},
            headers=alice["headers"],
        )
        shifted = await client.patch(
            f"/api/trips/{trip_z['id']}",
            json={"start_date": "2025-06-09", "end_date": "2025-06-11"},
            headers=alice["headers"],
        )

        assert clash.status_code == 409
        assert clash.json()["code"] == "OVERLAP_CONFLICT"
        assert "Trip X" in clash.json()["message"]
        assert shifted.status_code == 200, shifted.text
        assert shifted.json()["start_date"] == "2025-06-09"
        assert shifted.json()["end_date"] == "2025-06-11"

    async def test_standalone_filter(self, client, alice):
        summer = await self._collection(client, alice)
        await create_trip(client, alice, title="Inside", collection_id=summer["id"])
        await create_trip(client, alice, title="Outside", start_date="2025-09-01", end_date="2025-09-02")

        standalone = await client.get("/api/trips", params={"standalone": "true"}, headers=alice["headers"])
        inside = await client.get("/api/trips", params={"collection_id": summer["id"]}, headers=alice["headers"])

        assert [t["title"] for t in standalone.json()["trips"]] == ["Outside"]
        assert [t["title"] for t in inside.json()["trips"]] == ["Inside"]

    async def test_list_counts_trips(self, client, alice):
        summer = await self._collection(client, alice)
        await self._collection(client, alice, title="Winter")
        await create_trip(client, alice, collection_id=summer["id"])

        response = await client.get("/api/collections", headers=alice["headers"])

        counts = {c["title"]: c["trip_count"] for c in response.json()}
        assert counts == {"Summer": 1, "Winter": 0}

    async def test_deleting_collection_detaches_trips(self, client, alice):
        summer = await self._collection(client, alice)
        trip = await create_trip(client, alice, collection_id=summer["id"])

        response = await _delete(client, alice, "collection", summer["id"])

        assert response.status_code == 200
        survivor = await client.get(f"/api/trips/{trip['id']}", headers=alice["headers"])
        assert survivor.status_code == 200
        assert survivor.json()["collection_id"] is None

    async def test_collections_are_private(self, client, alice, bob):
        summer = await self._collection(client, alice)
        bobs_trip = await create_trip(client, bob)

        assert (await client.get(f"/api/collections/{summer['id']}", headers=bob["headers"])).status_code == 404
        response = await client.put(
            f"/api/trips/{bobs_trip['id']}/collection",
            json={"collection_id": summer["id"]},
            headers=bob["headers"],
        )
        assert response.status_code == 404


class FakeImageSearch:
    def __init__(self):
        self.queries = []

    async def cover_image_for(self, destination):
        self.queries.append(destination)
        return f"https://images.test/{destination.lower()}.jpg"


class TestTripServiceCoverImage:

    @pytest.fixture
    async def owner(self, db):
        user = UserModel(email="owner@example.com", display_name="Owner")
        db.add(user)
        await db.flush()
        return user

    async def test_destination_change_fetches_new_cover(self, db, owner):
        images = FakeImageSearch()
        service = TripService(image_search=images)
        view = await service.create_trip(db, owner.id, TripCreateRequest(
            title="Italy", destination="Rome", start_date="2025-06-01", end_date="2025-06-02",
        ))
        assert view.trip.image_url == "https://images.test/rome.jpg"

        await service.update_trip(db, view.trip.id, owner.id, TripUpdateRequest(destination="ROME"))
        assert images.queries == ["Rome"]

        updated = await service.update_trip(db, view.trip.id, owner.id, TripUpdateRequest(destination="Florence"))
        assert images.queries == ["Rome", "Florence"]
        assert updated.trip.image_url == "https://images.test/florence.jpg"
        assert updated.trip.destination == "Florence"

    async def test_get_unknown_trip(self, db, owner):
        with pytest.raises(NotFoundError):
            await TripService(image_search=FakeImageSearch()).get_trip(db, uuid4(), owner.id)
