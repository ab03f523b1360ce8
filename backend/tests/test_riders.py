"""
Rider applications, approval workflow and rider-scoped delivery lists.
"""
from pymongo.errors import PyMongoError

from conftest import auth_headers
from services import rider_service

APPLICATION = {
    "name": "Karim",
    "email": "r@x.com",
    "phone": "01700000000",
    "age": 24,
    "region": "Dhaka",
    "district": "Gazipur",
    "bike_brand": "Honda",
}


async def apply(client, user_headers, **overrides) -> dict:
    resp = await client.post("/riders", json={**APPLICATION, **overrides}, headers=user_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["rider"]


async def test_apply_creates_pending_rider(client, user_headers, admin_headers):
    rider = await apply(client, user_headers)
    assert rider["status"] == "pending"
    assert rider["work_status"] == "idle"

    resp = await client.get("/riders/pending", headers=admin_headers)
    assert [r["id"] for r in resp.json()] == [rider["id"]]


async def test_duplicate_pending_application_is_400(client, user_headers):
    await apply(client, user_headers)
    resp = await client.post("/riders", json=APPLICATION, headers=user_headers)
    assert resp.status_code == 400


async def test_approve_grants_rider_role(client, mongo, create_user, user_headers, admin_headers):
    await create_user("r@x.com")
    rider = await apply(client, user_headers)

    resp = await client.patch(
        f"/riders/approve/{rider['id']}",
        json={"status": "active", "email": "r@x.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["riderUpdate"]["modifiedCount"] == 1
    assert body["roleUpdate"]["modifiedCount"] == 1

    assert (await mongo.riders.find_one({"id": rider["id"]}))["status"] == "active"
    assert (await mongo.users.find_one({"email": "r@x.com"}))["role"] == "rider"

    # le nouveau livreur passe désormais le garde rider
    resp = await client.get("/parcels/rider/pending", headers=auth_headers("r@x.com"))
    assert resp.status_code == 200


async def test_approve_reports_missing_user(client, user_headers, admin_headers):
    rider = await apply(client, user_headers)
    resp = await client.patch(
        f"/riders/approve/{rider['id']}",
        json={"status": "active", "email": "r@x.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["riderUpdate"]["modifiedCount"] == 1
    assert resp.json()["roleUpdate"] == {"matchedCount": 0, "modifiedCount": 0}


async def test_approve_reports_role_write_error(client, mongo, monkeypatch, create_user, user_headers, admin_headers):
    await create_user("r@x.com")
    rider = await apply(client, user_headers)

    class FailingUsers:
        async def update_one(self, *args, **kwargs):
            raise PyMongoError("down")

    class StoreWithFailingUsers:
        users = FailingUsers()

        def __getattr__(self, name):
            return getattr(mongo, name)

    monkeypatch.setattr(rider_service, "db", StoreWithFailingUsers())

    resp = await client.patch(
        f"/riders/approve/{rider['id']}",
        json={"status": "active", "email": "r@x.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["riderUpdate"]["modifiedCount"] == 1
    assert body["roleUpdate"]["error"] == "down"
    assert body["roleUpdate"]["modifiedCount"] == 0

    # le statut livreur reste posé, le rôle n'a pas changé
    assert (await mongo.riders.find_one({"id": rider["id"]}))["status"] == "active"
    assert (await mongo.users.find_one({"email": "r@x.com"}))["role"] == "user"


async def test_approve_as_cancelled_does_not_touch_role(client, mongo, create_user, user_headers, admin_headers):
    await create_user("r@x.com")
    rider = await apply(client, user_headers)
    resp = await client.patch(
        f"/riders/approve/{rider['id']}",
        json={"status": "cancelled", "email": "r@x.com"},
        headers=admin_headers,
    )
    assert resp.json()["roleUpdate"] is None
    assert (await mongo.users.find_one({"email": "r@x.com"}))["role"] == "user"


async def test_approve_rejects_unknown_status(client, user_headers, admin_headers):
    rider = await apply(client, user_headers)
    resp = await client.patch(
        f"/riders/approve/{rider['id']}",
        json={"status": "deactivated", "email": "r@x.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


async def test_approve_unknown_rider_is_404(client, admin_headers):
    resp = await client.patch(
        "/riders/approve/rdr_missing",
        json={"status": "active", "email": "r@x.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 404


async def test_cancelled_rider_cannot_be_reactivated(client, user_headers, admin_headers):
    rider = await apply(client, user_headers)
    assert (await client.patch(f"/riders/cancel/{rider['id']}", headers=admin_headers)).status_code == 200

    resp = await client.patch(
        f"/riders/approve/{rider['id']}",
        json={"status": "active", "email": "r@x.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


async def test_deactivate_only_from_active(client, mongo, user_headers, admin_headers):
    rider = await apply(client, user_headers)
    resp = await client.patch(f"/riders/deactivate/{rider['id']}", headers=admin_headers)
    assert resp.status_code == 400

    await client.patch(
        f"/riders/approve/{rider['id']}",
        json={"status": "active", "email": "r@x.com"},
        headers=admin_headers,
    )
    resp = await client.patch(f"/riders/deactivate/{rider['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert (await mongo.riders.find_one({"id": rider["id"]}))["status"] == "deactivated"

    resp = await client.patch(f"/riders/deactivate/{rider['id']}", headers=admin_headers)
    assert resp.status_code == 400


async def test_list_active_by_district(client, create_rider, admin_headers):
    await create_rider(email="a@x.com", district="Gazipur")
    await create_rider(email="b@x.com", district="Sylhet")
    await create_rider(email="c@x.com", district="Gazipur", status="pending")

    resp = await client.get("/riders/active", params={"district": "Gazipur"}, headers=admin_headers)
    assert [r["email"] for r in resp.json()] == ["a@x.com"]

    resp = await client.get("/riders/active", headers=admin_headers)
    assert sorted(r["email"] for r in resp.json()) == ["a@x.com", "b@x.com"]


async def test_rider_delivery_lists(client, create_parcel, create_rider, admin_headers, rider_headers):
    rider = await create_rider()
    titles = ["assigned", "moving", "done", "at-center"]
    parcels = {}
    for title in titles:
        parcel = await create_parcel(title=title)
        parcels[title] = parcel["id"]
        await client.patch(
            "/parcels/assignRider",
            json={"parcelId": parcel["id"], "riderId": rider["id"], "riderEmail": rider["email"], "riderName": "Rahim"},
            headers=admin_headers,
        )
    await create_parcel(title="unassigned")

    steps = {
        "moving": ["in_transit"],
        "done": ["in_transit", "delivered"],
        "at-center": ["in_transit", "delivered_to_center"],
    }
    for title, statuses in steps.items():
        for status in statuses:
            resp = await client.patch(
                "/parcels/updateStatus", json={"parcelId": parcels[title], "status": status}, headers=rider_headers,
            )
            assert resp.status_code == 200

    pending = await client.get("/parcels/rider/pending", params={"email": "rider@x.com"}, headers=rider_headers)
    assert sorted(p["title"] for p in pending.json()) == ["assigned", "moving"]

    completed = await client.get("/rider/delivery/completed", params={"email": "rider@x.com"}, headers=rider_headers)
    assert sorted(p["title"] for p in completed.json()) == ["at-center", "done"]


async def test_rider_lists_require_rider_role(client, user_headers):
    assert (await client.get("/parcels/rider/pending", headers=user_headers)).status_code == 403
    assert (await client.get("/rider/delivery/completed")).status_code == 401
