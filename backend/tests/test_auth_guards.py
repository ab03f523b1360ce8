"""
Authorization gate: missing credential → 401, rejected credential or wrong
role → 403, correct role → handler runs.
"""
from datetime import timedelta

import pytest
from jose import jwt

from config import settings
from conftest import auth_headers
from core.security import IdentityVerifier, create_access_token


def test_verifier_extracts_email():
    verifier = IdentityVerifier(secret="s3cret")
    token = jwt.encode({"sub": "u1", "email": "A@X.com"}, "s3cret", algorithm="HS256")
    assert verifier.verify(token) == {"email": "a@x.com", "uid": "u1"}


def test_verifier_rejects_bad_signature():
    verifier = IdentityVerifier(secret="s3cret")
    token = jwt.encode({"email": "a@x.com"}, "other", algorithm="HS256")
    assert verifier.verify(token) is None


def test_verifier_rejects_token_without_email():
    verifier = IdentityVerifier(secret="s3cret")
    token = jwt.encode({"sub": "u1"}, "s3cret", algorithm="HS256")
    assert verifier.verify(token) is None


def test_verifier_rejects_non_string_email():
    verifier = IdentityVerifier(secret="s3cret")
    token = jwt.encode({"sub": "u1", "email": 12345}, "s3cret", algorithm="HS256")
    assert verifier.verify(token) is None


async def test_non_string_email_claim_is_403(client):
    token = jwt.encode({"sub": "u1", "email": 12345}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    resp = await client.get("/parcels", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_verifier_checks_audience():
    verifier = IdentityVerifier(secret="s3cret", audience="parcel-app")
    good = jwt.encode({"email": "a@x.com", "aud": "parcel-app"}, "s3cret", algorithm="HS256")
    bad = jwt.encode({"email": "a@x.com", "aud": "other-app"}, "s3cret", algorithm="HS256")
    assert verifier.verify(good)["email"] == "a@x.com"
    assert verifier.verify(bad) is None


async def test_missing_credential_is_401(client):
    resp = await client.get("/parcels")
    assert resp.status_code == 401
    assert resp.json()["message"]


async def test_non_bearer_scheme_is_401(client):
    resp = await client.get("/parcels", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401


async def test_malformed_token_is_403(client):
    resp = await client.get("/parcels", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 403


async def test_expired_token_is_403(client, create_user):
    await create_user("a@x.com")
    token = create_access_token({"email": "a@x.com"}, expires_delta=timedelta(minutes=-5))
    resp = await client.get("/parcels", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


@pytest.mark.parametrize("path", ["/riders/pending", "/riders/active", "/payments"])
async def test_admin_endpoints(client, path, create_user, admin_headers):
    assert (await client.get(path)).status_code == 401

    await create_user("plain@x.com", "user")
    assert (await client.get(path, headers=auth_headers("plain@x.com"))).status_code == 403

    resp = await client.get(path, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == []


async def test_unknown_user_is_forbidden_on_role_guard(client):
    # jeton valide mais aucun document utilisateur
    resp = await client.get("/riders/pending", headers=auth_headers("ghost@x.com"))
    assert resp.status_code == 403


async def test_rider_guard_rejects_admin(client, admin_headers):
    resp = await client.patch(
        "/parcels/updateStatus",
        json={"parcelId": "prc_x", "status": "in_transit"},
        headers=admin_headers,
    )
    assert resp.status_code == 403


async def test_guard_fails_closed_before_handler(client, mongo, create_parcel, user_headers):
    parcel = await create_parcel()
    resp = await client.patch(
        "/parcels/assignRider",
        json={"parcelId": parcel["id"], "riderId": "rdr_1", "riderEmail": "r@x.com", "riderName": "R"},
        headers=user_headers,
    )
    assert resp.status_code == 403
    stored = await mongo.parcels.find_one({"id": parcel["id"]})
    assert stored["delivery_status"] == "pending"
    assert stored["assigned_rider_id"] is None
