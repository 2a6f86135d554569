"""
MedWell Backend — Profile Route Tests
=======================================

What:  Tests for GET/POST/PUT /api/user/profile against the in-memory store.
Why:   The profile is keyed on a client-supplied userId; upsert must never
       produce duplicates and PUT must never re-key a profile.
How:   HTTPX AsyncClient against the app, with fake_db inspected directly.

What we test:
    ✅ 400 when userId/name/email are missing
    ✅ 404 for unknown users
    ✅ Upsert creates, then replaces in place (one record per userId)
    ✅ Extra attributes and defaults are stored
    ✅ PUT merges fields and ignores userId/_id in the body
    ✅ Store failures return 500 with the underlying message
"""

import pytest
from pymongo.errors import ServerSelectionTimeoutError


class TestGetProfile:

    @pytest.mark.asyncio
    async def test_missing_user_id(self, test_client):
        response = await test_client.get("/api/user/profile")
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_input"
        assert body["message"] == "userId is required"

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.get("/api/user/profile", params={"userId": "nobody"})
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_create_then_fetch(self, test_client):
        await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "ada@example.com"},
        )

        response = await test_client.get("/api/user/profile", params={"userId": "u1"})

        assert response.status_code == 200
        user = response.json()
        assert user["userId"] == "u1"
        assert user["name"] == "Ada"
        assert user["email"] == "ada@example.com"
        assert isinstance(user["_id"], str)


class TestUpsertProfile:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "Ada", "email": "ada@example.com"},
            {"userId": "u1", "email": "ada@example.com"},
            {"userId": "u1", "name": "Ada"},
            {"userId": "", "name": "Ada", "email": "ada@example.com"},
            {},
        ],
    )
    async def test_required_fields(self, test_client, fake_db, payload):
        response = await test_client.post("/api/user/profile", json=payload)

        assert response.status_code == 400
        assert response.json()["message"] == "userId, name, email required"
        assert fake_db["users"].docs == []

    @pytest.mark.asyncio
    async def test_new_profile_gets_defaults(self, test_client):
        response = await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "ada@example.com"},
        )

        assert response.status_code == 200
        user = response.json()
        assert user["conditions"] == []
        assert user["allergies"] == []
        assert user["medications"] == []
        assert "createdAt" in user
        assert "updatedAt" in user

    @pytest.mark.asyncio
    async def test_extra_attributes_are_stored(self, test_client, fake_db):
        response = await test_client.post(
            "/api/user/profile",
            json={
                "userId": "u1",
                "name": "Ada",
                "email": "ada@example.com",
                "age": 36,
                "allergies": ["penicillin"],
            },
        )

        user = response.json()
        assert user["age"] == 36
        assert user["allergies"] == ["penicillin"]
        assert fake_db["users"].docs[0]["age"] == 36

    @pytest.mark.asyncio
    async def test_second_upsert_replaces_in_place(self, test_client, fake_db):
        first = await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "ada@example.com"},
        )
        second = await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada Lovelace", "email": "ada@example.com"},
        )

        assert len(fake_db["users"].docs) == 1
        assert second.json()["name"] == "Ada Lovelace"
        assert second.json()["_id"] == first.json()["_id"]
        assert second.json()["createdAt"] == first.json()["createdAt"]

    @pytest.mark.asyncio
    async def test_operator_field_names_rejected(self, test_client, fake_db):
        response = await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "a@b.c", "$where": "1"},
        )

        assert response.status_code == 400
        assert "$where" in response.json()["message"]
        assert fake_db["users"].docs == []

    @pytest.mark.asyncio
    async def test_store_failure(self, test_client, fake_db):
        fake_db["users"].error = ServerSelectionTimeoutError("No servers available")

        response = await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "ada@example.com"},
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert body["message"] == "Server error"
        assert body["detail"] == "No servers available"


class TestUpdateProfile:

    @pytest.mark.asyncio
    async def test_missing_user_id(self, test_client):
        response = await test_client.put("/api/user/profile", json={"name": "Ada"})
        assert response.status_code == 400
        assert response.json()["message"] == "userId is required"

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client, fake_db):
        response = await test_client.put(
            "/api/user/profile", params={"userId": "nobody"}, json={"name": "Ada"}
        )

        assert response.status_code == 404
        assert fake_db["users"].docs == []

    @pytest.mark.asyncio
    async def test_merges_fields(self, test_client):
        await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "ada@example.com"},
        )

        response = await test_client.put(
            "/api/user/profile",
            params={"userId": "u1"},
            json={"conditions": ["asthma"], "bloodType": "O+"},
        )

        assert response.status_code == 200
        user = response.json()
        assert user["name"] == "Ada"
        assert user["conditions"] == ["asthma"]
        assert user["bloodType"] == "O+"

    @pytest.mark.asyncio
    async def test_user_id_in_body_is_ignored(self, test_client, fake_db):
        await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "ada@example.com"},
        )

        response = await test_client.put(
            "/api/user/profile",
            params={"userId": "u1"},
            json={"userId": "u2", "_id": "abc", "name": "Ada L."},
        )

        assert response.status_code == 200
        assert response.json()["userId"] == "u1"
        assert fake_db["users"].docs[0]["userId"] == "u1"
        missing = await test_client.get("/api/user/profile", params={"userId": "u2"})
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_body_keeps_profile(self, test_client):
        await test_client.post(
            "/api/user/profile",
            json={"userId": "u1", "name": "Ada", "email": "ada@example.com"},
        )

        response = await test_client.put("/api/user/profile", params={"userId": "u1"})

        assert response.status_code == 200
        assert response.json()["name"] == "Ada"
        assert "updatedAt" in response.json()
