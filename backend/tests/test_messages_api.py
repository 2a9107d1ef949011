"""
Memory Map Backend — Messages API Tests
=========================================

What:  End-to-end tests for /api/v1/messages, /, and /health.
How:   HTTPX AsyncClient over ASGITransport against a per-test SQLite store.

What we test:
    ✅ Empty store lists []
    ✅ Valid messages are created and listed with identical fields
    ✅ Every kind of invalid submission → 400, store unchanged
    ✅ Request IDs, the map page, health, and the creation rate limit
"""

import pytest

from memorymap.config import settings

MESSAGES = "/api/v1/messages"


async def list_messages(client):
    response = await client.get(MESSAGES)
    assert response.status_code == 200
    return response.json()


class TestListMessages:

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_array(self, test_client):
        assert await list_messages(test_client) == []

    @pytest.mark.asyncio
    async def test_lists_every_created_message(self, test_client):
        names = ["Ada", "Grace", "Linus"]
        for i, name in enumerate(names):
            response = await test_client.post(
                MESSAGES,
                json={"name": name, "message": f"Memory{i}", "latitude": i, "longitude": -i},
            )
            assert response.status_code == 200

        listed = await list_messages(test_client)

        assert sorted(m["name"] for m in listed) == names
        assert len({m["_id"] for m in listed}) == 3


class TestCreateMessage:

    @pytest.mark.asyncio
    async def test_valid_message_round_trip(self, test_client, valid_submission):
        """Alex/Hello2024 → 200, then appears in the list with its identifier."""
        response = await test_client.post(MESSAGES, json=valid_submission)

        assert response.status_code == 200
        created = response.json()
        assert created["_id"]
        assert created["date"] is not None
        for field, value in valid_submission.items():
            assert created[field] == value

        listed = await list_messages(test_client)
        assert len(listed) == 1
        assert listed[0]["_id"] == created["_id"]
        for field, value in valid_submission.items():
            assert listed[0][field] == value

    @pytest.mark.asyncio
    async def test_date_is_identical_in_create_and_list(self, test_client, valid_submission):
        created = (await test_client.post(MESSAGES, json=valid_submission)).json()

        listed = await list_messages(test_client)

        assert listed[0]["date"] == created["date"]
        assert created["date"].endswith(("Z", "+00:00"))

    @pytest.mark.asyncio
    async def test_message_with_space_rejected(self, test_client):
        """Bob/'hi there' → rejected, store unchanged."""
        response = await test_client.post(
            MESSAGES,
            json={"name": "Bob", "message": "hi there", "latitude": 10, "longitude": 10},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["errors"][0]["field"] == "message"
        assert body["request_id"]
        assert await list_messages(test_client) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"latitude": 91},
            {"longitude": -180.01},
            {"name": ""},
            {"name": "n" * 501},
            {"message": ""},
            {"message": "m" * 101},
            {"message": "emoji❤"},
            {"latitude": "not-a-number"},
            {"classyear": "2020"},
        ],
    )
    async def test_invalid_submission_rejected(self, test_client, valid_submission, overrides):
        candidate = {**valid_submission, **overrides}

        response = await test_client.post(MESSAGES, json=candidate)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert await list_messages(test_client) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["name", "message", "latitude", "longitude"])
    async def test_missing_field_rejected(self, test_client, valid_submission, missing):
        candidate = {k: v for k, v in valid_submission.items() if k != missing}

        response = await test_client.post(MESSAGES, json=candidate)

        assert response.status_code == 400
        fields = [e["field"] for e in response.json()["details"]["errors"]]
        assert fields == [missing]

    @pytest.mark.asyncio
    async def test_non_object_body_rejected(self, test_client):
        response = await test_client.post(MESSAGES, json=["Alex", "Hello", 1, 2])

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "body"

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, test_client):
        response = await test_client.post(
            MESSAGES,
            content=b'{"name": "Alex", ',
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_timestamp_can_be_disabled(self, test_client, valid_submission, monkeypatch):
        monkeypatch.setattr(settings, "stamp_created_at", False)

        response = await test_client.post(MESSAGES, json=valid_submission)

        assert response.status_code == 200
        assert response.json()["date"] is None

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client, valid_submission):
        response = await test_client.post(
            MESSAGES, json=valid_submission, headers={"X-Request-ID": "abc12345"}
        )

        assert response.headers["X-Request-ID"] == "abc12345"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_creation_is_limited_per_ip(self, test_client, valid_submission, monkeypatch):
        # Read when the middleware stack is built on the first request
        monkeypatch.setattr(settings, "rate_limit_requests", 2)

        for _ in range(2):
            assert (await test_client.post(MESSAGES, json=valid_submission)).status_code == 200

        response = await test_client.post(MESSAGES, json=valid_submission)

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert response.json()["error"] == "rate_limit_exceeded"

        # Reads stay available
        assert len(await list_messages(test_client)) == 2


class TestMapPage:

    @pytest.mark.asyncio
    async def test_renders_markers_for_stored_messages(self, test_client, valid_submission):
        await test_client.post(MESSAGES, json={**valid_submission, "name": "<b>Alex</b>"})

        response = await test_client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "leaflet" in response.text
        assert "<em>&lt;b&gt;Alex&lt;/b&gt;:<\\/em> Hello2024" in response.text
        assert "<b>Alex</b>" not in response.text


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_when_database_reachable(self, test_client, db_engine, monkeypatch):
        from memorymap import database

        monkeypatch.setattr(database, "engine", db_engine)

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
