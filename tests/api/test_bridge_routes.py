"""Integration Tests: bridge routes — session lifecycle and operations over HTTP.

Invariants:
    - Every ClientError maps to its HTTP status with the structured error body
    - Operations require an authenticated session (401 otherwise)
    - Validation failures → 400 with field details
"""

from autopostr_client.core.errors import TransportError
from tests.services.fakes import fail, ok, user


# -- Health ----------------------------------------------------------------------

async def test_liveness(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_readiness_without_database(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


async def test_backend_status_reports_offline(client, transport):
    transport.probe_outcome = TransportError("Failed to fetch: refused")
    response = await client.get("/api/v1/health/backend")
    assert response.status_code == 200
    assert response.json() == {"online": False, "error": "Failed to fetch: refused"}


# -- Session ---------------------------------------------------------------------

async def test_anonymous_session_view(client):
    response = await client.get("/api/v1/session")
    assert response.status_code == 200
    assert response.json() == {
        "status": "anonymous", "authenticated": False, "session": None,
    }


async def test_login_then_logout(client, transport, store):
    transport.route("user.login", ok(user=user()))

    response = await client.post("/api/v1/session/login", json={"email": "a@b.com"})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "active"
    assert body["authenticated"] is True
    assert body["session"]["identity"]["email"] == "a@b.com"
    assert body["session"]["plan"] == "pro"

    response = await client.post("/api/v1/session/logout")
    assert response.status_code == 200
    assert response.json()["status"] == "anonymous"
    assert store.snapshot() == {}


async def test_register_forwards_extra_fields(client, transport):
    transport.route("user.register", ok(user=user(name="Ada")))
    response = await client.post(
        "/api/v1/session/register",
        json={"email": "a@b.com", "name": "Ada", "company": "AE"},
    )
    assert response.status_code == 200
    assert transport.requests == [{
        "email": "a@b.com", "name": "Ada", "company": "AE",
        "operation": "user.register",
    }]


async def test_login_failure_returns_structured_error(client, transport):
    transport.route("user.login", fail("User not found"))
    response = await client.post("/api/v1/session/login", json={"email": "x@y.com"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "RETRY_EXHAUSTED"
    assert error["message"] == "User not found"
    assert error["context"]["operation"] == "user.login"


async def test_login_network_failure_is_502(client, transport):
    response = await client.post("/api/v1/session/login", json={"email": "x@y.com"})
    assert response.status_code == 502
    assert response.json()["error"]["message"] == (
        "Network error: Please check your internet connection"
    )


async def test_blank_email_rejected(client, transport):
    response = await client.post("/api/v1/session/login", json={"email": "   "})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert transport.requests == []


async def test_refresh_route(client, transport):
    transport.route("user.login", ok(user=user()))
    transport.route("user.profile", ok(user=user(name="Refreshed")))
    await client.post("/api/v1/session/login", json={"email": "a@b.com"})

    response = await client.post("/api/v1/session/refresh")
    assert response.status_code == 200
    assert response.json()["session"]["identity"]["name"] == "Refreshed"


# -- Operations ------------------------------------------------------------------

async def test_operation_requires_session(client, transport):
    response = await client.post("/api/v1/operations/post.list", json={})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"
    assert transport.requests == []


async def test_operation_after_login_injects_identity_and_caches(client, transport):
    transport.route("user.login", ok(user=user()))
    transport.route("post.list", ok(posts=[{"id": 1}]))
    await client.post("/api/v1/session/login", json={"email": "a@b.com"})

    for _ in range(2):
        response = await client.post(
            "/api/v1/operations/post.list",
            json={"payload": {"status": "scheduled"}, "cacheable": True, "ttl_ms": 30000},
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "posts": [{"id": 1}]}

    calls = transport.calls_for("post.list")
    assert len(calls) == 1
    assert calls[0]["email"] == "a@b.com"


async def test_operation_rejects_non_positive_ttl(client, transport):
    transport.route("user.login", ok(user=user()))
    await client.post("/api/v1/session/login", json={"email": "a@b.com"})
    response = await client.post(
        "/api/v1/operations/post.list", json={"cacheable": True, "ttl_ms": 0},
    )
    assert response.status_code == 400
