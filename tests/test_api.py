"""End-to-end flows over the HTTP surface."""

import pytest

pytestmark = pytest.mark.asyncio


async def register(client, name, email, role):
    r = await client.post(
        "/v1/auth/register",
        json={"name": name, "email": email, "password": "password-123", "role": role},
    )
    assert r.status_code == 200, r.text
    return r.json()["user"]


async def test_me_requires_session(client):
    r = await client.get("/v1/auth/me")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


async def test_register_and_me(client):
    user = await register(client, "Ana", "ana@example.com", "creator")
    assert user["credits"] == 10
    assert "password" not in user

    r = await client.get("/v1/auth/me")
    assert r.status_code == 200
    assert r.json()["role"] == "creator"


async def test_duplicate_registration_conflicts(client):
    await register(client, "Ana", "ana@example.com", "viewer")
    r = await client.post(
        "/v1/auth/register",
        json={"name": "Ana", "email": "ana@example.com", "password": "password-123"},
    )
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "ALREADY_EXISTS"


async def test_bad_login(client):
    await register(client, "Ana", "ana@example.com", "viewer")
    r = await client.post("/v1/auth/login", json={"email": "ana@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "AUTH_FAILED"


async def test_upload_moderate_delete_flow(client):
    await register(client, "Ana", "ana@example.com", "creator")

    r = await client.post("/v1/creator/movies", json={"title": "Dune", "release_year": 2021})
    assert r.status_code == 200, r.text
    body = r.json()
    movie_id = body["movie"]["id"]
    assert body["movie"]["status"] == "pending"
    assert body["request"]["status"] == "pending"
    assert body["balance"] == 0

    r = await client.post("/v1/creator/movies", json={"title": "Dune 2", "release_year": 2024})
    assert r.status_code == 402
    assert r.json()["error"]["code"] == "INSUFFICIENT_CREDITS"

    r = await client.get("/v1/movies")
    assert r.json()["total"] == 0

    r = await client.get("/v1/creator/movies")
    assert [m["id"] for m in r.json()["items"]] == [movie_id]

    r = await client.post("/v1/auth/admin", json={"password": "admin-secret"})
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "admin"

    r = await client.get("/v1/admin/requests", params={"status": "pending"})
    requests = r.json()["items"]
    assert len(requests) == 1
    request_id = requests[0]["id"]

    r = await client.post(f"/v1/admin/requests/{request_id}/approve")
    assert r.json()["status"] == "approved"
    r = await client.post(f"/v1/admin/requests/{request_id}/approve")
    assert r.json()["status"] == "approved"

    r = await client.get("/v1/movies")
    assert [m["id"] for m in r.json()["items"]] == [movie_id]

    r = await client.post(f"/v1/movies/{movie_id}/views")
    assert r.json()["views"] == 1

    r = await client.delete(f"/v1/admin/movies/{movie_id}")
    assert r.json() == {"deleted": movie_id, "requests_removed": 1}

    r = await client.get(f"/v1/movies/{movie_id}")
    assert r.status_code == 404
    r = await client.get("/v1/admin/requests")
    assert r.json()["items"] == []


async def test_pending_movie_hidden_from_viewers(client, store, creator):
    from catalog.models.movie import MovieDraft
    from catalog.services import moderation

    movie, _ = await moderation.submit_upload(store, creator.id, MovieDraft(title="Secret", release_year=2020))
    r = await client.get(f"/v1/movies/{movie.id}")
    assert r.status_code == 404


async def test_viewer_cannot_reach_admin_or_creator(client):
    await register(client, "Bo", "bo@example.com", "viewer")
    r = await client.get("/v1/admin/requests")
    assert r.status_code == 403
    r = await client.post("/v1/creator/movies", json={"title": "Nope", "release_year": 2020})
    assert r.status_code == 403


async def test_earn_credits(client):
    await register(client, "Ana", "ana@example.com", "creator")
    r = await client.post("/v1/creator/credits/earn", json={"completed_events": 3})
    assert r.status_code == 400
    r = await client.post("/v1/creator/credits/earn", json={"completed_events": 10})
    assert r.json() == {"balance": 20}
    r = await client.get("/v1/credits/balance")
    assert r.json() == {"balance": 20}


async def test_settings_round_trip(client, settings):
    r = await client.get("/v1/credits/earn-link")
    assert r.json() == {"earn_link": settings.default_earn_link}

    await client.post("/v1/auth/admin", json={"password": settings.admin_password})
    r = await client.put("/v1/admin/settings", json={"earn_link": "https://ads.example.com"})
    assert r.status_code == 200
    r = await client.get("/v1/credits/earn-link")
    assert r.json() == {"earn_link": "https://ads.example.com"}


async def test_pricing_and_categories(client):
    r = await client.get("/v1/credits/pricing")
    assert r.json()["costs"] == {"upload": 10, "edit": 5, "delete": 5, "promote": 10}
    r = await client.get("/v1/movies/categories")
    assert len(r.json()["items"]) == 5
    r = await client.get("/v1/movies/by-category")
    assert [g["category"]["name"] for g in r.json()["items"]][:2] == ["Action", "Sci-Fi"]
    assert all(g["movies"] == [] for g in r.json()["items"])


async def test_validation_error_shape(client):
    await register(client, "Ana", "ana@example.com", "creator")
    r = await client.post("/v1/creator/movies", json={"release_year": 2021})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_admin_portal_requires_password(client):
    r = await client.post("/v1/auth/admin")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "AUTH_FAILED"

    r = await client.post("/v1/auth/admin", json={"password": "guess"})
    assert r.status_code == 401

    r = await client.get("/v1/admin/users")
    assert r.status_code == 401


async def test_http_sessions_leave_provider_identity_alone(client, store):
    await register(client, "Ana", "ana@example.com", "creator")
    r = await client.post("/v1/auth/login", json={"email": "ana@example.com", "password": "password-123"})
    assert r.status_code == 200
    assert store.identity.current is None

    r = await client.post("/v1/auth/logout")
    assert r.json() == {"status": "ok"}
    r = await client.get("/v1/auth/me")
    assert r.status_code == 401
