# =============================================================================
# tests/test_posts_api.py - Posts Route Tests
# =============================================================================
# End-to-end tests through FastAPI's TestClient against a real SQLite file:
# - create / list / read / delete / destroy
# - status codes, Location header, standard error payload
# - API key on destructive routes, rate limit, request id propagation
#
# Run with: pytest backend/tests/test_posts_api.py -v
# =============================================================================

import pytest
from sqlalchemy.exc import OperationalError

from posts_api.core.settings import settings


# =============================================================================
# Create
# =============================================================================

class TestCreatePost:
    """Tests for POST /posts."""

    def test_create_returns_201_with_stored_post(self, api):
        resp = api.post("/posts", json={"title": "First", "text": "Body"})

        assert resp.status_code == 201
        body = resp.json()
        assert isinstance(body["id"], int)
        assert body["title"] == "First"
        assert body["text"] == "Body"
        assert body["published"] is False

    def test_create_sets_location_header(self, api):
        resp = api.post("/posts", json={"title": "First", "text": "Body"})

        assert resp.headers["location"] == f"/posts/{resp.json()['id']}"

    def test_client_id_and_published_are_ignored(self, api):
        resp = api.post(
            "/posts",
            json={"id": 999, "title": "Sneaky", "text": "Body", "published": True},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["id"] != 999
        assert body["published"] is False

        stored = api.get(f"/posts/{body['id']}").json()
        assert stored["published"] is False

    def test_missing_field_is_a_validation_error(self, api):
        resp = api.post("/posts", json={"title": "No text"})

        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["status"] == 422
        assert any(d["loc"][-1] == "text" for d in error["details"])

    def test_non_string_title_is_rejected(self, api):
        resp = api.post("/posts", json={"title": 123, "text": "Body"})

        assert resp.status_code == 422

    def test_malformed_json_is_rejected(self, api):
        resp = api.post(
            "/posts",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unicode_round_trips(self, api):
        resp = api.post("/posts", json={"title": "Été", "text": "Ça marche ✓"})
        post_id = resp.json()["id"]

        body = api.get(f"/posts/{post_id}").json()
        assert body["title"] == "Été"
        assert body["text"] == "Ça marche ✓"


# =============================================================================
# List / Read
# =============================================================================

class TestListPosts:
    """Tests for GET /posts."""

    def test_empty_table_gives_empty_list(self, api):
        resp = api.get("/posts")

        assert resp.status_code == 200
        assert resp.json() == []

    def test_lists_ids_of_every_post(self, api, create_post):
        ids = [create_post(title=f"t{i}")["id"] for i in range(3)]

        resp = api.get("/posts")

        assert resp.status_code == 200
        assert resp.json() == sorted(ids)

    def test_json_content_type_is_utf8(self, api):
        resp = api.get("/posts")

        assert resp.headers["content-type"] == "application/json; charset=utf-8"


class TestReadPost:
    """Tests for GET /posts/{id}."""

    def test_read_existing_post(self, api, create_post):
        created = create_post(title="Readable", text="Yes")

        resp = api.get(f"/posts/{created['id']}")

        assert resp.status_code == 200
        assert resp.json() == created

    def test_read_missing_post_is_404(self, api):
        resp = api.get("/posts/424242")

        assert resp.status_code == 404
        error = resp.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["details"] == {"id": 424242}
        assert error["request_id"]
        assert error["timestamp"]

    def test_non_integer_id_is_422(self, api):
        resp = api.get("/posts/abc")

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


# =============================================================================
# Delete / Destroy
# =============================================================================

class TestDeletePost:
    """Tests for DELETE /posts/{id}."""

    def test_delete_existing_post(self, api, create_post):
        keep = create_post(title="keep")
        drop = create_post(title="drop")

        resp = api.delete(f"/posts/{drop['id']}")

        assert resp.status_code == 204
        assert resp.content == b""
        assert api.get(f"/posts/{drop['id']}").status_code == 404
        assert api.get("/posts").json() == [keep["id"]]

    def test_delete_missing_post_is_404(self, api):
        resp = api.delete("/posts/424242")

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_delete_twice(self, api, create_post):
        post_id = create_post()["id"]

        assert api.delete(f"/posts/{post_id}").status_code == 204
        assert api.delete(f"/posts/{post_id}").status_code == 404


class TestDestroyPosts:
    """Tests for DELETE /posts."""

    def test_destroy_removes_everything(self, api, create_post):
        for i in range(3):
            create_post(title=f"t{i}")

        resp = api.delete("/posts")

        assert resp.status_code == 204
        assert api.get("/posts").json() == []

    def test_destroy_on_empty_table(self, api):
        assert api.delete("/posts").status_code == 204

    def test_create_after_destroy(self, api, create_post):
        create_post()
        api.delete("/posts")

        post_id = create_post()["id"]

        assert api.get("/posts").json() == [post_id]


# =============================================================================
# API key on destructive routes
# =============================================================================

class TestApiKey:
    """Tests for the API key dependency on delete / destroy."""

    @pytest.fixture
    def with_key(self, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "s3cret")

    def test_destroy_without_key_is_401(self, api, with_key):
        resp = api.delete("/posts")

        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"

    def test_wrong_key_is_401(self, api, with_key):
        resp = api.delete("/posts", headers={"X-API-Key": "nope"})

        assert resp.status_code == 401

    def test_bearer_token_is_accepted(self, api, with_key):
        resp = api.delete("/posts", headers={"Authorization": "Bearer s3cret"})

        assert resp.status_code == 204

    def test_x_api_key_is_accepted(self, api, create_post, with_key):
        post_id = create_post()["id"]

        resp = api.delete(f"/posts/{post_id}", headers={"X-API-Key": "s3cret"})

        assert resp.status_code == 204

    def test_reads_do_not_need_a_key(self, api, create_post, with_key):
        post_id = create_post()["id"]

        assert api.get("/posts").status_code == 200
        assert api.get(f"/posts/{post_id}").status_code == 200

    def test_prod_without_key_is_misconfigured(self, api, monkeypatch):
        monkeypatch.setattr(settings, "ENV", "prod")

        resp = api.delete("/posts")

        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "SERVER_MISCONFIG"


# =============================================================================
# Ambient behaviour: request id, errors, rate limit
# =============================================================================

class TestRequestObservability:
    """Tests for the request id middleware and error handlers."""

    def test_incoming_request_id_is_echoed(self, api):
        resp = api.get("/posts", headers={"X-Request-Id": "abc-123"})

        assert resp.headers["x-request-id"] == "abc-123"

    def test_request_id_is_generated(self, api):
        resp = api.get("/posts")

        assert len(resp.headers["x-request-id"]) == 36

    def test_error_carries_the_request_id(self, api):
        resp = api.get("/posts/999999", headers={"X-Request-Id": "trace-me"})

        assert resp.json()["error"]["request_id"] == "trace-me"

    def test_unknown_route_uses_standard_payload(self, api):
        resp = api.get("/nowhere")

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_method_not_allowed(self, api):
        resp = api.put("/posts/1", json={"title": "x", "text": "y"})

        assert resp.status_code == 405
        assert resp.json()["error"]["code"] == "HTTP_ERROR"


class TestDatabaseErrors:
    """ORM errors are not recovered: they surface as a standard 500."""

    def test_database_error_is_500(self, caplog):
        from fastapi.testclient import TestClient

        from posts_api.db.session import get_db
        from posts_api.main import app

        class BrokenSession:
            async def execute(self, *args, **kwargs):
                raise OperationalError("SELECT posts.id FROM posts", {}, Exception("disk I/O error"))

        async def broken_db():
            yield BrokenSession()

        app.dependency_overrides[get_db] = broken_db
        try:
            resp = TestClient(app, raise_server_exceptions=False).get(
                "/posts", headers={"X-Request-Id": "trace-500"}
            )
        finally:
            app.dependency_overrides.pop(get_db, None)

        assert resp.status_code == 500
        error = resp.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert "disk I/O" not in resp.text
        assert error["request_id"] == "trace-500"

        logged = [r for r in caplog.records if r.name == "posts_api" and r.exc_info]
        assert logged
        assert logged[-1].request_id == "trace-500"


class TestRateLimit:
    """Tests for the optional in-memory rate limiter."""

    def test_limit_applies_to_posts_routes(self, api, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 2)

        assert api.get("/posts").status_code == 200
        assert api.get("/posts").status_code == 200
        resp = api.get("/posts")

        assert resp.status_code == 429
        error = resp.json()["error"]
        assert error["code"] == "RATE_LIMITED"
        assert error["details"] == {"limit_rpm": 2}

    def test_health_is_not_limited(self, api, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 1)

        for _ in range(3):
            assert api.get("/health").status_code == 200

    def test_lookalike_paths_are_not_limited(self, api, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 1)

        for _ in range(3):
            assert api.get("/postsXYZ").status_code == 404

    def test_item_routes_are_limited(self, api, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_RPM", 1)

        assert api.get("/posts/1").status_code == 404
        assert api.get("/posts/1").status_code == 429


# =============================================================================
# Operational endpoints
# =============================================================================

class TestOperationalEndpoints:
    """Tests for /health and /system/status."""

    def test_health(self, api):
        resp = api.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_status_reports_migrations_and_count(self, api, create_post):
        from posts_api.db.migrate import head_revision

        create_post()
        create_post()

        body = api.get("/system/status").json()

        assert body["ok"] is True
        assert body["db"] == {"ok": True}
        assert body["migrations"]["revision"] == head_revision()
        assert body["migrations"]["ok"] is True
        assert body["posts"] == 2
