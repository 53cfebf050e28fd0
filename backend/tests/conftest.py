# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Key features:
# - Points the application at a throw-away SQLite file BEFORE any import
#   of posts_api (settings and the engine are built at import time)
# - Starts the real application (lifespan => embedded migrations) once
# - Empties the posts table before each API test
# =============================================================================

import os
import tempfile
from pathlib import Path

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================

_DB_DIR = Path(tempfile.mkdtemp(prefix="posts-api-tests-"))
_DB_FILE = _DB_DIR / "posts.sqlite3"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["DATABASE_URL_SYNC"] = f"sqlite:///{_DB_FILE}"
os.environ["ENV"] = "test"
os.environ["API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["POSTS_PREFIX"] = "/posts"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def client():
    """TestClient with the lifespan running (migrations applied at startup)."""
    from posts_api.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def api(client):
    """Client on an empty posts table, with a fresh rate limiter."""
    from posts_api.core.rate_limit import rate_limiter

    rate_limiter.reset()
    resp = client.delete("/posts")
    assert resp.status_code == 204
    yield client
    rate_limiter.reset()


@pytest.fixture
def sync_db_url(tmp_path):
    """URL of a brand new (unmigrated) SQLite database."""
    return f"sqlite:///{tmp_path / 'fresh.sqlite3'}"


@pytest.fixture
def create_post(api):
    """Helper: create a post through the API and return its JSON body."""

    def _create(title="Hello", text="World"):
        resp = api.post("/posts", json={"title": title, "text": text})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
