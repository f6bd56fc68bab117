import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from tasktrack.main import create_app
from tasktrack.settings import Settings

TEST_SECRET = "test-signing-secret-with-enough-length-0123456789"


def make_clock(start=datetime(2025, 1, 1, tzinfo=timezone.utc), step=timedelta(seconds=1)):
    """Deterministic clock: every call returns a later timestamp."""
    ticks = itertools.count()
    return lambda: start + step * next(ticks)


@pytest.fixture
def settings():
    # Lowest bcrypt cost keeps the suite fast
    return Settings(token_secret=TEST_SECRET, bcrypt_rounds=4, log_level="WARNING")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def signup(client):
    """
    Register and log in a user; returns request headers carrying its token.
    """

    def _signup(email="a@x.com", password="p", name="A"):
        res = client.post("/api/users", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        res = client.post("/api/users/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _signup
