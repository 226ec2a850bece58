import pytest
from fastapi.testclient import TestClient

from locationshare.config import Settings
from locationshare.errors import Unauthenticated
from locationshare.main import create_app
from locationshare.storage import LocationStore

GOOD_TOKEN = "good-token"
USER_ID = "uid-123"


class FakeVerifier:
    """Accepts GOOD_TOKEN only."""

    def __init__(self):
        self.seen = []

    def verify(self, token: str) -> str:
        self.seen.append(token)
        if token != GOOD_TOKEN:
            raise Unauthenticated("token rejected")
        return USER_ID


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def store():
    return LocationStore.with_fixtures()


@pytest.fixture
def client(settings, verifier, store):
    app = create_app(settings=settings, verifier=verifier, store=store)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {GOOD_TOKEN}"}
