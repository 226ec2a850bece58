from fastapi.testclient import TestClient

from locationshare.main import create_app


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "healthy"}


def test_health_needs_no_verifier(settings):
    client = TestClient(create_app(settings=settings))
    assert client.get("/health").json() == {"status": "healthy"}
