import pytest
from fastapi.testclient import TestClient

from locationshare.config import Settings
from locationshare.errors import IdentityProviderError
from locationshare.main import create_app

from .conftest import GOOD_TOKEN, USER_ID

URL = "/api/sharedlocations/+17206453833"


def test_missing_header(client, verifier):
    res = client.get(URL)
    assert res.status_code == 401
    assert res.json() == {"message": "missing authorization header"}
    assert verifier.seen == []


def test_empty_header(client):
    res = client.get(URL, headers={"Authorization": ""})
    assert res.status_code == 401
    assert "message" in res.json()


def test_empty_bearer_token(client, verifier):
    res = client.get(URL, headers={"Authorization": "Bearer "})
    assert res.status_code == 401
    assert res.json() == {"message": "invalid token format"}
    assert verifier.seen == []


def test_rejected_token(client):
    res = client.get(URL, headers={"Authorization": "Bearer BOGUS"})
    assert res.status_code == 401
    assert res.json() == {"message": "invalid token: token rejected"}


def test_token_without_bearer_prefix(client, verifier):
    res = client.get(URL, headers={"Authorization": GOOD_TOKEN})
    assert res.status_code == 200
    assert verifier.seen == [GOOD_TOKEN]


def test_valid_token(client, auth_headers, verifier):
    res = client.get(URL, headers=auth_headers)
    assert res.status_code == 200
    assert isinstance(res.json(), list)
    assert verifier.seen == [GOOD_TOKEN]


def test_verified_once_per_request(client, auth_headers, verifier):
    payload = {"user_id": USER_ID, "latitude": 1.0, "longitude": 2.0, "timestamp": "2025-02-21T12:00:00Z"}
    res = client.post("/api/locations", json=payload, headers=auth_headers)
    assert res.status_code == 201
    assert verifier.seen == [GOOD_TOKEN]


def test_no_verifier_configured(settings, auth_headers):
    client = TestClient(create_app(settings=settings))
    res = client.get(URL, headers=auth_headers)
    assert res.status_code == 500
    assert res.json() == {"message": "error getting Auth client"}


def test_startup_fails_without_credentials(tmp_path):
    settings = Settings(_env_file=None, firebase_credentials=tmp_path / "missing.json")
    with pytest.raises(IdentityProviderError):
        with TestClient(create_app(settings=settings)):
            pass


def test_startup_builds_verifier(tmp_path, mocker, auth_headers):
    build = mocker.patch("locationshare.main.IdentityVerifier.from_service_account_file")
    build.return_value.verify.return_value = USER_ID
    settings = Settings(_env_file=None, firebase_credentials=tmp_path / "key.json", firebase_project_id="demo")

    with TestClient(create_app(settings=settings)) as client:
        res = client.get(URL, headers=auth_headers)

    assert res.status_code == 200
    build.assert_called_once_with(tmp_path / "key.json", "demo")
    build.return_value.verify.assert_called_once_with(GOOD_TOKEN)
