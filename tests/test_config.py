from pathlib import Path

from locationshare.config import Settings, get_project_root


def test_defaults(monkeypatch):
    for name in ("PORT", "HOST", "FILTER_SHARED_LOCATIONS", "FIREBASE_CREDENTIALS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.port == 8080
    assert settings.host == "0.0.0.0"
    assert settings.filter_shared_locations is False
    assert settings.cors_allow_origins == ["*"]
    assert settings.firebase_credentials == get_project_root() / "config" / "serviceAccountKey.json"


def test_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("FILTER_SHARED_LOCATIONS", "true")
    monkeypatch.setenv("FIREBASE_CREDENTIALS", "/secrets/key.json")
    monkeypatch.setenv("FIREBASE_API_KEY", "web-key")
    settings = Settings(_env_file=None)
    assert settings.port == 9090
    assert settings.filter_shared_locations is True
    assert settings.firebase_credentials == Path("/secrets/key.json")
    assert settings.firebase_api_key == "web-key"
