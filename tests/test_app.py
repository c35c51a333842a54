# tests/test_app.py

from __future__ import annotations

from fastapi.testclient import TestClient

from taskmanager.config import Settings
from taskmanager.main import create_app

from .fakes import FakeMailer


def test_health_and_root(client) -> None:
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["health"] == "/health"


def test_maintenance_mode_blocks_everything() -> None:
    settings = Settings(database_url="sqlite://", jwt_secret="test-secret", maintenance_mode=True)
    with TestClient(create_app(settings, mailer=FakeMailer())) as client:
        for method, url in (("GET", "/health"), ("POST", "/users"), ("GET", "/tasks")):
            response = client.request(method, url)
            assert response.status_code == 503
            assert response.json() == {"error": "The site is under maintenance, please try again soon!"}


def test_malformed_json_is_a_bad_request(client) -> None:
    response = client.post("/users", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert "error" in response.json()


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    monkeypatch.setenv("JWT_SECRET", "from-env")
    monkeypatch.setenv("PORT", "3001")
    monkeypatch.setenv("MAINTENANCE_MODE", "true")
    monkeypatch.delenv("SENDGRID_API_KEY", raising=False)

    settings = Settings.from_env()
    assert settings.database_url == "sqlite:///./other.db"
    assert settings.jwt_secret == "from-env"
    assert settings.port == 3001
    assert settings.maintenance_mode is True
    assert settings.sendgrid_api_key is None
