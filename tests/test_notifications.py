# tests/test_notifications.py

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from taskmanager.config import Settings
from taskmanager.main import create_app
from taskmanager.services.notification_service import SENDGRID_SEND_URL, Mailer


def test_welcome_email_payload() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202)

    mailer = Mailer("sg-key", "app@example.com", transport=httpx.MockTransport(handler))
    assert asyncio.run(mailer.send_welcome_email("ann@example.com", "Ann")) is True

    assert len(requests) == 1
    sent = requests[0]
    assert str(sent.url) == SENDGRID_SEND_URL
    assert sent.headers["authorization"] == "Bearer sg-key"
    body = json.loads(sent.content)
    assert body["personalizations"] == [{"to": [{"email": "ann@example.com"}]}]
    assert body["from"] == {"email": "app@example.com"}
    assert body["subject"] == "Thanks for joining in!"
    assert body["content"][0]["value"] == "Welcome to the app, Ann. Let me know how you get along with the app."


def test_gateway_failure_is_swallowed() -> None:
    mailer = Mailer("sg-key", "app@example.com", transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    assert asyncio.run(mailer.send_goodbye_email("ann@example.com", "Ann")) is False


def test_missing_api_key_only_logs() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail("gateway must not be called without an API key")

    mailer = Mailer(None, "app@example.com", transport=httpx.MockTransport(handler))
    assert asyncio.run(mailer.send_welcome_email("ann@example.com", "Ann")) is False


def test_registration_succeeds_when_mail_gateway_is_down() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("gateway unreachable", request=request)

    mailer = Mailer("sg-key", "app@example.com", transport=httpx.MockTransport(handler))
    app = create_app(Settings(database_url="sqlite://", jwt_secret="test-secret"), mailer=mailer)

    with TestClient(app) as client:
        response = client.post("/users", json={
            "name": "Ann",
            "email": "ann@example.com",
            "password": "MyPass777!",
        })
    assert response.status_code == 201
    assert response.json()["token"]
