# tests/test_auth.py

from __future__ import annotations

import jwt
import pytest

from taskmanager.errors import AuthenticationError
from taskmanager.services.security import hash_password, verify_password
from taskmanager.services.token_service import create_jwt_token, verify_token

from .conftest import JWT_SECRET, auth_header


def test_token_round_trip_has_no_expiry() -> None:
    token = create_jwt_token("user-1", JWT_SECRET)
    assert verify_token(token, JWT_SECRET) == "user-1"
    assert "exp" not in jwt.decode(token, JWT_SECRET, algorithms=["HS256"])


def test_tokens_for_same_user_are_distinct() -> None:
    assert create_jwt_token("user-1", JWT_SECRET) != create_jwt_token("user-1", JWT_SECRET)


def test_verify_rejects_foreign_signature_and_garbage() -> None:
    with pytest.raises(AuthenticationError):
        verify_token(create_jwt_token("user-1", "another-secret"), JWT_SECRET)
    with pytest.raises(AuthenticationError):
        verify_token("not-a-token", JWT_SECRET)
    with pytest.raises(AuthenticationError):
        verify_token(jwt.encode({"foo": "bar"}, JWT_SECRET, algorithm="HS256"), JWT_SECRET)


def test_password_hash_round_trip() -> None:
    hashed = hash_password("MyPass777!")
    assert hashed != "MyPass777!"
    assert verify_password("MyPass777!", hashed)
    assert not verify_password("MyPass778!", hashed)
    assert not verify_password("MyPass777!", "not-a-bcrypt-hash")


def test_gate_rejects_every_failure_the_same_way(client, seed) -> None:
    signed_but_never_issued = create_jwt_token(seed.user_one.id, JWT_SECRET)
    attempts = [
        {},
        {"Authorization": seed.user_one.token},
        {"Authorization": f"Basic {seed.user_one.token}"},
        auth_header("garbage"),
        auth_header(create_jwt_token(seed.user_one.id, "another-secret")),
        auth_header(signed_but_never_issued),
    ]
    for headers in attempts:
        response = client.get("/users/profile", headers=headers)
        assert response.status_code == 401, headers
        assert response.json() == {"error": "Please authenticate."}
        assert response.headers["www-authenticate"] == "Bearer"


def test_gate_accepts_issued_token(client, seed) -> None:
    response = client.get("/users/profile", headers=auth_header(seed.user_two.token))
    assert response.status_code == 200
    assert response.json()["id"] == seed.user_two.id
