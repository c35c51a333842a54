# tests/conftest.py

from __future__ import annotations

from io import BytesIO
from types import SimpleNamespace
import uuid

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlmodel import Session

from taskmanager.config import Settings
from taskmanager.main import create_app
from taskmanager.models.task import Task
from taskmanager.models.user import User, UserToken
from taskmanager.services.security import hash_password
from taskmanager.services.token_service import create_jwt_token

from .fakes import FakeMailer

JWT_SECRET = "test-secret"


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def make_image(
    fmt: str = "JPEG",
    size: tuple[int, int] = (640, 480),
    mode: str = "RGB",
    color: tuple[int, ...] = (255, 0, 0),
) -> bytes:
    """Encode a solid-colour picture in memory."""
    buffer = BytesIO()
    Image.new(mode, size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture()
def settings() -> Settings:
    """In-memory database and a fixed signing secret per test."""
    return Settings(database_url="sqlite://", jwt_secret=JWT_SECRET)


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def app(settings: Settings, mailer: FakeMailer):
    return create_app(settings, mailer=mailer)


@pytest.fixture()
def client(app):
    # Entering the client runs the lifespan, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def new_session(app, client):
    """Factory for fresh sessions on the app's engine, so reads never hit a stale identity map."""
    return lambda: Session(app.state.engine)


@pytest.fixture()
def seed(new_session) -> SimpleNamespace:
    """
    Two users with one session each, and three tasks:
    Mike owns "First task" (open) and "Second task" (done),
    Jess owns "Third task" (done).
    """
    user_one_id = str(uuid.uuid4())
    user_two_id = str(uuid.uuid4())
    user_one_token = create_jwt_token(user_one_id, JWT_SECRET)
    user_two_token = create_jwt_token(user_two_id, JWT_SECRET)
    task_ids = [str(uuid.uuid4()) for _ in range(3)]

    with new_session() as db:
        db.add(User(
            id=user_one_id,
            name="Mike",
            email="mike@example.com",
            hashed_password=hash_password("56what!!"),
        ))
        db.add(User(
            id=user_two_id,
            name="Jess",
            email="jess@example.com",
            hashed_password=hash_password("myhouse099@@"),
        ))
        db.commit()

        db.add(UserToken(user_id=user_one_id, token=user_one_token))
        db.add(UserToken(user_id=user_two_id, token=user_two_token))
        db.add(Task(id=task_ids[0], description="First task", completed=False, owner=user_one_id))
        db.add(Task(id=task_ids[1], description="Second task", completed=True, owner=user_one_id))
        db.add(Task(id=task_ids[2], description="Third task", completed=True, owner=user_two_id))
        db.commit()

    return SimpleNamespace(
        user_one=SimpleNamespace(id=user_one_id, email="mike@example.com", password="56what!!", token=user_one_token),
        user_two=SimpleNamespace(id=user_two_id, email="jess@example.com", password="myhouse099@@", token=user_two_token),
        task_one_id=task_ids[0],
        task_two_id=task_ids[1],
        task_three_id=task_ids[2],
    )
