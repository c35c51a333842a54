"""User and issued-token models for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, LargeBinary
from datetime import datetime, timezone
from typing import Optional
import uuid


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """User entity for authentication and task ownership.

    Owned tasks are not stored here; they are queried by owner id.
    """

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        index=True
    )
    name: str = Field(max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    hashed_password: str = Field(max_length=255)
    age: int = Field(default=0)
    avatar: Optional[bytes] = Field(default=None, sa_column=Column(LargeBinary, nullable=True))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class UserToken(SQLModel, table=True):
    """One issued bearer token; the rows of a user, ordered by id, are its sessions."""

    __tablename__ = "user_token"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    token: str = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)
