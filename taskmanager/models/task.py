"""Task model for SQLModel."""
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from taskmanager.models.user import utc_now


class Task(SQLModel, table=True):
    """Task entity representing a todo item owned by one user."""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        index=True
    )
    description: str
    completed: bool = Field(default=False)
    owner: str = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
