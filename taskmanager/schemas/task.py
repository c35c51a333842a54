"""Task schemas."""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from typing import Optional

# Keys a PATCH /tasks/{id} body may carry
TASK_UPDATABLE_FIELDS = ("description", "completed")


class TaskCreate(BaseModel):
    """Schema for creating a task. The owner always comes from the token."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1)
    completed: bool = False


class TaskUpdate(BaseModel):
    """Schema for updating a task."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = Field(None, min_length=1)
    completed: Optional[bool] = None

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TaskResponse(BaseModel):
    """Schema for task API responses."""
    id: str
    description: str
    completed: bool
    owner: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
