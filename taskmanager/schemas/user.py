"""User and authentication schemas."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional

PASSWORD_MIN_LENGTH = 7

# Keys a PATCH /users/profile body may carry
USER_UPDATABLE_FIELDS = ("name", "email", "password", "age")


def check_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if "password" in value.lower():
        raise ValueError('Password cannot contain "password"')
    return value


class UserCreate(BaseModel):
    """Registration request body."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str
    age: int = Field(default=0, ge=0)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password(value)


class UserUpdate(BaseModel):
    """Profile update body; only the keys present are applied."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value is not None else value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: Optional[str]) -> Optional[str]:
        return check_password(value) if value is not None else value

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class LoginRequest(BaseModel):
    """Login request body. The login route validates it itself so bad input fails as a generic login error."""
    email: str
    password: str


class UserResponse(BaseModel):
    """Sanitized user: never carries the password hash, tokens or avatar."""
    id: str
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Response to registration and login."""
    user: UserResponse
    token: str
