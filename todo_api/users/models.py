"""API models for users."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserResponse(BaseModel):
    """Public user representation. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    role: str = Field(..., description="Role")
    created_at: datetime
    updated_at: datetime


class NewUser(BaseModel):
    """Registration payload."""

    name: str = Field(..., min_length=3, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="Email address")
    # bcrypt ignores everything past 72 bytes
    password: str = Field(..., min_length=6, max_length=72, description="Password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:  # noqa: PLR2004
            raise ValueError("name must be at least 3 characters")
        return value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > 72:  # noqa: PLR2004
            raise ValueError("password must be at most 72 bytes")
        return value
