"""Shared data models for todo-api."""

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field


class TaskStatus(StrEnum):
    """Lifecycle status of a task.

    The legacy boolean `completed` column mirrors `status == COMPLETED`.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(StrEnum):
    """Task priority, ordered low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return list(TaskPriority).index(self)


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class TokenClaims(BaseModel):
    """Decoded JWT claims."""

    user_id: int = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    role: str = Field(..., description="User role")
    sub: str = Field(..., description="Subject (email)")
    iss: str = Field(..., description="Issuer")
    iat: int = Field(..., description="Issued-at timestamp")
    nbf: int = Field(..., description="Not-before timestamp")
    exp: int = Field(..., description="Expiration timestamp")


class TokenPair(BaseModel):
    """Access and refresh token issued together."""

    access_token: str = Field(..., description="Short-lived JWT access token")
    refresh_token: str = Field(..., description="Long-lived JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Success envelope: {"data": ...}."""

    data: T
