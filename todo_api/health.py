"""Health check utilities for todo-api."""

from typing import Annotated

from fastapi import Depends, Request
from pydantic import BaseModel, Field

from todo_api.config import settings
from todo_api.db.database import Database
from todo_api.rate_limit import BucketStore


class HealthStatus(BaseModel):
    """Health status for a component."""

    status: str = Field(..., description="Health status: healthy, unhealthy, disabled")
    message: str | None = Field(None, description="Optional status message")


class HealthResponse(BaseModel):
    """Overall health check response."""

    status: str = Field(..., description="Overall status: healthy, unhealthy, degraded")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    components: dict[str, HealthStatus] = Field(
        default_factory=dict, description="Component health statuses"
    )


def get_database_from_request(request: Request) -> Database | None:
    """Get database from app state, return None if not available.

    This is different from the get_database() dependency which raises HTTPException.
    Health checks should not fail with 503, but report component status instead.
    """
    return getattr(request.app.state, "database", None)


def get_rate_limit_store_from_request(request: Request) -> BucketStore | None:
    return getattr(request.app.state, "rate_limit_store", None)


# Type aliases for dependency injection
DatabaseOptionalDep = Annotated[Database | None, Depends(get_database_from_request)]
BucketStoreOptionalDep = Annotated[
    BucketStore | None, Depends(get_rate_limit_store_from_request)
]


def check_database_health(database: Database | None) -> HealthStatus:
    """Check database health.

    Args:
        database: Database instance or None

    Returns:
        HealthStatus with current database health
    """
    if database is None:
        return HealthStatus(status="unhealthy", message="Database not initialized")
    if database.ping():
        return HealthStatus(status="healthy", message="Database reachable")
    return HealthStatus(status="unhealthy", message="Database unreachable")


def check_rate_limit_store_health(store: BucketStore | None) -> HealthStatus:
    if not settings.rate_limit.enabled:
        return HealthStatus(status="disabled", message="Rate limiting disabled")
    if store is None:
        return HealthStatus(status="unhealthy", message="Rate limit store not initialized")
    if store.ping():
        return HealthStatus(status="healthy", message="Rate limit store reachable")
    return HealthStatus(status="unhealthy", message="Rate limit store unreachable")


def get_health_status(
    database: DatabaseOptionalDep, store: BucketStoreOptionalDep
) -> HealthResponse:
    """Get overall health status including all components.

    The service is unhealthy without its database. A broken rate limit store
    only degrades it: requests are admitted without throttling.
    """
    components = {
        "database": check_database_health(database),
        "rate_limit_store": check_rate_limit_store_health(store),
    }

    if components["database"].status == "unhealthy":
        overall_status = "unhealthy"
    elif any(c.status == "unhealthy" for c in components.values()):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    return HealthResponse(
        status=overall_status,
        service=settings.app_name,
        version=settings.version,
        components=components,
    )


# Type alias for dependency injection (must be after function definition)
HealthResponseDep = Annotated[HealthResponse, Depends(get_health_status)]
