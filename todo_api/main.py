"""todo-api main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import RedirectResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_api.auth.tokens import TokenIssuer
from todo_api.config import settings
from todo_api.db.database import Database
from todo_api.exceptions import (
    APIError,
    api_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from todo_api.health import HealthResponse, HealthResponseDep
from todo_api.logger import setup_logging
from todo_api.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from todo_api.rate_limit import get_bucket_store
from todo_api.routers.api import api_router

logger = setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:  # noqa: RUF029
    """Manage application lifecycle - startup and shutdown.

    Note: FastAPI requires async lifespan, but our code is sync.

    Initializes singletons:
    - Database (engine and session factory)
    - TokenIssuer (JWT signing key)
    - BucketStore (rate limit state), only when rate limiting is enabled
    """
    _app.state.database = Database.from_settings(settings.database)
    if settings.database.create_tables:
        _app.state.database.create_all()

    _app.state.token_issuer = TokenIssuer.from_settings(settings.auth)

    _app.state.rate_limit_store = (
        get_bucket_store(settings.rate_limit) if settings.rate_limit.enabled else None
    )

    logger.info(f"{settings.app_name} {settings.version} started")

    yield

    if _app.state.rate_limit_store is not None:
        _app.state.rate_limit_store.close()

    _app.state.database.close()


app = FastAPI(
    title=settings.app_name,
    description="REST API for managing users and their todo tasks",
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    # don't use add_exception_handler because of https://github.com/Kludex/starlette/discussions/2391
    exception_handlers={
        APIError: api_error_handler,
        StarletteHTTPException: http_exception_handler,
        Exception: general_exception_handler,
        RequestValidationError: validation_exception_handler,
    },
)


def custom_openapi() -> dict[str, Any]:
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Todo List API",
        version=settings.version,
        summary="Todo List API OpenAPI schema",
        description="REST API for managing users and their todo tasks",
        routes=app.routes,
    )
    # request validation failures are reported as 400, not FastAPI's default 422
    for path in openapi_schema["paths"].values():
        for operation in path.values():
            responses = operation.get("responses", {})
            if "422" in responses:
                responses["400"] = responses.pop("422")
                responses["400"]["description"] = "Invalid input"
    app.openapi_schema = openapi_schema
    return app.openapi_schema


# See https://fastapi.tiangolo.com/how-to/extending-openapi/#override-the-method for details
app.openapi = custom_openapi  # type: ignore[method-assign]

# Add middleware (order matters - last added is outermost)
app.add_middleware(
    RateLimitMiddleware,
    capacity=settings.rate_limit.capacity,
    refill_rate=settings.rate_limit.refill_rate,
)
if settings.security_headers.enabled:
    app.add_middleware(
        SecurityHeadersMiddleware,
        hsts=settings.security_headers.hsts,
        hsts_max_age=settings.security_headers.hsts_max_age,
    )
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.allow_origins,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
    allow_credentials=settings.cors.allow_credentials,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

app.include_router(api_router)

Instrumentator(
    excluded_handlers=["/metrics", "/health/live", "/health/ready"]
).instrument(app).expose(app, include_in_schema=False)


@app.get("/", include_in_schema=False, tags=["General"])
def root() -> Response:
    """Root endpoint - redirect to OpenAPI documentation."""
    return RedirectResponse(url="/docs")


@app.get("/health/live", operation_id="liveness", tags=["Health"])
def liveness() -> dict[str, str]:
    """Liveness probe - returns 200 if service is running."""
    return {
        "status": "healthy",
        "service": settings.app_name,
    }


@app.get("/health/ready", operation_id="readiness", tags=["Health"])
def readiness(health_status: HealthResponseDep, response: Response) -> HealthResponse:
    """Readiness probe - returns 503 while the database is unreachable."""
    if health_status.status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return health_status
