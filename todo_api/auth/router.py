"""FastAPI router for registration, login and token refresh."""

from fastapi import APIRouter, status

from todo_api.auth.models import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    RefreshRequest,
)
from todo_api.dependencies import AuthServiceDep
from todo_api.models import DataResponse
from todo_api.users.models import NewUser

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    operation_id="register",
)
def register(
    new_user: NewUser, auth_service: AuthServiceDep
) -> DataResponse[AuthResponse]:
    """Create a user and return it with a token pair.

    Raises:
        HTTPException:
            - 400 Bad Request: name < 3 chars, malformed email, password < 6 chars
            - 409 Conflict: email already registered
    """
    return DataResponse(data=auth_service.register(new_user))


@router.post("/login", operation_id="login")
def login(
    credentials: LoginRequest, auth_service: AuthServiceDep
) -> DataResponse[AuthResponse]:
    """Exchange email and password for a token pair.

    Raises:
        HTTPException:
            - 401 Unauthorized: unknown email or wrong password
    """
    return DataResponse(
        data=auth_service.login(credentials.email, credentials.password)
    )


@router.post("/refresh", operation_id="refresh-token")
def refresh(
    refresh_request: RefreshRequest, auth_service: AuthServiceDep
) -> DataResponse[AccessTokenResponse]:
    """Mint a new access token from a refresh token.

    The refresh token is not consumed and stays valid until it expires.

    Raises:
        HTTPException:
            - 401 Unauthorized: tampered, expired or otherwise invalid token
    """
    return DataResponse(data=auth_service.refresh(refresh_request.refresh_token))
