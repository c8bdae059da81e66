"""Dependency injection container for todo-api."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from todo_api.auth.passwords import PasswordHasher
from todo_api.auth.service import AuthService
from todo_api.auth.tokens import TokenIssuer
from todo_api.config import settings
from todo_api.db.database import Database
from todo_api.exceptions import UnauthorizedError
from todo_api.models import TokenClaims
from todo_api.tasks.query import TaskQueryEngine
from todo_api.tasks.store import TaskStore
from todo_api.users.store import UserStore

# auto_error=False: a missing header is reported as 401 through UnauthorizedError
security = HTTPBearer(auto_error=False)


def get_database(request: Request) -> Database:
    """Get database from app state.

    Raises:
        HTTPException: If the database is not initialized
    """
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not available",
        )
    return database


DatabaseDep = Annotated[Database, Depends(get_database)]


def get_session(database: DatabaseDep) -> Generator[Session, None, None]:
    """One session per request."""
    with database.session() as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]


def get_token_issuer(request: Request) -> TokenIssuer:
    """Get token issuer from app state.

    Raises:
        HTTPException: If the token issuer is not initialized
    """
    issuer = getattr(request.app.state, "token_issuer", None)
    if issuer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token issuer not available",
        )
    return issuer


TokenIssuerDep = Annotated[TokenIssuer, Depends(get_token_issuer)]


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.auth.bcrypt_rounds)


PasswordHasherDep = Annotated[PasswordHasher, Depends(get_password_hasher)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: TokenIssuerDep,
) -> TokenClaims:
    """Validate the bearer token and return its claims.

    Raises:
        UnauthorizedError: header missing, not a bearer token, or token invalid
    """
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")
    return issuer.validate(credentials.credentials)


def get_user_store(session: SessionDep) -> UserStore:
    return UserStore(session)


def get_task_store(session: SessionDep) -> TaskStore:
    return TaskStore(session)


def get_task_query(session: SessionDep) -> TaskQueryEngine:
    return TaskQueryEngine(session)


def get_auth_service(
    users: Annotated[UserStore, Depends(get_user_store)],
    hasher: PasswordHasherDep,
    issuer: TokenIssuerDep,
) -> AuthService:
    return AuthService(users, hasher, issuer)


# Type aliases for dependency injection
UserDep = Annotated[TokenClaims, Depends(get_current_user)]
UserStoreDep = Annotated[UserStore, Depends(get_user_store)]
TaskStoreDep = Annotated[TaskStore, Depends(get_task_store)]
TaskQueryDep = Annotated[TaskQueryEngine, Depends(get_task_query)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
