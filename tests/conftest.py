"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

if TYPE_CHECKING:
    # todo_api reads its settings at import time, after pytest_configure
    from todo_api.auth.passwords import PasswordHasher
    from todo_api.auth.tokens import TokenIssuer
    from todo_api.db.database import Database
    from todo_api.db.models import User

TEST_JWT_SECRET = "test-secret-key-do-not-use-in-production"


def pytest_configure() -> None:
    """Configure pytest environment before test collection.

    This hook runs before pytest starts collecting tests, ensuring
    environment variables are set before Settings() is instantiated
    at module import time.
    """
    os.environ.setdefault("TODO_API_AUTH__JWT_SECRET_KEY", TEST_JWT_SECRET)
    # lowest bcrypt cost keeps hashing fast
    os.environ.setdefault("TODO_API_AUTH__BCRYPT_ROUNDS", "4")
    os.environ.setdefault("TODO_API_RATE_LIMIT__ENABLED", "false")
    os.environ.setdefault("TODO_API_DATABASE__URL", "sqlite://")
    os.environ.setdefault("TODO_API_LOG_FORMAT_JSON", "false")


@pytest.fixture
def database() -> Generator["Database", None, None]:
    """Fresh in-memory SQLite database with all tables created."""
    from todo_api.db.database import Database

    db = Database("sqlite://")
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def session(database: "Database") -> Generator[Session, None, None]:
    session = database.new_session()
    yield session
    session.close()


@pytest.fixture
def token_issuer() -> "TokenIssuer":
    from todo_api.auth.tokens import TokenIssuer
    from todo_api.config import settings

    return TokenIssuer.from_settings(settings.auth)


@pytest.fixture
def hasher() -> "PasswordHasher":
    from todo_api.auth.passwords import PasswordHasher

    return PasswordHasher(rounds=4)


@pytest.fixture
def client(
    database: "Database", token_issuer: "TokenIssuer"
) -> Generator[TestClient, None, None]:
    """Create test client backed by the in-memory database.

    The lifespan handler does not run (no context manager), the fixture
    puts the singletons on app.state instead.
    """
    from todo_api.main import app

    app.state.database = database
    app.state.token_issuer = token_issuer
    app.state.rate_limit_store = None

    # raise_server_exceptions=False allows testing error responses (401, 404, etc.)
    # instead of raising exceptions in tests
    yield TestClient(app, raise_server_exceptions=False)

    # Cleanup
    for name in ("database", "token_issuer", "rate_limit_store"):
        if hasattr(app.state, name):
            delattr(app.state, name)


@pytest.fixture
def user(session: Session, hasher: "PasswordHasher") -> "User":
    """Registered user alice@example.com with password 'secret1'."""
    from todo_api.users.store import UserStore

    return UserStore(session).create(
        name="Alice",
        email="alice@example.com",
        password_hash=hasher.hash("secret1"),
    )


@pytest.fixture
def other_user(session: Session, hasher: "PasswordHasher") -> "User":
    from todo_api.users.store import UserStore

    return UserStore(session).create(
        name="Bob",
        email="bob@example.com",
        password_hash=hasher.hash("secret2"),
    )


@pytest.fixture
def auth_headers(user: "User", token_issuer: "TokenIssuer") -> dict[str, str]:
    """Bearer header for the `user` fixture."""
    token = token_issuer.issue_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}
