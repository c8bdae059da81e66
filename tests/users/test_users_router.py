"""Tests for the user management endpoints."""

from http import HTTPStatus

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from todo_api.db.database import Database
from todo_api.db.models import Task, User
from todo_api.users.store import UserStore


def _add_task(session: Session, user: User, title: str, **kwargs: object) -> Task:
    task = Task(user_id=user.id, title=title, **kwargs)
    session.add(task)
    session.commit()
    return task


def test_list_users(
    client: TestClient, auth_headers: dict[str, str], user: User, other_user: User
) -> None:
    """Test all live users are listed without password hashes."""
    response = client.get("/allUsers", headers=auth_headers)
    assert response.status_code == HTTPStatus.OK
    data = response.json()["data"]
    assert [u["email"] for u in data] == ["alice@example.com", "bob@example.com"]
    assert all("password_hash" not in u for u in data)


def test_list_users_requires_auth(client: TestClient) -> None:
    response = client.get("/allUsers")
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.json()["error"] == "Missing bearer token"


def test_invalid_token(client: TestClient) -> None:
    """Test an invalid bearer token is rejected."""
    response = client.get(
        "/allUsers", headers={"Authorization": "Bearer invalid.token.here"}
    )
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.json()["error"] == "Invalid or expired token"


def test_delete_user(
    client: TestClient,
    auth_headers: dict[str, str],
    session: Session,
    user: User,
    other_user: User,
) -> None:
    """Test deleting a user returns its id and removes its tasks."""
    _add_task(session, other_user, "Bob's task")

    response = client.delete(f"/deleteUser/{other_user.id}", headers=auth_headers)

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"data": other_user.id}
    listing = client.get("/allUsers", headers=auth_headers).json()["data"]
    assert [u["id"] for u in listing] == [user.id]
    tasks = client.get(f"/tasks?user_id={other_user.id}", headers=auth_headers)
    assert tasks.json()["pagination"]["total"] == 0


def test_delete_unknown_user(client: TestClient, auth_headers: dict[str, str]) -> None:
    response = client.delete("/deleteUser/999", headers=auth_headers)
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["error"] == "User not found"


def test_delete_user_invalid_id(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    """Test a non-numeric id is rejected with 400."""
    response = client.delete("/deleteUser/abc", headers=auth_headers)
    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_create_user_legacy(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    """Test the legacy endpoint creates a user without issuing tokens."""
    response = client.post(
        "/createUser",
        json={"name": "Carol", "email": "carol@example.com", "password": "secret1"},
        headers=auth_headers,
    )
    assert response.status_code == HTTPStatus.CREATED
    data = response.json()["data"]
    assert data["email"] == "carol@example.com"
    assert "access_token" not in data


def test_create_user_legacy_requires_auth(
    client: TestClient, database: Database
) -> None:
    """Test an anonymous request is rejected and no user is stored."""
    response = client.post(
        "/createUser",
        json={"name": "Carol", "email": "carol@example.com", "password": "secret1"},
    )

    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.headers["WWW-Authenticate"] == "Bearer"
    with database.session() as session:
        assert UserStore(session).get_by_email("carol@example.com") is None


def test_list_user_tasks(
    client: TestClient,
    auth_headers: dict[str, str],
    session: Session,
    user: User,
    other_user: User,
) -> None:
    """Test only the given user's tasks are listed."""
    _add_task(session, user, "mine")
    _add_task(session, other_user, "theirs")

    response = client.get(f"/users/{user.id}/tasks", headers=auth_headers)

    assert response.status_code == HTTPStatus.OK
    body = response.json()
    assert [t["title"] for t in body["data"]] == ["mine"]
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "total_pages": 1}


def test_list_user_tasks_ignores_user_id_query(
    client: TestClient,
    auth_headers: dict[str, str],
    session: Session,
    user: User,
    other_user: User,
) -> None:
    """Test the path user wins over a user_id query parameter."""
    _add_task(session, other_user, "theirs")

    response = client.get(
        f"/users/{user.id}/tasks?user_id={other_user.id}", headers=auth_headers
    )

    assert response.json()["data"] == []


def test_list_user_tasks_filters(
    client: TestClient, auth_headers: dict[str, str], session: Session, user: User
) -> None:
    """Test the per-user listing accepts the same filters as /tasks."""
    _add_task(session, user, "urgent", priority="high")
    _add_task(session, user, "later", priority="low")

    response = client.get(
        f"/users/{user.id}/tasks?priority=high", headers=auth_headers
    )

    assert [t["title"] for t in response.json()["data"]] == ["urgent"]


def test_list_tasks_of_unknown_user(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    response = client.get("/users/999/tasks", headers=auth_headers)
    assert response.status_code == HTTPStatus.NOT_FOUND
