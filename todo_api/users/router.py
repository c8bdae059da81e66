"""FastAPI router for user management.

Paths keep the legacy camelCase API (/allUsers, /deleteUser/{id},
/createUser) so existing clients keep working.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from todo_api.dependencies import AuthServiceDep, TaskQueryDep, UserDep, UserStoreDep
from todo_api.logger import get_logger
from todo_api.models import DataResponse
from todo_api.tasks.models import TaskListParams, TaskListResponse
from todo_api.users.models import NewUser, UserResponse

logger = get_logger(__name__)

router = APIRouter(tags=["users"])


@router.get("/allUsers", operation_id="list-users")
def list_users(
    users: UserStoreDep,
    current_user: UserDep,  # noqa: ARG001
) -> DataResponse[list[UserResponse]]:
    """List all users that have not been deleted."""
    return DataResponse(
        data=[UserResponse.model_validate(user) for user in users.list_active()]
    )


@router.delete("/deleteUser/{user_id}", operation_id="delete-user")
def delete_user(
    user_id: int,
    users: UserStoreDep,
    current_user: UserDep,
) -> DataResponse[int]:
    """Delete a user together with all of the user's tasks.

    Raises:
        HTTPException:
            - 404 Not Found: no such user
    """
    users.delete(user_id)
    logger.info(
        f"User {user_id} deleted",
        extra={"user_id": user_id, "deleted_by": current_user.user_id},
    )
    return DataResponse(data=user_id)


@router.post(
    "/createUser",
    status_code=status.HTTP_201_CREATED,
    operation_id="create-user",
    deprecated=True,
)
def create_user(
    new_user: NewUser,
    auth_service: AuthServiceDep,
    current_user: UserDep,
) -> DataResponse[UserResponse]:
    """Create a user without issuing tokens. Use POST /auth/register instead.

    Raises:
        HTTPException:
            - 400 Bad Request: invalid name, email or password
            - 401 Unauthorized: missing or invalid bearer token
            - 409 Conflict: email already registered
    """
    user = auth_service.create_user(new_user)
    logger.info(
        f"User {user.id} created",
        extra={"user_id": user.id, "created_by": current_user.user_id},
    )
    return DataResponse(data=UserResponse.model_validate(user))


@router.get("/users/{user_id}/tasks", operation_id="list-user-tasks")
def list_user_tasks(
    user_id: int,
    params: Annotated[TaskListParams, Query()],
    users: UserStoreDep,
    tasks: TaskQueryDep,
    current_user: UserDep,  # noqa: ARG001
) -> TaskListResponse:
    """List one user's tasks with the same filters, sorting and paging as GET /tasks.

    Raises:
        HTTPException:
            - 404 Not Found: no such user
    """
    users.get(user_id)
    page = tasks.list(
        params.to_filter(user_id=user_id), params.to_sort(), params.to_page()
    )
    return TaskListResponse.from_page(page)
