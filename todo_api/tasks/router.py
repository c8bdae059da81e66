"""FastAPI router for task CRUD and listings."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from todo_api.dependencies import TaskQueryDep, TaskStoreDep, UserDep
from todo_api.logger import get_logger
from todo_api.models import DataResponse
from todo_api.tasks.models import (
    TaskCreate,
    TaskListParams,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)


@router.get("", operation_id="list-tasks")
def list_tasks(
    params: Annotated[TaskListParams, Query()],
    tasks: TaskQueryDep,
    current_user: UserDep,  # noqa: ARG001
) -> TaskListResponse:
    """List tasks with filtering, sorting and pagination.

    Example:
        GET /tasks?status=pending&priority=high&search=milk&sort_by=due_date&sort_order=asc&page=2&limit=20
        Response:
        {
            "data": [...],
            "pagination": {"page": 2, "limit": 20, "total": 57, "total_pages": 3}
        }
    """
    page = tasks.list(params.to_filter(), params.to_sort(), params.to_page())
    return TaskListResponse.from_page(page)


@router.post("", status_code=status.HTTP_201_CREATED, operation_id="create-task")
def create_task(
    task: TaskCreate,
    tasks: TaskStoreDep,
    current_user: UserDep,
) -> DataResponse[TaskResponse]:
    """Create a pending task.

    Raises:
        HTTPException:
            - 400 Bad Request: invalid body or the owning user does not exist
    """
    created = tasks.create(task)
    logger.info(
        f"Task {created.id} created",
        extra={"task_id": created.id, "created_by": current_user.user_id},
    )
    return DataResponse(data=TaskResponse.model_validate(created))


@router.get("/{task_id}", operation_id="get-task")
def get_task(
    task_id: int,
    tasks: TaskStoreDep,
    current_user: UserDep,  # noqa: ARG001
) -> DataResponse[TaskResponse]:
    return DataResponse(data=TaskResponse.model_validate(tasks.get(task_id)))


@router.put("/{task_id}", operation_id="update-task")
def update_task(
    task_id: int,
    changes: TaskUpdate,
    tasks: TaskStoreDep,
    current_user: UserDep,  # noqa: ARG001
) -> DataResponse[TaskResponse]:
    """Update the fields present in the body.

    Raises:
        HTTPException:
            - 400 Bad Request: invalid body, or status contradicts completed
            - 404 Not Found: no such task
    """
    return DataResponse(data=TaskResponse.model_validate(tasks.update(task_id, changes)))


@router.delete("/{task_id}", operation_id="delete-task")
def delete_task(
    task_id: int,
    tasks: TaskStoreDep,
    current_user: UserDep,  # noqa: ARG001
    hard: Annotated[
        bool,
        Query(description="Remove the row instead of marking it deleted"),
    ] = False,
) -> DataResponse[int]:
    """Delete a task (soft by default).

    Raises:
        HTTPException:
            - 404 Not Found: no such task
    """
    tasks.delete(task_id, hard=hard)
    return DataResponse(data=task_id)


@router.put("/{task_id}/complete", operation_id="complete-task")
def complete_task(
    task_id: int,
    tasks: TaskStoreDep,
    current_user: UserDep,  # noqa: ARG001
) -> DataResponse[TaskResponse]:
    """Mark a task completed (status=completed, completed=true).

    Raises:
        HTTPException:
            - 404 Not Found: no such task
    """
    return DataResponse(data=TaskResponse.model_validate(tasks.complete(task_id)))
