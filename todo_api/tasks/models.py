"""API models for tasks."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from todo_api.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from todo_api.models import SortOrder, TaskPriority, TaskStatus
from todo_api.tasks.query import (
    PageRequest,
    TaskFilter,
    TaskPage,
    TaskSort,
    TaskSortField,
)


def _strip_title(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("title must not be blank")
    return value


class TaskCreate(BaseModel):
    """Task creation payload. New tasks always start as pending."""

    user_id: int = Field(..., gt=0, description="Owning user ID")
    title: str = Field(..., min_length=1, max_length=255, description="Task title")
    description: str = Field(default="", description="Free-form description")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: datetime | None = Field(default=None, description="Optional due date")
    category: str = Field(default="", max_length=100)

    title_not_blank = field_validator("title")(_strip_title)


class TaskUpdate(BaseModel):
    """Partial task update; only fields present in the body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    completed: bool | None = Field(
        default=None,
        description="Legacy flag; true/false maps to completed/pending",
    )
    due_date: datetime | None = None
    category: str | None = Field(default=None, max_length=100)

    title_not_blank = field_validator("title")(_strip_title)

    @model_validator(mode="after")
    def status_matches_completed(self) -> "TaskUpdate":
        if self.status is not None and self.completed is not None:
            if self.completed != (self.status is TaskStatus.COMPLETED):
                raise ValueError("completed contradicts status")
        return self


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str
    priority: TaskPriority
    status: TaskStatus
    completed: bool
    due_date: datetime | None
    category: str
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Number of matching tasks")
    total_pages: int = Field(..., description="ceil(total / limit)")


class TaskListResponse(BaseModel):
    """Paginated task listing."""

    data: list[TaskResponse]
    pagination: Pagination

    @classmethod
    def from_page(cls, page: TaskPage) -> "TaskListResponse":
        return cls(
            data=[TaskResponse.model_validate(task) for task in page.items],
            pagination=Pagination(
                page=page.page,
                limit=page.limit,
                total=page.total,
                total_pages=page.total_pages,
            ),
        )


class TaskListParams(BaseModel):
    """Query parameters for task listings.

    page and limit are deliberately unconstrained here: non-positive values
    fall back to the defaults and limit is clamped to 100 by PageRequest.
    """

    page: int = Field(default=DEFAULT_PAGE, description="Page number (1-based)")
    limit: int = Field(default=DEFAULT_PAGE_SIZE, description="Page size (max 100)")
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    category: str | None = None
    search: str | None = Field(
        default=None, description="Case-insensitive match on title or description"
    )
    user_id: int | None = Field(default=None, description="Only tasks of this user")
    sort_by: TaskSortField = TaskSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    def to_filter(self, **overrides: int | None) -> TaskFilter:
        return TaskFilter(
            user_id=self.user_id,
            priority=self.priority,
            status=self.status,
            category=self.category,
            search=self.search,
        ).model_copy(update=overrides)

    def to_sort(self) -> TaskSort:
        return TaskSort(by=self.sort_by, order=self.sort_order)

    def to_page(self) -> PageRequest:
        return PageRequest(page=self.page, limit=self.limit)
