"""Filtered, sorted, paginated task listings.

A listing is a conjunction of optional predicates (owner, priority, status,
category, free-text search), one sort key and a page window. The engine
returns the page slice together with the total number of matching rows so
callers can derive the page count.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import ColumnElement, case, func, or_, select

from todo_api.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from todo_api.db.errors import translate_db_errors
from todo_api.db.models import Task
from todo_api.models import SortOrder, TaskPriority, TaskStatus

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class TaskSortField(StrEnum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    STATUS = "status"
    TITLE = "title"


class TaskFilter(BaseModel):
    """Conjunction of task predicates; None/empty fields are ignored."""

    model_config = ConfigDict(frozen=True)

    user_id: int | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    category: str | None = None
    search: str | None = None


class TaskSort(BaseModel):
    model_config = ConfigDict(frozen=True)

    by: TaskSortField = TaskSortField.CREATED_AT
    order: SortOrder = SortOrder.DESC


class PageRequest(BaseModel):
    """Page window. Out-of-range values are coerced, never rejected."""

    model_config = ConfigDict(frozen=True)

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    @field_validator("page")
    @classmethod
    def coerce_page(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_PAGE

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, value: int) -> int:
        if value <= 0:
            return DEFAULT_PAGE_SIZE
        return min(value, MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class TaskPage:
    items: list[Task] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


# rank priorities instead of sorting "high" < "low" < "medium" alphabetically
_PRIORITY_RANK = case(
    {priority.value: priority.rank for priority in TaskPriority},
    value=Task.priority,
    else_=-1,
)

_SORT_COLUMNS: dict[TaskSortField, ColumnElement] = {
    TaskSortField.CREATED_AT: Task.created_at,
    TaskSortField.UPDATED_AT: Task.updated_at,
    TaskSortField.DUE_DATE: Task.due_date,
    TaskSortField.PRIORITY: _PRIORITY_RANK,
    TaskSortField.STATUS: Task.status,
    TaskSortField.TITLE: Task.title,
}


def build_conditions(task_filter: TaskFilter) -> list[ColumnElement[bool]]:
    """Translate a filter into WHERE clauses. Soft-deleted tasks never match."""
    conditions: list[ColumnElement[bool]] = [Task.deleted_at.is_(None)]
    if task_filter.user_id is not None:
        conditions.append(Task.user_id == task_filter.user_id)
    if task_filter.priority is not None:
        conditions.append(Task.priority == task_filter.priority)
    if task_filter.status is not None:
        conditions.append(Task.status == task_filter.status)
    if task_filter.category:
        conditions.append(Task.category == task_filter.category)
    if task_filter.search and task_filter.search.strip():
        term = task_filter.search.strip()
        conditions.append(
            or_(
                Task.title.icontains(term, autoescape=True),
                Task.description.icontains(term, autoescape=True),
            )
        )
    return conditions


def build_order_by(sort: TaskSort) -> list[ColumnElement]:
    column = _SORT_COLUMNS[sort.by]
    if sort.order is SortOrder.ASC:
        primary, tiebreak = column.asc(), Task.id.asc()
    else:
        primary, tiebreak = column.desc(), Task.id.desc()
    if sort.by is TaskSortField.DUE_DATE:
        primary = primary.nulls_last()
    return [primary, tiebreak]


class TaskQueryEngine:
    """Read-only task listings over a session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def count(self, task_filter: TaskFilter) -> int:
        with translate_db_errors(self.session):
            return self.session.scalar(
                select(func.count())
                .select_from(Task)
                .where(*build_conditions(task_filter))
            ) or 0

    def list(
        self,
        task_filter: TaskFilter | None = None,
        sort: TaskSort | None = None,
        page: PageRequest | None = None,
    ) -> TaskPage:
        """Return one page of matching tasks plus the total match count.

        Args:
            task_filter: Predicates to AND together (default: all live tasks)
            sort: Sort key and direction (default: created_at descending)
            page: Page window (default: page 1, 10 items)

        Returns:
            TaskPage with the page slice and the pre-pagination total
        """
        task_filter = task_filter or TaskFilter()
        sort = sort or TaskSort()
        page = page or PageRequest()

        total = self.count(task_filter)
        if page.offset >= total:
            # nothing past the last row; such offsets may not even fit a BIGINT
            return TaskPage(total=total, page=page.page, limit=page.limit)

        statement = (
            select(Task)
            .where(*build_conditions(task_filter))
            .order_by(*build_order_by(sort))
            .offset(page.offset)
            .limit(page.limit)
        )
        with translate_db_errors(self.session):
            items = list(self.session.scalars(statement))
        return TaskPage(items=items, total=total, page=page.page, limit=page.limit)
