"""Tests for filtered, sorted, paginated task listings."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from todo_api.db.models import Task, User
from todo_api.models import SortOrder, TaskPriority, TaskStatus
from todo_api.tasks.query import (
    PageRequest,
    TaskFilter,
    TaskPage,
    TaskQueryEngine,
    TaskSort,
    TaskSortField,
)

NOW = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def engine(session: Session) -> TaskQueryEngine:
    return TaskQueryEngine(session)


def _add(session: Session, user: User, title: str, **kwargs: object) -> Task:
    task = Task(user_id=user.id, title=title, **kwargs)
    session.add(task)
    session.commit()
    return task


def _titles(page: TaskPage) -> list[str]:
    return [task.title for task in page.items]


@pytest.mark.parametrize(
    ("page", "limit", "expected"),
    [
        (1, 10, (1, 10)),
        (0, 10, (1, 10)),
        (-3, 10, (1, 10)),
        (2, 0, (2, 10)),
        (2, -5, (2, 10)),
        (1, 100, (1, 100)),
        (1, 101, (1, 100)),
        (1, 1000, (1, 100)),
    ],
)
def test_page_request_coercion(page: int, limit: int, expected: tuple[int, int]) -> None:
    """Test out-of-range page values are coerced, never rejected."""
    request = PageRequest(page=page, limit=limit)
    assert (request.page, request.limit) == expected


def test_page_request_offset() -> None:
    assert PageRequest(page=3, limit=20).offset == 40


@pytest.mark.parametrize(
    ("total", "limit", "pages"),
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3)],
)
def test_total_pages(total: int, limit: int, pages: int) -> None:
    assert TaskPage(total=total, limit=limit).total_pages == pages


def test_default_listing_paginates(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test 25 tasks give 10 items on page 1 out of 3 pages."""
    for i in range(25):
        _add(session, user, f"task {i:02d}")

    page = engine.list()

    assert len(page.items) == 10
    assert page.total == 25
    assert page.total_pages == 3
    assert (page.page, page.limit) == (1, 10)


def test_last_page(engine: TaskQueryEngine, session: Session, user: User) -> None:
    for i in range(25):
        _add(session, user, f"task {i:02d}")

    page = engine.list(page=PageRequest(page=3, limit=10))

    assert len(page.items) == 5
    assert page.total == 25


def test_page_past_the_end(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test a page beyond the last one is empty but keeps the total."""
    _add(session, user, "only")

    page = engine.list(page=PageRequest(page=5))

    assert page.items == []
    assert page.total == 1


def test_huge_page_number(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test a page whose offset overflows a 64-bit integer is simply empty."""
    _add(session, user, "only")

    page = engine.list(page=PageRequest(page=10**19, limit=100))

    assert page.items == []
    assert page.total == 1
    assert page.page == 10**19
    assert page.total_pages == 1


def test_default_sort_newest_first(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    _add(session, user, "old", created_at=NOW - timedelta(days=2))
    _add(session, user, "new", created_at=NOW)
    _add(session, user, "mid", created_at=NOW - timedelta(days=1))

    assert _titles(engine.list()) == ["new", "mid", "old"]


def test_filter_by_user(
    engine: TaskQueryEngine, session: Session, user: User, other_user: User
) -> None:
    _add(session, user, "mine")
    _add(session, other_user, "theirs")

    page = engine.list(TaskFilter(user_id=other_user.id))

    assert _titles(page) == ["theirs"]
    assert page.total == 1


def test_filter_by_priority_and_status(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test filters are combined with AND."""
    _add(session, user, "a", priority=TaskPriority.HIGH, status=TaskStatus.PENDING)
    _add(session, user, "b", priority=TaskPriority.HIGH, status=TaskStatus.COMPLETED)
    _add(session, user, "c", priority=TaskPriority.LOW, status=TaskStatus.PENDING)

    page = engine.list(
        TaskFilter(priority=TaskPriority.HIGH, status=TaskStatus.PENDING)
    )

    assert _titles(page) == ["a"]


def test_filter_by_category(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    _add(session, user, "groceries", category="home")
    _add(session, user, "report", category="work")

    assert _titles(engine.list(TaskFilter(category="work"))) == ["report"]
    # empty category means no filter
    assert engine.list(TaskFilter(category="")).total == 2


def test_search_title_and_description(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test search is a case-insensitive substring match on title or description."""
    _add(session, user, "Buy MILK", created_at=NOW)
    _add(session, user, "Shopping", description="oat milk and eggs", created_at=NOW - timedelta(hours=1))
    _add(session, user, "Call mom", created_at=NOW - timedelta(hours=2))

    assert _titles(engine.list(TaskFilter(search="milk"))) == ["Buy MILK", "Shopping"]


def test_search_escapes_wildcards(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test % and _ in the search term match literally."""
    _add(session, user, "100% done")
    _add(session, user, "1000 done")

    assert _titles(engine.list(TaskFilter(search="0%"))) == ["100% done"]


def test_blank_search_is_ignored(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    _add(session, user, "a")
    _add(session, user, "b")

    assert engine.list(TaskFilter(search="   ")).total == 2


def test_sort_by_priority_uses_rank(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test priority sorts low < medium < high, not alphabetically."""
    _add(session, user, "medium", priority=TaskPriority.MEDIUM)
    _add(session, user, "high", priority=TaskPriority.HIGH)
    _add(session, user, "low", priority=TaskPriority.LOW)

    ascending = engine.list(sort=TaskSort(by=TaskSortField.PRIORITY, order=SortOrder.ASC))
    descending = engine.list(sort=TaskSort(by=TaskSortField.PRIORITY))

    assert _titles(ascending) == ["low", "medium", "high"]
    assert _titles(descending) == ["high", "medium", "low"]


def test_sort_by_due_date_nulls_last(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test tasks without a due date come last in either direction."""
    _add(session, user, "none")
    _add(session, user, "later", due_date=NOW + timedelta(days=2))
    _add(session, user, "soon", due_date=NOW + timedelta(days=1))

    ascending = engine.list(sort=TaskSort(by=TaskSortField.DUE_DATE, order=SortOrder.ASC))
    descending = engine.list(sort=TaskSort(by=TaskSortField.DUE_DATE, order=SortOrder.DESC))

    assert _titles(ascending) == ["soon", "later", "none"]
    assert _titles(descending) == ["later", "soon", "none"]


def test_sort_by_title(engine: TaskQueryEngine, session: Session, user: User) -> None:
    for title in ("banana", "apple", "cherry"):
        _add(session, user, title)

    page = engine.list(sort=TaskSort(by=TaskSortField.TITLE, order=SortOrder.ASC))

    assert _titles(page) == ["apple", "banana", "cherry"]


def test_ties_are_stable_across_pages(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    """Test equal sort keys fall back to id so pages never overlap."""
    for i in range(5):
        _add(session, user, f"task {i}", created_at=NOW)

    sort = TaskSort(order=SortOrder.ASC)
    first = engine.list(sort=sort, page=PageRequest(page=1, limit=2))
    second = engine.list(sort=sort, page=PageRequest(page=2, limit=2))
    third = engine.list(sort=sort, page=PageRequest(page=3, limit=2))

    ids = [t.id for t in first.items + second.items + third.items]
    assert ids == sorted(ids)
    assert len(set(ids)) == 5


def test_deleted_tasks_are_hidden(
    engine: TaskQueryEngine, session: Session, user: User
) -> None:
    kept = _add(session, user, "kept")
    gone = _add(session, user, "gone")
    gone.soft_delete()
    session.commit()

    page = engine.list()

    assert [t.id for t in page.items] == [kept.id]
    assert engine.count(TaskFilter()) == 1
