"""Task persistence."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from todo_api.db.errors import translate_db_errors
from todo_api.db.models import Task, User
from todo_api.exceptions import NotFoundError, ValidationError
from todo_api.logger import get_logger
from todo_api.models import TaskStatus
from todo_api.tasks.models import TaskCreate, TaskUpdate

logger = get_logger(__name__)

# columns an update may explicitly reset to null
_NULLABLE_FIELDS = {"due_date"}


class TaskStore:
    """CRUD for tasks. Soft-deleted tasks are invisible to every read."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, data: TaskCreate) -> Task:
        """Insert a pending task for an existing user.

        Raises:
            ValidationError: the owning user does not exist
        """
        owner_missing_message = f"User {data.user_id} does not exist"
        with translate_db_errors(self.session):
            owner = self.session.scalar(
                select(User.id).where(
                    User.id == data.user_id, User.deleted_at.is_(None)
                )
            )
        if owner is None:
            raise ValidationError(owner_missing_message)

        task = Task(
            user_id=data.user_id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            status=TaskStatus.PENDING,
            due_date=data.due_date,
            category=data.category,
        )
        # the owner can still vanish between the check and the insert; the FK decides
        with translate_db_errors(
            self.session, foreign_key_message=owner_missing_message
        ):
            self.session.add(task)
            self.session.commit()
        logger.info(
            "Created task", extra={"task_id": task.id, "user_id": task.user_id}
        )
        return task

    def get(self, task_id: int) -> Task:
        """Get a live task by id.

        Raises:
            NotFoundError: no such task, or the task was deleted
        """
        with translate_db_errors(self.session):
            task = self.session.scalar(
                select(Task).where(Task.id == task_id, Task.deleted_at.is_(None))
            )
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def update(self, task_id: int, changes: TaskUpdate) -> Task:
        """Apply the fields present in changes.

        status wins over the legacy completed flag; when only completed is
        given it drives status (true -> completed, false -> pending).
        """
        task = self.get(task_id)
        values = changes.model_dump(exclude_unset=True)
        completed = values.pop("completed", None)
        for key, value in values.items():
            if value is None and key not in _NULLABLE_FIELDS:
                continue
            setattr(task, key, value)
        if completed is not None and changes.status is None:
            task.set_completed(completed)

        with translate_db_errors(self.session):
            self.session.commit()
        return task

    def complete(self, task_id: int) -> Task:
        """Mark a task completed.

        Raises:
            NotFoundError: no such task; nothing is written
        """
        task = self.get(task_id)
        task.status = TaskStatus.COMPLETED
        with translate_db_errors(self.session):
            self.session.commit()
        logger.info("Completed task", extra={"task_id": task_id})
        return task

    def delete(self, task_id: int, *, hard: bool = False) -> None:
        """Soft-delete a task, or remove the row when hard is set.

        Raises:
            NotFoundError: no such live task
        """
        task = self.get(task_id)
        with translate_db_errors(self.session):
            if hard:
                self.session.execute(delete(Task).where(Task.id == task.id))
            else:
                task.soft_delete()
            self.session.commit()
        logger.info("Deleted task", extra={"task_id": task_id, "hard": hard})
