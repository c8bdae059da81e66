"""ORM models for users and tasks."""

from datetime import datetime

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from todo_api.db.base import Base, SoftDeleteMixin, TimestampMixin, UTCDateTime
from todo_api.models import TaskPriority, TaskStatus


def _enum_column(enum_cls: type[TaskPriority] | type[TaskStatus]) -> Enum:
    # stored as plain VARCHAR values ("pending", "high", ...), not native enums
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class User(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="user", nullable=False)

    tasks: Mapped[list["Task"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role!r})>"


class Task(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    priority: Mapped[TaskPriority] = mapped_column(
        _enum_column(TaskPriority), default=TaskPriority.MEDIUM, nullable=False
    )
    status: Mapped[TaskStatus] = mapped_column(
        _enum_column(TaskStatus), default=TaskStatus.PENDING, nullable=False
    )
    # legacy flag, always equal to status == completed
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(UTCDateTime)
    category: Mapped[str] = mapped_column(
        String(100), default="", nullable=False, index=True
    )

    user: Mapped[User] = relationship(back_populates="tasks")

    @validates("status")
    def _sync_completed(self, _key: str, value: TaskStatus | str) -> TaskStatus:
        status = TaskStatus(value)
        self.completed = status is TaskStatus.COMPLETED
        return status

    def set_completed(self, completed: bool) -> None:  # noqa: FBT001
        """Drive status from the legacy flag."""
        self.status = TaskStatus.COMPLETED if completed else TaskStatus.PENDING

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, user_id={self.user_id}, status={self.status!r})>"


# email is unique among live users only, a soft-deleted email can register again
Index(
    "uq_users_email_active",
    User.email,
    unique=True,
    sqlite_where=User.deleted_at.is_(None),
    postgresql_where=User.deleted_at.is_(None),
)
