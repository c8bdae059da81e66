"""User persistence."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from todo_api.db.errors import translate_db_errors
from todo_api.db.models import Task, User
from todo_api.exceptions import NotFoundError
from todo_api.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ROLE = "user"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    """CRUD for users. Soft-deleted users are invisible to every read."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(
        self, name: str, email: str, password_hash: str, role: str = DEFAULT_ROLE
    ) -> User:
        """Insert a user.

        Raises:
            ConflictError: a live user already has this email
        """
        user = User(
            name=name,
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
        )
        with translate_db_errors(self.session, unique_message="Email already exists"):
            self.session.add(user)
            self.session.commit()
        logger.info("Created user", extra={"user_id": user.id})
        return user

    def get(self, user_id: int) -> User:
        """Get a live user by id.

        Raises:
            NotFoundError: no such user, or the user was deleted
        """
        with translate_db_errors(self.session):
            user = self.session.scalar(
                select(User).where(User.id == user_id, User.deleted_at.is_(None))
            )
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_by_email(self, email: str) -> User | None:
        with translate_db_errors(self.session):
            return self.session.scalar(
                select(User).where(
                    User.email == normalize_email(email), User.deleted_at.is_(None)
                )
            )

    def list_active(self) -> list[User]:
        with translate_db_errors(self.session):
            return list(
                self.session.scalars(
                    select(User).where(User.deleted_at.is_(None)).order_by(User.id)
                )
            )

    def delete(self, user_id: int) -> None:
        """Soft-delete a user and remove all of the user's tasks in one commit.

        Raises:
            NotFoundError: no such live user
        """
        user = self.get(user_id)
        with translate_db_errors(self.session):
            result = self.session.execute(delete(Task).where(Task.user_id == user.id))
            user.soft_delete()
            self.session.commit()
        logger.info(
            "Deleted user",
            extra={"user_id": user_id, "removed_tasks": result.rowcount},
        )

    def purge(self, user_id: int) -> None:
        """Physically delete a user row; the FK cascade removes its tasks."""
        with translate_db_errors(self.session):
            self.session.execute(delete(User).where(User.id == user_id))
            self.session.commit()
