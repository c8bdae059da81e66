"""Persistence: engine/session management and ORM models."""

from todo_api.db.base import Base
from todo_api.db.database import Database
from todo_api.db.models import Task, User

__all__ = ["Base", "Database", "Task", "User"]
