"""Database engine and session management.

A Database owns one SQLAlchemy engine and session factory. The application
creates it in the lifespan handler and keeps it on app.state; request
handlers get sessions through dependency injection (see dependencies.py).
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from todo_api.config import DatabaseSettings
from todo_api.db.base import Base
from todo_api.logger import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    # SQLite ignores FOREIGN KEY / ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine plus session factory for one database."""

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        pool_pre_ping: bool = True,
    ) -> None:
        self.url = make_url(url)
        engine_kwargs: dict[str, Any] = {"echo": echo}

        if self.url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.url.database in {None, "", ":memory:"}:
                # one shared connection, otherwise every checkout gets an empty database
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["pool_pre_ping"] = pool_pre_ping

        self.engine: Engine = create_engine(self.url, **engine_kwargs)
        if self.url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._sessionmaker = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "Database":
        return cls(
            settings.get_url(),
            echo=settings.echo,
            pool_size=settings.pool_size,
            pool_pre_ping=settings.pool_pre_ping,
        )

    def create_all(self) -> None:
        """Create missing tables."""
        logger.info(
            "Creating database tables",
            extra={"database": self.url.render_as_string(hide_password=True)},
        )
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    def new_session(self) -> Session:
        return self._sessionmaker()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session scope; rolls back on error, always closes."""
        session = self._sessionmaker()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """Check if the database is reachable."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning(f"Database ping failed: {e}")
            return False
        return True

    def close(self) -> None:
        """Dispose of the connection pool."""
        self.engine.dispose()
