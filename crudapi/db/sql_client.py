"""
This module contains the SQL client used by the database-backed demo.

A single connection is opened lazily and shared by every request. There is no
pool and no reconnection logic: once the connection drops, every query fails
until the process restarts.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from crudapi.utils.logging_utils import get_logger

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Raised when a statement fails on the shared connection."""


class ConstraintViolationError(DatabaseError):
    """Raised when a statement violates a unique or foreign key constraint."""


def _now() -> str:
    # Plain string so the same statement binds on MySQL and SQLite
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


class SQLClient:
    """
    Owns one SQLAlchemy connection and runs parameterized statements on it.

    Args:
        url: SQLAlchemy database URL (e.g. ``mysql+pymysql://root@localhost/bd_tasks``)
    """

    def __init__(self, url: str):
        self.url = url
        self._engine = None
        self._connection = None

    def _create_engine(self):
        connect_args = {}
        kwargs = {}
        if make_url(self.url).get_backend_name() == "sqlite":
            # One connection touched from the event loop thread and test threads
            connect_args["check_same_thread"] = False
            kwargs["poolclass"] = StaticPool
        return create_engine(self.url, connect_args=connect_args, **kwargs)

    @property
    def connection(self):
        """The shared connection, opened on first use in autocommit mode."""
        if self._connection is None:
            try:
                self._engine = self._create_engine()
                self._connection = self._engine.connect().execution_options(
                    isolation_level="AUTOCOMMIT"
                )
            except SQLAlchemyError as e:
                logger.error(f"Error connecting to database: {e}")
                raise DatabaseError(str(e)) from e
            logger.info(f"Database connected: {make_url(self.url).render_as_string()}")
        return self._connection

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None):
        """
        Run one statement and return the SQLAlchemy result.

        Raises:
            ConstraintViolationError: On unique or foreign key violations
            DatabaseError: On any other driver error
        """
        try:
            return self.connection.execute(text(sql), params or {})
        except IntegrityError as e:
            logger.warning(f"Integrity error running '{sql}': {e.orig}")
            raise ConstraintViolationError(str(e.orig)) from e
        except SQLAlchemyError as e:
            logger.error(f"Error running '{sql}': {e}")
            raise DatabaseError(str(e)) from e

    def fetch_all(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [dict(row) for row in self.execute(sql, params).mappings().all()]

    def fetch_one(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        row = self.execute(sql, params).mappings().first()
        return dict(row) if row is not None else None

    def ping(self) -> int:
        """Return the number of users, proving the connection works."""
        row = self.fetch_one("SELECT COUNT(*) AS users FROM users")
        return int(row["users"]) if row else 0

    def close(self):
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed")


class _Repository:
    table = ""
    columns: Iterable[str] = ()
    writable: Iterable[str] = ()

    def __init__(self, client: SQLClient):
        self.client = client

    @property
    def select_list(self) -> str:
        return ", ".join(self.columns)

    def list_all(self) -> List[Dict[str, Any]]:
        return self.client.fetch_all(
            f"SELECT {self.select_list} FROM {self.table} ORDER BY id"
        )

    def get(self, row_id: int) -> Optional[Dict[str, Any]]:
        return self.client.fetch_one(
            f"SELECT {self.select_list} FROM {self.table} WHERE id = :id",
            {"id": row_id},
        )

    def create(self, values: Dict[str, Any]) -> int:
        """Insert a row and return its auto-increment id."""
        names = [name for name in self.writable if name in values]
        params = {name: values[name] for name in names}
        params["created_at"] = params["updated_at"] = _now()

        placeholders = ", ".join(f":{name}" for name in names)
        result = self.client.execute(
            f"INSERT INTO {self.table} ({', '.join(names)}, created_at, updated_at) "
            f"VALUES ({placeholders}, :created_at, :updated_at)",
            params,
        )
        return int(result.lastrowid)

    def replace(self, row_id: int, values: Dict[str, Any]) -> int:
        """Overwrite every writable column; missing values become NULL."""
        params = {name: values.get(name) for name in self.writable}
        return self._update(row_id, params)

    def update(self, row_id: int, changes: Dict[str, Any]) -> int:
        """
        Update only the supplied columns.

        Raises:
            ValueError: If no writable column was supplied
        """
        params = {
            name: changes[name]
            for name in self.writable
            if name in changes and changes[name] is not None
        }
        if not params:
            raise ValueError("At least one field must be provided for update")
        return self._update(row_id, params)

    def _update(self, row_id: int, params: Dict[str, Any]) -> int:
        assignments = [f"{name} = :{name}" for name in params]
        assignments.append("updated_at = :updated_at")
        result = self.client.execute(
            f"UPDATE {self.table} SET {', '.join(assignments)} WHERE id = :id",
            {**params, "updated_at": _now(), "id": row_id},
        )
        return result.rowcount

    def delete(self, row_id: int) -> int:
        result = self.client.execute(
            f"DELETE FROM {self.table} WHERE id = :id", {"id": row_id}
        )
        return result.rowcount


class UserRepository(_Repository):
    """Statements against the users table. Passwords are written, never read."""

    table = "users"
    columns = ("id", "name", "email", "created_at", "updated_at")
    writable = ("name", "email", "password")

    def find_by_email(self, email: str) -> List[Dict[str, Any]]:
        return self.client.fetch_all(
            f"SELECT {self.select_list} FROM users WHERE email = :email",
            {"email": email},
        )

    def list_tasks(self, user_id: int) -> List[Dict[str, Any]]:
        return self.client.fetch_all(
            f"SELECT {', '.join(TaskRepository.columns)} FROM tasks "
            "WHERE id_user = :id_user ORDER BY id",
            {"id_user": user_id},
        )


class TaskRepository(_Repository):
    table = "tasks"
    columns = (
        "id",
        "title",
        "description",
        "status",
        "id_user",
        "created_at",
        "updated_at",
    )
    writable = ("title", "description", "status", "id_user")
