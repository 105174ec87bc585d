"""
Table definitions for the SQL-backed demo.

Queries in ``sql_client`` are plain parameterized SQL; these definitions only
exist so ``init-db`` and the tests can create the tables.
"""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("status", String(50), nullable=False),
    # Not enforced by the handlers; a task may point at a missing user
    Column("id_user", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)


def create_tables(connection):
    """Create the users and tasks tables if they don't exist."""
    metadata.create_all(connection)
    connection.commit()
