"""
Configuration module for pytest.

This module contains fixtures and setup/teardown functions for tests.
"""

import os
import tempfile

# Keep service log files out of the project tree; must run before crudapi imports
os.environ.setdefault("CRUDAPI_LOG_DIR", tempfile.mkdtemp(prefix="crudapi-logs-"))

import pytest
from fastapi.testclient import TestClient

from crudapi.config import RateLimitConfig, ServerConfig
from crudapi.db.sql_client import SQLClient
from crudapi.db.tables import create_tables
from crudapi.server import database_app, memory_app, uuid_app


@pytest.fixture
def server_config():
    """Default server config with rate limiting turned off."""
    return ServerConfig(rate_limit=RateLimitConfig(enabled=False))


@pytest.fixture
def sql_client():
    """SQL client on an in-memory SQLite database with both tables created."""
    client = SQLClient("sqlite://")
    create_tables(client.connection)
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def memory_client(server_config):
    """Test client for the integer-id in-memory app (fresh seed data)."""
    with TestClient(memory_app.create_app(config=server_config)) as client:
        yield client


@pytest.fixture
def uuid_client(server_config):
    """Test client for the UUID in-memory app (empty list)."""
    with TestClient(uuid_app.create_app(config=server_config)) as client:
        yield client


@pytest.fixture
def database_client(server_config, sql_client):
    """Test client for the SQL app backed by the SQLite fixture."""
    app = database_app.create_app(config=server_config, client=sql_client)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def new_user():
    """A valid user payload."""
    return {"name": "Julia Ferreira", "email": "julia@example.com"}


@pytest.fixture
def new_task():
    """A valid task payload (owner id filled in by the test)."""
    return {"title": "Write docs", "description": "Swagger examples", "status": "pending"}


@pytest.fixture
def env_vars():
    """Set environment variables for the duration of a test."""
    saved = {}

    def _set(**values):
        for name, value in values.items():
            saved.setdefault(name, os.environ.get(name))
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value

    yield _set

    # Restore original values
    for name, value in saved.items():
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value
