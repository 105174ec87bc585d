"""
Server module for the demo APIs.

Each module under this package is a standalone FastAPI application with
request validation and automatic OpenAPI documentation at ``/docs``:

- ``memory_app``: users over a mock list with integer ids
- ``uuid_app``: users over an empty list with UUID ids
- ``database_app``: users and tasks over parameterized SQL
"""

# uvicorn factory import strings; each call builds a fresh app
APPS = {
    "memory": "crudapi.server.memory_app:create_app",
    "uuid": "crudapi.server.uuid_app:create_app",
    "database": "crudapi.server.database_app:create_app",
}

__all__ = ["APPS"]
