"""
Small demo HTTP APIs.

This package shows how to wire FastAPI with pydantic validation, generated
OpenAPI documentation and simple CRUD over an in-memory list or a SQL table.
"""

__version__ = "1.0.0"
