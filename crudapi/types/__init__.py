"""
Type definitions for request and response bodies.
"""

from crudapi.types.common import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    RootResponse,
    StatusResponse,
)
from crudapi.types.tasks import CreateTaskRequest, Task, UpdateTaskRequest
from crudapi.types.users import (
    CreateUserRequest,
    UpdateUserProfileRequest,
    UpdateUserRequest,
    User,
    UserRecord,
    UuidUser,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "MessageResponse",
    "RootResponse",
    "StatusResponse",
    "CreateTaskRequest",
    "Task",
    "UpdateTaskRequest",
    "CreateUserRequest",
    "UpdateUserProfileRequest",
    "UpdateUserRequest",
    "User",
    "UserRecord",
    "UuidUser",
]
