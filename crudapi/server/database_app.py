# Users and tasks API over parameterized SQL on one shared connection
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request

from crudapi.config import ServerConfig, load_config
from crudapi.db.sql_client import (
    ConstraintViolationError,
    DatabaseError,
    SQLClient,
    TaskRepository,
    UserRepository,
)
from crudapi.server.common import create_base_app, error_response
from crudapi.types.common import ErrorResponse, MessageResponse
from crudapi.types.tasks import CreateTaskRequest, Task, UpdateTaskRequest
from crudapi.types.users import (
    ConnectionStatus,
    CreateUserRequest,
    UpdateUserRequest,
    UserRecord,
    UsersCount,
)
from crudapi.utils.logging_utils import get_service_logger

SERVICE = "database_app"

USER_NOT_FOUND = "User not found"
TASK_NOT_FOUND = "Task not found"
EMPTY_UPDATE = "At least one field must be provided for update"

USER_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
TASK_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def create_app(
    config: Optional[ServerConfig] = None, client: Optional[SQLClient] = None
) -> FastAPI:
    """
    Build the SQL-backed API.

    The connection is opened on the first query and closed on shutdown.

    Args:
        config: Server configuration (loaded from config/api.yml if None)
        client: SQL client to use (built from the database config if None)

    Returns:
        Configured FastAPI instance
    """
    config = config or load_config()
    client = client or SQLClient(config.database.sqlalchemy_url)
    users = UserRepository(client)
    tasks = TaskRepository(client)

    app = create_base_app(
        title="Users & Tasks API - SQL",
        description="CRUD over the users and tasks tables with pydantic validation and Swagger docs",
        config=config,
        service=SERVICE,
        endpoints=["/health", "/status", "/db", "/users", "/tasks", "/login", "/docs"],
        openapi_tags=[
            {"name": "Database", "description": "Database connection checks"},
            {"name": "Users", "description": "User management"},
            {"name": "Authentication", "description": "User lookup by email"},
            {"name": "Tasks", "description": "Task management"},
        ],
        on_shutdown=[client.close],
    )
    app.state.sql_client = client
    logger = get_service_logger(SERVICE, "queries")

    @app.exception_handler(ConstraintViolationError)
    async def constraint_violation_handler(request: Request, exc: ConstraintViolationError):
        return error_response(409, "Request conflicts with existing data")

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Database error")

    def _ensure_user_exists(user_id: int):
        if users.get(user_id) is None:
            raise HTTPException(status_code=404, detail=USER_NOT_FOUND)

    def _ensure_email_free(email: Optional[str], user_id: Optional[int] = None):
        if email is None:
            return
        for row in users.find_by_email(email):
            if row["id"] != user_id:
                raise HTTPException(status_code=409, detail="Email is already in use")

    # Database checks

    @app.get("/db", response_model=ConnectionStatus, tags=["Database"], summary="Check database connection")
    async def database_status():
        try:
            client.ping()
        except DatabaseError as e:
            logger.error(f"Database connection check failed: {e}")
            raise HTTPException(status_code=500, detail="Database connection error.")
        return ConnectionStatus(message="Database connection OK.")

    @app.get("/db/users/count", response_model=UsersCount, tags=["Database"], summary="Count users")
    async def users_count():
        return UsersCount(users=client.ping())

    # Users

    @app.get("/users", response_model=List[UserRecord], tags=["Users"], summary="List users")
    async def list_users():
        return users.list_all()

    @app.post(
        "/users",
        response_model=MessageResponse,
        status_code=201,
        tags=["Users"],
        summary="Create user",
        responses=USER_ERRORS,
    )
    async def create_user(request: CreateUserRequest):
        _ensure_email_free(request.email)
        user_id = users.create(request.model_dump())
        logger.info(f"Created user {user_id}")
        return MessageResponse(message="User created successfully", id=user_id)

    @app.get(
        "/users/{user_id}",
        response_model=UserRecord,
        tags=["Users"],
        summary="Get user by ID",
        responses=USER_ERRORS,
    )
    async def get_user(user_id: int):
        user = users.get(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
        return user

    @app.put(
        "/users/{user_id}",
        response_model=MessageResponse,
        tags=["Users"],
        summary="Replace user",
        responses=USER_ERRORS,
    )
    async def replace_user(user_id: int, request: CreateUserRequest):
        """Overwrite name, email and password; an omitted password is cleared."""
        _ensure_user_exists(user_id)
        _ensure_email_free(request.email, user_id)
        users.replace(user_id, request.model_dump())
        logger.info(f"Replaced user {user_id}")
        return MessageResponse(message="User updated successfully", id=user_id)

    @app.patch(
        "/users/{user_id}",
        response_model=MessageResponse,
        tags=["Users"],
        summary="Update user fields",
        responses=USER_ERRORS,
    )
    async def update_user(user_id: int, request: UpdateUserRequest):
        changes = request.model_dump(exclude_none=True)
        if not changes:
            raise HTTPException(status_code=400, detail=EMPTY_UPDATE)

        _ensure_user_exists(user_id)
        _ensure_email_free(changes.get("email"), user_id)
        users.update(user_id, changes)
        logger.info(f"Updated user {user_id}: {sorted(changes)}")
        return MessageResponse(message="User updated successfully", id=user_id)

    @app.delete(
        "/users/{user_id}",
        response_model=MessageResponse,
        tags=["Users"],
        summary="Delete user",
        responses=USER_ERRORS,
    )
    async def delete_user(user_id: int):
        try:
            deleted = users.delete(user_id)
        except ConstraintViolationError:
            raise HTTPException(status_code=409, detail="User still owns tasks")

        if deleted == 0:
            raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
        logger.info(f"Deleted user {user_id}")
        return MessageResponse(message="User deleted successfully", id=user_id)

    @app.get("/users/{user_id}/tasks", response_model=List[Task], tags=["Users"], summary="List a user's tasks")
    async def list_user_tasks(user_id: int):
        return users.list_tasks(user_id)

    @app.get("/login", response_model=List[UserRecord], tags=["Authentication"], summary="Find users by email")
    async def login(email: str = Query(..., min_length=3)):
        """Look up users by email. No password check is performed."""
        return users.find_by_email(email)

    # Tasks

    @app.get("/tasks", response_model=List[Task], tags=["Tasks"], summary="List tasks")
    async def list_tasks():
        return tasks.list_all()

    @app.post(
        "/tasks",
        response_model=MessageResponse,
        status_code=201,
        tags=["Tasks"],
        summary="Create task",
        responses=TASK_ERRORS,
    )
    async def create_task(request: CreateTaskRequest):
        task_id = tasks.create(request.model_dump())
        logger.info(f"Created task {task_id} for user {request.id_user}")
        return MessageResponse(message="Task created successfully", id=task_id)

    @app.get(
        "/tasks/{task_id}",
        response_model=Task,
        tags=["Tasks"],
        summary="Get task by ID",
        responses=TASK_ERRORS,
    )
    async def get_task(task_id: int):
        task = tasks.get(task_id)
        if task is None:
            raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
        return task

    @app.put(
        "/tasks/{task_id}",
        response_model=MessageResponse,
        tags=["Tasks"],
        summary="Replace task",
        responses=TASK_ERRORS,
    )
    async def replace_task(task_id: int, request: CreateTaskRequest):
        if tasks.replace(task_id, request.model_dump()) == 0:
            raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
        return MessageResponse(message="Task updated successfully", id=task_id)

    @app.patch(
        "/tasks/{task_id}",
        response_model=MessageResponse,
        tags=["Tasks"],
        summary="Update task fields",
        responses=TASK_ERRORS,
    )
    async def update_task(task_id: int, request: UpdateTaskRequest):
        changes = request.model_dump(exclude_none=True)
        if not changes:
            raise HTTPException(status_code=400, detail=EMPTY_UPDATE)

        if tasks.update(task_id, changes) == 0:
            raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
        return MessageResponse(message="Task updated successfully", id=task_id)

    @app.delete(
        "/tasks/{task_id}",
        response_model=MessageResponse,
        tags=["Tasks"],
        summary="Delete task",
        responses=TASK_ERRORS,
    )
    async def delete_task(task_id: int):
        if tasks.delete(task_id) == 0:
            raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
        logger.info(f"Deleted task {task_id}")
        return MessageResponse(message="Task deleted successfully", id=task_id)

    return app


if __name__ == "__main__":
    import uvicorn

    _config = load_config()
    uvicorn.run(create_app(_config), host=_config.host, port=_config.port)
