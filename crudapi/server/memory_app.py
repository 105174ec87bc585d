# Users API over a mock in-memory list with integer ids
from typing import Optional

from fastapi import FastAPI, HTTPException

from crudapi.config import ServerConfig, load_config
from crudapi.db.memory_store import SEED_USERS, EmailInUseError, MemoryUserStore
from crudapi.server.common import create_base_app
from crudapi.types.common import ErrorResponse, MessageResponse
from crudapi.types.users import CreateUserRequest, UpdateUserProfileRequest, User, UserList
from crudapi.utils.logging_utils import get_service_logger

SERVICE = "memory_app"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    404: {"model": ErrorResponse, "description": "User not found"},
    409: {"model": ErrorResponse, "description": "Email already in use"},
}


def _not_found(user_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"User with ID {user_id} not found")


def create_app(
    config: Optional[ServerConfig] = None, store: Optional[MemoryUserStore] = None
) -> FastAPI:
    """Build the in-memory users API. Each call gets its own store."""
    config = config or load_config()
    store = store if store is not None else MemoryUserStore(seed=SEED_USERS)

    app = create_base_app(
        title="Users API - In Memory",
        description="CRUD over a mock users list with pydantic validation and Swagger docs",
        config=config,
        service=SERVICE,
        endpoints=["/health", "/status", "/users", "/docs"],
        openapi_tags=[{"name": "Users", "description": "User management"}],
    )
    app.state.store = store
    logger = get_service_logger(SERVICE, "users")

    @app.get("/users", response_model=UserList, tags=["Users"], summary="List users")
    async def list_users():
        """Return every user in the mock list"""
        users = store.list()
        return UserList(users=users, total=len(users))

    @app.post(
        "/users",
        response_model=User,
        status_code=201,
        tags=["Users"],
        summary="Create user",
        responses=ERROR_RESPONSES,
    )
    async def create_user(request: CreateUserRequest):
        try:
            user = store.create(name=request.name, email=request.email, active=True)
        except EmailInUseError as e:
            logger.info(f"Rejected duplicate email {e.email}")
            raise HTTPException(status_code=409, detail="Email is already in use")

        logger.info(f"Created user {user['id']}")
        return user

    @app.get(
        "/users/{user_id}",
        response_model=User,
        tags=["Users"],
        summary="Get user by ID",
        responses=ERROR_RESPONSES,
    )
    async def get_user(user_id: int):
        user = store.get(user_id)
        if user is None:
            raise _not_found(user_id)
        return user

    @app.put(
        "/users/{user_id}",
        response_model=User,
        tags=["Users"],
        summary="Replace user",
        responses=ERROR_RESPONSES,
    )
    async def replace_user(user_id: int, request: CreateUserRequest):
        """Replace name and email of an existing user"""
        try:
            user = store.replace(user_id, {"name": request.name, "email": request.email})
        except EmailInUseError:
            raise HTTPException(status_code=409, detail="Email is already in use")

        if user is None:
            raise _not_found(user_id)
        logger.info(f"Replaced user {user_id}")
        return user

    @app.patch(
        "/users/{user_id}",
        response_model=User,
        tags=["Users"],
        summary="Update user fields",
        responses=ERROR_RESPONSES,
    )
    async def update_user(user_id: int, request: UpdateUserProfileRequest):
        changes = request.model_dump(exclude_none=True)
        if not changes:
            raise HTTPException(
                status_code=400, detail="At least one field must be provided for update"
            )

        try:
            user = store.update(user_id, changes)
        except EmailInUseError:
            raise HTTPException(status_code=409, detail="Email is already in use")

        if user is None:
            raise _not_found(user_id)
        logger.info(f"Updated user {user_id}: {sorted(changes)}")
        return user

    @app.delete(
        "/users/{user_id}",
        response_model=MessageResponse,
        tags=["Users"],
        summary="Delete user",
        responses=ERROR_RESPONSES,
    )
    async def delete_user(user_id: int):
        if store.delete(user_id) is None:
            raise _not_found(user_id)
        logger.info(f"Deleted user {user_id}")
        return MessageResponse(message="User deleted successfully", id=user_id)

    return app


if __name__ == "__main__":
    import uvicorn

    _config = load_config()
    uvicorn.run(create_app(_config), host=_config.host, port=_config.port)
