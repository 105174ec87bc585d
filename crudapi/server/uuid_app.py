# Users API over an in-memory list with UUID ids and creation timestamps
from typing import List, Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException, Response

from crudapi.config import ServerConfig, load_config
from crudapi.db.memory_store import EmailInUseError, MemoryUserStore, new_uuid
from crudapi.server.common import create_base_app
from crudapi.types.common import ErrorResponse
from crudapi.types.users import CreateUuidUserRequest, UpdateUuidUserRequest, UuidUser
from crudapi.utils.logging_utils import get_service_logger

SERVICE = "uuid_app"

NOT_FOUND_MESSAGE = "User not found."
EMAIL_IN_USE_MESSAGE = "This email is already in use."


def create_app(
    config: Optional[ServerConfig] = None, store: Optional[MemoryUserStore] = None
) -> FastAPI:
    """Build the UUID users API. The list starts empty."""
    config = config or load_config()
    store = store if store is not None else MemoryUserStore(id_factory=new_uuid, timestamps=True)

    app = create_base_app(
        title="Users API - UUID",
        description="Sample API with Swagger docs, FastAPI and pydantic",
        config=config,
        service=SERVICE,
        endpoints=["/health", "/status", "/users"],
        openapi_tags=[{"name": "Users", "description": "User management"}],
    )
    app.state.store = store
    logger = get_service_logger(SERVICE, "users")

    @app.post(
        "/users",
        response_model=UuidUser,
        status_code=201,
        tags=["Users"],
        summary="Create a new user",
        responses={409: {"model": ErrorResponse}},
    )
    async def create_user(request: CreateUuidUserRequest):
        """Create a new user with name and email."""
        try:
            user = store.create(name=request.name, email=request.email)
        except EmailInUseError:
            raise HTTPException(status_code=409, detail=EMAIL_IN_USE_MESSAGE)

        logger.info(f"Created user {user['id']}")
        return user

    @app.get("/users", response_model=List[UuidUser], tags=["Users"], summary="List all users")
    async def list_users():
        return store.list()

    @app.get(
        "/users/{user_id}",
        response_model=UuidUser,
        tags=["Users"],
        summary="Get a user by ID",
        responses={404: {"model": ErrorResponse}},
    )
    async def get_user(user_id: UUID):
        user = store.get(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
        return user

    @app.put(
        "/users/{user_id}",
        response_model=UuidUser,
        tags=["Users"],
        summary="Update a user",
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    )
    @app.patch(
        "/users/{user_id}",
        response_model=UuidUser,
        tags=["Users"],
        summary="Update a user",
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    )
    async def update_user(user_id: UUID, request: UpdateUuidUserRequest):
        """Update name and/or email of an existing user; omitted fields are kept."""
        try:
            user = store.update(user_id, request.model_dump(exclude_none=True))
        except EmailInUseError:
            raise HTTPException(status_code=409, detail=EMAIL_IN_USE_MESSAGE)

        if user is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
        return user

    @app.delete(
        "/users/{user_id}",
        status_code=204,
        response_class=Response,
        tags=["Users"],
        summary="Delete a user",
        responses={404: {"model": ErrorResponse}},
    )
    async def delete_user(user_id: UUID):
        if store.delete(user_id) is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
        logger.info(f"Deleted user {user_id}")
        return Response(status_code=204)

    return app


if __name__ == "__main__":
    import uvicorn

    _config = load_config()
    uvicorn.run(create_app(_config), host=_config.host, port=_config.port)
