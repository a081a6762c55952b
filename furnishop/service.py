"""HTTP API for the furniture catalog, order intake and user documents."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request, Response, status
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field

from .catalog import list_furniture
from .config import ServiceConfig
from .database import Database, parse_object_id
from .errors import DecodeError, NotFoundError, register_error_handlers
from .models import Furniture, User
from .users import UserRepository

logger = logging.getLogger("furnishop.service")


class FurnitureResponse(BaseModel):
    id: int
    name: str
    description: str
    price: float


class CreateUserRequest(BaseModel):
    # Client supplied timestamps, ids and versions are ignored.
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    age: int = 0


class UpdateUserRequest(BaseModel):
    name: str = Field(..., min_length=1)


class InsertUserResponse(BaseModel):
    inserted_id: str
    acknowledged: bool = True


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime
    version: int


class OrderResponse(BaseModel):
    status: str
    message: str


def furniture_to_response(item: Furniture) -> FurnitureResponse:
    return FurnitureResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        price=item.price,
    )


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        age=user.age,
        created_at=user.created_at,
        updated_at=user.updated_at,
        version=user.version,
    )


def register_catalog_routes(app: FastAPI) -> None:
    """Expose the stateless catalog and order intake endpoints."""

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/getFurniture", response_model=List[FurnitureResponse])
    async def get_furniture() -> List[FurnitureResponse]:
        return [furniture_to_response(item) for item in list_furniture()]

    @app.post("/submitOrder", response_model=OrderResponse)
    async def submit_order(request: Request) -> OrderResponse:
        try:
            order = await request.json()
        except ValueError as exc:
            raise DecodeError("Invalid JSON-message") from exc
        if not isinstance(order, dict):
            raise DecodeError("Invalid JSON-message")

        logger.info("Received order data: %s", order)
        return OrderResponse(status="200", message="Order received successfully")


def register_user_routes(app: FastAPI, database: Database, *, collection_name: str) -> None:
    """Expose CRUD endpoints for user documents.

    Handlers are plain functions so FastAPI runs each request on its own
    threadpool worker while the blocking driver call is in flight.
    """

    def get_users() -> UserRepository:
        return UserRepository(database.collection(collection_name))

    @app.post("/createUser", response_model=InsertUserResponse)
    def create_user(
        payload: CreateUserRequest,
        users: UserRepository = Depends(get_users),
    ) -> InsertUserResponse:
        inserted_id = users.create(payload.name, payload.email, age=payload.age)
        return InsertUserResponse(inserted_id=str(inserted_id))

    @app.get("/getUser", response_model=UserResponse)
    def get_user(
        user_id: Optional[str] = Query(default=None, alias="id"),
        users: UserRepository = Depends(get_users),
    ) -> UserResponse:
        object_id = parse_object_id(user_id)
        user = users.get(object_id)
        if user is None:
            raise NotFoundError(f"User {object_id} not found")
        return user_to_response(user)

    @app.api_route("/updateUser", methods=["PUT", "POST"], status_code=status.HTTP_204_NO_CONTENT)
    def update_user(
        payload: UpdateUserRequest,
        user_id: Optional[str] = Query(default=None, alias="id"),
        users: UserRepository = Depends(get_users),
    ) -> Response:
        object_id = parse_object_id(user_id)
        users.update_name(object_id, payload.name)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.api_route("/deleteUser", methods=["DELETE", "POST"], status_code=status.HTTP_204_NO_CONTENT)
    def delete_user(
        user_id: Optional[str] = Query(default=None, alias="id"),
        users: UserRepository = Depends(get_users),
    ) -> Response:
        object_id = parse_object_id(user_id)
        # A delete that matched nothing is still reported as success.
        users.delete(object_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/getAllUsers", response_model=List[UserResponse])
    def get_all_users(users: UserRepository = Depends(get_users)) -> List[UserResponse]:
        return [user_to_response(user) for user in users.list_all()]


def create_app(
    *,
    database: Database,
    config: ServiceConfig | None = None,
    static_dir: Path | None = None,
) -> FastAPI:
    """Build the ASGI application around an already connected ``database``."""

    settings = config or ServiceConfig()

    app = FastAPI(
        title="Furniture Shop",
        version="0.1.0",
        description="Furniture catalog, order intake and user management.",
    )
    app.state.database = database
    app.state.config = settings

    register_error_handlers(app)
    register_catalog_routes(app)
    register_user_routes(app, database, collection_name=settings.collection_name)

    # Mounted last so the API routes above take precedence.
    directory = static_dir if static_dir is not None else settings.static_dir
    if directory.is_dir():
        app.mount("/", StaticFiles(directory=str(directory), html=True), name="static")
    else:
        logger.warning("Static directory %s does not exist; static files are disabled", directory)

    return app


__all__ = ["create_app", "register_catalog_routes", "register_user_routes"]
