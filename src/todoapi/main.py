from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .auth import TokenValidator
from .errors import register_exception_handlers
from .repositories import Repository, get_repository
from .routers import todos as todos_router
from .routers import tokens as tokens_router
from .schemas import PingOut
from .service import TodoService
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service liveness endpoint."},
    {"name": "auth", "description": "Access token issuance."},
    {"name": "todos", "description": "Create Todo items (bearer token required)."},
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        repository: Persistence collaborator; built from settings when omitted.

    Returns:
        A FastAPI app whose todo service is stored on `app.state`.
    """
    settings = settings or get_settings()
    if repository is None:
        repository = get_repository(settings)
    if not settings.sign_secret:
        logger.warning("SIGN is not set; /tokenz will sign tokens with an empty secret")

    app = FastAPI(
        title="Todo API",
        description="Create todo records behind a bearer-token gate.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.todo_service = TodoService(
        repository=repository,
        validator=TokenValidator(settings.verify_secret),
    )

    register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/ping", response_model=PingOut, summary="Ping", tags=["health"])
    def ping() -> PingOut:
        """
        Liveness endpoint.

        Returns:
            {"message": "pong"}
        """
        return PingOut(message="pong")

    app.include_router(tokens_router.router)
    app.include_router(todos_router.router)
    return app
