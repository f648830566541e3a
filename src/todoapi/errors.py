from __future__ import annotations

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse


class TodoAPIError(Exception):
    """Base class for errors that terminate a single request."""


class AuthError(TodoAPIError):
    """Bearer token is missing, malformed, badly signed or uses a non-HMAC algorithm."""


class ValidationError(TodoAPIError):
    """Request body could not be decoded into a todo."""


class PersistenceError(TodoAPIError):
    """The store was unavailable or rejected the write."""


async def auth_error_handler(request: Request, exc: AuthError) -> Response:
    # No detail is echoed back; the reason only reaches the server log.
    return Response(
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


# PUBLIC_INTERFACE
def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the request error taxonomy onto HTTP responses.

    - AuthError -> 401 with an empty body
    - ValidationError -> 400 {"error": "<parser message>"}
    - PersistenceError -> 500 {"error": "<store message>"}

    Parser and store messages are returned verbatim while auth failures are
    opaque; both behaviours are intentional.
    """
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
