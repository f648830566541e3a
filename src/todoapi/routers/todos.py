from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ..schemas import ErrorOut, TodoCreate, TodoCreated
from ..service import TodoService

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)


def get_todo_service(request: Request) -> TodoService:
    """
    Dependency returning the service wired into this application instance.
    """
    return request.app.state.todo_service


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description=(
        "Create a new Todo item from `{\"text\": string}` and return its ID.\n\n"
        "Requires `Authorization: Bearer <token>` signed with an HMAC algorithm."
    ),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": TodoCreate.model_json_schema()}},
        }
    },
    responses={
        201: {"description": "Todo created successfully"},
        400: {"model": ErrorOut, "description": "Malformed JSON body"},
        401: {"description": "Missing or invalid bearer token (empty body)"},
        500: {"model": ErrorOut, "description": "Persistence failure"},
    },
)
async def create_todo(
    request: Request,
    service: TodoService = Depends(get_todo_service),
) -> JSONResponse:
    """
    Create a new Todo.

    The body is read raw so that authorization runs before any JSON parsing.
    """
    body = await request.body()
    todo_id = await run_in_threadpool(
        service.create_todo, body, request.headers.get("Authorization")
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=TodoCreated(ID=todo_id).model_dump(),
    )
