from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, model_validator


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    Only `text` is recognised; it maps to the stored title. The key is matched
    case-insensitively. Missing or null text means an empty title, a bare
    `null` document counts as an empty object, and unknown fields are ignored.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "buy milk",
            }
        }
    )

    text: str = Field(default="", description="Task description stored as the todo title")

    @model_validator(mode="before")
    @classmethod
    def normalize_body(cls, data: Any) -> Any:
        """
        Fold the body into {"text": ...}: null -> {}, any casing of the key
        (last one wins), null text -> "".
        """
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data
        normalized: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(key, str) and key.casefold() == "text":
                normalized["text"] = "" if value is None else value
        return normalized


# PUBLIC_INTERFACE
class TodoCreated(BaseModel):
    """
    Schema returned after a Todo has been persisted.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"ID": 1}})

    ID: int = Field(..., description="Identifier assigned to the new todo")


class ErrorOut(BaseModel):
    error: str = Field(..., description="Underlying parser or store error message")


class TokenOut(BaseModel):
    token: str = Field(..., description="HS256-signed access token")


class PingOut(BaseModel):
    message: str = Field(..., description="Always 'pong'")
