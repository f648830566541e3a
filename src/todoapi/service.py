from __future__ import annotations

import logging
from typing import Optional

import pydantic

from .auth import TokenValidator, extract_bearer_token
from .errors import AuthError, ValidationError
from .repositories import Repository
from .schemas import TodoCreate

logger = logging.getLogger(__name__)


def _describe(exc: pydantic.ValidationError) -> str:
    return "; ".join(str(err.get("msg", "")) for err in exc.errors()) or str(exc)


# PUBLIC_INTERFACE
class TodoService:
    """
    Turns an authenticated create-request into a persistence write.

    Collaborators are injected so handlers never reach for process-global state.
    """

    def __init__(self, repository: Repository, validator: TokenValidator) -> None:
        self._repository = repository
        self._validator = validator

    @property
    def repository(self) -> Repository:
        return self._repository

    def authorize(self, authorization: Optional[str]) -> None:
        """Raise AuthError unless the Authorization header carries a valid token."""
        token = extract_bearer_token(authorization)
        try:
            self._validator.validate(token)
        except AuthError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise

    def create_todo(self, raw_body: bytes, authorization: Optional[str]) -> int:
        """
        Create a todo from a raw JSON body and return its new id.

        Order matters: the token is checked before the body is parsed, so a
        bad token always wins over a bad body.

        Raises:
            AuthError: token missing, malformed, badly signed or non-HMAC.
            ValidationError: body is not a JSON object with a string `text`.
            PersistenceError: the store rejected the write.
        """
        self.authorize(authorization)

        try:
            payload = TodoCreate.model_validate_json(raw_body)
        except pydantic.ValidationError as exc:
            raise ValidationError(_describe(exc)) from exc

        created = self._repository.create(payload)
        logger.info("Created todo %d", created["id"])
        return created["id"]
