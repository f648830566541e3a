from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from .errors import AuthError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
ISSUE_ALGORITHM = "HS256"

_CLAIM_CHECKS = (
    "verify_exp",
    "verify_nbf",
    "verify_iat",
    "verify_aud",
    "verify_iss",
    "verify_sub",
    "verify_jti",
)

# Only the signature is checked; registered claims are ignored, including
# the type checks newer PyJWT releases apply to `sub` and `jti`.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "require": [],
    **{check: False for check in _CLAIM_CHECKS},
}


# PUBLIC_INTERFACE
def extract_bearer_token(header: Optional[str]) -> str:
    """
    Strip the literal, case-sensitive "Bearer " prefix from an Authorization header.

    A header without the prefix is returned unchanged and a missing header
    becomes an empty string; either way the validator decides.
    """
    if header is None:
        return ""
    if header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):]
    return header


# PUBLIC_INTERFACE
class TokenValidator:
    """
    Verifies compact JWS bearer tokens against a single shared secret.

    Only HMAC algorithms (HS256/HS384/HS512) are accepted; the declared
    algorithm is checked against that allow-list before any signature work.
    """

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def validate(self, token: str) -> None:
        """
        Raise AuthError unless token is an HMAC-signed JWS verifiable with the secret.

        Parse failures, algorithm mismatches and bad signatures all produce
        the same exception type.
        """
        try:
            header = jwt.get_unverified_header(token)
            algorithm = header.get("alg")
            if algorithm not in HMAC_ALGORITHMS:
                raise AuthError(f"unexpected signing method: {algorithm}")
            jwt.decode(
                token,
                self._secret,
                algorithms=list(HMAC_ALGORITHMS),
                options=_DECODE_OPTIONS,
            )
        except jwt.InvalidTokenError as exc:
            raise AuthError(str(exc)) from exc


# PUBLIC_INTERFACE
def issue_access_token(
    *,
    secret: str,
    audience: str,
    ttl_seconds: int,
    now: Optional[datetime] = None,
) -> str:
    """Return an HS256 token carrying `aud` and an `exp` ttl_seconds from now."""
    issued_at = now or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "aud": audience,
        "exp": int((issued_at + timedelta(seconds=max(1, int(ttl_seconds)))).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ISSUE_ALGORITHM)
