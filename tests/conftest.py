"""Pytest configuration and shared fixtures."""
import base64
import json

import jwt
import pytest
from fastapi.testclient import TestClient

from todoapi.db import SQLAlchemyRepository
from todoapi.main import create_app
from todoapi.settings import Settings

# Long enough for HS512 so PyJWT never complains about key length.
SECRET = "s3cr3t-" * 10


def make_settings(**overrides) -> Settings:
    values = dict(
        sign_secret=SECRET,
        verify_secret=SECRET,
        token_audience="todoapi",
        token_ttl_seconds=300,
        host="127.0.0.1",
        port=8080,
        persistence_backend="memory",
        sqlite_db_path=":memory:",
        read_timeout=10,
        max_header_bytes=1 << 20,
        shutdown_timeout=5.0,
        log_level="INFO",
    )
    values.update(overrides)
    return Settings(**values)


def forge_token(header: dict, payload: dict, signature: bytes = b"not-a-signature") -> str:
    """Assemble a compact JWS by hand, for algorithms PyJWT would refuse to sign."""

    def seg(raw: bytes) -> str:
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    return ".".join(
        [
            seg(json.dumps(header).encode()),
            seg(json.dumps(payload).encode()),
            seg(signature),
        ]
    )


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def repository():
    repo = SQLAlchemyRepository.from_url("sqlite://")
    yield repo
    repo.dispose()


@pytest.fixture
def app(settings, repository):
    return create_app(settings=settings, repository=repository)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def token():
    return jwt.encode({"sub": "tester"}, SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
