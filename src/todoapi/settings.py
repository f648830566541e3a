from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_SECRET = "==signature=="


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - SIGN: secret used to sign tokens issued by /tokenz
    - TOKEN_VERIFY_SECRET: secret used to verify bearer tokens on /todos
      (defaults to a fixed placeholder and is NOT derived from SIGN)
    - TOKEN_AUDIENCE: audience claim placed in issued tokens (default 'todoapi')
    - TOKEN_TTL_SECONDS: lifetime of issued tokens (default 300)
    - HOST / PORT: listen address (default 0.0.0.0:8080)
    - PERSISTENCE_BACKEND: 'sqlite' (default) or 'memory'
    - SQLITE_DB_PATH: path to sqlite db file. Default './test.db'
    - READ_TIMEOUT: per-connection read/keep-alive timeout in seconds (default 10)
    - MAX_HEADER_BYTES: maximum size of a request head (default 1 MiB)
    - SHUTDOWN_TIMEOUT: graceful shutdown ceiling in seconds (default 5)
    - LOG_LEVEL: root log level (default INFO)
    """

    sign_secret: str
    verify_secret: str
    token_audience: str
    token_ttl_seconds: int
    host: str
    port: int
    persistence_backend: str
    sqlite_db_path: str
    read_timeout: int
    max_header_bytes: int
    shutdown_timeout: float
    log_level: str

    @property
    def database_url(self) -> str:
        if self.sqlite_db_path == ":memory:":
            return "sqlite://"
        return f"sqlite:///{self.sqlite_db_path}"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_float(value: str, default: float) -> float:
    try:
        return float(value.strip())
    except ValueError:
        return default


# PUBLIC_INTERFACE
def load_env_file(path: str = ".env") -> bool:
    """
    Load variables from a dotenv file into the process environment.

    A missing file is not an error: a warning is logged and the process keeps
    running on whatever is already in the environment. Existing variables are
    never overridden.

    Returns:
        True if the file was found and loaded, False otherwise.
    """
    if not os.path.isfile(path):
        logger.warning("please consider environment variables: %s not found", path)
        return False
    load_dotenv(path, override=False)
    logger.info("Loaded environment from %s", path)
    return True


# PUBLIC_INTERFACE
def get_settings(env_file: Optional[str] = None) -> Settings:
    """Return application settings loaded from environment variables."""
    if env_file is not None:
        load_env_file(env_file)

    backend = _get_env("PERSISTENCE_BACKEND", "sqlite").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to sqlite if unsupported
        backend = "sqlite"

    return Settings(
        sign_secret=os.getenv("SIGN", ""),
        verify_secret=_get_env("TOKEN_VERIFY_SECRET", DEFAULT_VERIFY_SECRET),
        token_audience=_get_env("TOKEN_AUDIENCE", "todoapi").strip(),
        token_ttl_seconds=_parse_int(_get_env("TOKEN_TTL_SECONDS", "300"), 300),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_int(_get_env("PORT", "8080"), 8080),
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./test.db").strip(),
        read_timeout=_parse_int(_get_env("READ_TIMEOUT", "10"), 10),
        max_header_bytes=_parse_int(_get_env("MAX_HEADER_BYTES", str(1 << 20)), 1 << 20),
        shutdown_timeout=_parse_float(_get_env("SHUTDOWN_TIMEOUT", "5"), 5.0),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
