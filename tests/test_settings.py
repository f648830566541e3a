import logging
import os

import pytest

from todoapi.settings import DEFAULT_VERIFY_SECRET, get_settings, load_env_file

ENV_VARS = [
    "SIGN",
    "TOKEN_VERIFY_SECRET",
    "TOKEN_AUDIENCE",
    "TOKEN_TTL_SECONDS",
    "HOST",
    "PORT",
    "PERSISTENCE_BACKEND",
    "SQLITE_DB_PATH",
    "READ_TIMEOUT",
    "MAX_HEADER_BYTES",
    "SHUTDOWN_TIMEOUT",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so teardown also removes anything a .env file adds
    for name in ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return monkeypatch


class TestGetSettings:
    def test_defaults(self, clean_env):
        s = get_settings()
        assert s.sign_secret == ""
        assert s.verify_secret == DEFAULT_VERIFY_SECRET
        assert s.port == 8080
        assert s.persistence_backend == "sqlite"
        assert s.sqlite_db_path == "./test.db"
        assert s.read_timeout == 10
        assert s.max_header_bytes == 1 << 20
        assert s.shutdown_timeout == 5.0
        assert s.token_ttl_seconds == 300

    def test_verify_secret_is_not_derived_from_sign(self, clean_env):
        clean_env.setenv("SIGN", "issuer-secret")
        s = get_settings()
        assert s.sign_secret == "issuer-secret"
        assert s.verify_secret == DEFAULT_VERIFY_SECRET

    def test_overrides(self, clean_env):
        clean_env.setenv("PORT", "9090")
        clean_env.setenv("TOKEN_VERIFY_SECRET", "verifier")
        clean_env.setenv("PERSISTENCE_BACKEND", "MEMORY")
        clean_env.setenv("SHUTDOWN_TIMEOUT", "2.5")
        s = get_settings()
        assert s.port == 9090
        assert s.verify_secret == "verifier"
        assert s.persistence_backend == "memory"
        assert s.shutdown_timeout == 2.5

    def test_bad_values_fall_back(self, clean_env):
        clean_env.setenv("PORT", "http")
        clean_env.setenv("PERSISTENCE_BACKEND", "postgres")
        clean_env.setenv("READ_TIMEOUT", "")
        s = get_settings()
        assert s.port == 8080
        assert s.persistence_backend == "sqlite"
        assert s.read_timeout == 10

    def test_database_url(self, clean_env):
        clean_env.setenv("SQLITE_DB_PATH", ":memory:")
        assert get_settings().database_url == "sqlite://"
        clean_env.setenv("SQLITE_DB_PATH", "data/todos.db")
        assert get_settings().database_url == "sqlite:///data/todos.db"


class TestLoadEnvFile:
    def test_missing_file_is_not_fatal(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="todoapi.settings"):
            assert load_env_file(str(tmp_path / ".env")) is False
        assert "please consider environment variables" in caplog.text

    def test_loads_without_overriding(self, tmp_path, clean_env):
        env_file = tmp_path / ".env"
        env_file.write_text("SIGN=from-file\nPORT=7000\n")
        clean_env.setenv("PORT", "7001")
        assert load_env_file(str(env_file)) is True
        assert os.environ["SIGN"] == "from-file"
        assert os.environ["PORT"] == "7001"

    def test_get_settings_can_load_env_file(self, tmp_path, clean_env):
        env_file = tmp_path / ".env"
        env_file.write_text("TOKEN_AUDIENCE=from-file\n")
        assert get_settings(env_file=str(env_file)).token_audience == "from-file"
