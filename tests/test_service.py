import json

import jwt
import pytest

from todoapi.auth import TokenValidator
from todoapi.errors import AuthError, PersistenceError, ValidationError
from todoapi.repositories import InMemoryRepository, Repository
from todoapi.service import TodoService

from conftest import SECRET


class FailingRepository(Repository):
    def create(self, data):
        raise PersistenceError("database is locked")

    def get(self, todo_id):
        return None


@pytest.fixture
def header():
    return "Bearer " + jwt.encode({"sub": "tester"}, SECRET, algorithm="HS256")


@pytest.fixture
def service():
    return TodoService(repository=InMemoryRepository(), validator=TokenValidator(SECRET))


class TestCreateTodo:
    def test_returns_increasing_ids(self, service, header):
        assert service.create_todo(b'{"text": "buy milk"}', header) == 1
        assert service.create_todo(b'{"text": "buy milk"}', header) == 2

    @pytest.mark.parametrize("text", ["", "  padded  ", "ünïcødé ✓", "x" * 5000])
    def test_title_is_stored_verbatim(self, service, header, text):
        todo_id = service.create_todo(json.dumps({"text": text}).encode(), header)
        assert service.repository.get(todo_id)["title"] == text

    def test_missing_header_is_auth_error(self, service):
        with pytest.raises(AuthError):
            service.create_todo(b'{"text": "x"}', None)

    def test_bad_token_wins_over_bad_body(self, service):
        with pytest.raises(AuthError):
            service.create_todo(b"{not json", "Bearer a.b.c")

    def test_invalid_json_is_validation_error(self, service, header):
        with pytest.raises(ValidationError) as excinfo:
            service.create_todo(b'{"text": invalid}', header)
        assert str(excinfo.value)

    def test_non_string_text_is_validation_error(self, service, header):
        with pytest.raises(ValidationError):
            service.create_todo(b'{"text": ["a"]}', header)

    def test_nothing_is_stored_on_rejection(self, service, header):
        with pytest.raises(ValidationError):
            service.create_todo(b"", header)
        assert service.create_todo(b'{"text": "first"}', header) == 1

    def test_persistence_error_propagates(self, header):
        service = TodoService(repository=FailingRepository(), validator=TokenValidator(SECRET))
        with pytest.raises(PersistenceError, match="database is locked"):
            service.create_todo(b'{"text": "x"}', header)
