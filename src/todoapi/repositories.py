from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, Optional

from .models import TodoEntity
from .schemas import TodoCreate
from .settings import Settings, get_settings


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def create(self, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity. Raises PersistenceError on store failure."""

    @abstractmethod
    def get(self, todo_id: int) -> Optional[TodoEntity]:
        """Return a live TodoEntity by id, or None if not found or soft-deleted."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and throwaway runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[int, TodoEntity] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def create(self, data: TodoCreate) -> TodoEntity:
        now = self._now()
        with self._lock:
            entity: TodoEntity = {
                "id": self._next_id,
                "title": data.text,
                "created_at": now,
                "updated_at": now,
                "deleted_at": None,
            }
            self._next_id += 1
            self._items[entity["id"]] = entity
            return entity.copy()  # type: ignore[return-value]

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            if item is None or item["deleted_at"] is not None:
                return None
            return item.copy()  # type: ignore[return-value]


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - sqlite: SQLAlchemyRepository on SQLITE_DB_PATH, table created if missing
    - memory: InMemoryRepository

    Errors opening the database propagate; the caller decides whether they
    are fatal.
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .db import SQLAlchemyRepository

    return SQLAlchemyRepository.from_url(settings.database_url)
