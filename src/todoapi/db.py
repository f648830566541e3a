from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, Text, create_engine, make_url, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import PersistenceError
from .models import TodoEntity
from .repositories import Repository
from .schemas import TodoCreate

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TodoRecord(Base):
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)


def create_db_engine(url: str) -> Engine:
    """
    Build an engine for `url`. SQLite connections are shared across the
    server's worker threads; in-memory databases are pinned to one connection
    so every session sees the same data.
    """
    parsed = make_url(url)
    kwargs: dict = {}
    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            os.makedirs(os.path.dirname(parsed.database) or ".", exist_ok=True)
    return create_engine(url, **kwargs)


def init_db(engine: Engine) -> None:
    """Create the todos table (and its deleted_at index) if absent."""
    Base.metadata.create_all(engine)


def _error_message(exc: SQLAlchemyError) -> str:
    # Prefer the driver's message over SQLAlchemy's wrapper with the SQL text.
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class SQLAlchemyRepository(Repository):
    """
    Repository backed by the SQLAlchemy ORM, normally on a SQLite file.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str) -> "SQLAlchemyRepository":
        """Open `url` and make sure the schema exists. Connection errors propagate."""
        engine = create_db_engine(url)
        init_db(engine)
        logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def _record_to_entity(self, record: TodoRecord) -> TodoEntity:
        return {
            "id": int(record.id),
            "title": str(record.title),
            "created_at": record.created_at,
            "updated_at": record.updated_at,
            "deleted_at": record.deleted_at,
        }  # type: ignore[return-value]

    def create(self, data: TodoCreate) -> TodoEntity:
        try:
            with self._session_factory.begin() as session:
                record = TodoRecord(title=data.text)
                session.add(record)
                session.flush()
                return self._record_to_entity(record)
        except SQLAlchemyError as exc:
            raise PersistenceError(_error_message(exc)) from exc

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        try:
            with self._session_factory() as session:
                record = session.scalars(
                    select(TodoRecord).where(
                        TodoRecord.id == todo_id,
                        TodoRecord.deleted_at.is_(None),
                    )
                ).first()
                return self._record_to_entity(record) if record is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(_error_message(exc)) from exc

    def dispose(self) -> None:
        self._engine.dispose()
