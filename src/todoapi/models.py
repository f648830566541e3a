from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a stored Todo, independent of the
    storage backend that produced it.

    Fields:
    - id: Unique integer identifier assigned by the store
    - title: Task description as supplied by the caller (may be empty)
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp
    - deleted_at: Soft-delete marker, None while the record is live
    """

    id: int
    title: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime]
