"""
Persistence layer: the document store and per-entity CRUD helpers.
"""

from .store import (
    DocumentStore, MongoStore, MemoryStore, WriteResult,
    create_store, new_id, utcnow
)
from . import crud

__all__ = [
    "DocumentStore",
    "MongoStore",
    "MemoryStore",
    "WriteResult",
    "create_store",
    "new_id",
    "utcnow",
    "crud"
]
