"""
Document store used by every CRUD module.

Two backends implement the same interface:
- MongoStore: MongoDB through pymongo (production)
- MemoryStore: process-local dictionaries (tests and local development)

Filters are equality matches on (optionally dotted) keys, plus the ``$in``
and ``$ne`` operators. Updates have ``$set`` semantics.
"""

import abc
import copy
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import MongoClient, ASCENDING, DESCENDING

from lems.core.config import STORE_BACKEND, MONGODB_URI, MONGODB_DATABASE
from lems.core.logging_config import get_logger

logger = get_logger(__name__)

Filter = Dict[str, Any]
Sort = Sequence[Tuple[str, int]]


def utcnow() -> datetime:
    """Current UTC time, timezone-naive as stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Fresh document identifier (ObjectId hex string)."""
    return str(ObjectId())


@dataclass
class WriteResult:
    acknowledged: bool
    inserted_id: Optional[str] = None
    inserted_ids: List[str] = field(default_factory=list)
    upserted_id: Optional[str] = None
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0


class DocumentStore(abc.ABC):
    """Collection-oriented persistence interface."""

    @abc.abstractmethod
    def find_one(self, collection: str, filter: Filter) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    def find(self, collection: str, filter: Optional[Filter] = None,
             sort: Optional[Sort] = None) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    def insert_one(self, collection: str, document: Dict[str, Any]) -> WriteResult:
        raise NotImplementedError

    @abc.abstractmethod
    def insert_many(self, collection: str, documents: List[Dict[str, Any]]) -> WriteResult:
        raise NotImplementedError

    @abc.abstractmethod
    def update_one(self, collection: str, filter: Filter, fields: Dict[str, Any],
                   upsert: bool = False) -> WriteResult:
        raise NotImplementedError

    @abc.abstractmethod
    def update_many(self, collection: str, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
        raise NotImplementedError

    @abc.abstractmethod
    def delete_one(self, collection: str, filter: Filter) -> WriteResult:
        raise NotImplementedError

    @abc.abstractmethod
    def delete_many(self, collection: str, filter: Filter) -> WriteResult:
        raise NotImplementedError

    def count(self, collection: str, filter: Optional[Filter] = None) -> int:
        return len(self.find(collection, filter))

    def close(self) -> None:
        pass


class MongoStore(DocumentStore):
    """MongoDB-backed store. Documents use string ``_id`` values."""

    def __init__(self, uri: str, database: str, client: Optional[MongoClient] = None):
        self.client = client or MongoClient(uri, tz_aware=False)
        self.db = self.client[database]
        logger.info(f"Using MongoDB database '{database}'")

    def find_one(self, collection, filter):
        return self.db[collection].find_one(filter)

    def find(self, collection, filter=None, sort=None):
        cursor = self.db[collection].find(filter or {})
        if sort:
            cursor = cursor.sort([(key, ASCENDING if direction >= 0 else DESCENDING) for key, direction in sort])
        return list(cursor)

    def insert_one(self, collection, document):
        document = {"_id": new_id(), **document}
        result = self.db[collection].insert_one(document)
        return WriteResult(acknowledged=result.acknowledged, inserted_id=result.inserted_id)

    def insert_many(self, collection, documents):
        if not documents:
            return WriteResult(acknowledged=True)
        documents = [{"_id": new_id(), **document} for document in documents]
        result = self.db[collection].insert_many(documents)
        return WriteResult(acknowledged=result.acknowledged, inserted_ids=list(result.inserted_ids))

    def update_one(self, collection, filter, fields, upsert=False):
        update: Dict[str, Any] = {"$set": fields}
        if upsert and "_id" not in filter and "_id" not in fields:
            update["$setOnInsert"] = {"_id": new_id()}
        result = self.db[collection].update_one(filter, update, upsert=upsert)
        return WriteResult(
            acknowledged=result.acknowledged,
            upserted_id=result.upserted_id,
            matched_count=result.matched_count,
            modified_count=result.modified_count
        )

    def update_many(self, collection, filter, fields):
        result = self.db[collection].update_many(filter, {"$set": fields})
        return WriteResult(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count
        )

    def delete_one(self, collection, filter):
        result = self.db[collection].delete_one(filter)
        return WriteResult(acknowledged=result.acknowledged, deleted_count=result.deleted_count)

    def delete_many(self, collection, filter):
        result = self.db[collection].delete_many(filter)
        return WriteResult(acknowledged=result.acknowledged, deleted_count=result.deleted_count)

    def count(self, collection, filter=None):
        return self.db[collection].count_documents(filter or {})

    def close(self):
        self.client.close()


_MISSING = object()


def _lookup(document: Dict[str, Any], key: str) -> Any:
    value: Any = document
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _matches(document: Dict[str, Any], filter: Optional[Filter]) -> bool:
    for key, expected in (filter or {}).items():
        actual = _lookup(document, key)
        if isinstance(expected, dict) and any(k.startswith("$") for k in expected):
            for operator, operand in expected.items():
                if operator == "$in":
                    if actual is _MISSING or actual not in operand:
                        return False
                elif operator == "$ne":
                    if actual is not _MISSING and actual == operand:
                        return False
                else:
                    raise ValueError(f"Unsupported filter operator: {operator}")
        elif actual is _MISSING:
            if expected is not None:
                return False
        elif actual != expected:
            return False
    return True


def _sort_key(document: Dict[str, Any], key: str) -> Tuple[bool, Any]:
    value = _lookup(document, key)
    # Missing and None sort lowest, as in MongoDB
    if value is _MISSING or value is None:
        return (False, 0)
    return (True, value)


def _set_fields(document: Dict[str, Any], fields: Dict[str, Any]) -> bool:
    changed = False
    for key, value in fields.items():
        target = document
        parts = key.split(".")
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        if target.get(parts[-1], _MISSING) != value:
            changed = True
        target[parts[-1]] = copy.deepcopy(value)
    return changed


class MemoryStore(DocumentStore):
    """
    In-process store with MongoDB-like semantics.

    Set ``acknowledge_writes`` to False to simulate a store that drops writes.
    """

    def __init__(self):
        self._collections: Dict[str, "OrderedDict[str, Dict[str, Any]]"] = {}
        self._lock = threading.Lock()
        self.acknowledge_writes = True

    def _collection(self, name: str) -> "OrderedDict[str, Dict[str, Any]]":
        return self._collections.setdefault(name, OrderedDict())

    def find_one(self, collection, filter):
        with self._lock:
            for document in self._collection(collection).values():
                if _matches(document, filter):
                    return copy.deepcopy(document)
        return None

    def find(self, collection, filter=None, sort=None):
        with self._lock:
            documents = [copy.deepcopy(d) for d in self._collection(collection).values() if _matches(d, filter)]
        for key, direction in reversed(list(sort or [])):
            documents.sort(key=lambda d: _sort_key(d, key), reverse=direction < 0)
        return documents

    def insert_one(self, collection, document):
        if not self.acknowledge_writes:
            return WriteResult(acknowledged=False)
        document = {"_id": new_id(), **copy.deepcopy(document)}
        with self._lock:
            self._collection(collection)[document["_id"]] = document
        return WriteResult(acknowledged=True, inserted_id=document["_id"])

    def insert_many(self, collection, documents):
        if not self.acknowledge_writes:
            return WriteResult(acknowledged=False)
        ids = [self.insert_one(collection, document).inserted_id for document in documents]
        return WriteResult(acknowledged=True, inserted_ids=ids)

    def update_one(self, collection, filter, fields, upsert=False):
        if not self.acknowledge_writes:
            return WriteResult(acknowledged=False)
        with self._lock:
            for document in self._collection(collection).values():
                if _matches(document, filter):
                    changed = _set_fields(document, fields)
                    return WriteResult(acknowledged=True, matched_count=1, modified_count=int(changed))
            if not upsert:
                return WriteResult(acknowledged=True)
            document = {
                key: copy.deepcopy(value) for key, value in filter.items()
                if not (isinstance(value, dict) and any(k.startswith("$") for k in value))
            }
            _set_fields(document, fields)
            document.setdefault("_id", new_id())
            self._collection(collection)[document["_id"]] = document
            return WriteResult(acknowledged=True, upserted_id=document["_id"])

    def update_many(self, collection, filter, fields):
        if not self.acknowledge_writes:
            return WriteResult(acknowledged=False)
        matched = modified = 0
        with self._lock:
            for document in self._collection(collection).values():
                if _matches(document, filter):
                    matched += 1
                    modified += int(_set_fields(document, fields))
        return WriteResult(acknowledged=True, matched_count=matched, modified_count=modified)

    def delete_one(self, collection, filter):
        if not self.acknowledge_writes:
            return WriteResult(acknowledged=False)
        with self._lock:
            documents = self._collection(collection)
            for key, document in documents.items():
                if _matches(document, filter):
                    del documents[key]
                    return WriteResult(acknowledged=True, deleted_count=1)
        return WriteResult(acknowledged=True)

    def delete_many(self, collection, filter):
        if not self.acknowledge_writes:
            return WriteResult(acknowledged=False)
        with self._lock:
            documents = self._collection(collection)
            doomed = [key for key, document in documents.items() if _matches(document, filter)]
            for key in doomed:
                del documents[key]
        return WriteResult(acknowledged=True, deleted_count=len(doomed))


def create_store(backend: Optional[str] = None) -> DocumentStore:
    """Store selected by ``LEMS_STORE`` (``mongo`` or ``memory``)."""
    backend = backend or STORE_BACKEND
    if backend == "memory":
        logger.warning("Using in-memory store; data is lost on restart")
        return MemoryStore()
    if backend == "mongo":
        return MongoStore(MONGODB_URI, MONGODB_DATABASE)
    raise ValueError(f"Unknown store backend: {backend}")
