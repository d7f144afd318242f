from typing import Any, Dict, List

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "awards"


def get_division_awards(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, {"divisionId": division_id}, sort=[("index", 1), ("place", 1)])


def add_awards(store: DocumentStore, awards: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, awards)


def update_award(store: DocumentStore, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
    return store.update_one(COLLECTION, filter, fields)


def delete_division_awards(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})


def update_awards(store: DocumentStore, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
    return store.update_many(COLLECTION, filter, fields)
