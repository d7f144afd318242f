from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "deliberations"


def get_deliberation(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_division_deliberations(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, {"divisionId": division_id}, sort=[("category", 1)])


def add_deliberations(store: DocumentStore, deliberations: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, deliberations)


def update_deliberation(store: DocumentStore, filter: Filter, fields: Dict[str, Any],
                        upsert: bool = False) -> WriteResult:
    return store.update_one(COLLECTION, filter, fields, upsert=upsert)


def delete_division_deliberations(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
