from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "tables"


def get_table(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_division_tables(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, {"divisionId": division_id}, sort=[("_id", 1)])


def add_tables(store: DocumentStore, tables: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, tables)


def delete_division_tables(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
