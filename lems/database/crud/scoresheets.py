from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "scoresheets"


def get_scoresheet(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_scoresheets(store: DocumentStore, filter: Filter) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, filter, sort=[("stage", 1), ("round", 1)])


def add_scoresheets(store: DocumentStore, scoresheets: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, scoresheets)


def update_scoresheet(store: DocumentStore, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
    return store.update_one(COLLECTION, filter, fields)


def delete_division_scoresheets(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
