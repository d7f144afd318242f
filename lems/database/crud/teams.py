from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "teams"


def get_team(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_division_teams(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, {"divisionId": division_id}, sort=[("number", 1)])


def add_teams(store: DocumentStore, teams: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, teams)


def update_team(store: DocumentStore, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
    return store.update_one(COLLECTION, filter, fields)


def delete_division_teams(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
