from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "matches"


def get_match(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_matches(store: DocumentStore, filter: Filter) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, filter, sort=[("number", 1)])


def get_division_matches(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return get_matches(store, {"divisionId": division_id})


def get_table_matches(store: DocumentStore, division_id: str, table_id: str) -> List[Dict[str, Any]]:
    # participants is an array; filter here so both store backends behave the same
    return [
        match for match in get_division_matches(store, division_id)
        if any(p.get("tableId") == table_id for p in match.get("participants", []))
    ]


def get_team_matches(store: DocumentStore, division_id: str, team_id: str) -> List[Dict[str, Any]]:
    return [
        match for match in get_division_matches(store, division_id)
        if any(p.get("teamId") == team_id for p in match.get("participants", []))
    ]


def add_matches(store: DocumentStore, matches: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, matches)


def update_match(store: DocumentStore, filter: Filter, fields: Dict[str, Any],
                 upsert: bool = False) -> WriteResult:
    return store.update_one(COLLECTION, filter, fields, upsert=upsert)


def delete_division_matches(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
