from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "sessions"


def get_session(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_sessions(store: DocumentStore, filter: Filter) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, filter, sort=[("scheduledTime", 1), ("number", 1)])


def get_division_sessions(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return get_sessions(store, {"divisionId": division_id})


def get_room_sessions(store: DocumentStore, room_id: str) -> List[Dict[str, Any]]:
    return get_sessions(store, {"roomId": room_id})


def get_team_session(store: DocumentStore, division_id: str, team_id: str) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, {"divisionId": division_id, "teamId": team_id})


def add_sessions(store: DocumentStore, sessions: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, sessions)


def update_session(store: DocumentStore, filter: Filter, fields: Dict[str, Any],
                   upsert: bool = False) -> WriteResult:
    return store.update_one(COLLECTION, filter, fields, upsert=upsert)


def delete_division_sessions(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
