from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

EVENTS = "events"
DIVISIONS = "divisions"
DIVISION_STATES = "division_states"


def get_event(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(EVENTS, filter)


def get_events(store: DocumentStore) -> List[Dict[str, Any]]:
    return store.find(EVENTS, {}, sort=[("startDate", 1)])


def add_event(store: DocumentStore, event: Dict[str, Any]) -> WriteResult:
    return store.insert_one(EVENTS, event)


def get_division(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(DIVISIONS, filter)


def get_event_divisions(store: DocumentStore, event_id: str) -> List[Dict[str, Any]]:
    return store.find(DIVISIONS, {"eventId": event_id})


def add_division(store: DocumentStore, division: Dict[str, Any]) -> WriteResult:
    return store.insert_one(DIVISIONS, division)


def update_division(store: DocumentStore, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
    return store.update_one(DIVISIONS, filter, fields)


def get_event_state(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(DIVISION_STATES, filter)


def update_event_state(store: DocumentStore, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
    return store.update_one(DIVISION_STATES, filter, fields, upsert=True)


def delete_event_state(store: DocumentStore, filter: Filter) -> WriteResult:
    return store.delete_one(DIVISION_STATES, filter)
