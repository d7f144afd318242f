from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "rubrics"


def get_rubric(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_rubrics(store: DocumentStore, filter: Filter) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, filter)


def get_team_rubrics(store: DocumentStore, team_id: str) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, {"teamId": team_id})


def add_rubric(store: DocumentStore, rubric: Dict[str, Any]) -> WriteResult:
    return store.insert_one(COLLECTION, rubric)


def add_rubrics(store: DocumentStore, rubrics: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, rubrics)


def update_rubric(store: DocumentStore, filter: Filter, new_rubric: Dict[str, Any]) -> WriteResult:
    return store.update_one(COLLECTION, filter, new_rubric, upsert=True)


def delete_rubric(store: DocumentStore, filter: Filter) -> WriteResult:
    return store.delete_one(COLLECTION, filter)


def delete_team_rubrics(store: DocumentStore, team_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"teamId": team_id})


def delete_division_rubrics(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
