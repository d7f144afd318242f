from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "cv_forms"


def get_cv_form(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_division_cv_forms(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, {"divisionId": division_id}, sort=[("createdAt", 1)])


def add_cv_form(store: DocumentStore, cv_form: Dict[str, Any]) -> WriteResult:
    return store.insert_one(COLLECTION, cv_form)


def update_cv_form(store: DocumentStore, filter: Filter, fields: Dict[str, Any]) -> WriteResult:
    return store.update_one(COLLECTION, filter, fields)


def delete_division_cv_forms(store: DocumentStore, division_id: str) -> WriteResult:
    return store.delete_many(COLLECTION, {"divisionId": division_id})
