from typing import Any, Dict, List, Optional

from lems.database.store import DocumentStore, Filter, WriteResult

COLLECTION = "users"

# Never leave the store
PRIVATE_FIELDS = ("password", "passwordHash")


def safe_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in user.items() if key not in PRIVATE_FIELDS}


def get_user(store: DocumentStore, filter: Filter) -> Optional[Dict[str, Any]]:
    return store.find_one(COLLECTION, filter)


def get_division_users(store: DocumentStore, division_id: str) -> List[Dict[str, Any]]:
    return store.find(COLLECTION, {"divisionId": division_id})


def add_user(store: DocumentStore, user: Dict[str, Any]) -> WriteResult:
    return store.insert_one(COLLECTION, user)


def add_users(store: DocumentStore, users: List[Dict[str, Any]]) -> WriteResult:
    return store.insert_many(COLLECTION, users)
