from fastapi import APIRouter, Depends

from lems.core.errors import NotFoundError
from lems.database import crud, DocumentStore
from lems.api.deps import get_division, get_store

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return [crud.users.safe_user(u) for u in crud.users.get_division_users(store, division["_id"])]


@router.get("/{user_id}")
async def get_user(user_id: str, division: dict = Depends(get_division),
                   store: DocumentStore = Depends(get_store)):
    user = crud.users.get_user(store, {"_id": user_id, "divisionId": division["_id"]})
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return crud.users.safe_user(user)
