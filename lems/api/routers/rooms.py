from fastapi import APIRouter, Depends

from lems.core.errors import NotFoundError
from lems.database import crud, DocumentStore
from lems.api.deps import get_division, get_store

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("")
async def list_rooms(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.rooms.get_division_rooms(store, division["_id"])


@router.get("/{room_id}")
async def get_room(room_id: str, division: dict = Depends(get_division),
                   store: DocumentStore = Depends(get_store)):
    room = crud.rooms.get_room(store, {"_id": room_id, "divisionId": division["_id"]})
    if room is None:
        raise NotFoundError(f"Room {room_id} not found")
    return room


@router.get("/{room_id}/sessions")
async def get_room_sessions(room_id: str, division: dict = Depends(get_division),
                            store: DocumentStore = Depends(get_store)):
    return crud.sessions.get_sessions(store, {"divisionId": division["_id"], "roomId": room_id})
