"""
Robot game match routes. Every transition persists the division's EventState.
"""

from fastapi import APIRouter, Depends

from lems.models.schemas import AbortRequest, MatchParticipantsUpdate
from lems.database import crud, DocumentStore
from lems.services.lifecycle import Lifecycle
from lems.api.deps import (
    get_division, get_division_state, get_lifecycle, get_store,
    match_context, require, save_event_state
)

router = APIRouter(prefix="/matches", tags=["matches"])

field_match = require("field:match", context=match_context)


@router.get("")
async def list_matches(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.matches.get_division_matches(store, division["_id"])


@router.get("/{match_id}")
async def get_match(match_id: str, division: dict = Depends(get_division),
                    lifecycle: Lifecycle = Depends(get_lifecycle)):
    return lifecycle.get_match(division["_id"], match_id)


@router.put("/{match_id}")
async def update_match_participants(match_id: str, body: MatchParticipantsUpdate,
                                    division: dict = Depends(get_division),
                                    user: dict = Depends(field_match),
                                    lifecycle: Lifecycle = Depends(get_lifecycle)):
    updates = [participant.to_document() for participant in body.participants]
    return {"ok": True, "match": lifecycle.update_match_participants(division["_id"], match_id, updates)}


@router.post("/{match_id}/start")
async def start_match(match_id: str, division: dict = Depends(get_division),
                      state: dict = Depends(get_division_state),
                      user: dict = Depends(field_match),
                      lifecycle: Lifecycle = Depends(get_lifecycle),
                      store: DocumentStore = Depends(get_store)):
    match, state = lifecycle.start_match(division["_id"], match_id, state)
    save_event_state(store, state)
    return {"ok": True, "match": match, "state": state}


@router.post("/{match_id}/complete")
async def complete_match(match_id: str, division: dict = Depends(get_division),
                         state: dict = Depends(get_division_state),
                         user: dict = Depends(field_match),
                         lifecycle: Lifecycle = Depends(get_lifecycle),
                         store: DocumentStore = Depends(get_store)):
    match, state = lifecycle.complete_match(division["_id"], match_id, state)
    save_event_state(store, state)
    return {"ok": True, "match": match, "state": state}


@router.post("/{match_id}/abort")
async def abort_match(match_id: str, body: AbortRequest,
                      division: dict = Depends(get_division),
                      state: dict = Depends(get_division_state),
                      user: dict = Depends(field_match),
                      lifecycle: Lifecycle = Depends(get_lifecycle),
                      store: DocumentStore = Depends(get_store)):
    match, state = lifecycle.abort_match(division["_id"], match_id, body.reason, state)
    save_event_state(store, state)
    return {"ok": True, "match": match, "state": state}


@router.post("/{match_id}/reset")
async def reset_match(match_id: str, division: dict = Depends(get_division),
                      state: dict = Depends(get_division_state),
                      user: dict = Depends(require("schedule:admin")),
                      lifecycle: Lifecycle = Depends(get_lifecycle),
                      store: DocumentStore = Depends(get_store)):
    match, state = lifecycle.reset_match(division["_id"], match_id, state)
    save_event_state(store, state)
    return {"ok": True, "match": match, "state": state}
