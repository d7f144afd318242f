"""
Judging session routes: listing, the lifecycle transitions and rubric indicators.
"""

from fastapi import APIRouter, Depends

from lems.models.schemas import AbortRequest, SessionIndicatorsUpdate
from lems.core.errors import ValidationError
from lems.database import crud, DocumentStore
from lems.services.lifecycle import Lifecycle, session_timer
from lems.api.deps import (
    get_division, get_division_state, get_lifecycle, get_store,
    require, save_event_state, session_context
)

router = APIRouter(prefix="/sessions", tags=["sessions"])

judging_session = require("judging:session", context=session_context)


@router.get("")
async def list_sessions(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.sessions.get_division_sessions(store, division["_id"])


@router.get("/{session_id}")
async def get_session(session_id: str, division: dict = Depends(get_division),
                      lifecycle: Lifecycle = Depends(get_lifecycle)):
    return lifecycle.get_session(division["_id"], session_id)


@router.get("/{session_id}/timer")
async def get_session_timer(session_id: str, division: dict = Depends(get_division),
                            lifecycle: Lifecycle = Depends(get_lifecycle)):
    return session_timer(lifecycle.get_session(division["_id"], session_id))


@router.post("/{session_id}/start")
async def start_session(
    session_id: str,
    division: dict = Depends(get_division),
    state: dict = Depends(get_division_state),
    user: dict = Depends(judging_session),
    lifecycle: Lifecycle = Depends(get_lifecycle),
    store: DocumentStore = Depends(get_store)
):
    session, state = lifecycle.start_session(division["_id"], session_id, state)
    save_event_state(store, state)
    return {"ok": True, "session": session}


@router.post("/{session_id}/complete")
async def complete_session(session_id: str, division: dict = Depends(get_division),
                           user: dict = Depends(judging_session),
                           lifecycle: Lifecycle = Depends(get_lifecycle)):
    return {"ok": True, "session": lifecycle.complete_session(division["_id"], session_id)}


@router.post("/{session_id}/abort")
async def abort_session(session_id: str, body: AbortRequest,
                        division: dict = Depends(get_division),
                        user: dict = Depends(judging_session),
                        lifecycle: Lifecycle = Depends(get_lifecycle)):
    return {"ok": True, "session": lifecycle.abort_session(division["_id"], session_id, body.reason)}


@router.post("/{session_id}/reset")
async def reset_session(session_id: str, division: dict = Depends(get_division),
                        user: dict = Depends(require("schedule:admin")),
                        lifecycle: Lifecycle = Depends(get_lifecycle)):
    return {"ok": True, "session": lifecycle.reset_session(division["_id"], session_id)}


@router.put("/{session_id}")
async def update_session_indicators(session_id: str, body: SessionIndicatorsUpdate,
                                    division: dict = Depends(get_division),
                                    user: dict = Depends(require("judging:rubric")),
                                    lifecycle: Lifecycle = Depends(get_lifecycle)):
    indicators = {key: value for key, value in body.to_document().items() if value is not None}
    if not indicators:
        raise ValidationError("No rubric indicators to update")
    return {"ok": True, "session": lifecycle.update_session_indicators(division["_id"], session_id, indicators)}
