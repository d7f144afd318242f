"""
Division routes: the division itself, its live EventState and every
division-scoped resource router.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore
from lems.services.notifier import Notifier
from lems.api.deps import get_division, get_notifier, get_store, require
from lems.api.routers import (
    awards, cv_forms, deliberations, export, insights, matches, rooms, rubrics,
    scoresheets, sessions, tables, teams, tickets, users
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/events/{division_id}", tags=["events"])


@router.get("")
async def get_division_details(withSchedule: bool = False, division: dict = Depends(get_division)):
    if not withSchedule:
        division.pop("schedule", None)
    return division


@router.get("/state")
async def get_state(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.events.get_event_state(store, {"divisionId": division["_id"]})


@router.put("/state")
async def update_state(
    body: Optional[Dict[str, Any]] = Body(default=None),
    division: dict = Depends(get_division),
    user: dict = Depends(require("state:write")),
    store: DocumentStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier)
):
    """Partial update of the EventState; creates it if the division has none yet."""
    fields = {key: value for key, value in (body or {}).items() if key not in ("_id", "divisionId")}
    if not fields:
        return JSONResponse(status_code=400, content={"ok": False})

    logger.info(f"Updating event state for division {division['_id']}")
    result = crud.events.update_event_state(store, {"divisionId": division["_id"]}, fields)
    if not result.acknowledged:
        logger.error(f"Could not update event state for division {division['_id']}")
        return JSONResponse(status_code=500, content={"ok": False})

    notifier.emit(division["_id"], "eventStateUpdated", division["_id"])
    return {"ok": True, "id": result.upserted_id}


for resource in (awards, rooms, tables, users, sessions, matches, teams, rubrics,
                 scoresheets, tickets, cv_forms, deliberations, export, insights):
    router.include_router(resource.router)
