from typing import Optional

from fastapi import APIRouter, Depends

from lems.models.schemas import ScoresheetUpdate
from lems.core.errors import NotFoundError, PersistenceError, ValidationError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore
from lems.services.notifier import Notifier
from lems.api.deps import get_division, get_notifier, get_store, require, scoresheet_context

logger = get_logger(__name__)

router = APIRouter(prefix="/scoresheets", tags=["scoresheets"])


def _get_scoresheet(store: DocumentStore, division_id: str, scoresheet_id: str) -> dict:
    scoresheet = crud.scoresheets.get_scoresheet(store, {"_id": scoresheet_id, "divisionId": division_id})
    if scoresheet is None:
        raise NotFoundError(f"Scoresheet {scoresheet_id} not found")
    return scoresheet


@router.get("")
async def list_scoresheets(team_id: Optional[str] = None, stage: Optional[str] = None,
                           division: dict = Depends(get_division),
                           store: DocumentStore = Depends(get_store)):
    filter = {"divisionId": division["_id"]}
    if team_id:
        filter["teamId"] = team_id
    if stage:
        filter["stage"] = stage
    return crud.scoresheets.get_scoresheets(store, filter)


@router.get("/{scoresheet_id}")
async def get_scoresheet(scoresheet_id: str, division: dict = Depends(get_division),
                         store: DocumentStore = Depends(get_store)):
    return _get_scoresheet(store, division["_id"], scoresheet_id)


@router.put("/{scoresheet_id}")
async def update_scoresheet(scoresheet_id: str, body: ScoresheetUpdate,
                            division: dict = Depends(get_division),
                            user: dict = Depends(require("field:scoresheet", context=scoresheet_context)),
                            store: DocumentStore = Depends(get_store),
                            notifier: Notifier = Depends(get_notifier)):
    scoresheet = _get_scoresheet(store, division["_id"], scoresheet_id)
    fields = {key: value for key, value in body.to_document().items() if value is not None}
    if not fields:
        raise ValidationError("Nothing to update")
    if "status" in fields:
        fields["status"] = fields["status"].value

    result = crud.scoresheets.update_scoresheet(
        store, {"_id": scoresheet_id, "divisionId": division["_id"]}, fields
    )
    if not result.acknowledged:
        raise PersistenceError(f"Could not save scoresheet {scoresheet_id}")

    if "status" in fields and fields["status"] != scoresheet["status"]:
        notifier.emit(division["_id"], "scoresheetStatusChanged", scoresheet_id, fields["status"])
        logger.info(f"Scoresheet {scoresheet_id}: {scoresheet['status']} -> {fields['status']}")

    scoresheet.update(fields)
    return {"ok": True, "scoresheet": scoresheet}
