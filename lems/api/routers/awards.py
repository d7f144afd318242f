from fastapi import APIRouter, Depends

from lems.models.schemas import AwardWinnersUpdate
from lems.core.errors import NotFoundError, PersistenceError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore
from lems.services.notifier import Notifier
from lems.api.deps import get_division, get_notifier, get_store, require

logger = get_logger(__name__)

router = APIRouter(prefix="/awards", tags=["awards"])


@router.get("")
async def list_awards(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.awards.get_division_awards(store, division["_id"])


@router.put("")
async def update_award_winners(body: AwardWinnersUpdate, division: dict = Depends(get_division),
                               user: dict = Depends(require("awards:write")),
                               store: DocumentStore = Depends(get_store),
                               notifier: Notifier = Depends(get_notifier)):
    """Set the winner (a team id or a free-text name) of one or more award places."""
    division_id = division["_id"]
    known = {award["_id"] for award in crud.awards.get_division_awards(store, division_id)}
    missing = [entry.award_id for entry in body.awards if entry.award_id not in known]
    if missing:
        raise NotFoundError("Unknown awards", details={"awards": missing})

    for entry in body.awards:
        result = crud.awards.update_award(store, {"_id": entry.award_id, "divisionId": division_id},
                                          {"winner": entry.winner})
        if not result.acknowledged:
            raise PersistenceError(f"Could not update award {entry.award_id}")

    notifier.emit(division_id, "awardsUpdated")
    logger.info(f"Updated {len(body.awards)} award winners in division {division_id}")
    return {"ok": True, "awards": crud.awards.get_division_awards(store, division_id)}
