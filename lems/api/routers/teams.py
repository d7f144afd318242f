from fastapi import APIRouter, Depends

from lems.models.schemas import RubricUpdate, TeamUpdate
from lems.core.errors import NotFoundError, PersistenceError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore
from lems.services.notifier import Notifier
from lems.services.rubrics import RubricWorkflow
from lems.api.deps import (
    category_context, get_division, get_notifier, get_rubric_workflow,
    get_store, require
)

logger = get_logger(__name__)

router = APIRouter(prefix="/teams", tags=["teams"])


def _get_team(store: DocumentStore, division_id: str, team_id: str) -> dict:
    team = crud.teams.get_team(store, {"_id": team_id, "divisionId": division_id})
    if team is None:
        raise NotFoundError(f"Team {team_id} not found")
    return team


@router.get("")
async def list_teams(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.teams.get_division_teams(store, division["_id"])


@router.get("/{team_id}")
async def get_team(team_id: str, division: dict = Depends(get_division),
                   store: DocumentStore = Depends(get_store)):
    return _get_team(store, division["_id"], team_id)


@router.put("/{team_id}")
async def update_team_registration(team_id: str, body: TeamUpdate,
                                   division: dict = Depends(get_division),
                                   user: dict = Depends(require("teams:register")),
                                   store: DocumentStore = Depends(get_store),
                                   notifier: Notifier = Depends(get_notifier)):
    """Pit check-in: mark the team as (un)registered."""
    team = _get_team(store, division["_id"], team_id)
    result = crud.teams.update_team(store, {"_id": team_id, "divisionId": division["_id"]},
                                    {"registered": body.registered})
    if not result.acknowledged:
        raise PersistenceError(f"Could not update team {team_id}")

    team["registered"] = body.registered
    notifier.emit(division["_id"], "teamRegistered", team_id, body.registered)
    logger.info(f"Team #{team['number']} registered={body.registered}")
    return {"ok": True, "team": team}


@router.get("/{team_id}/rubrics")
async def get_team_rubrics(team_id: str, division: dict = Depends(get_division),
                           rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    return rubrics.list_team(division["_id"], team_id)


@router.get("/{team_id}/rubrics/{category}")
async def get_team_rubric(team_id: str, category: str, division: dict = Depends(get_division),
                          rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    return rubrics.get(division["_id"], team_id, category)


@router.put("/{team_id}/rubrics/{category}")
async def update_team_rubric(team_id: str, category: str, body: RubricUpdate,
                             division: dict = Depends(get_division),
                             user: dict = Depends(require("judging:rubric", context=category_context)),
                             rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    rubric = rubrics.update(division["_id"], team_id, category, body.to_document())
    return {"ok": True, "rubric": rubric}
