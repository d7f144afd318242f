from typing import Optional

from fastapi import APIRouter, Depends

from lems.models.schemas import RubricUpdate
from lems.services.rubrics import RubricWorkflow
from lems.api.deps import category_context, get_division, get_rubric_workflow, require

router = APIRouter(prefix="/rubrics", tags=["rubrics"])


@router.get("")
async def list_rubrics(category: Optional[str] = None, division: dict = Depends(get_division),
                       rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    return rubrics.list_division(division["_id"], category)


@router.get("/{rubric_id}")
async def get_rubric(rubric_id: str, division: dict = Depends(get_division),
                     rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    return rubrics.get_by_id(division["_id"], rubric_id)


@router.put("/{rubric_id}")
async def update_rubric(rubric_id: str, body: RubricUpdate,
                        division: dict = Depends(get_division),
                        user: dict = Depends(require("judging:rubric", context=category_context)),
                        rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    rubric = rubrics.get_by_id(division["_id"], rubric_id)
    rubric = rubrics.update(division["_id"], rubric["teamId"], rubric["category"], body.to_document())
    return {"ok": True, "rubric": rubric}


@router.delete("/team/{team_id}")
async def delete_team_rubrics(team_id: str, division: dict = Depends(get_division),
                              user: dict = Depends(require("schedule:admin")),
                              rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    return {"ok": True, "deleted": rubrics.delete_all(division["_id"], team_id)}


@router.delete("/{rubric_id}")
async def delete_rubric(rubric_id: str, division: dict = Depends(get_division),
                        user: dict = Depends(require("schedule:admin")),
                        rubrics: RubricWorkflow = Depends(get_rubric_workflow)):
    rubrics.delete(division["_id"], rubric_id)
    return {"ok": True}
