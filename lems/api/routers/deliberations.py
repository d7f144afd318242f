from fastapi import APIRouter, Depends

from lems.models.schemas import PicklistUpdate
from lems.services.deliberations import DeliberationWorkflow
from lems.api.deps import category_context, get_deliberations, get_division, require

router = APIRouter(prefix="/deliberations", tags=["deliberations"])


@router.get("")
async def list_deliberations(division: dict = Depends(get_division),
                             deliberations: DeliberationWorkflow = Depends(get_deliberations)):
    return deliberations.list(division["_id"])


@router.get("/{category}")
async def get_deliberation(category: str, division: dict = Depends(get_division),
                           deliberations: DeliberationWorkflow = Depends(get_deliberations)):
    return deliberations.get(division["_id"], category)


@router.post("/{category}/start")
async def start_deliberation(category: str, division: dict = Depends(get_division),
                             user: dict = Depends(require("judging:deliberation", context=category_context)),
                             deliberations: DeliberationWorkflow = Depends(get_deliberations)):
    return {"ok": True, "deliberation": deliberations.start(division["_id"], category)}


@router.put("/{category}")
async def update_picklist(category: str, body: PicklistUpdate, division: dict = Depends(get_division),
                          user: dict = Depends(require("judging:deliberation", context=category_context)),
                          deliberations: DeliberationWorkflow = Depends(get_deliberations)):
    deliberation = deliberations.update_picklist(division["_id"], category, body.picklist)
    return {"ok": True, "deliberation": deliberation}


@router.post("/{category}/lock")
async def lock_deliberation(category: str, division: dict = Depends(get_division),
                            user: dict = Depends(require("judging:deliberation", context=category_context)),
                            deliberations: DeliberationWorkflow = Depends(get_deliberations)):
    return {"ok": True, "deliberation": deliberations.lock(division["_id"], category)}
