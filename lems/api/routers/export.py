from fastapi import APIRouter, Depends

from lems.database import DocumentStore
from lems.services import insights
from lems.api.deps import get_division, get_store, require

router = APIRouter(prefix="/export", tags=["export"])


@router.get("/rubrics")
async def export_rubrics(division: dict = Depends(get_division),
                         user: dict = Depends(require("awards:write")),
                         store: DocumentStore = Depends(get_store)):
    return insights.export_rubrics(store, division["_id"])


@router.get("/scores")
async def export_scores(division: dict = Depends(get_division),
                        user: dict = Depends(require("awards:write")),
                        store: DocumentStore = Depends(get_store)):
    return insights.export_scores(store, division["_id"])
