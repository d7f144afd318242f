from fastapi import APIRouter, Depends

from lems.database import DocumentStore
from lems.services import insights
from lems.api.deps import get_division, get_store

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("/judging")
async def judging_insights(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return insights.judging_insights(store, division["_id"])


@router.get("/field")
async def field_insights(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return insights.field_insights(store, division["_id"])
