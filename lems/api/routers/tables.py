from fastapi import APIRouter, Depends

from lems.core.errors import NotFoundError
from lems.database import crud, DocumentStore
from lems.api.deps import get_division, get_store

router = APIRouter(prefix="/tables", tags=["tables"])


@router.get("")
async def list_tables(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.tables.get_division_tables(store, division["_id"])


@router.get("/{table_id}")
async def get_table(table_id: str, division: dict = Depends(get_division),
                    store: DocumentStore = Depends(get_store)):
    table = crud.tables.get_table(store, {"_id": table_id, "divisionId": division["_id"]})
    if table is None:
        raise NotFoundError(f"Table {table_id} not found")
    return table


@router.get("/{table_id}/matches")
async def get_table_matches(table_id: str, division: dict = Depends(get_division),
                            store: DocumentStore = Depends(get_store)):
    return crud.matches.get_table_matches(store, division["_id"], table_id)
