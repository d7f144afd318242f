from typing import Any, Dict

from fastapi import APIRouter, Depends

from lems.models.schemas import CVFormBody, CVFormUpdate
from lems.services.cv_forms import CVFormService
from lems.api.deps import get_cv_forms, get_division, require

router = APIRouter(prefix="/cv-forms", tags=["cv-forms"])


@router.get("")
async def list_cv_forms(division: dict = Depends(get_division),
                        cv_forms: CVFormService = Depends(get_cv_forms)):
    return cv_forms.list(division["_id"])


@router.get("/{form_id}")
async def get_cv_form(form_id: str, division: dict = Depends(get_division),
                      cv_forms: CVFormService = Depends(get_cv_forms)):
    return cv_forms.get(division["_id"], form_id)


@router.post("")
async def create_cv_form(body: CVFormBody, division: dict = Depends(get_division),
                         user: dict = Depends(require("cv-forms:write")),
                         cv_forms: CVFormService = Depends(get_cv_forms)):
    form = cv_forms.create(division["_id"], body.model_dump(by_alias=True))
    return {"ok": True, "id": form["_id"]}


@router.put("/{form_id}")
async def update_cv_form(form_id: str, body: CVFormUpdate, division: dict = Depends(get_division),
                         user: dict = Depends(require("cv-forms:write")),
                         cv_forms: CVFormService = Depends(get_cv_forms)):
    fields: Dict[str, Any] = body.to_document()
    return {"ok": True, "cvForm": cv_forms.update(division["_id"], form_id, fields)}
