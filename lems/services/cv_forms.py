"""
Core values (CV) forms: incident reports filed by volunteers.
"""

from typing import Any, Dict, List, Optional

from lems.core.errors import NotFoundError, PersistenceError, ValidationError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore, utcnow
from lems.services.notifier import Notifier

logger = get_logger(__name__)

Document = Dict[str, Any]


def _checked_fields(data: Any) -> Optional[List[bool]]:
    """Every checkbox of every category, for both subject groups. None when malformed."""
    if data is None:
        return []
    if not isinstance(data, dict):
        return None

    checked = []
    for category in data.values():
        if not isinstance(category, dict):
            return None
        for group in ("teamOrStudent", "anyoneElse"):
            checkboxes = category.get(group) or {}
            if not isinstance(checkboxes, dict) or not isinstance(checkboxes.get("fields", []), list):
                return None
            checked.extend(checkboxes.get("fields", []))
    return checked


def validate_cv_form(form: Document) -> Dict[str, str]:
    """
    Check a submitted CV form.

    Returns:
        Mapping of field name to error message; empty when the form is valid
    """
    errors = {}

    observers = form.get("observers") or []
    if not observers:
        errors["observers"] = "At least one observer is required"
    elif "team" in observers and not form.get("observerAffiliation"):
        errors["observerAffiliation"] = "Team number of the observer is required"

    demonstrators = form.get("demonstrators") or []
    if not demonstrators:
        errors["demonstrators"] = "At least one demonstrator is required"
    elif "team" in demonstrators and not form.get("demonstratorAffiliation"):
        errors["demonstratorAffiliation"] = "Team number of the demonstrator is required"

    checked = _checked_fields(form.get("data"))
    if checked is None:
        errors["data"] = "Malformed field data"
    elif not any(checked):
        errors["data"] = "Mark at least one field"

    if not form.get("details"):
        errors["details"] = "Describe what happened"

    completed_by = form.get("completedBy") or {}
    if not (completed_by.get("name") and completed_by.get("phone") and completed_by.get("affiliation")):
        errors["completedBy"] = "Name, phone and affiliation of the reporter are required"

    return errors


class CVFormService:
    def __init__(self, store: DocumentStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    def list(self, division_id: str) -> List[Document]:
        return crud.cv_forms.get_division_cv_forms(self.store, division_id)

    def get(self, division_id: str, form_id: str) -> Document:
        form = crud.cv_forms.get_cv_form(self.store, {"_id": form_id, "divisionId": division_id})
        if form is None:
            raise NotFoundError(f"CV form {form_id} not found")
        return form

    def create(self, division_id: str, form: Document) -> Document:
        errors = validate_cv_form(form)
        if errors:
            raise ValidationError("Invalid CV form", details=errors)

        form = {**form, "divisionId": division_id, "createdAt": utcnow()}
        result = crud.cv_forms.add_cv_form(self.store, form)
        if not result.acknowledged:
            raise PersistenceError("Could not save CV form")

        form = {"_id": result.inserted_id, **form}
        self.notifier.emit(division_id, "cvFormCreated", form["_id"])
        logger.info(f"CV form {form['_id']} filed in division {division_id}")
        return form

    def update(self, division_id: str, form_id: str, fields: Document) -> Document:
        """Follow-up edits (action taken, severity) on a filed form."""
        self.get(division_id, form_id)
        fields = {k: v for k, v in fields.items() if k not in ("_id", "divisionId", "createdAt")}
        result = crud.cv_forms.update_cv_form(
            self.store, {"_id": form_id, "divisionId": division_id}, fields
        )
        if not result.acknowledged:
            raise PersistenceError(f"Could not update CV form {form_id}")

        self.notifier.emit(division_id, "cvFormUpdated", form_id)
        return self.get(division_id, form_id)
