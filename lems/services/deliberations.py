"""
Judging deliberations, one per judging category.

    not-started -> in-progress -> completed

Advisors start a deliberation, build the category's award picklist while it
is in progress and lock it when done. The picklist is frozen outside
in-progress.
"""

from typing import Any, Dict, List

from lems.models import DeliberationStatus
from lems.core.config import JUDGING_CATEGORIES
from lems.core.errors import InvalidTransitionError, NotFoundError, PersistenceError, ValidationError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore, utcnow
from lems.services.notifier import Notifier
from lems.services.rubrics import check_category

logger = get_logger(__name__)

Document = Dict[str, Any]

DELIBERATION_TRANSITIONS: Dict[DeliberationStatus, List[DeliberationStatus]] = {
    DeliberationStatus.NOT_STARTED: [DeliberationStatus.IN_PROGRESS],
    DeliberationStatus.IN_PROGRESS: [DeliberationStatus.COMPLETED],
    DeliberationStatus.COMPLETED: [],
}


def empty_deliberation(division_id: str, category: str) -> Document:
    return {
        "divisionId": division_id,
        "category": category,
        "status": DeliberationStatus.NOT_STARTED.value,
        "startTime": None,
        "completionTime": None,
        "awards": {category: []}
    }


class DeliberationWorkflow:
    def __init__(self, store: DocumentStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    def create_for_division(self, division_id: str) -> int:
        """One deliberation per judging category, skipping those that exist."""
        existing = {d["category"] for d in crud.deliberations.get_division_deliberations(self.store, division_id)}
        deliberations = [
            empty_deliberation(division_id, category)
            for category in JUDGING_CATEGORIES
            if category not in existing
        ]
        if deliberations:
            result = crud.deliberations.add_deliberations(self.store, deliberations)
            if not result.acknowledged:
                raise PersistenceError(f"Could not create deliberations for division {division_id}")
        return len(deliberations)

    def list(self, division_id: str) -> List[Document]:
        return crud.deliberations.get_division_deliberations(self.store, division_id)

    def get(self, division_id: str, category: str) -> Document:
        check_category(category)
        deliberation = crud.deliberations.get_deliberation(
            self.store, {"divisionId": division_id, "category": category}
        )
        if deliberation is None:
            raise NotFoundError(f"No {category} deliberation in division {division_id}")
        return deliberation

    def _transition(self, deliberation: Document, target: DeliberationStatus):
        current = DeliberationStatus(deliberation["status"])
        if target not in DELIBERATION_TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Cannot move the {deliberation['category']} deliberation from {current.value} to {target.value}",
                details={"status": current.value, "requested": target.value}
            )

    def _write(self, deliberation: Document, fields: Document, event_name: str) -> Document:
        result = crud.deliberations.update_deliberation(
            self.store,
            {"divisionId": deliberation["divisionId"], "category": deliberation["category"]},
            fields, upsert=True
        )
        if not result.acknowledged:
            raise PersistenceError(f"Store did not acknowledge update of the {deliberation['category']} deliberation")
        deliberation.update(fields)
        self.notifier.emit(deliberation["divisionId"], event_name, deliberation["_id"], deliberation["status"])
        logger.info(f"Deliberation {deliberation['category']} of division {deliberation['divisionId']} "
                    f"-> {deliberation['status']} ({event_name})")
        return deliberation

    def start(self, division_id: str, category: str) -> Document:
        deliberation = self.get(division_id, category)
        self._transition(deliberation, DeliberationStatus.IN_PROGRESS)
        return self._write(
            deliberation,
            {"status": DeliberationStatus.IN_PROGRESS.value, "startTime": utcnow()},
            "judgingDeliberationStarted"
        )

    def update_picklist(self, division_id: str, category: str, team_ids: List[str]) -> Document:
        """
        Replace the category's ranked award picklist.

        Raises:
            InvalidTransitionError: when the deliberation is not in progress
            ValidationError: on duplicate teams or teams outside the division
        """
        deliberation = self.get(division_id, category)
        if deliberation["status"] != DeliberationStatus.IN_PROGRESS.value:
            raise InvalidTransitionError(
                f"The {category} deliberation is {deliberation['status']}; its picklist is frozen",
                details={"status": deliberation["status"]}
            )

        if len(set(team_ids)) != len(team_ids):
            raise ValidationError("A team can appear only once on the picklist")
        division_teams = {team["_id"] for team in crud.teams.get_division_teams(self.store, division_id)}
        unknown = [team_id for team_id in team_ids if team_id not in division_teams]
        if unknown:
            raise ValidationError("Teams are not part of this division", details={"teams": unknown})

        awards = {**(deliberation.get("awards") or {}), category: list(team_ids)}
        return self._write(deliberation, {"awards": awards}, "judgingDeliberationUpdated")

    def lock(self, division_id: str, category: str) -> Document:
        deliberation = self.get(division_id, category)
        self._transition(deliberation, DeliberationStatus.COMPLETED)
        if not (deliberation.get("awards") or {}).get(category):
            raise ValidationError(f"The {category} picklist is empty")
        return self._write(
            deliberation,
            {"status": DeliberationStatus.COMPLETED.value, "completionTime": utcnow()},
            "judgingDeliberationCompleted"
        )
