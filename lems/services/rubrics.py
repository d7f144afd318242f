"""
Rubric workflow.

A rubric is keyed by (team, category). Writes are upserts on that key with
last-write-wins semantics: there is no version token, and updates stamp no
timestamps so repeating an identical update leaves the document unchanged.
"""

from typing import Any, Dict, List, Optional

from lems.models import RubricStatus, Status
from lems.core.config import JUDGING_CATEGORIES
from lems.core.errors import NotFoundError, PersistenceError, ValidationError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore
from lems.services.notifier import Notifier

logger = get_logger(__name__)

Document = Dict[str, Any]


def check_category(category: str):
    if category not in JUDGING_CATEGORIES:
        raise ValidationError(
            f"Unknown judging category: {category}",
            details={"categories": JUDGING_CATEGORIES}
        )


def empty_rubric(division_id: str, team_id: str, category: str) -> Document:
    return {
        "divisionId": division_id,
        "teamId": team_id,
        "category": category,
        "status": RubricStatus.EMPTY.value,
        "data": None
    }


class RubricWorkflow:
    """Creates, reads and updates rubrics. Edits wait for the judging session to complete."""

    def __init__(self, store: DocumentStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    def create(self, division_id: str, team_id: str, category: str) -> Document:
        """Empty rubric for the team and category. Returns the existing one if present."""
        check_category(category)
        key = {"divisionId": division_id, "teamId": team_id, "category": category}
        existing = crud.rubrics.get_rubric(self.store, key)
        if existing is not None:
            return existing

        rubric = empty_rubric(division_id, team_id, category)
        result = crud.rubrics.add_rubric(self.store, rubric)
        if not result.acknowledged:
            raise PersistenceError(f"Could not create {category} rubric for team {team_id}")
        return {"_id": result.inserted_id, **rubric}

    def create_for_teams(self, division_id: str, teams: List[Document]) -> int:
        """
        One empty rubric per team and category, skipping pairs that already exist.

        Returns:
            Number of rubrics created
        """
        existing = {
            (r["teamId"], r["category"])
            for r in crud.rubrics.get_rubrics(self.store, {"divisionId": division_id})
        }
        rubrics = [
            empty_rubric(division_id, team["_id"], category)
            for team in teams
            for category in JUDGING_CATEGORIES
            if (team["_id"], category) not in existing
        ]
        if rubrics:
            result = crud.rubrics.add_rubrics(self.store, rubrics)
            if not result.acknowledged:
                raise PersistenceError(f"Could not create rubrics for division {division_id}")
        logger.info(f"Created {len(rubrics)} rubrics for {len(teams)} teams in division {division_id}")
        return len(rubrics)

    def get(self, division_id: str, team_id: str, category: str) -> Document:
        check_category(category)
        rubric = crud.rubrics.get_rubric(
            self.store, {"divisionId": division_id, "teamId": team_id, "category": category}
        )
        if rubric is None:
            raise NotFoundError(f"No {category} rubric for team {team_id}")
        return rubric

    def get_by_id(self, division_id: str, rubric_id: str) -> Document:
        rubric = crud.rubrics.get_rubric(self.store, {"_id": rubric_id, "divisionId": division_id})
        if rubric is None:
            raise NotFoundError(f"Rubric {rubric_id} not found")
        return rubric

    def list_team(self, division_id: str, team_id: str) -> List[Document]:
        return [r for r in crud.rubrics.get_team_rubrics(self.store, team_id) if r["divisionId"] == division_id]

    def list_division(self, division_id: str, category: Optional[str] = None) -> List[Document]:
        filter: Document = {"divisionId": division_id}
        if category is not None:
            check_category(category)
            filter["category"] = category
        return crud.rubrics.get_rubrics(self.store, filter)

    def update(self, division_id: str, team_id: str, category: str, fields: Document) -> Document:
        """
        Upsert the rubric's status and/or data.

        Raises:
            ValidationError: when the team's judging session is not completed
        """
        check_category(category)
        team = crud.teams.get_team(self.store, {"_id": team_id, "divisionId": division_id})
        if team is None:
            raise NotFoundError(f"Team {team_id} not found")

        fields = {key: value for key, value in fields.items() if key in ("status", "data")}
        if fields.get("status") is None:
            fields.pop("status", None)
        if not fields:
            raise ValidationError("Nothing to update: expected status and/or data")
        if "status" in fields:
            try:
                fields["status"] = RubricStatus(fields["status"]).value
            except ValueError:
                raise ValidationError(f"Unknown rubric status: {fields['status']}")

        session = crud.sessions.get_team_session(self.store, division_id, team_id)
        if session is None or session["status"] != Status.COMPLETED.value:
            raise ValidationError(
                f"Cannot edit the {category} rubric of team #{team['number']} "
                f"before its judging session is completed",
                details={"sessionStatus": session["status"] if session else None}
            )

        key = {"divisionId": division_id, "teamId": team_id, "category": category}
        if crud.rubrics.get_rubric(self.store, key) is None:
            fields.setdefault("status", RubricStatus.EMPTY.value)

        result = crud.rubrics.update_rubric(self.store, key, fields)
        if not result.acknowledged:
            raise PersistenceError(f"Could not save {category} rubric for team {team_id}")

        rubric = crud.rubrics.get_rubric(self.store, key)
        self.notifier.emit(division_id, "rubricUpdated", team_id, rubric["_id"])
        logger.info(f"Rubric {category} of team {team_id} updated ({rubric['status']})")
        return rubric

    def delete(self, division_id: str, rubric_id: str) -> bool:
        result = crud.rubrics.delete_rubric(self.store, {"_id": rubric_id, "divisionId": division_id})
        if not result.acknowledged:
            raise PersistenceError(f"Could not delete rubric {rubric_id}")
        if not result.deleted_count:
            raise NotFoundError(f"Rubric {rubric_id} not found")
        return True

    def delete_all(self, division_id: str, team_id: str) -> int:
        if crud.teams.get_team(self.store, {"_id": team_id, "divisionId": division_id}) is None:
            raise NotFoundError(f"Team {team_id} not found")
        result = crud.rubrics.delete_team_rubrics(self.store, team_id)
        if not result.acknowledged:
            raise PersistenceError(f"Could not delete rubrics of team {team_id}")
        return result.deleted_count
