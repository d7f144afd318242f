"""
Judging session and robot game match lifecycle.

    not-started -> in-progress -> completed
                               -> aborted

Terminal states are final; only the administrative reset returns an entity to
not-started. Each transition is written with a single key-qualified upsert and
announced with exactly one notifier event. Match transitions (and session
start) take the division's EventState and return the updated copy; persisting
it is up to the caller.
"""

import copy
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from lems.models import RubricIndicator, Status, TERMINAL_STATUSES
from lems.core.config import CATEGORY_INDICATOR_FIELDS, JUDGING_SESSION_STAGES
from lems.core.errors import (
    ConflictError, InvalidTransitionError, NotFoundError,
    PersistenceError, ValidationError
)
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore, WriteResult, utcnow
from lems.services.notifier import Notifier

logger = get_logger(__name__)

Document = Dict[str, Any]

ALLOWED_TRANSITIONS: Dict[Status, List[Status]] = {
    Status.NOT_STARTED: [Status.IN_PROGRESS],
    Status.IN_PROGRESS: [Status.COMPLETED, Status.ABORTED],
    Status.COMPLETED: [],
    Status.ABORTED: [],
}

INDICATOR_FIELDS = list(CATEGORY_INDICATOR_FIELDS.values())


def check_transition(kind: str, entity: Document, target: Status):
    current = Status(entity["status"])
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot move {kind} {entity['_id']} from {current.value} to {target.value}",
            details={"status": current.value, "requested": target.value}
        )


def _ensure_written(result: WriteResult, what: str):
    if not result.acknowledged:
        raise PersistenceError(f"Store did not acknowledge update of {what}")


def session_timer(session: Document, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Where a running judging session is on its stage clock.

    Returns:
        Dict with the current stage name, when it ends, and when the session ends.
        ``stage`` is None once every stage has elapsed.
    """
    if session.get("status") != Status.IN_PROGRESS.value or not session.get("startTime"):
        raise ValidationError(f"Session {session.get('_id')} is not running")

    now = now or utcnow()
    stage_end = session["startTime"]
    current = None
    current_end = None
    for name, seconds in JUDGING_SESSION_STAGES:
        stage_end = stage_end + timedelta(seconds=seconds)
        if current is None and now < stage_end:
            current, current_end = name, stage_end

    return {
        "stage": current,
        "stageEndTime": current_end,
        "endTime": stage_end,
        "remaining": max(0, int((stage_end - now).total_seconds()))
    }


class Lifecycle:
    """Status transitions for sessions and matches of any division."""

    def __init__(self, store: DocumentStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    # -- sessions -----------------------------------------------------------

    def get_session(self, division_id: str, session_id: str) -> Document:
        session = crud.sessions.get_session(self.store, {"_id": session_id, "divisionId": division_id})
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def _write_session(self, session: Document, fields: Document, event_name: str) -> Document:
        result = crud.sessions.update_session(
            self.store, {"_id": session["_id"], "divisionId": session["divisionId"]},
            fields, upsert=True
        )
        _ensure_written(result, f"session {session['_id']}")
        session.update(fields)
        self.notifier.emit(session["divisionId"], event_name, session["_id"], session["status"])
        logger.info(f"Session {session['_id']} -> {session['status']} ({event_name})")
        return session

    def start_session(self, division_id: str, session_id: str,
                      state: Document) -> Tuple[Document, Document]:
        session = self.get_session(division_id, session_id)
        check_transition("session", session, Status.IN_PROGRESS)

        team_id = session.get("teamId")
        if not team_id:
            raise ValidationError(f"Session {session_id} has no team assigned")
        team = crud.teams.get_team(self.store, {"_id": team_id, "divisionId": division_id})
        if team is None:
            raise ValidationError(f"Team {team_id} is not part of division {division_id}")
        if not team.get("registered"):
            raise ValidationError(f"Team #{team['number']} has not registered yet")

        session = self._write_session(
            session, {"status": Status.IN_PROGRESS.value, "startTime": utcnow()}, "sessionStarted"
        )
        state = copy.deepcopy(state)
        state["currentSession"] = session["number"]
        return session, state

    def complete_session(self, division_id: str, session_id: str) -> Document:
        session = self.get_session(division_id, session_id)
        check_transition("session", session, Status.COMPLETED)

        incomplete = [
            field for field in INDICATOR_FIELDS
            if session.get(field) != RubricIndicator.COMPLETED.value
        ]
        if incomplete:
            raise ValidationError(
                f"Session {session_id} still has incomplete rubrics",
                details={"incomplete": incomplete}
            )
        return self._write_session(session, {"status": Status.COMPLETED.value}, "sessionCompleted")

    def abort_session(self, division_id: str, session_id: str, reason: str) -> Document:
        session = self.get_session(division_id, session_id)
        check_transition("session", session, Status.ABORTED)
        return self._write_session(
            session, {"status": Status.ABORTED.value, "abortReason": reason}, "sessionAborted"
        )

    def reset_session(self, division_id: str, session_id: str) -> Document:
        """Administrative override: back to not-started from any state."""
        session = self.get_session(division_id, session_id)
        return self._write_session(
            session,
            {"status": Status.NOT_STARTED.value, "startTime": None, "abortReason": None},
            "sessionUpdated"
        )

    def update_session_indicators(self, division_id: str, session_id: str,
                                  indicators: Dict[str, str]) -> Document:
        session = self.get_session(division_id, session_id)
        if Status(session["status"]) in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Session {session_id} is {session['status']}; rubric indicators are frozen"
            )

        fields = {}
        for field, value in indicators.items():
            if field not in INDICATOR_FIELDS:
                raise ValidationError(f"Unknown rubric indicator: {field}")
            fields[field] = RubricIndicator(value).value
        if not fields:
            raise ValidationError("No rubric indicators to update")

        return self._write_session(session, fields, "sessionUpdated")

    # -- matches ------------------------------------------------------------

    def get_match(self, division_id: str, match_id: str) -> Document:
        match = crud.matches.get_match(self.store, {"_id": match_id, "divisionId": division_id})
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return match

    def _write_match(self, match: Document, fields: Document, event_name: str) -> Document:
        result = crud.matches.update_match(
            self.store, {"_id": match["_id"], "divisionId": match["divisionId"]},
            fields, upsert=True
        )
        _ensure_written(result, f"match {match['_id']}")
        match.update(fields)
        self.notifier.emit(match["divisionId"], event_name, match["_id"], match["status"])
        logger.info(f"Match {match['_id']} -> {match['status']} ({event_name})")
        return match

    def start_match(self, division_id: str, match_id: str,
                    state: Document) -> Tuple[Document, Document]:
        match = self.get_match(division_id, match_id)
        check_transition("match", match, Status.IN_PROGRESS)

        active = state.get("activeMatch")
        if active and active != match_id:
            raise ConflictError(f"Match {active} is still running", details={"activeMatch": active})

        match = self._write_match(
            match, {"status": Status.IN_PROGRESS.value, "startTime": utcnow()}, "matchStarted"
        )
        state = copy.deepcopy(state)
        state["activeMatch"] = match_id
        if state.get("loadedMatch") == match_id:
            state["loadedMatch"] = None
        state["currentStage"] = match["stage"]
        state["currentRound"] = match["round"]
        return match, state

    def complete_match(self, division_id: str, match_id: str,
                       state: Document) -> Tuple[Document, Document]:
        match = self.get_match(division_id, match_id)
        check_transition("match", match, Status.COMPLETED)
        match = self._write_match(match, {"status": Status.COMPLETED.value}, "matchCompleted")
        return match, self._release(state, match_id)

    def abort_match(self, division_id: str, match_id: str, reason: str,
                    state: Document) -> Tuple[Document, Document]:
        match = self.get_match(division_id, match_id)
        check_transition("match", match, Status.ABORTED)
        match = self._write_match(
            match, {"status": Status.ABORTED.value, "abortReason": reason}, "matchAborted"
        )
        return match, self._release(state, match_id)

    def reset_match(self, division_id: str, match_id: str,
                    state: Document) -> Tuple[Document, Document]:
        """Administrative override: back to not-started from any state."""
        match = self.get_match(division_id, match_id)
        match = self._write_match(
            match,
            {"status": Status.NOT_STARTED.value, "startTime": None, "abortReason": None},
            "matchUpdated"
        )
        return match, self._release(state, match_id)

    @staticmethod
    def _release(state: Document, match_id: str) -> Document:
        state = copy.deepcopy(state)
        if state.get("activeMatch") == match_id:
            state["activeMatch"] = None
        return state

    def update_match_participants(self, division_id: str, match_id: str,
                                  updates: List[Dict[str, Any]]) -> Document:
        """
        Change who plays at which table, or their present/ready flags.

        Only allowed before the match starts. Each update addresses a table
        already in the match; ``None`` values leave the field unchanged except
        for ``teamId``, where an explicit None empties the seat.
        """
        match = self.get_match(division_id, match_id)
        if match["status"] != Status.NOT_STARTED.value:
            raise InvalidTransitionError(
                f"Match {match_id} is {match['status']}; participants can only change before it starts"
            )

        participants = copy.deepcopy(match.get("participants", []))
        seats = {p["tableId"]: p for p in participants}
        for update in updates:
            seat = seats.get(update["tableId"])
            if seat is None:
                raise ValidationError(f"Table {update['tableId']} does not play in match {match_id}")
            if "teamId" in update:
                team_id = update["teamId"]
                if team_id is not None and crud.teams.get_team(
                        self.store, {"_id": team_id, "divisionId": division_id}) is None:
                    raise ValidationError(f"Team {team_id} is not part of division {division_id}")
                seat["teamId"] = team_id
            for flag in ("present", "ready"):
                if update.get(flag) is not None:
                    seat[flag] = update[flag]

        seated = [p["teamId"] for p in participants if p.get("teamId")]
        if len(seated) != len(set(seated)):
            raise ValidationError(f"A team cannot play at two tables in match {match_id}")

        return self._write_match(match, {"participants": participants}, "matchUpdated")
