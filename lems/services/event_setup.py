"""
Event setup: events, divisions, rosters and schedule materialisation.

A division is set up in three steps. The admin creates it, imports its roster
(teams, judging rooms, robot game tables) and generates the timetable. The
timetable is then materialised into session, match, scoresheet and rubric
documents together with the division's EventState, after which the division
``hasState`` and its schedule can no longer be regenerated until a data reset.
"""

from typing import Any, Dict, List, Optional

from lems.models import (
    DivisionSchedule, MatchStage, RubricIndicator, ScheduleSettings,
    ScheduleValidationResult, ScoresheetStatus, Status
)
from lems.core.config import DEFAULT_AWARDS, CATEGORY_INDICATOR_FIELDS
from lems.core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore, WriteResult
from lems.services.deliberations import DeliberationWorkflow
from lems.services.notifier import Notifier
from lems.services.rubrics import RubricWorkflow
from lems.services.scheduler import ScheduleGenerator
from lems.services.validator import ScheduleValidator

logger = get_logger(__name__)

Document = Dict[str, Any]


def _ensure_written(result: WriteResult, what: str):
    if not result.acknowledged:
        raise PersistenceError(f"Store did not acknowledge {what}")


def initial_event_state(division_id: str) -> Document:
    return {
        "divisionId": division_id,
        "activeMatch": None,
        "loadedMatch": None,
        "currentStage": MatchStage.PRACTICE.value,
        "currentRound": 1,
        "currentSession": 0,
        "completed": False
    }


class EventSetup:
    """Administrative setup operations for events and divisions."""

    def __init__(self, store: DocumentStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier
        self.rubrics = RubricWorkflow(store, notifier)
        self.deliberations = DeliberationWorkflow(store, notifier)

    def get_division(self, division_id: str) -> Document:
        division = crud.events.get_division(self.store, {"_id": division_id})
        if division is None:
            raise NotFoundError(f"Division {division_id} not found")
        return division

    def create_event(self, event: Document) -> Document:
        """
        Create an event. Events that do not enable divisions get a single
        division carrying the event's name and color.
        """
        result = crud.events.add_event(self.store, event)
        _ensure_written(result, f"creation of event '{event['name']}'")
        event = {"_id": result.inserted_id, **event}
        logger.info(f"Created event {event['_id']} ({event['name']})")

        event["divisions"] = []
        if not event.get("enableDivisions"):
            event["divisions"].append(self.create_division(
                event["_id"], {"name": event["name"], "color": event.get("color", "")}
            ))
        return event

    def create_division(self, event_id: str, division: Document) -> Document:
        if crud.events.get_event(self.store, {"_id": event_id}) is None:
            raise NotFoundError(f"Event {event_id} not found")

        division = {**division, "eventId": event_id, "schedule": [], "hasState": False}
        result = crud.events.add_division(self.store, division)
        _ensure_written(result, f"creation of division '{division['name']}'")
        division = {"_id": result.inserted_id, **division}

        self.configure_awards(division["_id"], [
            {"name": name, "places": places} for name, places in DEFAULT_AWARDS
        ])
        logger.info(f"Created division {division['_id']} in event {event_id}")
        return division

    def import_roster(self, division_id: str, teams: List[Document],
                      rooms: List[str], tables: List[str]) -> Dict[str, int]:
        """
        Add teams, judging rooms and robot game tables to a division.

        Raises:
            ConflictError: once the schedule has been materialised
            ValidationError: on duplicate team numbers
        """
        division = self.get_division(division_id)
        if division.get("hasState"):
            raise ConflictError(f"Division {division_id} is already running; reset its data first")

        existing = {t["number"] for t in crud.teams.get_division_teams(self.store, division_id)}
        numbers = [t["number"] for t in teams]
        duplicates = sorted({n for n in numbers if numbers.count(n) > 1 or n in existing})
        if duplicates:
            raise ValidationError("Duplicate team numbers", details={"numbers": duplicates})

        team_docs = [
            {
                "divisionId": division_id,
                "number": team["number"],
                "name": team["name"],
                "affiliation": team.get("affiliation", {"name": "", "institution": "", "city": ""}),
                "registered": team.get("registered", False)
            }
            for team in teams
        ]
        _ensure_written(crud.teams.add_teams(self.store, team_docs), "team import")
        _ensure_written(crud.rooms.add_rooms(
            self.store, [{"divisionId": division_id, "name": name} for name in rooms]
        ), "room import")
        _ensure_written(crud.tables.add_tables(
            self.store, [{"divisionId": division_id, "name": name} for name in tables]
        ), "table import")

        logger.info(
            f"Imported {len(team_docs)} teams, {len(rooms)} rooms, "
            f"{len(tables)} tables into division {division_id}"
        )
        return {"teams": len(team_docs), "rooms": len(rooms), "tables": len(tables)}

    def update_schedule_blocks(self, division_id: str, entries: List[Document]) -> Document:
        """Replace the division's general schedule (opening, lunch, ceremonies...)."""
        self.get_division(division_id)
        for entry in entries:
            if entry["endTime"] <= entry["startTime"]:
                raise ValidationError(f"Schedule block '{entry['name']}' ends before it starts")
        entries = sorted(entries, key=lambda e: e["startTime"])
        _ensure_written(
            crud.events.update_division(self.store, {"_id": division_id}, {"schedule": entries}),
            "schedule update"
        )
        return self.get_division(division_id)

    def configure_awards(self, division_id: str, awards: List[Document]) -> List[Document]:
        """Replace the award list. Each award expands to one document per place."""
        _ensure_written(crud.awards.delete_division_awards(self.store, division_id), "award reset")
        documents = [
            {"divisionId": division_id, "name": award["name"], "index": index,
             "place": place, "winner": None}
            for index, award in enumerate(awards)
            for place in range(1, award.get("places", 1) + 1)
        ]
        if documents:
            _ensure_written(crud.awards.add_awards(self.store, documents), "award creation")
        return crud.awards.get_division_awards(self.store, division_id)

    def generate(self, division_id: str, settings: ScheduleSettings,
                 progress=None) -> ScheduleValidationResult:
        """
        Generate, validate and materialise the division's timetable.

        Args:
            division_id: Division to schedule
            settings: Generation settings
            progress: Optional callable receiving a status message per step

        Raises:
            ConflictError: the division already has a materialised schedule
            SchedulingInfeasibleError: the teams do not fit
        """
        def report(message: str):
            logger.info(message)
            if progress:
                progress(message)

        division = self.get_division(division_id)
        if division.get("hasState"):
            raise ConflictError(f"Division {division_id} already has a schedule")

        teams = crud.teams.get_division_teams(self.store, division_id)
        rooms = crud.rooms.get_division_rooms(self.store, division_id)
        tables = crud.tables.get_division_tables(self.store, division_id)
        if not teams:
            raise ValidationError(f"Division {division_id} has no teams")

        report(f"Generating schedule for {len(teams)} teams...")
        schedule = ScheduleGenerator(teams, rooms, tables, settings).generate_schedule()

        report("Validating schedule...")
        validation = ScheduleValidator().validate_schedule(
            schedule, team_ids=[t["_id"] for t in teams], breaks=settings.breaks
        )
        if not validation.is_valid:
            raise ValidationError(
                "Generated schedule violates hard constraints",
                details=validation.get_summary()
            )

        report("Saving schedule...")
        self.materialise(division_id, schedule, teams)
        report(f"Schedule ready: {len(schedule.sessions)} sessions, {len(schedule.matches)} matches")
        return validation

    def materialise(self, division_id: str, schedule: DivisionSchedule,
                    teams: Optional[List[Document]] = None) -> Dict[str, int]:
        """Write the timetable as sessions, matches, scoresheets, rubrics, deliberations and the EventState."""
        division = self.get_division(division_id)
        if division.get("hasState"):
            raise ConflictError(f"Division {division_id} already has a schedule")
        if teams is None:
            teams = crud.teams.get_division_teams(self.store, division_id)

        sessions = [
            {
                "divisionId": division_id,
                "number": slot.number,
                "roomId": slot.room_id,
                "teamId": slot.team_id,
                "status": Status.NOT_STARTED.value,
                "scheduledTime": slot.start,
                **{field: RubricIndicator.EMPTY.value for field in CATEGORY_INDICATOR_FIELDS.values()}
            }
            for slot in schedule.sessions
        ]
        _ensure_written(crud.sessions.add_sessions(self.store, sessions), "session creation")

        matches = [
            {
                "divisionId": division_id,
                "number": slot.number,
                "stage": slot.stage.value,
                "round": slot.round,
                "status": Status.NOT_STARTED.value,
                "scheduledTime": slot.start,
                "participants": [
                    {"tableId": seat.table_id, "teamId": seat.team_id, "present": False, "ready": False}
                    for seat in slot.participants
                ]
            }
            for slot in schedule.matches
        ]
        result = crud.matches.add_matches(self.store, matches)
        _ensure_written(result, "match creation")

        scoresheets = [
            {
                "divisionId": division_id,
                "teamId": seat["teamId"],
                "matchId": match_id,
                "tableId": seat["tableId"],
                "stage": match["stage"],
                "round": match["round"],
                "status": ScoresheetStatus.EMPTY.value,
                "escalated": False,
                "data": None
            }
            for match_id, match in zip(result.inserted_ids, matches)
            for seat in match["participants"]
            if seat["teamId"]
        ]
        if scoresheets:
            _ensure_written(crud.scoresheets.add_scoresheets(self.store, scoresheets), "scoresheet creation")

        rubric_count = self.rubrics.create_for_teams(division_id, teams)
        deliberation_count = self.deliberations.create_for_division(division_id)

        _ensure_written(
            crud.events.update_event_state(self.store, {"divisionId": division_id},
                                           initial_event_state(division_id)),
            "event state creation"
        )
        _ensure_written(
            crud.events.update_division(self.store, {"_id": division_id}, {"hasState": True}),
            "division update"
        )

        counts = {
            "sessions": len(sessions),
            "matches": len(matches),
            "scoresheets": len(scoresheets),
            "rubrics": rubric_count,
            "deliberations": deliberation_count
        }
        logger.info(f"Materialised schedule for division {division_id}: {counts}")
        return counts

    def reset_data(self, division_id: str) -> Dict[str, int]:
        """Delete everything the division accumulated and clear ``hasState``."""
        self.get_division(division_id)
        deleted = {
            "teams": crud.teams.delete_division_teams(self.store, division_id).deleted_count,
            "rooms": crud.rooms.delete_division_rooms(self.store, division_id).deleted_count,
            "tables": crud.tables.delete_division_tables(self.store, division_id).deleted_count,
            "sessions": crud.sessions.delete_division_sessions(self.store, division_id).deleted_count,
            "matches": crud.matches.delete_division_matches(self.store, division_id).deleted_count,
            "scoresheets": crud.scoresheets.delete_division_scoresheets(self.store, division_id).deleted_count,
            "rubrics": crud.rubrics.delete_division_rubrics(self.store, division_id).deleted_count,
            "tickets": crud.tickets.delete_division_tickets(self.store, division_id).deleted_count,
            "cvForms": crud.cv_forms.delete_division_cv_forms(self.store, division_id).deleted_count,
            "deliberations": crud.deliberations.delete_division_deliberations(self.store, division_id).deleted_count,
        }
        crud.events.delete_event_state(self.store, {"divisionId": division_id})
        _ensure_written(
            crud.awards.update_awards(self.store, {"divisionId": division_id}, {"winner": None}),
            "award reset"
        )
        _ensure_written(
            crud.events.update_division(self.store, {"_id": division_id}, {"hasState": False}),
            "division update"
        )
        logger.warning(f"Reset data of division {division_id}: {deleted}")
        return deleted
