"""
Administrative routes: event and division setup, roster import, schedule
generation (sync and via Celery) and data reset.
"""

from fastapi import APIRouter, Depends

from lems.models.schemas import (
    AwardsConfig, DivisionCreate, EventCreate, EventScheduleUpdate,
    GenerateScheduleRequest, RosterImport
)
from lems.core.errors import TaskQueueError
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore
from lems.services.event_setup import EventSetup
from lems.tasks.schedule_tasks import generate_division_schedule
from lems.api.deps import get_event_setup, get_store, require

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require("schedule:admin"))]
)


@router.get("/events")
async def list_events(store: DocumentStore = Depends(get_store)):
    """Every event with its divisions (schedules stripped)."""
    events = crud.events.get_events(store)
    for event in events:
        event["divisions"] = [
            {key: value for key, value in division.items() if key != "schedule"}
            for division in crud.events.get_event_divisions(store, event["_id"])
        ]
    return events


@router.post("/events")
async def create_event(body: EventCreate, setup: EventSetup = Depends(get_event_setup)):
    return {"ok": True, "event": setup.create_event(body.model_dump(by_alias=True))}


@router.post("/events/{event_id}/divisions")
async def create_division(event_id: str, body: DivisionCreate,
                          setup: EventSetup = Depends(get_event_setup)):
    return {"ok": True, "division": setup.create_division(event_id, body.model_dump(by_alias=True))}


@router.post("/divisions/{division_id}/roster")
async def import_roster(division_id: str, body: RosterImport,
                        setup: EventSetup = Depends(get_event_setup)):
    teams = [team.model_dump(by_alias=True) for team in body.teams]
    return {"ok": True, "imported": setup.import_roster(division_id, teams, body.rooms, body.tables)}


@router.put("/divisions/{division_id}/schedule")
async def update_schedule_blocks(division_id: str, body: EventScheduleUpdate,
                                 setup: EventSetup = Depends(get_event_setup)):
    entries = [entry.model_dump(by_alias=True) for entry in body.schedule]
    division = setup.update_schedule_blocks(division_id, entries)
    return {"ok": True, "schedule": division["schedule"]}


@router.post("/divisions/{division_id}/generate")
async def generate_schedule(division_id: str, body: GenerateScheduleRequest,
                            setup: EventSetup = Depends(get_event_setup)):
    """
    Generate and materialise the division's timetable.

    This endpoint:
    1. Loads the division's teams, rooms and tables
    2. Generates judging sessions and robot game matches
    3. Validates the timetable
    4. Writes sessions, matches, scoresheets, rubrics and the EventState
    """
    validation = setup.generate(division_id, body.to_settings())
    return {"ok": True, "validation": validation.get_summary()}


@router.post("/divisions/{division_id}/generate/async")
async def generate_schedule_async(division_id: str, body: GenerateScheduleRequest,
                                  setup: EventSetup = Depends(get_event_setup)):
    """
    Start async schedule generation task.

    Returns:
        dict: Task ID for polling status at /api/admin/tasks/{task_id}
    """
    setup.get_division(division_id)

    try:
        task = generate_division_schedule.delay(division_id, body.model_dump(mode="json"))
    except Exception as e:
        logger.error(f"Could not queue schedule generation: {e}")
        raise TaskQueueError(f"Failed to start task: {e}")

    return {
        "task_id": task.id,
        "status": "PENDING",
        "message": "Schedule generation started"
    }


@router.delete("/divisions/{division_id}/data")
async def reset_division_data(division_id: str, setup: EventSetup = Depends(get_event_setup)):
    return {"ok": True, "deleted": setup.reset_data(division_id)}


@router.put("/divisions/{division_id}/awards")
async def configure_awards(division_id: str, body: AwardsConfig,
                           setup: EventSetup = Depends(get_event_setup)):
    setup.get_division(division_id)
    awards = setup.configure_awards(division_id, [a.model_dump(by_alias=True) for a in body.awards])
    return {"ok": True, "awards": awards}
