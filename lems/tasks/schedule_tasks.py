"""
Celery tasks for schedule generation.
"""

from datetime import datetime
import traceback

from lems.models.schemas import GenerateScheduleRequest
from lems.core.celery_app import celery_app
from lems.core.logging_config import get_logger
from lems.database import create_store
from lems.services.event_setup import EventSetup
from lems.services.notifier import Notifier

logger = get_logger(__name__)


@celery_app.task(bind=True, name="generate_division_schedule")
def generate_division_schedule(self, division_id: str, settings: dict):
    """
    Async task to generate and materialise a division's timetable.

    Args:
        division_id: Division to schedule
        settings: GenerateScheduleRequest fields (JSON)

    Returns:
        dict: Outcome with the validation summary
    """
    store = create_store()
    try:
        self.update_state(
            state="PROGRESS",
            meta={"status": "Loading division..."}
        )
        start_time = datetime.now()

        request = GenerateScheduleRequest.model_validate(settings)
        setup = EventSetup(store, Notifier())
        validation = setup.generate(
            division_id,
            request.to_settings(),
            progress=lambda message: self.update_state(state="PROGRESS", meta={"status": message})
        )

        generation_time = (datetime.now() - start_time).total_seconds()
        return {
            "success": True,
            "message": "Schedule generated successfully",
            "division_id": division_id,
            "validation": validation.get_summary(),
            "generation_time": generation_time
        }

    except Exception as e:
        error_trace = traceback.format_exc()
        logger.error(f"Error in generate_division_schedule: {error_trace}")

        return {
            "success": False,
            "message": f"Schedule generation failed: {str(e)}",
            "error": str(e),
            "traceback": error_trace
        }
    finally:
        store.close()
