"""
Services for scheduling, validation, lifecycle, rubrics and real-time events.
"""

from .scheduler import ScheduleGenerator, schedule_from_documents
from .validator import ScheduleValidator
from .notifier import Notifier, Subscription, EVENT_CHANNELS
from .lifecycle import Lifecycle, session_timer
from .rubrics import RubricWorkflow
from .policy import Decision, authorize, can_access_division
from .event_setup import EventSetup, initial_event_state
from .cv_forms import CVFormService, validate_cv_form

__all__ = [
    "ScheduleGenerator",
    "schedule_from_documents",
    "ScheduleValidator",
    "Notifier",
    "Subscription",
    "EVENT_CHANNELS",
    "Lifecycle",
    "session_timer",
    "RubricWorkflow",
    "Decision",
    "authorize",
    "can_access_division",
    "EventSetup",
    "initial_event_state",
    "CVFormService",
    "validate_cv_form"
]
