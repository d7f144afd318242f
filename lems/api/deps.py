"""
Request dependencies shared by the routers.

The store and notifier live on ``app.state`` (see ``lems.main.create_app``).
The caller's identity arrives as an already-resolved user id in the
``X-User-Id`` header.
"""

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Header, Request

from lems.core.errors import (
    AuthenticationError, AuthorizationError, NotFoundError, PersistenceError
)
from lems.core.logging_config import get_logger
from lems.database import crud, DocumentStore
from lems.services.notifier import Notifier
from lems.services.policy import authorize, can_access_division
from lems.services.cv_forms import CVFormService
from lems.services.deliberations import DeliberationWorkflow
from lems.services.event_setup import EventSetup, initial_event_state
from lems.services.lifecycle import Lifecycle
from lems.services.rubrics import RubricWorkflow

logger = get_logger(__name__)

Document = Dict[str, Any]
ContextLoader = Callable[[Request, DocumentStore], Dict[str, Any]]


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def resolve_user(store: DocumentStore, user_id: Optional[str]) -> Document:
    if not user_id:
        raise AuthenticationError("Missing user identity")
    user = crud.users.get_user(store, {"_id": user_id})
    if user is None:
        raise AuthenticationError(f"Unknown user {user_id}")
    return crud.users.safe_user(user)


def current_user(
    x_user_id: Optional[str] = Header(default=None),
    store: DocumentStore = Depends(get_store)
) -> Document:
    return resolve_user(store, x_user_id)


def get_division(
    division_id: str,
    user: Document = Depends(current_user),
    store: DocumentStore = Depends(get_store)
) -> Document:
    """The division named in the path, after checking the user may see it."""
    division = crud.events.get_division(store, {"_id": division_id})
    if division is None:
        raise NotFoundError(f"Division {division_id} not found")
    decision = can_access_division(user, division_id)
    if not decision.allowed:
        raise AuthorizationError(decision.reason)
    return division


def get_division_state(
    division: Document = Depends(get_division),
    store: DocumentStore = Depends(get_store)
) -> Document:
    state = crud.events.get_event_state(store, {"divisionId": division["_id"]})
    return state or initial_event_state(division["_id"])


def require(*capabilities: str, context: Optional[ContextLoader] = None):
    """
    Dependency factory: the current user must hold every capability.

    Args:
        capabilities: Capability names (see ``lems.services.policy``)
        context: Optional loader returning the room/table/category the
            request touches, for role-association checks
    """
    def dependency(
        request: Request,
        user: Document = Depends(current_user),
        store: DocumentStore = Depends(get_store)
    ) -> Document:
        request_context = context(request, store) if context else None
        decision = authorize(user, capabilities, request_context)
        if not decision.allowed:
            logger.info(f"Denied {', '.join(capabilities)} to user {user.get('_id')}: {decision.reason}")
            raise AuthorizationError(decision.reason)
        return user

    return dependency


def session_context(request: Request, store: DocumentStore) -> Dict[str, Any]:
    session = crud.sessions.get_session(store, {
        "_id": request.path_params.get("session_id"),
        "divisionId": request.path_params.get("division_id")
    })
    return {"room": session["roomId"]} if session else {}


def match_context(request: Request, store: DocumentStore) -> Dict[str, Any]:
    """A referee may act on a match only if their table plays in it."""
    match = crud.matches.get_match(store, {
        "_id": request.path_params.get("match_id"),
        "divisionId": request.path_params.get("division_id")
    })
    if not match:
        return {}
    return {"table": [p["tableId"] for p in match.get("participants", [])]}


def scoresheet_context(request: Request, store: DocumentStore) -> Dict[str, Any]:
    scoresheet = crud.scoresheets.get_scoresheet(store, {
        "_id": request.path_params.get("scoresheet_id"),
        "divisionId": request.path_params.get("division_id")
    })
    return {"table": scoresheet.get("tableId")} if scoresheet else {}


def category_context(request: Request, store: DocumentStore) -> Dict[str, Any]:
    category = request.path_params.get("category")
    if category is None and request.path_params.get("rubric_id"):
        rubric = crud.rubrics.get_rubric(store, {"_id": request.path_params["rubric_id"]})
        category = rubric["category"] if rubric else None
    return {"category": category} if category else {}


def get_lifecycle(
    store: DocumentStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier)
) -> Lifecycle:
    return Lifecycle(store, notifier)


def get_rubric_workflow(
    store: DocumentStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier)
) -> RubricWorkflow:
    return RubricWorkflow(store, notifier)


def get_cv_forms(
    store: DocumentStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier)
) -> CVFormService:
    return CVFormService(store, notifier)


def get_deliberations(
    store: DocumentStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier)
) -> DeliberationWorkflow:
    return DeliberationWorkflow(store, notifier)


def get_event_setup(
    store: DocumentStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier)
) -> EventSetup:
    return EventSetup(store, notifier)


def save_event_state(store: DocumentStore, state: Document) -> Document:
    """Persist the EventState returned by a lifecycle transition."""
    fields = {key: value for key, value in state.items() if key not in ("_id", "divisionId")}
    result = crud.events.update_event_state(store, {"divisionId": state["divisionId"]}, fields)
    if not result.acknowledged:
        raise PersistenceError(f"Could not save event state of division {state['divisionId']}")
    return state
