"""
Top-level API routes: health, the current user and background task status.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends
from celery.result import AsyncResult

from lems import __version__
from lems.core.celery_app import celery_app
from lems.core.logging_config import get_logger
from lems.api.deps import current_user, require

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["system"])

TASK_MESSAGES = {
    "PENDING": "Task is waiting to start...",
    "STARTED": "Task started",
    "RETRY": "Task is being retried",
    "REVOKED": "Task was cancelled",
}


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__, "timestamp": datetime.now().isoformat()}


@router.get("/me")
async def get_me(user: dict = Depends(current_user)):
    return user


@router.get("/admin/tasks/{task_id}")
async def get_task_status(task_id: str, user: dict = Depends(require("schedule:admin"))) -> Dict[str, Any]:
    """
    Poll a schedule generation task started by ``POST .../generate/async``.

    SUCCESS carries the task's return value; note that a generation that
    failed inside the task still finishes as SUCCESS with ``success: false``.
    """
    task_result = AsyncResult(task_id, app=celery_app)
    state = task_result.state
    response: Dict[str, Any] = {"task_id": task_id, "status": state}

    if state == "PROGRESS":
        response["message"] = (task_result.info or {}).get("status", "Processing...")
    elif state == "SUCCESS":
        response["result"] = task_result.result
    elif state == "FAILURE":
        logger.error(f"Task {task_id} crashed: {task_result.info}")
        response["message"] = str(task_result.info)
    else:
        response["message"] = TASK_MESSAGES.get(state, f"Task state: {state}")
    return response
