"""
Celery application for background work (schedule generation).

Broker and result backend both use ``REDIS_URL``. Generation tasks go to
their own queue so a long run never delays other work.
"""

from celery import Celery

from lems.core.config import REDIS_URL

SCHEDULING_QUEUE = "scheduling"

celery_app = Celery(
    "lems",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["lems.tasks.schedule_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=24 * 60 * 60,
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,
    task_soft_time_limit=270,
    task_routes={"generate_division_schedule": {"queue": SCHEDULING_QUEUE}},
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
)
