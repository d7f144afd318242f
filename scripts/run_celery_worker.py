"""
Start a Celery worker that consumes the schedule generation queue.

    python scripts/run_celery_worker.py [concurrency]
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lems.core.celery_app import SCHEDULING_QUEUE, celery_app
from lems.core.config import REDIS_URL


def main(argv):
    concurrency = argv[1] if len(argv) > 1 else "2"

    print("=" * 60)
    print("LEMS - Schedule Generation Worker")
    print("=" * 60)
    print(f"Broker:      {REDIS_URL}")
    print(f"Queues:      {SCHEDULING_QUEUE}, celery")
    print(f"Concurrency: {concurrency}")
    print("=" * 60)

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        f"--queues={SCHEDULING_QUEUE},celery",
        f"--concurrency={concurrency}",
        # prefork is unavailable on Windows
        "--pool=solo" if os.name == "nt" else "--pool=prefork"
    ])


if __name__ == "__main__":
    main(sys.argv)
