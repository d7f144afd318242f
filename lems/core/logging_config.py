"""
Logging setup shared by the API server, the Celery worker and the scripts.
"""

import logging
import sys
from typing import Dict, Optional, TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that drown out tournament events at INFO
QUIET_LOGGERS: Dict[str, int] = {
    "uvicorn.access": logging.WARNING,
    "pymongo": logging.WARNING,
    "kombu": logging.WARNING,
    "redis": logging.WARNING,
    "celery": logging.INFO,
}

_HANDLER_NAME = "lems-console"


def setup_logging(log_level=logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Install a single console handler on the root logger.

    Calling it again (uvicorn reload, worker restarts) replaces the handler
    instead of stacking a second one.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        if handler.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console_handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, log_level))

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass ``__name__``."""
    return logging.getLogger(name)
