"""Root logger setup.

One stdout handler with a ``timestamp | level | logger | message`` line
format.  Modules log snake_case event names and put context in ``extra``.
"""

import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Libraries that log every request or tick at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "apscheduler", "uvicorn.access")


def setup_logging(level: str | None = None) -> None:
    """Install the stdout handler on the root logger.

    *level* defaults to ``settings.LOG_LEVEL``.  Calling this again replaces
    the handler instead of adding a second one.
    """
    level_name = (level or settings.LOG_LEVEL).upper()

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
