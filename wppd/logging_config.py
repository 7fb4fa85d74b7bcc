"""Logging setup.

Everything logs through the standard library. Console output is always on;
with ``log_directory`` set, daily-rotating files are added for the whole
application, for errors only, and for the scheduler and its tasks.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from wppd.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SCHEDULER_LOGGERS = ("wppd.scheduler", "wppd.tasks")
RETENTION_DAYS = 7


def _file_handler(path: Path, level: int) -> TimedRotatingFileHandler:
    handler = TimedRotatingFileHandler(
        path, when="midnight", backupCount=RETENTION_DAYS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.api_log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if not settings.log_directory:
        return

    directory = Path(settings.log_directory)
    directory.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.addHandler(_file_handler(directory / "app.log", logging.INFO))
    root.addHandler(_file_handler(directory / "error.log", logging.ERROR))

    scheduler_handler = _file_handler(directory / "scheduler.log", level)
    for name in SCHEDULER_LOGGERS:
        logging.getLogger(name).addHandler(scheduler_handler)
