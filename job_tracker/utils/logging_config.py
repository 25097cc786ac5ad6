"""Rotating file + console logging setup."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_dir: str = "logs", level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Send ``job_tracker.*`` records to logs/job_tracker.log and stdout.

    Safe to call again (e.g. after reloading config): existing handlers are
    closed and replaced.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("job_tracker")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # 5MB per file, 3 backups
    file_handler = RotatingFileHandler(
        log_path / "job_tracker.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler(sys.stdout)
    for handler in (file_handler, console_handler):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # SQLAlchemy engine chatter stays out of tracker logs unless debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return logger
