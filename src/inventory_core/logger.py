import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import settings


LOG_FILE_NAME = "inventory.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def setup_logger(
    name: str | None = None,
    log_level: int | str = settings.LOG_LEVEL,
    log_dir: Path | None = None,
) -> logging.Logger:
    """
    Attach console and rotating-file output to a logger.

    Module loggers (`logging.getLogger(__name__)`) propagate here, so the
    dashboard only sets up the two package loggers. Calling it again for
    the same name changes the level and leaves the handlers alone.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    if logger.handlers:
        return logger

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter("%(message)s"))

    log_dir = Path(log_dir or settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    logfile.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    for handler in (console, logfile):
        handler.setLevel(log_level)
        logger.addHandler(handler)
    return logger
