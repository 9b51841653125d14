from __future__ import annotations

import logging
import logging.handlers
import os
from typing import Optional

from . import config


def configure_logging(
    log_file: Optional[str] = config.LOG_FILE, level: str = config.LOG_LEVEL
) -> logging.Logger:
    """Route the package's log records to a rotating file.

    The live dashboard owns the terminal, so there is no console handler.
    Without a log file, records are dropped.
    """
    package_logger = logging.getLogger("latency_monitor")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    if log_file:
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            os.path.expanduser(log_file),
            maxBytes=config.LOG_MAX_BYTES,
            backupCount=config.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s %(name)s | %(message)s",
                datefmt=config.LOG_TIME_FORMAT,
            )
        )
    else:
        handler = logging.NullHandler()

    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return package_logger
