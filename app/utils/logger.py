# app/utils/logger.py
"""
Logging setup shared by every module.
Console always; a rotating inventory log file unless LOG_TO_FILE is off.
Service messages carry a bracketed tag ([ZONES], [CAPACITY], [SWEEP], ...)
so one lot's history can be grepped out of the file.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs"
)

# Third-party loggers that drown out inventory messages at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "httpx", "urllib3")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)
    root.addHandler(console)

    if settings.LOG_TO_FILE:
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=os.path.join(LOG_DIR, "inventory.log"),
            maxBytes=settings.LOG_FILE_MAX_MB * 1024 * 1024,
            backupCount=settings.LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setLevel(LOG_LEVEL)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures the root logger on first use."""
    _configure_root_logger()
    return logging.getLogger(name)
