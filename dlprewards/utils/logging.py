"""Rotating events log for tranche releases and penalty withdrawals."""

import os
import json
import logging
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

EVENTS_LEVEL_NUM = 38
EVENTS_LOGGER_NAME = "event"
EVENTS_FILENAME = "reward_events.log"
DEFAULT_LOG_BACKUP_COUNT = 10


def _event(self, message, *args, **kws):
    if self.isEnabledFor(EVENTS_LEVEL_NUM):
        self._log(EVENTS_LEVEL_NUM, message, args, **kws)


def setup_events_logger(full_path, events_retention_size):
    """
    Attach a rotating ``reward_events.log`` handler under ``full_path``.

    Calling it again for the same directory returns the configured logger
    without adding a second handler.
    """
    logging.addLevelName(EVENTS_LEVEL_NUM, "EVENT")
    logging.Logger.event = _event

    logger = logging.getLogger(EVENTS_LOGGER_NAME)
    logger.setLevel(EVENTS_LEVEL_NUM)

    os.makedirs(full_path, exist_ok=True)
    log_path = os.path.abspath(os.path.join(full_path, EVENTS_FILENAME))
    if any(getattr(h, "baseFilename", None) == log_path for h in logger.handlers):
        return logger

    handler = RotatingFileHandler(
        log_path,
        maxBytes=events_retention_size,
        backupCount=DEFAULT_LOG_BACKUP_COUNT,
    )
    handler.setLevel(EVENTS_LEVEL_NUM)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger


def log_reward_event(logger, name: str, payload: Dict[str, Any]) -> None:
    """Write one JSON line: ``{"event": name, **payload}``."""
    logger.event(json.dumps({"event": name, **payload}, sort_keys=True))
