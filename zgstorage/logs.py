"""Logger options and a progress reminder for long-running operations."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass
class LogOption:
    """Either a logger to use, or the level for a new one."""

    log_level: int = logging.CRITICAL
    logger: Optional[logging.Logger] = None


def new_logger(option: Optional[LogOption] = None) -> logging.Logger:
    """Return the option's logger, a new logger at its level, or a silent logger."""
    if option is None:
        logger = logging.Logger("zgstorage")
        logger.addHandler(logging.NullHandler())
        return logger
    if option.logger is not None:
        return option.logger
    logger = logging.Logger("zgstorage", option.log_level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    return logger


def _format(message: str, fields: Optional[Mapping[str, Any]]) -> str:
    if not fields:
        return message
    return message + " " + " ".join(f"{key}={value}" for key, value in fields.items())


class Reminder:
    """Logs progress messages, escalating to a warning once per interval."""

    def __init__(self, logger: Optional[logging.Logger] = None, interval: float = 60.0):
        self._logger = logger if logger is not None else new_logger()
        self._interval = interval
        self._start = time.monotonic()

    def remind_with(self, message: str, key: str, value: Any) -> None:
        self.remind(message, {key: value})

    def remind(self, message: str, fields: Optional[Mapping[str, Any]] = None) -> None:
        """Log a message at the logger's level, or as a warning once the interval has passed."""
        if time.monotonic() - self._start > self._interval:
            self._logger.log(logging.WARNING, _format(message, fields))
            self._start = time.monotonic()
        else:
            self._logger.log(self._logger.getEffectiveLevel(), _format(message, fields))