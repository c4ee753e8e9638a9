"""Retry policy model - the resolved retry parameters for one decorated request"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Optional

MIN_ATTEMPTS = 0
MAX_ATTEMPTS = 100
MIN_DELAY_MS = 10

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY_MS = 100

WILDCARD_METHOD = "*"


class LogLevel(str, Enum):
    """Severity used for retry log records"""

    EMERGENCY = "emergency"
    ALERT = "alert"
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"
    INFO = "info"
    DEBUG = "debug"

    @classmethod
    def coerce(cls, value: Any) -> "LogLevel":
        """Return the matching level, or INFO for anything unrecognised"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.INFO

    def to_logging_level(self) -> int:
        """Map onto the stdlib logging levels"""
        return _STDLIB_LEVELS[self]


_STDLIB_LEVELS = {
    LogLevel.EMERGENCY: logging.CRITICAL,
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.NOTICE: logging.INFO,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def clamp_attempts(value: int) -> int:
    return max(MIN_ATTEMPTS, min(MAX_ATTEMPTS, int(value)))


def clamp_delay(value: int) -> int:
    return max(MIN_DELAY_MS, int(value))


def normalize_methods(methods: Any) -> FrozenSet[str]:
    """Uppercase and strip HTTP verbs, dropping empty entries

    Accepts a comma-separated string or a collection; any other value yields
    an empty set.
    """
    if not methods:
        return frozenset()
    if isinstance(methods, str):
        methods = methods.split(",")
    elif not isinstance(methods, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(str(m).strip().upper() for m in methods if str(m).strip())


@dataclass(frozen=True)
class RetryPolicy:
    """Effective retry parameters for one call to ``with_timeout_retry``

    Attributes:
        attempts: Total number of executions (0 and 1 both mean a single try)
        delay: Fixed pause between attempts, in milliseconds
        logging_enabled: Whether retry decisions are logged
        log_level: Level of retry log records
        log_channel: Named log channel (None = default sink)
        allowed_methods: Uppercase verbs eligible for retry (empty = all)
    """

    attempts: int = DEFAULT_ATTEMPTS
    delay: int = DEFAULT_DELAY_MS
    logging_enabled: bool = False
    log_level: LogLevel = LogLevel.INFO
    log_channel: Optional[str] = None
    allowed_methods: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # frozen: go through object.__setattr__
        object.__setattr__(self, "attempts", clamp_attempts(self.attempts))
        object.__setattr__(self, "delay", clamp_delay(self.delay))
        object.__setattr__(self, "log_level", LogLevel.coerce(self.log_level))
        object.__setattr__(self, "allowed_methods", normalize_methods(self.allowed_methods))

    @property
    def delay_seconds(self) -> float:
        return self.delay / 1000.0

    @property
    def allows_all_methods(self) -> bool:
        """True when the allow-list is empty or contains the wildcard"""
        return not self.allowed_methods or WILDCARD_METHOD in self.allowed_methods

    def allows(self, method: str) -> bool:
        if self.allows_all_methods:
            return True
        return (method or "").upper() in self.allowed_methods


@dataclass
class RetryContext:
    """Per-request mutable state shared by the capture hook and the logging layer"""

    attempt_counter: int = 0
    captured_method: str = ""
    captured_url: str = ""

    def capture(self, request: Any) -> None:
        """Record the method and URL of an outgoing (prepared) request"""
        self.captured_method = (request.method or "").upper()
        self.captured_url = str(request.url or "")
