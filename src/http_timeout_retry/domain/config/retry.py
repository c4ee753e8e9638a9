"""Retry configuration model.

Unlike the rest of the configuration, retry settings never fail validation:
out-of-range or unparseable values are coerced to the nearest valid value so a
bad environment variable cannot take the HTTP layer down.
"""

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from http_timeout_retry.domain.models.retry_policy import (
    DEFAULT_ATTEMPTS,
    DEFAULT_DELAY_MS,
    MAX_ATTEMPTS,
    LogLevel,
    clamp_attempts,
    clamp_delay,
    normalize_methods,
)

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    logger.debug(f"Invalid boolean retry setting {value!r}, using {default}")
    return default


def _coerce_int(value: Any, default: int, upper: Optional[int] = None) -> int:
    """Parse an integer setting; infinities map to the nearest bound

    Args:
        value: Raw setting
        default: Value used when the setting cannot be parsed
        upper: Value used for positive infinity (default: ``default``)
    """
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except OverflowError:
        if value > 0:
            bound = default if upper is None else upper
        else:
            # below every lower bound, the caller clamps it
            bound = -1
        logger.debug(f"Infinite integer retry setting {value!r}, using {bound}")
        return bound
    except (TypeError, ValueError):
        logger.debug(f"Invalid integer retry setting {value!r}, using {default}")
        return default


class RetryLoggingConfig(BaseModel):
    """Configuration for retry attempt logging.

    Attributes:
        enabled: Whether each retry decision is logged
        level: Log level (emergency..debug, invalid values fall back to info)
        channel: Named log channel (None = default logger)
    """

    enabled: bool = False
    level: LogLevel = LogLevel.INFO
    channel: Optional[str] = None

    @field_validator("enabled", mode="before")
    @classmethod
    def _enabled(cls, value: Any) -> bool:
        return _coerce_bool(value, False)

    @field_validator("level", mode="before")
    @classmethod
    def _level(cls, value: Any) -> LogLevel:
        return LogLevel.coerce(value)

    @field_validator("channel", mode="before")
    @classmethod
    def _channel(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class RetryConfig(BaseModel):
    """Global configuration for timeout retries.

    Attributes:
        enabled: Master switch; when off ``with_timeout_retry`` is a no-op
        attempts: Total attempts, clamped to [0, 100]
        delay: Delay between attempts in milliseconds, at least 10
        logging: Retry logging configuration
        allowed_methods: HTTP verbs eligible for retry (empty or "*" = all)
    """

    enabled: bool = True
    attempts: int = Field(DEFAULT_ATTEMPTS)
    delay: int = Field(DEFAULT_DELAY_MS)
    logging: RetryLoggingConfig = Field(default_factory=RetryLoggingConfig)
    allowed_methods: List[str] = Field(default_factory=list)

    @field_validator("enabled", mode="before")
    @classmethod
    def _enabled(cls, value: Any) -> bool:
        return _coerce_bool(value, True)

    @field_validator("attempts", mode="before")
    @classmethod
    def _attempts(cls, value: Any) -> int:
        return clamp_attempts(_coerce_int(value, DEFAULT_ATTEMPTS, upper=MAX_ATTEMPTS))

    @field_validator("delay", mode="before")
    @classmethod
    def _delay(cls, value: Any) -> int:
        return clamp_delay(_coerce_int(value, DEFAULT_DELAY_MS))

    @field_validator("logging", mode="before")
    @classmethod
    def _logging(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("allowed_methods", mode="before")
    @classmethod
    def _allowed_methods(cls, value: Any) -> List[str]:
        if value and not isinstance(value, (str, list, tuple, set, frozenset)):
            logger.debug(f"Invalid allowed_methods retry setting {value!r}, using []")
            return []
        return sorted(normalize_methods(value))
