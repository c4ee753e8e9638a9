"""Resolve the effective retry policy from call-site overrides and global settings"""

from __future__ import annotations

from typing import Iterable, Optional

from http_timeout_retry.domain.config.retry import RetryConfig
from http_timeout_retry.domain.models.retry_policy import RetryPolicy


def resolve_retry_policy(
    settings: Optional[RetryConfig] = None,
    attempts: Optional[int] = None,
    delay: Optional[int] = None,
    logging_enabled: Optional[bool] = None,
    allowed_methods: Optional[Iterable[str]] = None,
) -> RetryPolicy:
    """Combine per-call overrides with the global retry configuration.

    Precedence is: explicit argument > settings > built-in default (the
    defaults live on ``RetryConfig``). Out-of-range values from either layer
    are clamped by ``RetryPolicy``, so resolution never fails.

    Args:
        settings: Global retry configuration snapshot (defaults if None)
        attempts: Total attempts override
        delay: Delay override in milliseconds
        logging_enabled: Retry logging override
        allowed_methods: HTTP method allow-list override (empty or "*" = all)

    Returns:
        Immutable RetryPolicy
    """
    if settings is None:
        settings = RetryConfig()

    return RetryPolicy(
        attempts=attempts if attempts is not None else settings.attempts,
        delay=delay if delay is not None else settings.delay,
        logging_enabled=logging_enabled if logging_enabled is not None else settings.logging.enabled,
        log_level=settings.logging.level,
        log_channel=settings.logging.channel,
        allowed_methods=allowed_methods if allowed_methods is not None else settings.allowed_methods,
    )
