"""Configuration models with Pydantic validation."""

from http_timeout_retry.domain.config.app import AppConfig
from http_timeout_retry.domain.config.retry import RetryConfig, RetryLoggingConfig

__all__ = [
    "AppConfig",
    "RetryConfig",
    "RetryLoggingConfig",
]
