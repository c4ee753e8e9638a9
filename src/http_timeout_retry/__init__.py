"""Configurable retry-on-failure for HTTP requests made with requests."""

from http_timeout_retry.domain.config import AppConfig, RetryConfig, RetryLoggingConfig
from http_timeout_retry.domain.exceptions import ConfigurationError, HttpRetryError, LogChannelError
from http_timeout_retry.domain.models.retry_policy import LogLevel, RetryContext, RetryPolicy
from http_timeout_retry.domain.retry.predicates import compose_predicate
from http_timeout_retry.domain.retry.resolver import resolve_retry_policy
from http_timeout_retry.infrastructure.config.config_manager import ConfigManager
from http_timeout_retry.infrastructure.http_client import PendingRequest
from http_timeout_retry.infrastructure.log_channels import LogChannelRegistry, default_registry
from http_timeout_retry.infrastructure.retry import execute_with_retry

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "ConfigManager",
    "ConfigurationError",
    "HttpRetryError",
    "LogChannelError",
    "LogChannelRegistry",
    "LogLevel",
    "PendingRequest",
    "RetryConfig",
    "RetryContext",
    "RetryLoggingConfig",
    "RetryPolicy",
    "compose_predicate",
    "default_registry",
    "execute_with_retry",
    "resolve_retry_policy",
]
