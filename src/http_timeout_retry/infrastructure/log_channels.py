"""Named log channels and the retry log emitter.

A channel is a name mapped to a ``logging.Logger``. Applications register the
channels they want retry records routed to; an unknown channel falls back to
the default retry logger rather than dropping the record.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from http_timeout_retry.domain.exceptions import LogChannelError
from http_timeout_retry.domain.models.retry_policy import LogLevel

logger = logging.getLogger(__name__)

DEFAULT_RETRY_LOGGER = "http_timeout_retry.retry"


class LogChannelRegistry:
    """Registry of named log channels"""

    def __init__(self):
        self._channels: Dict[str, logging.Logger] = {}
        self._lock = threading.Lock()

    def register(self, name: str, channel_logger: Optional[logging.Logger] = None) -> logging.Logger:
        """Register a channel

        Args:
            name: Channel name used in configuration
            channel_logger: Logger to route to (default: logger named after the channel)

        Returns:
            The registered logger
        """
        if channel_logger is None:
            channel_logger = logging.getLogger(name)
        with self._lock:
            self._channels[name] = channel_logger
        return channel_logger

    def unregister(self, name: str) -> None:
        with self._lock:
            self._channels.pop(name, None)

    def clear(self) -> None:
        with self._lock:
            self._channels.clear()

    def channel(self, name: str) -> logging.Logger:
        """Resolve a channel by name

        Raises:
            LogChannelError: If the channel is not registered
        """
        with self._lock:
            try:
                return self._channels[name]
            except KeyError:
                raise LogChannelError(name) from None

    def __contains__(self, name: str) -> bool:
        return name in self._channels


default_registry = LogChannelRegistry()


class RetryLogEmitter:
    """Write one structured record per retry decision"""

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        channel: Optional[str] = None,
        registry: Optional[LogChannelRegistry] = None,
        default_logger: Optional[logging.Logger] = None,
    ):
        self.level = LogLevel.coerce(level)
        self.channel = channel
        self.registry = registry if registry is not None else default_registry
        self.default_logger = default_logger or logging.getLogger(DEFAULT_RETRY_LOGGER)

    def _resolve_logger(self) -> logging.Logger:
        if not self.channel:
            return self.default_logger
        try:
            return self.registry.channel(self.channel)
        except LogChannelError as e:
            logger.debug(f"{e}, falling back to {self.default_logger.name}")
            return self.default_logger

    def emit(
        self,
        failure: BaseException,
        attempt: int,
        total_attempts: int,
        url: str = "",
        method: str = "",
    ) -> None:
        context = {
            "attempt": attempt,
            "total_attempts": total_attempts,
            "exception_class": f"{type(failure).__module__}.{type(failure).__qualname__}",
            "exception_message": str(failure),
            "request_url": url,
            "request_method": method,
        }
        message = (
            f"HTTP {method or 'UNKNOWN'} request retry attempt {attempt}/{total_attempts} "
            f"failed for URL {url or 'unknown'}: {failure}"
        )

        level = self.level.to_logging_level()
        target = self._resolve_logger()
        try:
            target.log(level, message, extra=context)
        except Exception as e:
            # Emission errors never reach the retry loop
            if target is self.default_logger:
                logger.debug(f"Failed to write retry log record: {e}")
                return
            try:
                self.default_logger.log(level, message, extra=context)
            except Exception as fallback_error:
                logger.debug(f"Failed to write retry log record: {fallback_error}")
