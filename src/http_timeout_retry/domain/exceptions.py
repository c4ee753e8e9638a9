"""Exceptions raised by http_timeout_retry itself.

Transport and application failures raised while executing a request are never
wrapped: the caller always receives the original ``requests`` exception.
"""


class HttpRetryError(Exception):
    """Base class for library errors."""

    pass


class ConfigurationError(HttpRetryError):
    """Configuration validation error."""

    pass


class LogChannelError(HttpRetryError):
    """Named log channel could not be resolved."""

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"Log channel [{channel}] is not defined")
