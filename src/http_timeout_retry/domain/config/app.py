"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from http_timeout_retry.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Structural errors (unknown sections, wrong container types) fail fast at load time;
    individual retry values are coerced instead.

    Attributes:
        retry: Timeout retry configuration
    """

    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "retry": {
                    "enabled": True,
                    "attempts": 3,
                    "delay": 100,
                    "logging": {
                        "enabled": False,
                        "level": "info",
                        "channel": None,
                    },
                    "allowed_methods": ["GET", "HEAD"],
                },
            }
        },
    )
