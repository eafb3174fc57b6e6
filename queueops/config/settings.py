"""
Pydantic Settings Models for queue operations configuration
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueueSettings(BaseSettings):
    """Queue references used by the redrive engine"""

    aws_region: str = Field(..., min_length=1, description="Region of both queues")
    dlq_url: str = Field(..., min_length=1, description="Dead-letter queue to drain")
    source_queue_url: str = Field(
        ..., min_length=1, description="Main queue the DLQ messages are redriven to"
    )
    endpoint_url: Optional[str] = Field(
        default=None,
        validation_alias="AWS_ENDPOINT_URL",
        description="Custom queue service endpoint (LocalStack)",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    @field_validator("aws_region", "dlq_url", "source_queue_url")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        """Whitespace-only values count as missing"""
        v = v.strip()
        if not v:
            raise ValueError("value must be non-empty")
        return v


class RedriveSettings(BaseSettings):
    """Redrive loop tuning parameters"""

    batch_size: int = Field(default=10, ge=1, le=10, description="Messages per receive")
    visibility_timeout_seconds: int = Field(
        default=30,
        ge=1,
        le=43200,
        description="Must exceed the send+delete round-trip of one batch",
    )
    wait_time_seconds: int = Field(
        default=5, ge=0, le=20, description="Receive wait for messages to become available"
    )
    max_batch_payload_bytes: int = Field(
        default=262_144,
        ge=1024,
        le=1_048_576,
        description="Payload limit of one batched send; larger batches are split",
    )

    model_config = SettingsConfigDict(env_prefix="REDRIVE_", extra="ignore")


class ConsumerSettings(BaseSettings):
    """Batch consumer configuration"""

    failure_marker: str = Field(
        default="fail", min_length=1, description="Bodies containing this are rejected"
    )

    model_config = SettingsConfigDict(env_prefix="CONSUMER_", extra="ignore")


class ObservabilitySettings(BaseSettings):
    """Logging, metrics and tracing configuration"""

    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_format: str = Field(default="json", pattern="^(json|console)$")
    metrics_port: int = Field(default=9090, ge=1024, le=65535)
    enable_tracing: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="QUEUEOPS_", extra="ignore")


class AppSettings(BaseSettings):
    """Complete redrive configuration"""

    queues: QueueSettings = Field(default_factory=QueueSettings)
    redrive: RedriveSettings = Field(default_factory=RedriveSettings)
    consumer: ConsumerSettings = Field(default_factory=ConsumerSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(env_prefix="QUEUEOPS_", extra="ignore")
