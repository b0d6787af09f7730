"""Webhook connector data models — all Pydantic v2, all frozen (immutable)."""

from webhook_connector.models.configuration import Configuration
from webhook_connector.models.events import (
    EventMetadata,
    IngestResult,
    IngestStatus,
    RejectionReason,
    WebhookEvent,
)
from webhook_connector.models.sinks import (
    SUPPORTED_SINK_TYPES,
    FileSinkDescriptor,
    FileSinkParameters,
    SinkDescriptor,
    TableSinkDescriptor,
    TableSinkParameters,
    sink_descriptor_adapter,
    validate_sink,
)

__all__ = [
    # sinks
    "SUPPORTED_SINK_TYPES",
    "FileSinkDescriptor",
    "FileSinkParameters",
    "SinkDescriptor",
    "TableSinkDescriptor",
    "TableSinkParameters",
    "sink_descriptor_adapter",
    "validate_sink",
    # configuration
    "Configuration",
    # events
    "EventMetadata",
    "IngestResult",
    "IngestStatus",
    "RejectionReason",
    "WebhookEvent",
]
