"""Ingested events and ingestion outcomes."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventMetadata(BaseModel):
    """Timing and source information stamped on every ingested event."""

    model_config = ConfigDict(frozen=True)

    received_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    loaded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    source_id: str = ""
    source_name: str = ""


class WebhookEvent(BaseModel):
    """One webhook payload plus its metadata.

    ``event`` holds the raw request body as text.  It has already been
    checked to be well-formed JSON, but is kept verbatim rather than
    re-serialized so the destination sees exactly what the caller sent.
    """

    model_config = ConfigDict(frozen=True)

    event: str
    metadata: EventMetadata = Field(default_factory=EventMetadata)


class IngestStatus(str, Enum):
    """Caller-facing outcome class of an ingestion request."""

    ACCEPTED = "accepted"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    BAD_REQUEST = "bad_request"


class RejectionReason(str, Enum):
    """Machine-readable reason attached to every ingestion outcome."""

    ACCEPTED = "accepted"
    NOT_FOUND = "not_found"
    AUTH_ERROR = "auth_error"
    MALFORMED_PAYLOAD = "malformed_payload"
    CONSTRUCTION_ERROR = "construction_error"
    WRITE_ERROR = "write_error"


class IngestResult(BaseModel):
    """The outcome of ``IngestionDispatcher.handle``.

    ``detail`` carries human-readable text, including any destination
    error message.  Its wording is not stable across versions; match on
    ``status`` and ``reason`` instead.
    """

    model_config = ConfigDict(frozen=True)

    status: IngestStatus
    reason: RejectionReason
    detail: str = ""

    @property
    def accepted(self) -> bool:
        return self.status is IngestStatus.ACCEPTED

    @classmethod
    def ok(cls) -> IngestResult:
        return cls(
            status=IngestStatus.ACCEPTED,
            reason=RejectionReason.ACCEPTED,
            detail="Received",
        )

    @classmethod
    def reject(
        cls, status: IngestStatus, reason: RejectionReason, detail: str
    ) -> IngestResult:
        return cls(status=status, reason=reason, detail=detail)
