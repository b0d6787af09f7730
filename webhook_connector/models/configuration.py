"""Tenant configuration records."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from webhook_connector.models.sinks import SinkDescriptor


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Configuration(BaseModel):
    """A tenant's identity, sink descriptor, and webhook key settings.

    An empty ``id`` marks an unidentified configuration: one that has not
    been stored yet and cannot be used for ingestion.  Once stored, the id
    is stable and doubles as the SinkManager cache key.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    sink: SinkDescriptor
    use_key: bool = False
    key_hash: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_identified(self) -> bool:
        return self.id != ""

    def with_id(self, config_id: str) -> Configuration:
        return self.model_copy(update={"id": config_id})

    def with_key_hash(self, key_hash: str) -> Configuration:
        return self.model_copy(update={"key_hash": key_hash})
