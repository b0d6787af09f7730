"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from webhook_connector.models.configuration import Configuration
from webhook_connector.models.sinks import SinkDescriptor


class SinkRequest(BaseModel):
    """Unvalidated sink section of a configuration request.

    Parameters are checked by ``validate_sink`` so the error names the
    offending field.  ``config`` is accepted as an alias of
    ``parameters``; a null or missing value is reported by ``validate_sink``.
    """

    type: str
    parameters: dict[str, Any] | None = Field(
        default_factory=dict,
        validation_alias=AliasChoices("parameters", "config"),
    )


class ConfigurationRequest(BaseModel):
    """Body of ``POST /configurations`` and ``PUT /configurations/{id}``."""

    name: str = ""
    use_key: bool = False
    sink: SinkRequest


class ConfigurationResponse(BaseModel):
    """A configuration as returned to clients.

    ``key`` is only present in the response that issued it.  The stored
    hash is never returned.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    use_key: bool
    key: str | None = None
    sink: SinkDescriptor
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_config(
        cls, config: Configuration, key: str | None = None
    ) -> ConfigurationResponse:
        return cls(
            id=config.id,
            name=config.name,
            use_key=config.use_key,
            key=key,
            sink=config.sink,
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class ErrorResponse(BaseModel):
    error: str
    reason: str = ""
