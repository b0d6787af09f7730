"""Error taxonomy for the connector.

Every failure the ingestion path can report maps to exactly one of these
classes.  The dispatcher translates them into machine-readable rejection
reasons.  Only ``SinkClosedError`` is retried, on a freshly acquired sink.
"""

from __future__ import annotations


class ConnectorError(RuntimeError):
    """Base class for all connector errors."""


class SinkValidationError(ConnectorError, ValueError):
    """Raised when a sink descriptor's type or parameters are invalid.

    Only raised while creating or replacing a configuration, never
    during ingestion.
    """


class ConstructionError(ConnectorError):
    """Raised when a sink cannot be built for a configuration."""


class WriteError(ConnectorError):
    """Raised when a sink fails to hand rows to its destination."""


class SinkClosedError(WriteError):
    """Raised when rows are written to a sink that was already closed.

    The sink was retired by a configuration change; the caller can
    acquire a fresh one and write again.
    """


class CloseError(ConnectorError):
    """Raised when a sink fails to release its resources."""


class AuthError(ConnectorError):
    """Raised when a webhook key does not match the stored hash."""


class MalformedPayloadError(ConnectorError, ValueError):
    """Raised when a request body is not well-formed JSON."""


class ConfigNotFoundError(ConnectorError, KeyError):
    """Raised when a configuration id is unknown to the store."""

    def __init__(self, config_id: str) -> None:
        super().__init__(f"Configuration with id {config_id} not found.")
        self.config_id = config_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])
