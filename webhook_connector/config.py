"""Runtime configuration — env-driven settings for the connector service.

Reads from a .env file and WEBHOOK_CONNECTOR_* environment variables.
Core classes never read these settings directly; the CLI and the HTTP
app pass the relevant values into constructors.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConnectorSettings(BaseSettings):
    """Service configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export WEBHOOK_CONNECTOR_LOG_LEVEL=DEBUG
        export WEBHOOK_CONNECTOR_PORT=9000
        export WEBHOOK_CONNECTOR_WRITE_TIMEOUT_SECONDS=5

    Or via .env file::

        WEBHOOK_CONNECTOR_ENVIRONMENT=production
        WEBHOOK_CONNECTOR_TRACE_ID=webhook-connector-eu
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WEBHOOK_CONNECTOR_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    # Streaming sinks
    trace_id: str = "webhook-connector"  # identifies this client to BigQuery
    write_timeout_seconds: float | None = 30.0

    # Webhook keys
    key_length: int = 24

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level instance: import as `from webhook_connector.config import settings`
settings = ConnectorSettings()
