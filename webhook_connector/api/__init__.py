"""HTTP surface of the connector: configuration CRUD and the ingest endpoint."""

from webhook_connector.api.app import create_app

__all__ = ["create_app"]
