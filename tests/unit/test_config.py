"""Tests for env-driven connector settings."""

from __future__ import annotations

from webhook_connector.config import ConnectorSettings


class TestConnectorSettings:
    def test_defaults(self):
        config = ConnectorSettings()
        assert config.environment == "development"
        assert config.log_level == "INFO"
        assert config.trace_id == "webhook-connector"
        assert config.write_timeout_seconds == 30.0
        assert config.key_length == 24

    def test_is_production(self):
        assert ConnectorSettings().is_production is False
        assert ConnectorSettings(environment="production").is_production is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("WEBHOOK_CONNECTOR_PORT", "9000")
        monkeypatch.setenv("WEBHOOK_CONNECTOR_TRACE_ID", "wc-eu")
        config = ConnectorSettings()
        assert config.port == 9000
        assert config.trace_id == "wc-eu"
