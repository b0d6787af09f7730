"""Webhook Connector: forwards webhook events to per-configuration sinks.

Sinks:
  - ``file``: append-only JSON-Lines file (testing)
  - ``table``: BigQuery streaming insert via the Storage Write API

The SinkManager builds one sink per configuration on first use, reuses it
for every later event, and closes it when the configuration changes.
"""

__version__ = "0.2.0"

from webhook_connector.models.sinks import validate_sink
from webhook_connector.routing.dispatcher import IngestionDispatcher
from webhook_connector.routing.manager import SinkManager
from webhook_connector.routing.sinks.factory import SinkFactory

__all__ = [
    "IngestionDispatcher",
    "SinkFactory",
    "SinkManager",
    "validate_sink",
    "__version__",
]
