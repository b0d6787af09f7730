"""In-memory configuration store.

Holds identified configurations keyed by id.  Records are frozen pydantic
models, so readers can hold on to what ``get`` returns without copying.
Nothing survives a process restart.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone

from webhook_connector.errors import ConfigNotFoundError
from webhook_connector.models.configuration import Configuration

logger = logging.getLogger(__name__)


class InMemoryConfigStore:
    """Thread-safe id -> Configuration mapping."""

    def __init__(self) -> None:
        self._records: dict[str, Configuration] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def insert(self, config: Configuration) -> Configuration:
        """Assign an id to an unidentified configuration and store it."""
        if config.is_identified:
            raise ValueError(f"Configuration {config.id} is already identified")

        now = datetime.now(timezone.utc)
        stored = config.model_copy(
            update={"id": uuid.uuid4().hex, "created_at": now, "updated_at": now}
        )
        with self._lock:
            self._records[stored.id] = stored
        logger.info("Stored configuration %s (%s)", stored.id, stored.name)
        return stored

    def get(self, config_id: str) -> Configuration:
        with self._lock:
            try:
                return self._records[config_id]
            except KeyError:
                raise ConfigNotFoundError(config_id) from None

    def list(self) -> list[Configuration]:
        """Return all configurations, oldest first."""
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda c: c.created_at)

    def update(self, config: Configuration) -> Configuration:
        """Replace an existing record, keeping its ``created_at``."""
        with self._lock:
            existing = self._records.get(config.id)
            if existing is None:
                raise ConfigNotFoundError(config.id)
            stored = config.model_copy(
                update={
                    "created_at": existing.created_at,
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            self._records[config.id] = stored
        logger.info("Updated configuration %s", config.id)
        return stored

    def delete(self, config_id: str) -> Configuration:
        """Remove and return a record."""
        with self._lock:
            try:
                deleted = self._records.pop(config_id)
            except KeyError:
                raise ConfigNotFoundError(config_id) from None
        logger.info("Deleted configuration %s", config_id)
        return deleted
