"""Create, replace, and delete tenant configurations.

Every write path validates the sink descriptor first, and every replace
or delete releases the live sink bound to the old descriptor, so a stale
sink never keeps serving a previous destination.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from webhook_connector.core.config_store import InMemoryConfigStore
from webhook_connector.core.hasher import create_key_hash, generate_key
from webhook_connector.models.configuration import Configuration
from webhook_connector.models.sinks import validate_sink

if TYPE_CHECKING:
    from webhook_connector.routing.manager import SinkManager

logger = logging.getLogger(__name__)


class ConfigurationService:
    """Keeps the config store and the SinkManager consistent.

    Parameters
    ----------
    store:
        Where configurations live.
    manager:
        The SinkManager whose cached sinks must be released when a
        configuration changes.
    key_length:
        Length of generated webhook keys.
    """

    def __init__(
        self,
        store: InMemoryConfigStore,
        manager: SinkManager,
        *,
        key_length: int = 24,
    ) -> None:
        self._store = store
        self._manager = manager
        self._key_length = key_length

    @property
    def store(self) -> InMemoryConfigStore:
        return self._store

    def create(
        self,
        name: str,
        sink_type: str,
        parameters: Mapping[str, Any] | None,
        *,
        use_key: bool = False,
    ) -> tuple[Configuration, str | None]:
        """Validate and store a new configuration.

        Returns the identified configuration and, when ``use_key`` is
        set, the plaintext webhook key.  The key is not recoverable
        afterwards.

        Raises
        ------
        SinkValidationError
            If the sink descriptor is invalid.  Nothing is stored.
        """
        sink = validate_sink(sink_type, parameters)
        config = self._store.insert(
            Configuration(name=name, sink=sink, use_key=use_key)
        )

        key: str | None = None
        if use_key:
            # The hash is salted with the id, which only exists after insert
            key = generate_key(self._key_length)
            config = self._store.update(
                config.with_key_hash(create_key_hash(config.id, key))
            )
        return config, key

    def update(
        self,
        config_id: str,
        name: str,
        sink_type: str,
        parameters: Mapping[str, Any] | None,
        *,
        use_key: bool = False,
    ) -> tuple[Configuration, str | None]:
        """Replace a configuration and release its live sink.

        A new key is issued whenever ``use_key`` is set.

        Raises
        ------
        SinkValidationError
            If the new sink descriptor is invalid.  The stored record and
            the live sink are left untouched.
        ConfigNotFoundError
            If *config_id* is unknown.
        """
        sink = validate_sink(sink_type, parameters)
        existing = self._store.get(config_id)

        key: str | None = None
        key_hash = ""
        if use_key:
            key = generate_key(self._key_length)
            key_hash = create_key_hash(config_id, key)

        updated = self._store.update(
            existing.model_copy(
                update={
                    "name": name,
                    "sink": sink,
                    "use_key": use_key,
                    "key_hash": key_hash,
                }
            )
        )
        self._manager.release(config_id)
        return updated, key

    def delete(self, config_id: str) -> Configuration:
        """Delete a configuration and release its live sink.

        Raises
        ------
        ConfigNotFoundError
            If *config_id* is unknown.
        """
        deleted = self._store.delete(config_id)
        self._manager.release(config_id)
        return deleted
