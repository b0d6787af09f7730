"""IngestionDispatcher — turns one webhook request into one sink write.

Order of checks is fixed: configuration lookup, then webhook key, then
payload syntax, then sink acquisition, then the write.  A wrong key is
rejected before the body is even parsed.

An update or delete can retire the sink while a request holds it.  After
acquiring, the dispatcher re-reads the configuration and starts over when
the descriptor changed; a write that lands on a closed sink is retried on
a freshly acquired one.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from webhook_connector.core.hasher import check_key
from webhook_connector.errors import (
    AuthError,
    ConfigNotFoundError,
    ConstructionError,
    MalformedPayloadError,
    SinkClosedError,
    WriteError,
)
from webhook_connector.models.configuration import Configuration
from webhook_connector.models.events import (
    EventMetadata,
    IngestResult,
    IngestStatus,
    RejectionReason,
    WebhookEvent,
)
from webhook_connector.routing.manager import SinkManager

logger = logging.getLogger(__name__)

# Attempts per request when the sink is retired or replaced mid-flight
_MAX_ATTEMPTS = 3


class ConfigSource(Protocol):
    """Read side of the configuration store."""

    def get(self, config_id: str) -> Configuration:
        """Return the configuration or raise ``ConfigNotFoundError``."""
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_payload(raw_payload: bytes) -> str:
    """Return *raw_payload* as text if it is well-formed JSON.

    Syntax only: the document is not checked against any schema.

    Raises
    ------
    MalformedPayloadError
        If the body is not UTF-8 or not valid JSON.
    """
    try:
        text = raw_payload.decode("utf-8")
        json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedPayloadError("Request body is not valid JSON") from exc
    return text


def authorize(config: Configuration, credential: str | None) -> None:
    """Check the caller's webhook key against the stored hash.

    Raises
    ------
    AuthError
        If the configuration requires a key and *credential* does not
        match.
    """
    if config.use_key and not check_key(config.id, credential, config.key_hash):
        raise AuthError("Unauthorized. Invalid webhook key.")


class IngestionDispatcher:
    """Routes a webhook payload to its configuration's sink.

    Parameters
    ----------
    store:
        Resolves configuration ids.  Must only return configurations
        whose sink descriptors were validated when stored.
    manager:
        Owns the sinks.
    clock:
        Source of receipt and load timestamps.
    """

    def __init__(
        self,
        store: ConfigSource,
        manager: SinkManager,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._manager = manager
        self._clock = clock

    def handle(
        self,
        config_id: str,
        raw_payload: bytes,
        credential: str | None = None,
    ) -> IngestResult:
        """Ingest one payload for *config_id*.

        Never raises for expected failures; every rejection comes back
        as an ``IngestResult`` with a machine-readable reason.
        """
        received_at = self._clock()

        try:
            config = self._store.get(config_id)
        except ConfigNotFoundError as exc:
            return IngestResult.reject(
                IngestStatus.NOT_FOUND, RejectionReason.NOT_FOUND, str(exc)
            )

        try:
            authorize(config, credential)
        except AuthError as exc:
            logger.info("Rejected webhook for %s: invalid key", config_id)
            return IngestResult.reject(
                IngestStatus.UNAUTHORIZED, RejectionReason.AUTH_ERROR, str(exc)
            )

        try:
            payload = parse_payload(raw_payload)
        except MalformedPayloadError as exc:
            return IngestResult.reject(
                IngestStatus.BAD_REQUEST, RejectionReason.MALFORMED_PAYLOAD, str(exc)
            )

        last_error: WriteError | None = None
        for _ in range(_MAX_ATTEMPTS):
            try:
                sink = self._manager.acquire(config.id, config.sink)
            except ConstructionError as exc:
                logger.warning("Failed to get sink for config %s: %s", config.id, exc)
                return IngestResult.reject(
                    IngestStatus.BAD_REQUEST,
                    RejectionReason.CONSTRUCTION_ERROR,
                    f"Failed to get sink for config {config.id}: {exc}",
                )

            # The configuration may have been replaced or deleted while the
            # sink was being acquired
            try:
                current = self._store.get(config_id)
            except ConfigNotFoundError as exc:
                self._manager.release(config_id)
                return IngestResult.reject(
                    IngestStatus.NOT_FOUND, RejectionReason.NOT_FOUND, str(exc)
                )
            if current.sink != config.sink:
                logger.info("Sink for %s changed during ingestion, reacquiring", config_id)
                config = current
                continue
            config = current

            event = WebhookEvent(
                event=payload,
                metadata=EventMetadata(
                    received_at=received_at,
                    loaded_at=self._clock(),
                    source_id=config.id,
                    source_name=config.name,
                ),
            )

            # One event per request; there is no in-process buffering
            try:
                sink.write_rows([event])
            except SinkClosedError as exc:
                logger.info("Sink %s was retired before the write, reacquiring", sink.sink_name)
                last_error = exc
                continue
            except WriteError as exc:
                logger.warning("Failed to write rows to %s: %s", sink.sink_name, exc)
                return IngestResult.reject(
                    IngestStatus.BAD_REQUEST,
                    RejectionReason.WRITE_ERROR,
                    f"Failed to write rows to sink: {exc}",
                )

            logger.debug("Accepted webhook for %s via %s", config.id, sink.sink_name)
            return IngestResult.ok()

        detail = str(last_error) if last_error is not None else "configuration kept changing"
        logger.warning("Gave up writing for %s after %d attempts", config_id, _MAX_ATTEMPTS)
        return IngestResult.reject(
            IngestStatus.BAD_REQUEST,
            RejectionReason.WRITE_ERROR,
            f"Failed to write rows to sink: {detail}",
        )
