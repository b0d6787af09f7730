"""SinkManager — owns every live sink, keyed by configuration id.

Sinks are built lazily on first use, reused for every later event on the
same configuration, and closed when the configuration changes or the
process shuts down.

Locking
-------
``_lock`` guards the id -> entry mapping and the per-id lock table.  A
per-id lock is held across check-construct-register and across
remove-close, so concurrent first use of one configuration builds exactly
one sink, and ``release`` waits for a construction already under way
instead of letting it register afterwards.  First use of other
configurations proceeds in parallel.

A per-id lock lives in the table only while its id has a cached sink or
a construction in flight; ``release`` and failed constructions drop it.
A thread that waited on a dropped lock notices and starts over with a
new one.

Each entry remembers the descriptor it was built from.  ``acquire`` with
a different descriptor retires the cached sink and builds a new one, so
a changed configuration never keeps writing to its old destination.
Sinks serialize their own ``write_rows`` and ``close`` calls, so closing
waits for an in-flight write; a write that arrives after the close gets
``SinkClosedError``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from webhook_connector.errors import CloseError
from webhook_connector.models.sinks import SinkDescriptor
from webhook_connector.routing.sinks import BaseSink
from webhook_connector.routing.sinks.factory import SinkFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleasedSink:
    """A sink removed from the manager, and the outcome of closing it."""

    config_id: str
    sink: BaseSink
    error: CloseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class _Entry:
    sink: BaseSink
    descriptor: SinkDescriptor


class SinkManager:
    """Lazily creates, caches, and retires per-configuration sinks.

    Usage
    -----
    >>> manager = SinkManager(SinkFactory())
    >>> sink = manager.acquire(config.id, config.sink)
    >>> sink.write_rows([event])
    >>> manager.release(config.id)   # on update / delete
    >>> manager.shutdown()           # on process exit
    """

    def __init__(self, factory: SinkFactory | None = None) -> None:
        self._factory = factory or SinkFactory()
        self._entries: dict[str, _Entry] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> SinkManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, config_id: object) -> bool:
        with self._lock:
            return config_id in self._entries

    @property
    def active_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    @property
    def pending_locks(self) -> int:
        """Number of per-id locks currently held in the lock table."""
        with self._lock:
            return len(self._key_locks)

    def get(self, config_id: str) -> BaseSink | None:
        """Return the live sink for *config_id* without creating one."""
        with self._lock:
            entry = self._entries.get(config_id)
        return entry.sink if entry is not None else None

    def descriptor_for(self, config_id: str) -> SinkDescriptor | None:
        """Return the descriptor the live sink for *config_id* was built from."""
        with self._lock:
            entry = self._entries.get(config_id)
        return entry.descriptor if entry is not None else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def acquire(self, config_id: str, descriptor: SinkDescriptor) -> BaseSink:
        """Return the sink for *config_id*, building it on first use.

        A cached sink built from an equal descriptor is returned
        unchanged.  A cached sink built from a different descriptor is
        closed and replaced.

        Raises
        ------
        ValueError
            If *config_id* is empty (unidentified configuration).
        ConstructionError
            If the sink cannot be built.  Nothing is registered, and a
            stale sink retired by this call stays retired.
        """
        if not config_id:
            raise ValueError("Cannot acquire a sink for an unidentified configuration")

        while True:
            with self._lock:
                entry = self._entries.get(config_id)
                if entry is not None and entry.descriptor == descriptor:
                    return entry.sink
                key_lock = self._key_locks.setdefault(config_id, threading.Lock())

            with key_lock:
                with self._lock:
                    if self._key_locks.get(config_id) is not key_lock:
                        # Dropped by release() while we waited
                        continue
                    entry = self._entries.get(config_id)
                    if entry is not None and entry.descriptor == descriptor:
                        return entry.sink
                    if entry is not None:
                        del self._entries[config_id]

                if entry is not None:
                    logger.info(
                        "SinkManager: descriptor changed for %s, retiring %s",
                        config_id,
                        entry.sink.sink_name,
                    )
                    self._close(config_id, entry.sink)

                registered = False
                try:
                    sink = self._factory.create(descriptor)
                    with self._lock:
                        self._entries[config_id] = _Entry(sink, descriptor)
                    registered = True
                finally:
                    if not registered:
                        with self._lock:
                            del self._key_locks[config_id]

            logger.info("SinkManager: registered %s for %s", sink.sink_name, config_id)
            return sink

    def release(self, config_id: str) -> ReleasedSink | None:
        """Remove and close the sink for *config_id*, if there is one.

        Waits for a construction of the same id that is already under
        way, then retires what it built.  The entry is removed even when
        ``close()`` fails, so the next ``acquire`` always builds a fresh
        sink.  A close failure is logged and carried on the result, never
        raised.
        """
        while True:
            with self._lock:
                key_lock = self._key_locks.get(config_id)
            if key_lock is None:
                return None

            with key_lock:
                with self._lock:
                    if self._key_locks.get(config_id) is not key_lock:
                        continue
                    entry = self._entries.pop(config_id, None)
                    del self._key_locks[config_id]
                if entry is None:
                    return None
                return self._close(config_id, entry.sink)

    def shutdown(self) -> list[ReleasedSink]:
        """Release every live sink."""
        with self._lock:
            config_ids = list(self._entries)
        released = [r for r in (self.release(cid) for cid in config_ids) if r is not None]
        logger.info("SinkManager: shut down %d sinks", len(released))
        return released

    def _close(self, config_id: str, sink: BaseSink) -> ReleasedSink:
        error: CloseError | None = None
        try:
            sink.close()
        except CloseError as exc:
            logger.error(
                "SinkManager: failed to close %s for %s: %s",
                sink.sink_name,
                config_id,
                exc,
            )
            error = exc
        else:
            logger.info("SinkManager: released %s for %s", sink.sink_name, config_id)
        return ReleasedSink(config_id=config_id, sink=sink, error=error)
