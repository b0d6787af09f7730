"""Sink protocol for webhook event delivery.

All sinks implement the ``BaseSink`` protocol: a ``sink_name`` property,
a ``write_rows(events)`` method, and a ``close()`` method.  The
SinkManager owns every live sink; nothing else keeps a long-lived
reference to one.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from webhook_connector.models.events import WebhookEvent


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every webhook connector sink must implement.

    Attributes
    ----------
    sink_name : str
        A human-readable identifier for this sink instance
        (e.g. ``"file:/tmp/out.jsonl"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the name of this sink."""
        ...

    def write_rows(self, events: Sequence[WebhookEvent]) -> None:
        """Durably hand *events* to the destination, in order.

        Raises
        ------
        WriteError
            On any transport failure or destination-side rejection.
        """
        ...

    def close(self) -> None:
        """Release held resources.

        Idempotent and safe to call when no write ever happened.

        Raises
        ------
        CloseError
            If teardown fails.  Resources are still released as far as
            possible.
        """
        ...
