"""Sink factory. Maps a descriptor's ``type`` to a sink constructor.

Adding a destination = one sink class + one ``register`` call.  No other
component changes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from webhook_connector.errors import ConnectorError, ConstructionError
from webhook_connector.models.sinks import (
    FileSinkParameters,
    SinkDescriptor,
    TableSinkParameters,
)
from webhook_connector.routing.sinks import BaseSink
from webhook_connector.routing.sinks.local_file import FileSink
from webhook_connector.routing.sinks.streaming_table import StreamingTableSink

logger = logging.getLogger(__name__)

SinkConstructor = Callable[[Any], BaseSink]


class SinkFactory:
    """Builds sinks from validated descriptors.

    Parameters
    ----------
    trace_id:
        Client identifier passed to streaming table sinks.
    write_timeout:
        Per-append timeout, in seconds, for streaming table sinks.
    """

    def __init__(
        self,
        *,
        trace_id: str = "webhook-connector",
        write_timeout: float | None = 30.0,
    ) -> None:
        self._trace_id = trace_id
        self._write_timeout = write_timeout
        self._constructors: dict[str, SinkConstructor] = {
            "file": self._build_file_sink,
            "table": self._build_table_sink,
        }

    @property
    def registered_types(self) -> list[str]:
        return sorted(self._constructors)

    def register(self, sink_type: str, constructor: SinkConstructor) -> None:
        """Register (or replace) the constructor for *sink_type*.

        The constructor receives the descriptor's validated parameters
        model.
        """
        self._constructors[sink_type] = constructor
        logger.info("Registered sink constructor: %s", sink_type)

    def create(self, descriptor: SinkDescriptor) -> BaseSink:
        """Build a new sink for *descriptor*.

        Raises
        ------
        ConstructionError
            If the type has no constructor or the constructor fails.
        """
        constructor = self._constructors.get(descriptor.type)
        if constructor is None:
            raise ConstructionError(f"Unsupported sink type '{descriptor.type}'")

        try:
            sink = constructor(descriptor.parameters)
        except ConstructionError:
            raise
        except (ConnectorError, OSError, ValueError) as exc:
            raise ConstructionError(
                f"Failed to create {descriptor.type} sink: {exc}"
            ) from exc

        logger.info("Created sink %s", sink.sink_name)
        return sink

    # ------------------------------------------------------------------
    # Built-in constructors
    # ------------------------------------------------------------------

    @staticmethod
    def _build_file_sink(parameters: FileSinkParameters) -> BaseSink:
        return FileSink(parameters.file_path)

    def _build_table_sink(self, parameters: TableSinkParameters) -> BaseSink:
        return StreamingTableSink(
            parameters.project,
            parameters.dataset,
            parameters.table,
            self._trace_id,
            write_timeout=self._write_timeout,
        )

