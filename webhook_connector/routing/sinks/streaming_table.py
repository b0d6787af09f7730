"""Streaming table sink — appends events to BigQuery over the Storage Write API.

One sink holds one long-lived ``AppendRowsStream`` on the table's
``_default`` stream.  The writer schema (the normalized descriptor of the
event row) and the trace id go into the stream's request template, so
they are negotiated once per sink rather than once per batch.

Each ``write_rows`` call sends one ``AppendRowsRequest`` and blocks until
BigQuery acknowledges it or the write timeout expires.  There is no local
retry; callers resubmit.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import bigquery_storage_v1
from google.cloud.bigquery_storage_v1 import exceptions as bqstorage_exceptions
from google.cloud.bigquery_storage_v1 import types, writer

from webhook_connector.errors import (
    CloseError,
    ConstructionError,
    SinkClosedError,
    WriteError,
)
from webhook_connector.models.events import WebhookEvent
from webhook_connector.routing.sinks.row_schema import encode_event, normalized_descriptor

logger = logging.getLogger(__name__)

StreamFactory = Callable[[Any, types.AppendRowsRequest], Any]

_TRANSPORT_ERRORS = (
    api_exceptions.GoogleAPIError,
    bqstorage_exceptions.StreamClosedError,
)


class StreamingTableSink:
    """Streams events into a BigQuery table.

    Parameters
    ----------
    project, dataset, table:
        Destination table identity.
    trace_id:
        Identifies this client in BigQuery's request logs.
    write_timeout:
        Seconds to wait for each append acknowledgement.  ``None`` waits
        forever.
    client:
        A ``BigQueryWriteClient``.  Created from application default
        credentials when omitted.  The sink takes ownership either way
        and closes its transport in ``close()``.
    stream_factory:
        Builds the append stream from ``(client, request_template)``.
        Defaults to ``writer.AppendRowsStream``.

    The append stream connects lazily: the gRPC call is opened, and the
    writer schema sent, by the first ``write_rows``.  A table that does
    not exist or cannot be reached therefore surfaces as a ``WriteError``
    on that first write rather than at construction.

    Raises
    ------
    ConstructionError
        If the client cannot be created or the stream object rejects
        its request template.
    """

    def __init__(
        self,
        project: str,
        dataset: str,
        table: str,
        trace_id: str = "webhook-connector",
        *,
        write_timeout: float | None = 30.0,
        client: Any | None = None,
        stream_factory: StreamFactory | None = None,
    ) -> None:
        self._table_path = f"projects/{project}/datasets/{dataset}/tables/{table}"
        self._trace_id = trace_id
        self._write_timeout = write_timeout
        self._lock = threading.Lock()
        self._closed = False

        try:
            self._client = (
                client if client is not None else bigquery_storage_v1.BigQueryWriteClient()
            )
        except (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            raise ConstructionError(f"Error creating BigQuery write client: {exc}") from exc

        factory = stream_factory or writer.AppendRowsStream
        try:
            self._stream = factory(self._client, self._request_template())
        except _TRANSPORT_ERRORS as exc:
            self._close_client()
            raise ConstructionError(
                f"Error creating append stream for {self._table_path}: {exc}"
            ) from exc

        logger.info(
            "StreamingTableSink: prepared stream %s (trace_id=%s), connects on first write",
            self.write_stream,
            trace_id,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def sink_name(self) -> str:
        return f"table:{self._table_path}"

    @property
    def table_path(self) -> str:
        return self._table_path

    @property
    def write_stream(self) -> str:
        return f"{self._table_path}/streams/_default"

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Framing
    # ------------------------------------------------------------------

    def _request_template(self) -> types.AppendRowsRequest:
        """The stream-level part of every append: destination, trace, schema."""
        proto_data = types.AppendRowsRequest.ProtoData(
            writer_schema=types.ProtoSchema(proto_descriptor=normalized_descriptor())
        )
        return types.AppendRowsRequest(
            write_stream=self.write_stream,
            trace_id=self._trace_id,
            proto_rows=proto_data,
        )

    @staticmethod
    def _rows_request(events: Sequence[WebhookEvent]) -> types.AppendRowsRequest:
        rows = types.ProtoRows(serialized_rows=[encode_event(e) for e in events])
        return types.AppendRowsRequest(
            proto_rows=types.AppendRowsRequest.ProtoData(rows=rows)
        )

    # ------------------------------------------------------------------
    # Sink API
    # ------------------------------------------------------------------

    def write_rows(self, events: Sequence[WebhookEvent]) -> None:
        """Append *events* as one request and wait for the acknowledgement."""
        if not events:
            return

        request = self._rows_request(events)

        with self._lock:
            if self._closed:
                raise SinkClosedError(f"{self.sink_name} is closed")

            try:
                future = self._stream.send(request)
                response = future.result(timeout=self._write_timeout)
            except FuturesTimeoutError as exc:
                raise WriteError(
                    f"Timed out after {self._write_timeout}s appending rows "
                    f"to {self._table_path}"
                ) from exc
            except _TRANSPORT_ERRORS as exc:
                raise WriteError(f"Error appending rows: {exc}") from exc

        row_errors = list(getattr(response, "row_errors", None) or [])
        if row_errors:
            details = "; ".join(f"row {e.index}: {e.message}" for e in row_errors)
            raise WriteError(f"Destination rejected rows: {details}")

        logger.debug(
            "StreamingTableSink: appended %d rows to %s", len(events), self._table_path
        )

    def close(self) -> None:
        """Close the append stream and the client transport.

        Both are attempted even if the first fails.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

            errors: list[str] = []
            try:
                self._stream.close()
            except _TRANSPORT_ERRORS as exc:
                errors.append(f"stream: {exc}")
            try:
                self._close_client()
            except (api_exceptions.GoogleAPIError, OSError) as exc:
                errors.append(f"client: {exc}")

        if errors:
            raise CloseError(f"Error closing {self.sink_name}: " + "; ".join(errors))
        logger.info("StreamingTableSink: closed stream %s", self.write_stream)

    def _close_client(self) -> None:
        transport = getattr(self._client, "transport", None)
        if transport is not None:
            transport.close()
