"""Protocol buffer row schema for streaming table inserts.

BigQuery's Storage Write API takes rows as serialized protocol buffers
plus a self-contained ``DescriptorProto`` describing them.  The row
message mirrors ``WebhookEvent``::

    message WebhookEvent {
      message Metadata {
        optional int64  received_at = 1;   // epoch microseconds (TIMESTAMP)
        optional int64  loaded_at   = 2;   // epoch microseconds (TIMESTAMP)
        optional string source_id   = 3;
        optional string source_name = 4;
      }
      optional string   event    = 1;      // raw JSON payload
      optional Metadata metadata = 2;
    }

The message class is built once per process in a private descriptor pool,
so no generated ``_pb2`` module is needed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from webhook_connector.models.events import WebhookEvent

_PACKAGE = "webhook_connector"
_ROW_MESSAGE = "WebhookEvent"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MICROSECOND = timedelta(microseconds=1)

_Field = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    type_name: str = "",
) -> None:
    field = message.field.add(
        name=name, number=number, type=field_type, label=_Field.LABEL_OPTIONAL
    )
    if type_name:
        field.type_name = type_name


def _build_file_proto() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=f"{_PACKAGE}/webhook_event.proto",
        package=_PACKAGE,
        syntax="proto2",
    )
    row = file_proto.message_type.add(name=_ROW_MESSAGE)

    metadata = row.nested_type.add(name="Metadata")
    _add_field(metadata, "received_at", 1, _Field.TYPE_INT64)
    _add_field(metadata, "loaded_at", 2, _Field.TYPE_INT64)
    _add_field(metadata, "source_id", 3, _Field.TYPE_STRING)
    _add_field(metadata, "source_name", 4, _Field.TYPE_STRING)

    _add_field(row, "event", 1, _Field.TYPE_STRING)
    _add_field(
        row,
        "metadata",
        2,
        _Field.TYPE_MESSAGE,
        type_name=f".{_PACKAGE}.{_ROW_MESSAGE}.Metadata",
    )
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_proto().SerializeToString())
_row_descriptor = _pool.FindMessageTypeByName(f"{_PACKAGE}.{_ROW_MESSAGE}")

# Generated-style message class for encoding rows.
WebhookEventRow: Any = message_factory.GetMessageClass(_row_descriptor)


def normalized_descriptor() -> descriptor_pb2.DescriptorProto:
    """Return the self-contained descriptor sent as the writer schema.

    Nested types live inside the row message, so the descriptor decodes
    rows without any other file in scope.
    """
    proto = descriptor_pb2.DescriptorProto()
    _row_descriptor.CopyToProto(proto)
    return proto


def to_epoch_micros(value: datetime) -> int:
    """Convert a datetime to integer microseconds since the epoch.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_MICROSECOND


def encode_event(event: WebhookEvent) -> bytes:
    """Serialize *event* to the binary row format."""
    row = WebhookEventRow(event=event.event)
    row.metadata.received_at = to_epoch_micros(event.metadata.received_at)
    row.metadata.loaded_at = to_epoch_micros(event.metadata.loaded_at)
    row.metadata.source_id = event.metadata.source_id
    row.metadata.source_name = event.metadata.source_name
    return row.SerializeToString()
