"""Sink descriptors: the tagged union of supported sink shapes.

A descriptor is ``{"type": ..., "parameters": {...}}``.  Each ``type``
value selects exactly one parameter model, and the parameters are
validated against it when a configuration is created or replaced.
Ingestion code receives descriptors that have already passed through
these models and never re-validates them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
)

from webhook_connector.errors import SinkValidationError

NonEmptyStr = Annotated[str, StringConstraints(strict=True, min_length=1)]


# ---------------------------------------------------------------------------
# Parameter models
# ---------------------------------------------------------------------------


class FileSinkParameters(BaseModel):
    """Parameters for the local JSON-Lines file sink (testing)."""

    model_config = ConfigDict(frozen=True)

    file_path: NonEmptyStr  # absolute, or relative to the working directory


class TableSinkParameters(BaseModel):
    """Parameters identifying a BigQuery destination table."""

    model_config = ConfigDict(frozen=True)

    project: NonEmptyStr
    dataset: NonEmptyStr
    table: NonEmptyStr

    @property
    def table_path(self) -> str:
        """Fully qualified table resource name."""
        return f"projects/{self.project}/datasets/{self.dataset}/tables/{self.table}"


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class FileSinkDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    parameters: FileSinkParameters


class TableSinkDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["table"] = "table"
    parameters: TableSinkParameters


SinkDescriptor = Annotated[
    Union[FileSinkDescriptor, TableSinkDescriptor],
    Field(discriminator="type"),
]

sink_descriptor_adapter: TypeAdapter[SinkDescriptor] = TypeAdapter(SinkDescriptor)

_DESCRIPTOR_MODELS: dict[str, type[BaseModel]] = {
    "file": FileSinkDescriptor,
    "table": TableSinkDescriptor,
}

SUPPORTED_SINK_TYPES: tuple[str, ...] = tuple(_DESCRIPTOR_MODELS)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _describe(exc: ValidationError) -> str:
    """Render pydantic errors as ``field: message`` pairs.

    The ``parameters`` prefix is dropped so the message names the
    offending parameter directly (``file_path: Field required``).
    """
    parts: list[str] = []
    for error in exc.errors():
        loc = [str(p) for p in error["loc"]]
        if len(loc) > 1 and loc[0] == "parameters":
            loc = loc[1:]
        parts.append(f"{'.'.join(loc) or 'parameters'}: {error['msg']}")
    return "; ".join(parts)


def validate_sink(
    sink_type: str, parameters: Mapping[str, Any] | None
) -> FileSinkDescriptor | TableSinkDescriptor:
    """Validate a sink type and its parameters, returning the descriptor.

    Pure function: no I/O and no reachability checks.  Whether the file
    is writable or the table exists surfaces later as a write error.

    Raises
    ------
    SinkValidationError
        If the type is unsupported or a required parameter is missing,
        empty, or not a string.
    """
    model = _DESCRIPTOR_MODELS.get(sink_type)
    if model is None:
        raise SinkValidationError(f"unsupported sink type '{sink_type}'")

    try:
        return model.model_validate(
            {"type": sink_type, "parameters": {} if parameters is None else parameters}
        )
    except ValidationError as exc:
        raise SinkValidationError(
            f"invalid '{sink_type}' sink: {_describe(exc)}"
        ) from exc
