"""Unit tests for sink descriptors and ``validate_sink``."""

from __future__ import annotations

import pytest

from webhook_connector.errors import SinkValidationError
from webhook_connector.models.configuration import Configuration
from webhook_connector.models.sinks import (
    SUPPORTED_SINK_TYPES,
    FileSinkDescriptor,
    TableSinkDescriptor,
    sink_descriptor_adapter,
    validate_sink,
)

_VALID_PARAMETERS = {
    "file": {"file_path": "/tmp/out.jsonl"},
    "table": {"project": "proj", "dataset": "ds", "table": "events"},
}


class TestValidateSink:
    """Each sink type must accept complete parameters and name what is wrong."""

    def test_supported_types(self):
        assert set(SUPPORTED_SINK_TYPES) == {"file", "table"}

    @pytest.mark.parametrize("sink_type", sorted(_VALID_PARAMETERS))
    def test_complete_parameters_pass(self, sink_type: str):
        descriptor = validate_sink(sink_type, _VALID_PARAMETERS[sink_type])
        assert descriptor.type == sink_type

    @pytest.mark.parametrize(
        ("sink_type", "missing"),
        [(t, field) for t, params in sorted(_VALID_PARAMETERS.items()) for field in params],
    )
    def test_missing_parameter_fails_naming_field(self, sink_type: str, missing: str):
        params = {k: v for k, v in _VALID_PARAMETERS[sink_type].items() if k != missing}
        with pytest.raises(SinkValidationError, match=missing):
            validate_sink(sink_type, params)

    @pytest.mark.parametrize(
        ("sink_type", "field"),
        [(t, field) for t, params in sorted(_VALID_PARAMETERS.items()) for field in params],
    )
    def test_empty_parameter_fails(self, sink_type: str, field: str):
        params = dict(_VALID_PARAMETERS[sink_type], **{field: ""})
        with pytest.raises(SinkValidationError, match=field):
            validate_sink(sink_type, params)

    def test_non_string_parameter_fails(self):
        with pytest.raises(SinkValidationError, match="file_path"):
            validate_sink("file", {"file_path": 42})

    def test_none_parameters_fail(self):
        with pytest.raises(SinkValidationError, match="file_path"):
            validate_sink("file", None)

    def test_unknown_type_fails(self):
        with pytest.raises(SinkValidationError, match="unsupported sink type 'kafka'"):
            validate_sink("kafka", {"topic": "events"})

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_sink("file", {})

    def test_extra_parameters_ignored(self):
        descriptor = validate_sink("file", {"file_path": "/tmp/x", "mode": "fast"})
        assert descriptor.parameters.file_path == "/tmp/x"


class TestDescriptors:
    """The descriptor union must round-trip through plain dicts."""

    def test_adapter_selects_variant_by_type(self):
        file_desc = sink_descriptor_adapter.validate_python(
            {"type": "file", "parameters": _VALID_PARAMETERS["file"]}
        )
        table_desc = sink_descriptor_adapter.validate_python(
            {"type": "table", "parameters": _VALID_PARAMETERS["table"]}
        )
        assert isinstance(file_desc, FileSinkDescriptor)
        assert isinstance(table_desc, TableSinkDescriptor)

    def test_table_path(self):
        descriptor = validate_sink("table", _VALID_PARAMETERS["table"])
        assert descriptor.parameters.table_path == "projects/proj/datasets/ds/tables/events"

    def test_descriptor_is_frozen(self):
        descriptor = validate_sink("file", _VALID_PARAMETERS["file"])
        with pytest.raises(Exception):
            descriptor.type = "table"  # type: ignore[misc]

    def test_configuration_parses_descriptor_dict(self):
        config = Configuration.model_validate(
            {"name": "c", "sink": {"type": "table", "parameters": _VALID_PARAMETERS["table"]}}
        )
        assert isinstance(config.sink, TableSinkDescriptor)
        assert config.is_identified is False
        assert config.with_id("abc").is_identified is True
