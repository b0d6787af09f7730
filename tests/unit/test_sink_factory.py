"""Unit tests for the sink construction dispatch table."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from webhook_connector.errors import ConstructionError
from webhook_connector.models.sinks import validate_sink
from webhook_connector.routing.sinks.factory import SinkFactory
from webhook_connector.routing.sinks.local_file import FileSink

from tests.conftest import RecordingSink


class TestSinkFactory:
    def test_builds_file_sink(self, tmp_path: Path):
        descriptor = validate_sink("file", {"file_path": str(tmp_path / "out.jsonl")})
        sink = SinkFactory().create(descriptor)
        assert isinstance(sink, FileSink)
        assert sink.path == tmp_path / "out.jsonl"

    def test_builtin_types_registered(self):
        assert SinkFactory().registered_types == ["file", "table"]

    def test_unregistered_type_raises_construction_error(self):
        descriptor = SimpleNamespace(type="kafka", parameters=None)
        with pytest.raises(ConstructionError, match="Unsupported sink type 'kafka'"):
            SinkFactory().create(descriptor)  # type: ignore[arg-type]

    def test_constructor_failure_wrapped(self, tmp_path: Path):
        def _broken(parameters):
            raise OSError("disk unavailable")

        factory = SinkFactory()
        factory.register("file", _broken)
        descriptor = validate_sink("file", {"file_path": str(tmp_path / "x")})

        with pytest.raises(ConstructionError, match="disk unavailable"):
            factory.create(descriptor)

    def test_register_custom_constructor(self, tmp_path: Path):
        factory = SinkFactory()
        built: list[RecordingSink] = []

        def _build(parameters):
            sink = RecordingSink(f"custom:{parameters.file_path}")
            built.append(sink)
            return sink

        factory.register("file", _build)
        sink = factory.create(validate_sink("file", {"file_path": "a.jsonl"}))

        assert sink is built[0]
        assert sink.sink_name == "custom:a.jsonl"

    def test_table_sink_receives_trace_and_timeout(self, monkeypatch):
        captured: dict = {}

        class _Capture(RecordingSink):
            def __init__(self, project, dataset, table, trace_id, *, write_timeout):
                super().__init__()
                captured.update(
                    project=project,
                    dataset=dataset,
                    table=table,
                    trace_id=trace_id,
                    write_timeout=write_timeout,
                )

        monkeypatch.setattr(
            "webhook_connector.routing.sinks.factory.StreamingTableSink", _Capture
        )
        factory = SinkFactory(trace_id="trace-x", write_timeout=2.5)
        factory.create(
            validate_sink("table", {"project": "p", "dataset": "d", "table": "t"})
        )

        assert captured == {
            "project": "p",
            "dataset": "d",
            "table": "t",
            "trace_id": "trace-x",
            "write_timeout": 2.5,
        }
