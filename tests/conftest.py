"""Shared test fixtures for the webhook connector."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from webhook_connector.core.config_store import InMemoryConfigStore
from webhook_connector.core.configurations import ConfigurationService
from webhook_connector.errors import CloseError, SinkClosedError, WriteError
from webhook_connector.models.configuration import Configuration
from webhook_connector.models.events import EventMetadata, WebhookEvent
from webhook_connector.models.sinks import FileSinkParameters, validate_sink
from webhook_connector.routing.dispatcher import IngestionDispatcher
from webhook_connector.routing.manager import SinkManager
from webhook_connector.routing.sinks.factory import SinkFactory
from webhook_connector.routing.sinks.local_file import FileSink


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class RecordingSink:
    """An in-memory sink that records writes and close calls."""

    def __init__(self, name: str = "recording") -> None:
        self._name = name
        self.written: list[WebhookEvent] = []
        self.close_calls = 0
        self.closed = False
        self.fail_writes = False
        self.fail_close = False

    @property
    def sink_name(self) -> str:
        return self._name

    def write_rows(self, events: Sequence[WebhookEvent]) -> None:
        if self.closed:
            raise SinkClosedError(f"{self._name} is closed")
        if self.fail_writes:
            raise WriteError("destination rejected row")
        self.written.extend(events)

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True
        if self.fail_close:
            raise CloseError("teardown failed")


class CountingFileSink(FileSink):
    """A FileSink that counts ``close()`` calls."""

    def __init__(self, file_path: Path | str) -> None:
        super().__init__(file_path)
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        super().close()


class CountingConstructor:
    """Sink constructor that counts calls and remembers what it built."""

    def __init__(self, build: Callable[[Any], Any]) -> None:
        self._build = build
        self._lock = threading.Lock()
        self.built: list[Any] = []

    @property
    def calls(self) -> int:
        return len(self.built)

    def __call__(self, parameters: Any) -> Any:
        sink = self._build(parameters)
        with self._lock:
            self.built.append(sink)
        return sink


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryConfigStore:
    """Provide an empty configuration store."""
    return InMemoryConfigStore()


@pytest.fixture
def file_constructor() -> CountingConstructor:
    """Counting constructor that builds CountingFileSinks."""

    def _build(parameters: FileSinkParameters) -> CountingFileSink:
        return CountingFileSink(parameters.file_path)

    return CountingConstructor(_build)


@pytest.fixture
def recording_constructor() -> CountingConstructor:
    """Counting constructor that builds RecordingSinks for any type."""
    return CountingConstructor(lambda parameters: RecordingSink())


@pytest.fixture
def factory(file_constructor: CountingConstructor) -> SinkFactory:
    """A SinkFactory whose ``file`` constructor is counted."""
    f = SinkFactory()
    f.register("file", file_constructor)
    return f


@pytest.fixture
def manager(factory: SinkFactory) -> SinkManager:
    """Provide a SinkManager wired to the counting factory."""
    return SinkManager(factory)


@pytest.fixture
def service(store: InMemoryConfigStore, manager: SinkManager) -> ConfigurationService:
    return ConfigurationService(store, manager)


@pytest.fixture
def dispatcher(
    store: InMemoryConfigStore, manager: SinkManager, fixed_now: datetime
) -> IngestionDispatcher:
    return IngestionDispatcher(store, manager, clock=lambda: fixed_now)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_file_config(tmp_path: Path) -> Callable[..., Configuration]:
    """Factory fixture: build an unidentified file-sink Configuration."""

    def _factory(
        file_name: str = "out.jsonl", name: str = "test-config", **overrides: Any
    ) -> Configuration:
        defaults: dict[str, Any] = {
            "name": name,
            "sink": validate_sink("file", {"file_path": str(tmp_path / file_name)}),
        }
        defaults.update(overrides)
        return Configuration(**defaults)

    return _factory


@pytest.fixture
def make_event() -> Callable[..., WebhookEvent]:
    """Factory fixture: build a WebhookEvent with sensible defaults."""

    def _factory(payload: str = '{"a":1}', **metadata: Any) -> WebhookEvent:
        defaults: dict[str, Any] = {
            "source_id": "cfg-001",
            "source_name": "test-config",
        }
        defaults.update(metadata)
        return WebhookEvent(event=payload, metadata=EventMetadata(**defaults))

    return _factory
