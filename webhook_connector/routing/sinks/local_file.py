"""Local file sink: appends events to a JSON-Lines file.

One UTF-8 JSON object per line, newline terminated, no enclosing array.
The file is opened, appended to, and closed on every call; no handle is
held between writes, so a failed batch cannot damage what earlier calls
already wrote and closed.  Intended for testing.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from pathlib import Path

from webhook_connector.errors import SinkClosedError, WriteError
from webhook_connector.models.events import WebhookEvent

logger = logging.getLogger(__name__)


def serialize_event(event: WebhookEvent) -> str:
    """Serialize one event as a single JSON line (without the newline)."""
    return event.model_dump_json()


class FileSink:
    """Appends events to a local JSON-Lines file.

    Parameters
    ----------
    file_path:
        Destination file.  It and any missing parent directories are
        created on first write.
    """

    def __init__(self, file_path: Path | str) -> None:
        self._path = Path(file_path)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def sink_name(self) -> str:
        return f"file:{self._path}"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def write_rows(self, events: Sequence[WebhookEvent]) -> None:
        """Append *events* to the file, one line each, in order."""
        if not events:
            return

        # Serialize everything before touching the file
        payload = "".join(serialize_event(e) + "\n" for e in events)

        with self._lock:
            if self._closed:
                raise SinkClosedError(f"{self.sink_name} is closed")
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as fh:
                    fh.write(payload)
            except OSError as exc:
                raise WriteError(f"Failed to write to {self._path}: {exc}") from exc

        logger.debug("FileSink: appended %d rows to %s", len(events), self._path)

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def read_rows(self) -> list[str]:
        """Return the file's lines without trailing newlines."""
        if not self._path.exists():
            return []
        return self._path.read_text(encoding="utf-8").splitlines()
