"""FastAPI application — configuration CRUD and webhook ingestion.

Routes
------
GET    /hello-world
POST   /configurations
GET    /configurations
GET    /configurations/{config_id}
PUT    /configurations/{config_id}
DELETE /configurations/{config_id}
POST   /ingest/{config_id}

The app owns one SinkManager and shuts it down when the server stops.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from webhook_connector.api.schemas import (
    ConfigurationRequest,
    ConfigurationResponse,
    ErrorResponse,
)
from webhook_connector.config import ConnectorSettings
from webhook_connector.core.config_store import InMemoryConfigStore
from webhook_connector.core.configurations import ConfigurationService
from webhook_connector.errors import ConfigNotFoundError, SinkValidationError
from webhook_connector.models.events import IngestStatus
from webhook_connector.routing.dispatcher import IngestionDispatcher
from webhook_connector.routing.manager import SinkManager
from webhook_connector.routing.sinks.factory import SinkFactory

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_CODES: dict[IngestStatus, int] = {
    IngestStatus.ACCEPTED: 200,
    IngestStatus.NOT_FOUND: 404,
    IngestStatus.UNAUTHORIZED: 401,
    IngestStatus.BAD_REQUEST: 400,
}


def _error(status_code: int, message: str, reason: str = "") -> JSONResponse:
    body = ErrorResponse(error=message, reason=reason)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def extract_key(authorization: str | None) -> str | None:
    """Return the last space-separated token of an Authorization header.

    Accepts both ``Bearer <key>`` and a bare ``<key>``.
    """
    if not authorization:
        return None
    parts = authorization.split()
    return parts[-1] if parts else None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/hello-world", response_class=PlainTextResponse)
def hello_world() -> str:
    return "Hello webhook connector!"


@router.post("/configurations", response_model=ConfigurationResponse)
def create_configuration(body: ConfigurationRequest, request: Request):
    service: ConfigurationService = request.app.state.configurations
    try:
        config, key = service.create(
            body.name, body.sink.type, body.sink.parameters, use_key=body.use_key
        )
    except SinkValidationError as exc:
        return _error(400, f"Error creating configuration object: {exc}", "validation_error")
    return ConfigurationResponse.from_config(config, key)


@router.get("/configurations", response_model=list[ConfigurationResponse])
def list_configurations(request: Request):
    service: ConfigurationService = request.app.state.configurations
    return [ConfigurationResponse.from_config(c) for c in service.store.list()]


@router.get("/configurations/{config_id}", response_model=ConfigurationResponse)
def get_configuration(config_id: str, request: Request):
    service: ConfigurationService = request.app.state.configurations
    try:
        config = service.store.get(config_id)
    except ConfigNotFoundError as exc:
        return _error(404, str(exc), "not_found")
    return ConfigurationResponse.from_config(config)


@router.put("/configurations/{config_id}", response_model=ConfigurationResponse)
def update_configuration(config_id: str, body: ConfigurationRequest, request: Request):
    service: ConfigurationService = request.app.state.configurations
    try:
        config, key = service.update(
            config_id,
            body.name,
            body.sink.type,
            body.sink.parameters,
            use_key=body.use_key,
        )
    except SinkValidationError as exc:
        return _error(400, f"Error creating configuration object: {exc}", "validation_error")
    except ConfigNotFoundError as exc:
        return _error(404, str(exc), "not_found")
    return ConfigurationResponse.from_config(config, key)


@router.delete("/configurations/{config_id}", response_model=ConfigurationResponse)
def delete_configuration(config_id: str, request: Request):
    service: ConfigurationService = request.app.state.configurations
    try:
        config = service.delete(config_id)
    except ConfigNotFoundError as exc:
        return _error(404, f"Failed to delete config with id {config_id}: {exc}", "not_found")
    return ConfigurationResponse.from_config(config)


@router.post("/ingest/{config_id}")
async def ingest_webhook(config_id: str, request: Request):
    dispatcher: IngestionDispatcher = request.app.state.dispatcher
    body = await request.body()
    credential = extract_key(request.headers.get("Authorization"))

    # Sink writes block; keep them off the event loop
    result = await run_in_threadpool(dispatcher.handle, config_id, body, credential)

    if result.accepted:
        return PlainTextResponse(result.detail)
    return _error(_STATUS_CODES[result.status], result.detail, result.reason.value)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(
    settings: ConnectorSettings | None = None,
    *,
    store: InMemoryConfigStore | None = None,
    manager: SinkManager | None = None,
) -> FastAPI:
    """Build the application and wire its collaborators.

    Parameters
    ----------
    settings:
        Service settings.  Read from the environment when omitted.
    store, manager:
        Override the configuration store or SinkManager (tests).
    """
    settings = settings or ConnectorSettings()
    store = store or InMemoryConfigStore()
    manager = manager or SinkManager(
        SinkFactory(
            trace_id=settings.trace_id,
            write_timeout=settings.write_timeout_seconds,
        )
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("webhook-connector starting (%s)", settings.environment)
        yield
        released = manager.shutdown()
        failed = [r.config_id for r in released if not r.ok]
        if failed:
            logger.error("Sinks failed to close cleanly: %s", ", ".join(failed))

    app = FastAPI(title="webhook-connector", lifespan=lifespan)
    app.state.settings = settings
    app.state.manager = manager
    app.state.configurations = ConfigurationService(
        store, manager, key_length=settings.key_length
    )
    app.state.dispatcher = IngestionDispatcher(store, manager)
    app.include_router(router)
    return app
