"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. No business logic here, only
wiring: logging, transition table check, document store, services,
WebSocket manager, telemetry.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from printflow.core.config import get_settings
from printflow.domain.transitions import validate_transition_table
from printflow.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, transition table validation (fails fast on an
    incomplete table), document client, services, WebSocket manager,
    telemetry (if enabled). Shutdown order: live queries, document client,
    telemetry.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    validate_transition_table()

    from printflow.api.v1.dependencies import build_services
    from printflow.api.websocket import ConnectionManager
    from printflow.infrastructure.store import build_document_client

    client = build_document_client(settings)
    app.state.services = build_services(settings, client)
    app.state.ws_manager = ConnectionManager()
    logger.info("Document store ready (backend=%s)", settings.database_backend)

    if settings.telemetry_enabled:
        from printflow.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        logger.info("Telemetry initialized")

    yield

    # ---- Shutdown ----
    await app.state.services.close()
    await client.aclose()
    if settings.database_backend == "firestore":
        from printflow.infrastructure.firebase.client import close_firebase

        await close_firebase()
    logger.info("Document store closed")

    from printflow.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")
