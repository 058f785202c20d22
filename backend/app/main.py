"""FastAPI entry point for the ticket rating score service.

Run with::

    uvicorn app.main:create_app --factory --port 8000

or ``python -m app.main`` to use the host/port from app_config.yaml.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Response

from app.config import AppConfig, configure_logging, get_settings
from application.report_service import ReportService
from infrastructure.repository import RatingRepository
from interfaces import deps, score_router
from interfaces.metrics import RequestMetrics

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[AppConfig] = None,
    repository: Optional[RatingRepository] = None,
) -> FastAPI:
    """Wire settings, storage and routers; the storage handle lives as long as the app."""
    settings = settings or get_settings()
    repository = repository or deps.create_repository(settings)

    metrics = RequestMetrics()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        repository.close()
        logger.info("service stopped")

    app = FastAPI(title="Ticket Rating Score Service", version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository
    app.state.report_service = ReportService(repository)
    app.state.metrics = metrics
    app.middleware("http")(metrics.middleware)

    app.include_router(score_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """Readiness probe backed by a trivial storage round trip."""
        serving = app.state.report_service.is_serving()
        return {
            "status": "SERVING" if serving else "NOT_SERVING",
            "backend": repository.name,
            "configVersion": settings.version,
        }

    @app.get("/metrics", tags=["health"], include_in_schema=False)
    def metrics_endpoint() -> Response:
        body, content_type = metrics.render()
        return Response(content=body, media_type=content_type)

    logger.info("service started with %s backend", repository.name)
    return app


def main() -> None:  # pragma: no cover - process entry point
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    server = settings.server
    uvicorn.run(
        create_app(settings),
        host=str(server.get("host", "0.0.0.0")),
        port=int(server.get("port", 8000)),
    )


if __name__ == "__main__":  # pragma: no cover
    main()
