"""Storage backend selection and request-scoped access to the report service.

The repository is built once per application by :func:`create_repository`
and kept on ``app.state``; routers reach it through :func:`get_report_service`.
"""
from __future__ import annotations

import logging

from fastapi import Request

from app.config import AppConfig
from application.report_service import ReportService
from infrastructure.database import create_db_engine, postgres_url, sqlite_url
from infrastructure.memory_store import InMemoryRatingRepository
from infrastructure.repository import RatingRepository
from infrastructure.seed import load_seed
from infrastructure.sql_repo import SQLRatingRepository

logger = logging.getLogger(__name__)


def create_repository(settings: AppConfig) -> RatingRepository:
    """Build the repository named by the storage.backend setting."""
    backend = settings.database_backend
    if backend == "memory":
        repository: RatingRepository = InMemoryRatingRepository(settings.max_rating)
    elif backend == "sqlite":
        engine = create_db_engine(sqlite_url(settings.storage.get("sqlite_path")))
        repository = SQLRatingRepository(engine, settings.max_rating, name="sqlite")
    elif backend == "postgres":
        engine = create_db_engine(postgres_url(settings.storage.get("postgres") or {}))
        repository = SQLRatingRepository(engine, settings.max_rating, name="postgres")
    else:
        raise ValueError(f"Unknown database backend: {backend}. Supported: sqlite, postgres, memory")

    if settings.seed_file:
        load_seed(repository, settings.seed_file)
    logger.info("database backend: %s", repository.name)
    return repository


def get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service
