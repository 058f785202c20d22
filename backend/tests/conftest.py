"""Shared fixtures: one rating data set loaded into every storage backend."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

import pytest

from infrastructure.database import create_db_engine, sqlite_url
from infrastructure.memory_store import InMemoryRatingRepository
from infrastructure.repository import RatingRepository
from infrastructure.seed import apply_seed
from infrastructure.sql_repo import SQLRatingRepository


@pytest.fixture
def seed_document() -> Dict[str, Any]:
    """Ratings spread over March and April 2019.

    Scores worked out by hand are asserted in the backend and router tests.
    """
    return {
        "categories": [
            {"id": 1, "name": "Speed", "weight": 1.0},
            {"id": 2, "name": "Quality", "weight": 0.5},
            {"id": 3, "name": "Tone", "weight": 0.0},
            {"id": 4, "name": "Empathy", "weight": 2.0},
        ],
        "tickets": [
            {"id": 1, "created_at": datetime(2019, 3, 1, 10, 0)},
            {"id": 2, "created_at": datetime(2019, 3, 1, 23, 30)},
            {"id": 3, "created_at": datetime(2019, 3, 2, 9, 0)},
            {"id": 4, "created_at": datetime(2019, 3, 20, 12, 0)},
            {"id": 5, "created_at": datetime(2019, 4, 10, 8, 0)},
        ],
        "ratings": [
            {"ticket_id": 1, "category_id": 1, "rating": 5},
            {"ticket_id": 1, "category_id": 2, "rating": 4},
            {"ticket_id": 2, "category_id": 1, "rating": 3},
            {"ticket_id": 2, "category_id": 3, "rating": 2},
            {"ticket_id": 3, "category_id": 2, "rating": 5},
            {"ticket_id": 3, "category_id": 3, "rating": 4},
            {"ticket_id": 4, "category_id": 1, "rating": 4},
            {"ticket_id": 5, "category_id": 1, "rating": 2},
            {"ticket_id": 5, "category_id": 2, "rating": 3},
        ],
    }


@pytest.fixture
def memory_repo(seed_document) -> InMemoryRatingRepository:
    repo = InMemoryRatingRepository()
    apply_seed(repo, seed_document)
    return repo


@pytest.fixture
def sqlite_repo(tmp_path, seed_document):
    repo = SQLRatingRepository(create_db_engine(sqlite_url(tmp_path / "ratings.db")), name="sqlite")
    apply_seed(repo, seed_document)
    yield repo
    repo.close()


@pytest.fixture(params=["memory", "sqlite"])
def repository(request) -> RatingRepository:
    """Each backend in turn, loaded with the same data."""
    return request.getfixturevalue(f"{request.param}_repo")
