"""Load rating reference data and raw ratings from a YAML document."""
from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict

import yaml

from domain.rating import RatingCategory
from .repository import RatingRepository

logger = logging.getLogger(__name__)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    return datetime.fromisoformat(str(value))


def apply_seed(repository: RatingRepository, document: Dict[str, Any]) -> Dict[str, int]:
    """Insert ``categories``, ``tickets`` and ``ratings`` in dependency order."""
    categories = document.get("categories") or []
    tickets = document.get("tickets") or []
    ratings = document.get("ratings") or []

    for item in categories:
        repository.add_category(
            RatingCategory(id=int(item["id"]), name=str(item["name"]), weight=float(item.get("weight", 0.0)))
        )
    for item in tickets:
        repository.add_ticket(int(item["id"]), _as_datetime(item["created_at"]))
    for item in ratings:
        repository.add_rating(int(item["ticket_id"]), int(item["category_id"]), int(item["rating"]))

    return {"categories": len(categories), "tickets": len(tickets), "ratings": len(ratings)}


def load_seed(repository: RatingRepository, path: Path | str) -> Dict[str, int]:
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("Seed file must define a mapping at the top level.")
    counts = apply_seed(repository, data)
    logger.info("seeded %s backend from %s: %s", repository.name, path, counts)
    return counts
