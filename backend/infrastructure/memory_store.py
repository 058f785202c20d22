"""In-memory rating store, handy for demos and tests."""
from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, List, Tuple

from domain.rating import RatedTicket, RatingCategory, TimeRange
from .repository import RatingRepository


class InMemoryRatingRepository(RatingRepository):
    name = "memory"

    def __init__(self, max_rating: int = 5):
        super().__init__(max_rating)
        self._categories: Dict[int, RatingCategory] = {}
        self._tickets: Dict[int, datetime] = {}
        self._ratings: List[Tuple[int, int, int]] = []
        self._lock = threading.Lock()

    def list_categories(self) -> List[RatingCategory]:
        with self._lock:
            return [self._categories[cid] for cid in sorted(self._categories)]

    def list_ratings(self, time_range: TimeRange) -> List[RatedTicket]:
        with self._lock:
            rows = []
            for ticket_id, category_id, rating in self._ratings:
                created_at = self._tickets[ticket_id]
                if time_range.contains(created_at):
                    rows.append(
                        RatedTicket(ticket_id, self._categories[category_id], rating, created_at)
                    )
            return rows

    def ping(self) -> bool:
        return True

    def add_category(self, category: RatingCategory) -> None:
        with self._lock:
            if any(c.name == category.name and c.id != category.id for c in self._categories.values()):
                raise ValueError(f"duplicate category name {category.name!r}")
            self._categories[category.id] = category

    def add_ticket(self, ticket_id: int, created_at: datetime) -> None:
        with self._lock:
            self._tickets[ticket_id] = created_at

    def add_rating(self, ticket_id: int, category_id: int, rating: int) -> None:
        with self._lock:
            if ticket_id not in self._tickets or category_id not in self._categories:
                raise ValueError(
                    f"rating references unknown ticket {ticket_id} or category {category_id}"
                )
            self._ratings.append((ticket_id, category_id, rating))
