"""Abstract storage gateway for rating data."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from domain import scoring
from domain.rating import (
    CategoryCount,
    CategoryDiff,
    Granularity,
    PeriodScore,
    RatedTicket,
    RatingCategory,
    TicketScore,
    TimeRange,
)


class RatingRepository(ABC):
    """Unified gateway so memory / SQLite / PostgreSQL share the same API.

    Backends implement the raw reads only. The score operations below are
    shared and hand the raw rows to :mod:`domain.scoring`, which keeps every
    backend's output identical for identical data.
    """

    name = "abstract"

    def __init__(self, max_rating: int = scoring.MAX_RATING):
        self.max_rating = max_rating

    # Raw reads -----------------------------------------------------------
    @abstractmethod
    def list_categories(self) -> List[RatingCategory]:
        """All rating categories ordered by id."""
        raise NotImplementedError

    @abstractmethod
    def list_ratings(self, time_range: TimeRange) -> List[RatedTicket]:
        """Ratings of tickets created within the inclusive range."""
        raise NotImplementedError

    @abstractmethod
    def ping(self) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        pass

    # Write path used by seeding ------------------------------------------
    @abstractmethod
    def add_category(self, category: RatingCategory) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_ticket(self, ticket_id: int, created_at) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_rating(self, ticket_id: int, category_id: int, rating: int) -> None:
        raise NotImplementedError

    # Score operations ----------------------------------------------------
    def daily_scores(self, time_range: TimeRange) -> List[PeriodScore]:
        return scoring.bucket_scores(self.list_ratings(time_range), Granularity.DAY, self.max_rating)

    def weekly_scores(self, time_range: TimeRange) -> List[PeriodScore]:
        return scoring.bucket_scores(self.list_ratings(time_range), Granularity.WEEK, self.max_rating)

    def rating_counts(self, time_range: TimeRange) -> List[CategoryCount]:
        return scoring.rating_counts(self.list_ratings(time_range))

    def ticket_scores(self, time_range: TimeRange) -> List[TicketScore]:
        return scoring.ticket_scores(self.list_ratings(time_range), self.max_rating)

    def overall_score(self, time_range: TimeRange) -> int:
        return scoring.overall_score(self.list_ratings(time_range), self.max_rating)

    def period_over_period(self, first: TimeRange, second: TimeRange) -> List[CategoryDiff]:
        return scoring.period_over_period(
            self.list_ratings(first), self.list_ratings(second), self.max_rating
        )

    def rating_categories(self) -> List[str]:
        return [category.name for category in self.list_categories()]
