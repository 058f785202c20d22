"""Rating value types shared by the scoring engine and every storage backend."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class Granularity(str, Enum):
    DAY = "DAY"
    WEEK = "WEEK"


@dataclass(frozen=True)
class TimeRange:
    """Inclusive calendar-day range; no timezone is modeled."""

    start: date
    end: date

    def contains(self, moment: datetime | date) -> bool:
        day = moment.date() if isinstance(moment, datetime) else moment
        return self.start <= day <= self.end


@dataclass(frozen=True)
class RatingCategory:
    id: int
    name: str
    weight: float = 0.0


@dataclass(frozen=True)
class RatedTicket:
    """One raw rating joined with its ticket creation time and category weight."""

    ticket_id: int
    category: RatingCategory
    rating: int
    created_at: datetime


@dataclass(frozen=True)
class CategoryCount:
    category: RatingCategory
    count: int


@dataclass(frozen=True)
class PeriodScore:
    category: RatingCategory
    period_label: str
    score: int


@dataclass(frozen=True)
class TicketScore:
    ticket_id: int
    category_name: str
    score: int


@dataclass(frozen=True)
class CategoryDiff:
    category: RatingCategory
    diff: int
