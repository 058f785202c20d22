"""Reporting service: validates ranges, picks granularity, assembles score reports."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List

from domain import scoring
from domain.errors import StorageUnavailable
from domain.rating import CategoryCount, CategoryDiff, Granularity, PeriodScore, TicketScore
from infrastructure.repository import RatingRepository

logger = logging.getLogger(__name__)


@dataclass
class CategoryScoresReport:
    granularity: Granularity
    scores: List[PeriodScore] = field(default_factory=list)
    counts: List[CategoryCount] = field(default_factory=list)


@dataclass
class TicketScoresReport:
    categories: List[str] = field(default_factory=list)
    scores: List[TicketScore] = field(default_factory=list)


@dataclass
class OverallScoreReport:
    score: int = 0


@dataclass
class PeriodOverPeriodReport:
    changes: List[CategoryDiff] = field(default_factory=list)


class ReportService:
    def __init__(self, repository: RatingRepository):
        self.repository = repository

    @contextmanager
    def _reading(self, what: str) -> Iterator[None]:
        """Log the storage cause, surface only a generic message."""
        try:
            yield
        except StorageUnavailable as exc:
            logger.error("DB error while reading %s: %s", what, exc, exc_info=exc)
            raise StorageUnavailable(f"failed to read {what} from the database") from exc

    def category_scores(self, start: str, end: str) -> CategoryScoresReport:
        """Per-category scores over a range, daily up to one month and weekly beyond.

        E.g. the daily scores of the past week, or weekly scores for a quarter.
        """
        time_range = scoring.make_range(start, end)
        granularity = scoring.select_granularity(time_range)
        logger.info("category scores from=%s to=%s granularity=%s", start, end, granularity.value)

        report = CategoryScoresReport(granularity=granularity)
        if granularity is Granularity.WEEK:
            with self._reading("weekly scores"):
                report.scores = self.repository.weekly_scores(time_range)
        else:
            with self._reading("daily scores"):
                report.scores = self.repository.daily_scores(time_range)

        with self._reading("rating counts"):
            report.counts = self.repository.rating_counts(time_range)
        return report

    def ticket_scores(self, start: str, end: str) -> TicketScoresReport:
        """Aggregate category scores of every ticket created within the range."""
        time_range = scoring.make_range(start, end)
        logger.info("ticket scores from=%s to=%s", start, end)

        report = TicketScoresReport()
        with self._reading("ticket scores"):
            report.scores = self.repository.ticket_scores(time_range)
        with self._reading("rating categories"):
            report.categories = self.repository.rating_categories()
        return report

    def overall_score(self, start: str, end: str) -> OverallScoreReport:
        """E.g. the overall score over the past week has been 96%."""
        time_range = scoring.make_range(start, end)
        logger.info("overall score from=%s to=%s", start, end)

        with self._reading("overall score"):
            return OverallScoreReport(score=self.repository.overall_score(time_range))

    def period_over_period(
        self, first_start: str, first_end: str, second_start: str, second_end: str
    ) -> PeriodOverPeriodReport:
        """Score change per category from the first period to the second one.

        E.g. current week vs. previous week, or December vs. January.
        """
        first = scoring.make_range(first_start, first_end)
        second = scoring.make_range(second_start, second_end)
        logger.info(
            "period over period first=%s..%s second=%s..%s",
            first_start, first_end, second_start, second_end,
        )

        with self._reading("period scores"):
            return PeriodOverPeriodReport(changes=self.repository.period_over_period(first, second))

    def is_serving(self) -> bool:
        return self.repository.ping()
