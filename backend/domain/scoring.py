"""Scoring aggregation engine.

Turns raw weighted ratings into integer 0-100 scores. Storage backends only
hand over :class:`RatedTicket` rows; the formula, the daily/weekly bucketing
policy and the final ordering are decided here and nowhere else.

Score of a group of ratings::

    round(avg(rating * weight + rating) / avg(max_rating * weight + max_rating) * 100)

Both averages run over the same rows, so the quotient reduces to a ratio of
sums. Rounding is half away from zero.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import InvalidRange
from .rating import (
    CategoryCount,
    CategoryDiff,
    Granularity,
    PeriodScore,
    RatedTicket,
    RatingCategory,
    TicketScore,
    TimeRange,
)

MAX_RATING = 5
DATE_FORMAT = "%Y-%m-%d"

_ONE = Decimal(1)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date, raising :class:`InvalidRange`."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise InvalidRange(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def make_range(start: str, end: str) -> TimeRange:
    time_range = TimeRange(parse_date(start), parse_date(end))
    validate_range(time_range)
    return time_range


def validate_range(time_range: TimeRange) -> None:
    if time_range.end < time_range.start:
        raise InvalidRange(
            f"range end {time_range.end.isoformat()} is before start {time_range.start.isoformat()}"
        )


def add_month(day: date) -> date:
    """Same day one calendar month later.

    Days past the end of the target month overflow into the next one, so
    Jan 31 becomes Mar 3 (Mar 2 in a leap year).
    """
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    return date(year, month, 1) + timedelta(days=day.day - 1)


def select_granularity(time_range: TimeRange) -> Granularity:
    """Weekly buckets once the range runs past one calendar month, daily otherwise."""
    validate_range(time_range)
    if time_range.end > add_month(time_range.start):
        return Granularity.WEEK
    return Granularity.DAY


def bucket_of(moment: datetime, granularity: Granularity) -> Tuple[Tuple[int, ...], str]:
    """Return ``(sort_key, label)`` of the bucket holding ``moment``."""
    day = moment.date()
    if granularity is Granularity.WEEK:
        iso = day.isocalendar()
        return (iso[0], iso[1]), f"{iso[0]:04d}-W{iso[1]:02d}"
    return (day.year, day.month, day.day), day.isoformat()


def normalized_score(ratings: Iterable[RatedTicket], max_rating: int = MAX_RATING) -> Optional[int]:
    """Weighted percentage score, or ``None`` when there is nothing to score."""
    achieved = Decimal(0)
    best = Decimal(0)
    for row in ratings:
        factor = Decimal(str(row.category.weight)) + _ONE
        achieved += row.rating * factor
        best += max_rating * factor
    if not best:
        return None
    return int((achieved * 100 / best).quantize(_ONE, rounding=ROUND_HALF_UP))


def _group_by_category(rows: Iterable[RatedTicket]) -> Dict[int, List[RatedTicket]]:
    groups: Dict[int, List[RatedTicket]] = defaultdict(list)
    for row in rows:
        groups[row.category.id].append(row)
    return groups


def bucket_scores(
    rows: Iterable[RatedTicket],
    granularity: Granularity,
    max_rating: int = MAX_RATING,
) -> List[PeriodScore]:
    """Per-category scores for each day or ISO week, oldest bucket first."""
    groups: Dict[Tuple[Tuple[int, ...], int], List[RatedTicket]] = defaultdict(list)
    labels: Dict[Tuple[int, ...], str] = {}
    for row in rows:
        key, label = bucket_of(row.created_at, granularity)
        labels[key] = label
        groups[(key, row.category.id)].append(row)

    scores: List[PeriodScore] = []
    for key, category_id in sorted(groups):
        members = groups[(key, category_id)]
        score = normalized_score(members, max_rating)
        if score is None:
            continue
        scores.append(PeriodScore(members[0].category, labels[key], score))
    return scores


def rating_counts(rows: Iterable[RatedTicket]) -> List[CategoryCount]:
    groups = _group_by_category(rows)
    return [CategoryCount(groups[cid][0].category, len(groups[cid])) for cid in sorted(groups)]


def ticket_scores(rows: Iterable[RatedTicket], max_rating: int = MAX_RATING) -> List[TicketScore]:
    groups: Dict[Tuple[int, int], List[RatedTicket]] = defaultdict(list)
    for row in rows:
        groups[(row.ticket_id, row.category.id)].append(row)

    scores: List[TicketScore] = []
    for ticket_id, category_id in sorted(groups):
        members = groups[(ticket_id, category_id)]
        score = normalized_score(members, max_rating)
        if score is None:
            continue
        scores.append(TicketScore(ticket_id, members[0].category.name, score))
    return scores


def overall_score(rows: Iterable[RatedTicket], max_rating: int = MAX_RATING) -> int:
    score = normalized_score(rows, max_rating)
    return 0 if score is None else score


def category_scores(
    rows: Iterable[RatedTicket], max_rating: int = MAX_RATING
) -> Dict[int, Tuple[RatingCategory, int]]:
    """Range-wide score per category id; unscorable categories count as 0."""
    result: Dict[int, Tuple[RatingCategory, int]] = {}
    for category_id, members in _group_by_category(rows).items():
        score = normalized_score(members, max_rating)
        result[category_id] = (members[0].category, 0 if score is None else score)
    return result


def period_over_period(
    first: Iterable[RatedTicket],
    second: Iterable[RatedTicket],
    max_rating: int = MAX_RATING,
) -> List[CategoryDiff]:
    """Score change per category from the first range to the second.

    Categories are matched by id. A category rated in only one of the ranges
    takes 0 for the other side.
    """
    before = category_scores(first, max_rating)
    after = category_scores(second, max_rating)

    diffs: List[CategoryDiff] = []
    for category_id in sorted(before.keys() | after.keys()):
        category = (after.get(category_id) or before[category_id])[0]
        old_score = before[category_id][1] if category_id in before else 0
        new_score = after[category_id][1] if category_id in after else 0
        diffs.append(CategoryDiff(category, new_score - old_score))
    return diffs
