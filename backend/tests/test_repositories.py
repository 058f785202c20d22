"""Every storage backend must return identical scores for identical data."""
from __future__ import annotations

from datetime import date, datetime

import pytest

from domain.errors import StorageUnavailable
from domain.rating import RatingCategory, TimeRange
from infrastructure.database import create_db_engine, sqlite_url
from infrastructure.memory_store import InMemoryRatingRepository
from infrastructure.sql_repo import SQLRatingRepository

MARCH = TimeRange(date(2019, 3, 1), date(2019, 3, 31))
APRIL = TimeRange(date(2019, 4, 1), date(2019, 4, 30))
SPRING = TimeRange(date(2019, 3, 1), date(2019, 4, 30))


def test_rating_categories_ordered_by_id(repository) -> None:
    assert repository.rating_categories() == ["Speed", "Quality", "Tone", "Empathy"]


def test_daily_scores(repository) -> None:
    scores = repository.daily_scores(MARCH)
    assert [(s.period_label, s.category.name, s.score) for s in scores] == [
        ("2019-03-01", "Speed", 80),
        ("2019-03-01", "Quality", 80),
        ("2019-03-01", "Tone", 40),
        ("2019-03-02", "Quality", 100),
        ("2019-03-02", "Tone", 80),
        ("2019-03-20", "Speed", 80),
    ]


def test_weekly_scores(repository) -> None:
    scores = repository.weekly_scores(SPRING)
    assert [(s.period_label, s.category.name, s.score) for s in scores] == [
        ("2019-W09", "Speed", 80),
        ("2019-W09", "Quality", 90),
        ("2019-W09", "Tone", 60),
        ("2019-W12", "Speed", 80),
        ("2019-W15", "Speed", 40),
        ("2019-W15", "Quality", 60),
    ]


def test_rating_counts(repository) -> None:
    counts = repository.rating_counts(MARCH)
    assert [(c.category.id, c.category.name, c.count) for c in counts] == [
        (1, "Speed", 3),
        (2, "Quality", 2),
        (3, "Tone", 2),
    ]


def test_ticket_scores(repository) -> None:
    scores = repository.ticket_scores(MARCH)
    assert [(t.ticket_id, t.category_name, t.score) for t in scores] == [
        (1, "Speed", 100),
        (1, "Quality", 80),
        (2, "Speed", 60),
        (2, "Tone", 40),
        (3, "Quality", 100),
        (3, "Tone", 80),
        (4, "Speed", 80),
    ]


def test_overall_score(repository) -> None:
    # (2*12 + 1.5*9 + 1*6) / (2*15 + 1.5*10 + 1*10) = 43.5 / 55
    assert repository.overall_score(MARCH) == 79


def test_period_over_period(repository) -> None:
    diffs = repository.period_over_period(MARCH, APRIL)
    assert [(d.category.name, d.diff) for d in diffs] == [
        ("Speed", -40),
        ("Quality", -30),
        ("Tone", -60),
    ]


def test_same_period_has_no_change(repository) -> None:
    assert all(d.diff == 0 for d in repository.period_over_period(MARCH, MARCH))


def test_whole_end_day_is_included(repository) -> None:
    one_day = TimeRange(date(2019, 3, 1), date(2019, 3, 1))
    assert [c.count for c in repository.rating_counts(one_day)] == [2, 1, 1]


def test_empty_range(repository) -> None:
    empty = TimeRange(date(2020, 1, 1), date(2020, 1, 31))
    assert repository.daily_scores(empty) == []
    assert repository.rating_counts(empty) == []
    assert repository.ticket_scores(empty) == []
    assert repository.overall_score(empty) == 0
    assert repository.period_over_period(empty, empty) == []


def test_scored_categories_match_rated_categories(repository) -> None:
    counted = {c.category.name for c in repository.rating_counts(SPRING)}
    scored = {s.category.name for s in repository.weekly_scores(SPRING)}
    rated = {name for name in repository.rating_categories() if name in counted}
    assert counted == scored == rated


def test_ping(repository) -> None:
    assert repository.ping() is True


def test_ordering_independent_of_insertion_order() -> None:
    repo = InMemoryRatingRepository()
    for category in [RatingCategory(3, "C", 0.0), RatingCategory(1, "A", 0.0), RatingCategory(2, "B", 0.0)]:
        repo.add_category(category)
    repo.add_ticket(9, datetime(2019, 3, 2))
    repo.add_ticket(8, datetime(2019, 3, 1))
    for category_id in (3, 2, 1):
        repo.add_rating(9, category_id, 5)
        repo.add_rating(8, category_id, 5)

    march = TimeRange(date(2019, 3, 1), date(2019, 3, 2))
    assert [c.category.id for c in repo.rating_counts(march)] == [1, 2, 3]
    assert [(s.period_label, s.category.id) for s in repo.daily_scores(march)] == [
        ("2019-03-01", 1), ("2019-03-01", 2), ("2019-03-01", 3),
        ("2019-03-02", 1), ("2019-03-02", 2), ("2019-03-02", 3),
    ]
    assert all(s.score == 100 for s in repo.daily_scores(march))
    assert repo.overall_score(march) == 100


def test_memory_rejects_dangling_rating() -> None:
    repo = InMemoryRatingRepository()
    with pytest.raises(ValueError):
        repo.add_rating(1, 1, 5)


def test_sql_failure_becomes_storage_unavailable(tmp_path) -> None:
    repo = SQLRatingRepository(create_db_engine(sqlite_url(tmp_path / "broken.db")))
    with repo.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE ratings")
    with pytest.raises(StorageUnavailable):
        repo.overall_score(MARCH)
    repo.close()


def test_in_memory_sqlite_url_shares_one_database() -> None:
    repo = SQLRatingRepository(create_db_engine(sqlite_url(":memory:")))
    repo.add_category(RatingCategory(1, "Speed", 1.0))
    assert repo.rating_categories() == ["Speed"]
    repo.close()


@pytest.mark.parametrize("ticket_id, category_id", [(99, 1), (1, 99)])
def test_rating_for_unknown_reference_rejected(repository, ticket_id, category_id) -> None:
    before = repository.overall_score(SPRING)
    with pytest.raises(ValueError):
        repository.add_rating(ticket_id, category_id, 5)
    assert repository.overall_score(SPRING) == before
    assert sum(c.count for c in repository.rating_counts(SPRING)) == 9


def test_duplicate_category_name_rejected(repository) -> None:
    with pytest.raises(ValueError):
        repository.add_category(RatingCategory(9, "Speed", 0.0))
    assert repository.rating_categories() == ["Speed", "Quality", "Tone", "Empathy"]


def test_sql_keeps_naive_creation_timestamps(sqlite_repo) -> None:
    sqlite_repo.add_ticket(6, datetime(2019, 3, 31, 23, 59, 59))
    sqlite_repo.add_rating(6, 3, 5)
    rows = [r for r in sqlite_repo.list_ratings(MARCH) if r.ticket_id == 6]
    assert [r.created_at for r in rows] == [datetime(2019, 3, 31, 23, 59, 59)]
    assert rows[0].created_at.tzinfo is None
