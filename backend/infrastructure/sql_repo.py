"""SQL-backed rating repository (SQLite file or PostgreSQL server)."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Iterator, List

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from domain.errors import StorageUnavailable
from domain.rating import RatedTicket, RatingCategory, TimeRange
from .database import init_db, open_session
from .models import RatingCategoryModel, RatingModel, TicketModel
from .repository import RatingRepository

logger = logging.getLogger(__name__)


class SQLRatingRepository(RatingRepository):
    def __init__(self, engine: Engine, max_rating: int = 5, name: str = "sqlite"):
        super().__init__(max_rating)
        self.engine = engine
        self.name = name
        try:
            init_db(engine)
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"failed to initialise {name} schema: {exc}") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with open_session(self.engine) as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"{self.name} query failed: {exc}") from exc

    @contextmanager
    def _writing(self) -> Iterator[Session]:
        """Transactional session; constraint violations are bad input, not outages."""
        try:
            with open_session(self.engine) as session, session.begin():
                yield session
        except IntegrityError as exc:
            raise ValueError(f"rejected by {self.name} constraints: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"{self.name} write failed: {exc}") from exc

    def close(self) -> None:
        self.engine.dispose()

    # Reads ----------------------------------------------------------------
    def list_categories(self) -> List[RatingCategory]:
        with self._session() as session:
            models = session.exec(select(RatingCategoryModel).order_by(RatingCategoryModel.id)).all()
            return [self._category_from_model(model) for model in models]

    def list_ratings(self, time_range: TimeRange) -> List[RatedTicket]:
        # created_at is a timestamp: include the whole end day
        start = datetime.combine(time_range.start, time.min)
        stop = datetime.combine(time_range.end + timedelta(days=1), time.min)
        statement = (
            select(RatingModel, TicketModel, RatingCategoryModel)
            .join(TicketModel, RatingModel.ticket_id == TicketModel.id)
            .join(RatingCategoryModel, RatingModel.rating_category_id == RatingCategoryModel.id)
            .where(TicketModel.created_at >= start)
            .where(TicketModel.created_at < stop)
        )
        with self._session() as session:
            rows = session.exec(statement).all()
            categories = {}
            result = []
            for rating, ticket, category_model in rows:
                category = categories.get(category_model.id)
                if category is None:
                    category = categories[category_model.id] = self._category_from_model(category_model)
                result.append(RatedTicket(rating.ticket_id, category, rating.rating, ticket.created_at))
            return result

    def ping(self) -> bool:
        try:
            with open_session(self.engine) as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("%s health probe failed: %s", self.name, exc)
            return False

    # Writes ---------------------------------------------------------------
    def add_category(self, category: RatingCategory) -> None:
        with self._writing() as session:
            session.merge(
                RatingCategoryModel(id=category.id, name=category.name, weight=category.weight)
            )

    def add_ticket(self, ticket_id: int, created_at: datetime) -> None:
        with self._writing() as session:
            session.merge(TicketModel(id=ticket_id, created_at=created_at))

    def add_rating(self, ticket_id: int, category_id: int, rating: int) -> None:
        with self._writing() as session:
            session.add(RatingModel(ticket_id=ticket_id, rating_category_id=category_id, rating=rating))

    # Helpers --------------------------------------------------------------
    def _category_from_model(self, model: RatingCategoryModel) -> RatingCategory:
        return RatingCategory(id=model.id, name=model.name, weight=float(model.weight or 0.0))
