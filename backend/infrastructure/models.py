"""SQLModel ORM tables for rating reference data and raw ratings."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


class RatingCategoryModel(SQLModel, table=True):
    __tablename__ = "rating_categories"

    id: int = Field(primary_key=True)
    name: str = Field(unique=True)
    weight: float = Field(default=0.0)


class TicketModel(SQLModel, table=True):
    __tablename__ = "tickets"

    id: int = Field(primary_key=True)
    # naive local timestamps, as stored by the ticketing system
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))


class RatingModel(SQLModel, table=True):
    __tablename__ = "ratings"

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(foreign_key="tickets.id", index=True)
    rating_category_id: int = Field(foreign_key="rating_categories.id")
    rating: int
