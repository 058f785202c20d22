"""Score reporting endpoints: category, ticket, overall and period-over-period scores."""
from __future__ import annotations

from typing import Callable, List, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from application.report_service import ReportService
from domain.errors import InvalidRange, StorageUnavailable
from interfaces import deps

router = APIRouter(prefix="/scores", tags=["scores"])

T = TypeVar("T")


class PeriodScoreOut(BaseModel):
    category_id: int
    category_name: str
    period_label: str
    score: int


class CategoryCountOut(BaseModel):
    category_id: int
    category_name: str
    count: int


class CategoryScoresOut(BaseModel):
    granularity: str
    scores: List[PeriodScoreOut]
    counts: List[CategoryCountOut]


class TicketScoreOut(BaseModel):
    ticket_id: int
    category_name: str
    score: int


class TicketScoresOut(BaseModel):
    categories: List[str]
    scores: List[TicketScoreOut]


class OverallScoreOut(BaseModel):
    score: int


class CategoryDiffOut(BaseModel):
    category_id: int
    category_name: str
    diff: int


class PeriodOverPeriodOut(BaseModel):
    changes: List[CategoryDiffOut]


def _call(fn: Callable[..., T], *args: str) -> T:
    try:
        return fn(*args)
    except InvalidRange as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/categories", response_model=CategoryScoresOut)
def get_category_scores(
    from_: str = Query(..., alias="from"),
    to: str = Query(...),
    service: ReportService = Depends(deps.get_report_service),
) -> CategoryScoresOut:
    report = _call(service.category_scores, from_, to)
    return CategoryScoresOut(
        granularity=report.granularity.value,
        scores=[
            PeriodScoreOut(
                category_id=item.category.id,
                category_name=item.category.name,
                period_label=item.period_label,
                score=item.score,
            )
            for item in report.scores
        ],
        counts=[
            CategoryCountOut(category_id=item.category.id, category_name=item.category.name, count=item.count)
            for item in report.counts
        ],
    )


@router.get("/tickets", response_model=TicketScoresOut)
def get_ticket_scores(
    from_: str = Query(..., alias="from"),
    to: str = Query(...),
    service: ReportService = Depends(deps.get_report_service),
) -> TicketScoresOut:
    report = _call(service.ticket_scores, from_, to)
    return TicketScoresOut(
        categories=report.categories,
        scores=[
            TicketScoreOut(ticket_id=item.ticket_id, category_name=item.category_name, score=item.score)
            for item in report.scores
        ],
    )


@router.get("/overall", response_model=OverallScoreOut)
def get_overall_score(
    from_: str = Query(..., alias="from"),
    to: str = Query(...),
    service: ReportService = Depends(deps.get_report_service),
) -> OverallScoreOut:
    report = _call(service.overall_score, from_, to)
    return OverallScoreOut(score=report.score)


@router.get("/period-over-period", response_model=PeriodOverPeriodOut)
def get_period_over_period(
    first_from: str = Query(...),
    first_to: str = Query(...),
    second_from: str = Query(...),
    second_to: str = Query(...),
    service: ReportService = Depends(deps.get_report_service),
) -> PeriodOverPeriodOut:
    report = _call(service.period_over_period, first_from, first_to, second_from, second_to)
    return PeriodOverPeriodOut(
        changes=[
            CategoryDiffOut(category_id=item.category.id, category_name=item.category.name, diff=item.diff)
            for item in report.changes
        ]
    )
