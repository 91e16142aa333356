"""
장부 API - 요약 통계 / 기간 리포트
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor
from app.core.database import get_db
from app.core.security import Actor
from app.schemas.ledger import AggregateStatsResponse, KindTotalsResponse, ReportSummaryResponse
from app.services import ledger_service

router = APIRouter()


@router.get("/stats/summary", response_model=AggregateStatsResponse)
async def get_stats_summary(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """전체 판매/수금/잔액 + 유효 일괄 입금 건수"""
    stats = await ledger_service.aggregate_stats(db)
    return AggregateStatsResponse(
        total_selling=stats.total_selling,
        total_received=stats.total_received,
        balance_left=stats.balance_left,
        party_payments_count=stats.party_payments_count,
    )


@router.get("/reports/summary", response_model=ReportSummaryResponse)
async def get_report_summary(
    date_from: Optional[date] = Query(None, description="시작일"),
    date_to: Optional[date] = Query(None, description="종료일"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """기간별 매입/판매 건수·중량·금액"""
    totals = await ledger_service.report_summary(db, date_from=date_from, date_to=date_to)
    return ReportSummaryResponse(
        buying=KindTotalsResponse(**vars(totals["buying"])),
        selling=KindTotalsResponse(**vars(totals["selling"])),
    )
