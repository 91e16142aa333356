"""
장부 API - 거래처 등록/조회/상세/통계
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_uow
from app.api.v1.ledger.converters import party_payment_to_response, transaction_to_response
from app.core.database import get_db
from app.core.security import Actor
from app.schemas.ledger import (
    PartyCreate,
    PartyDetailResponse,
    PartyResponse,
    PartyStatsItem,
    PartySummaryResponse,
)
from app.services import ledger_service
from app.services.unit_of_work import UnitOfWork

router = APIRouter()


@router.get("", response_model=List[PartyResponse])
async def list_parties(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """거래처 목록 (최근 등록순)"""
    parties = await ledger_service.list_parties(db)
    return [PartyResponse.model_validate(p) for p in parties]


@router.post("", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
async def create_party(
    data: PartyCreate,
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    """거래처 등록"""
    party = await ledger_service.create_party(uow, actor, data)
    return PartyResponse.model_validate(party)


@router.get("/stats", response_model=List[PartyStatsItem])
async def list_party_stats(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """거래처별 매입/판매/수금/잔액 통계"""
    rows = await ledger_service.list_party_stats(db)
    return [
        PartyStatsItem(
            id=party.id,
            name=party.name,
            phone=party.phone,
            image=party.image,
            is_active=party.is_active,
            buying_total=summary.buying_total,
            selling_total=summary.selling_total,
            total_received=summary.total_received,
            balance=summary.balance_owed,
            transaction_count=summary.transaction_count,
        )
        for party, summary in rows
    ]


@router.get("/{party_id}", response_model=PartyDetailResponse)
async def get_party_detail(
    party_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """거래처 상세 (거래, 유효 일괄 입금, 요약)"""
    detail = await ledger_service.get_party_detail(db, party_id)
    party = PartyResponse.model_validate(detail.party)
    summary = detail.summary
    return PartyDetailResponse(
        **party.model_dump(),
        transactions=[transaction_to_response(t) for t in detail.transactions],
        party_payments=[party_payment_to_response(pp) for pp in detail.party_payments],
        summary=PartySummaryResponse(
            buying_total=summary.buying_total,
            selling_total=summary.selling_total,
            total_received=summary.total_received,
            balance_owed=summary.balance_owed,
            credit_balance=summary.credit_balance,
            transaction_count=summary.transaction_count,
            last_payment=summary.last_payment,
        ),
    )
