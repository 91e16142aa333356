"""
장부 API - 매입/판매 거래 등록/조회
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_uow
from app.api.v1.ledger.converters import transaction_to_response
from app.core.database import get_db
from app.core.security import Actor
from app.schemas.ledger import TransactionCreate, TransactionResponse
from app.services import ledger_service
from app.services.notification_service import NotificationSink, get_notification_sink
from app.services.unit_of_work import UnitOfWork

router = APIRouter()


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: TransactionCreate,
    uow: UnitOfWork = Depends(get_uow),
    sink: NotificationSink = Depends(get_notification_sink),
    actor: Actor = Depends(get_current_actor),
):
    """매입/판매 거래 등록 (판매 항목은 미수 잔액 생성)"""
    txn = await ledger_service.create_transaction(uow, actor, data, sink)
    return transaction_to_response(txn)


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    kind: Optional[str] = Query(None, pattern="^(buy|sell|all)$", description="buy/sell/all"),
    party_id: Optional[UUID] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """거래 목록 조회"""
    transactions = await ledger_service.list_transactions(
        db, kind=kind, party_id=party_id, date_from=date_from, date_to=date_to
    )
    return [transaction_to_response(t) for t in transactions]


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """거래 상세"""
    txn = await ledger_service.get_transaction(db, transaction_id)
    return transaction_to_response(txn)
