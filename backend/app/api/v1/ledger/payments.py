"""
장부 API - 판매 항목 직접 입금
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_uow
from app.core.database import get_db
from app.core.security import Actor
from app.schemas.ledger import (
    PaymentCreate,
    PaymentDeleteResponse,
    PaymentRecordResponse,
    PaymentResponse,
)
from app.services import payment_service
from app.services.notification_service import NotificationSink, get_notification_sink
from app.services.unit_of_work import UnitOfWork

router = APIRouter()


@router.post("", response_model=PaymentRecordResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    data: PaymentCreate,
    uow: UnitOfWork = Depends(get_uow),
    sink: NotificationSink = Depends(get_notification_sink),
    actor: Actor = Depends(get_current_actor),
):
    """직접 입금 등록 → 갱신된 잔액 반환"""
    result = await payment_service.record_payment(
        uow,
        actor,
        sell_item_id=data.sell_item_id,
        amount=data.amount,
        payment_date=data.payment_date,
        sink=sink,
        payment_method=data.payment_method,
        notes=data.notes,
    )
    payment = PaymentResponse.model_validate(result.payment)
    return PaymentRecordResponse(**payment.model_dump(), updated_balance=result.updated_balance)


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    sell_item_id: UUID = Query(..., description="판매 항목 ID"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """판매 항목의 직접 입금 이력 (최근 입금일순)"""
    payments = await payment_service.list_payments(db, sell_item_id)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.delete("/{payment_id}", response_model=PaymentDeleteResponse)
async def delete_payment(
    payment_id: UUID,
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    """직접 입금 삭제 (관리자 전용)"""
    updated_balance = await payment_service.delete_payment(uow, actor, payment_id)
    return PaymentDeleteResponse(updated_balance=updated_balance)
