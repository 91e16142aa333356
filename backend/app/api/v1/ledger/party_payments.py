"""
장부 API - 거래처 일괄 입금 (FIFO 자동 배분) / 취소 (역분개)
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_uow
from app.api.v1.ledger.converters import (
    party_payment_to_detail,
    party_payment_to_response,
)
from app.core.database import get_db
from app.core.security import Actor
from app.schemas.ledger import (
    AllocationResponse,
    PartyPaymentCreate,
    PartyPaymentCreateResponse,
    PartyPaymentDeleteRequest,
    PartyPaymentDetailResponse,
    PartyPaymentResponse,
)
from app.services import allocation_service, reversal_service
from app.services.notification_service import NotificationSink, get_notification_sink
from app.services.unit_of_work import UnitOfWork

router = APIRouter()


@router.post("", response_model=PartyPaymentCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_party_payment(
    data: PartyPaymentCreate,
    uow: UnitOfWork = Depends(get_uow),
    sink: NotificationSink = Depends(get_notification_sink),
    actor: Actor = Depends(get_current_actor),
):
    """
    거래처 일괄 입금 등록

    오래된 미수 판매 항목부터 자동 배분하고 남는 금액은 거래처 적립액으로 전환
    """
    result = await allocation_service.create_party_payment(
        uow,
        actor,
        party_id=data.party_id,
        amount=data.amount,
        payment_date=data.payment_date,
        sink=sink,
        payment_method=data.payment_method,
        notes=data.notes,
    )
    base = party_payment_to_response(result.party_payment)
    return PartyPaymentCreateResponse(
        **base.model_dump(),
        allocations_count=result.allocations_count,
        credit_added=result.credit_added,
        allocations=[AllocationResponse.model_validate(a) for a in result.allocations],
    )


@router.get("", response_model=List[PartyPaymentResponse])
async def list_party_payments(
    party_id: UUID = Query(..., description="거래처 ID"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """거래처의 유효 일괄 입금 목록 (취소 건 제외)"""
    party_payments = await allocation_service.list_party_payments(db, party_id)
    return [party_payment_to_response(pp) for pp in party_payments]


@router.get("/{party_payment_id}", response_model=PartyPaymentDetailResponse)
async def get_party_payment(
    party_payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """일괄 입금 상세 (배분 내역 포함, 취소 건 조회 가능)"""
    party_payment = await allocation_service.get_party_payment(db, party_payment_id)
    return party_payment_to_detail(party_payment)


@router.delete("/{party_payment_id}", response_model=PartyPaymentResponse)
async def delete_party_payment(
    party_payment_id: UUID,
    body: Optional[PartyPaymentDeleteRequest] = Body(None),
    uow: UnitOfWork = Depends(get_uow),
    sink: NotificationSink = Depends(get_notification_sink),
    actor: Actor = Depends(get_current_actor),
):
    """일괄 입금 취소 + 배분 역분개 (관리자 전용)"""
    party_payment = await reversal_service.delete_party_payment(
        uow,
        actor,
        party_payment_id,
        sink=sink,
        reason=body.reason if body else None,
    )
    return party_payment_to_response(party_payment)
