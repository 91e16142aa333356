"""
거래 장부 관리 시스템 - 직접 입금 처리
특정 판매 항목 1건에 대한 입금 등록/조회/삭제 + 수금액 재계산

수금 누적액 = 해당 항목의 직접 입금 합계 + 유효(ACTIVE) 일괄 입금 배분 합계
잔액은 음수가 될 수 있음 (직접 입금은 잔액 초과분을 적립으로 돌리지 않음)
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError
from app.core.security import Actor
from app.models.audit_log import AuditLog
from app.models.enums import AuditAction, NotificationType, PartyPaymentStatus
from app.models.party_payment import PartyPayment
from app.models.payment import Payment
from app.models.payment_allocation import PaymentAllocation
from app.models.transaction import SellItem, Transaction
from app.services.notification_service import (
    NotificationEvent, NotificationSink, format_amount, notify_after_commit,
)
from app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PaymentRecordResult:
    payment: Payment
    updated_balance: Decimal


def to_decimal(value) -> Decimal:
    """집계 결과(드라이버별 float/Decimal/None) → 소수 2자리 Decimal"""
    if value is None:
        return Decimal("0")
    return Decimal(str(value)).quantize(CENT)


def validate_amount(amount: Optional[Decimal]) -> Decimal:
    if amount is None:
        raise InvalidArgumentError("금액은 필수입니다")
    try:
        amount = Decimal(str(amount))
    except InvalidOperation:
        raise InvalidArgumentError("금액 형식이 올바르지 않습니다")
    if not amount.is_finite():
        raise InvalidArgumentError("금액 형식이 올바르지 않습니다")
    if amount <= 0:
        raise InvalidArgumentError("금액은 0보다 커야 합니다")
    # 저장 정밀도(소수 2자리)를 넘는 금액은 반올림하지 않고 거부
    if amount != amount.quantize(CENT):
        raise InvalidArgumentError("금액은 소수 둘째 자리까지만 입력할 수 있습니다")
    return amount.quantize(CENT)


def validate_date(value: Optional[date], field: str = "입금일") -> date:
    if not isinstance(value, date):
        raise InvalidArgumentError(f"{field}은(는) 필수입니다")
    return value


async def recompute_payment_received(session: AsyncSession, sell_item: SellItem) -> Decimal:
    """직접 입금 + 유효 배분 합계로 수금액/잔액 재계산"""
    direct_total = (await session.execute(
        select(func.coalesce(func.sum(Payment.amount), 0))
        .where(Payment.sell_item_id == sell_item.id)
    )).scalar()

    allocated_total = (await session.execute(
        select(func.coalesce(func.sum(PaymentAllocation.amount), 0))
        .join(PartyPayment, PaymentAllocation.party_payment_id == PartyPayment.id)
        .where(
            PaymentAllocation.sell_item_id == sell_item.id,
            PartyPayment.status == PartyPaymentStatus.ACTIVE,
        )
    )).scalar()

    sell_item.apply_received(to_decimal(direct_total) + to_decimal(allocated_total))
    return sell_item.balance_left


async def _lock_sell_item(session: AsyncSession, sell_item_id: uuid.UUID) -> Optional[SellItem]:
    result = await session.execute(
        select(SellItem)
        .options(selectinload(SellItem.transaction).selectinload(Transaction.party))
        .where(SellItem.id == sell_item_id)
        .with_for_update(of=SellItem)
    )
    return result.scalar_one_or_none()


async def record_payment(
    uow: UnitOfWork,
    actor: Actor,
    sell_item_id: uuid.UUID,
    amount: Decimal,
    payment_date: date,
    sink: NotificationSink,
    payment_method: Optional[str] = None,
    notes: Optional[str] = None,
) -> PaymentRecordResult:
    """
    판매 항목에 직접 입금 등록

    Raises:
        InvalidArgumentError: 금액/입금일 누락 또는 0 이하
        NotFoundError: 판매 항목 없음
    """
    if sell_item_id is None:
        raise InvalidArgumentError("판매 항목 ID는 필수입니다")
    amount = validate_amount(amount)
    payment_date = validate_date(payment_date)

    async with uow:
        session = uow.session
        sell_item = await _lock_sell_item(session, sell_item_id)
        if not sell_item:
            raise NotFoundError("판매 항목을 찾을 수 없습니다")

        payment = Payment(
            sell_item_id=sell_item.id,
            amount=amount,
            payment_date=payment_date,
            payment_method=payment_method or None,
            notes=notes or None,
            created_by=actor.id,
        )
        session.add(payment)
        await session.flush()

        before_balance = sell_item.balance_left
        updated_balance = await recompute_payment_received(session, sell_item)
        if updated_balance < 0:
            logger.warning(
                f"[Payment] 잔액 초과 입금: sell_item={sell_item.id}, balance={updated_balance}"
            )

        session.add(AuditLog(
            user_id=actor.id,
            action=AuditAction.PAYMENT_CREATE,
            target_type="payment",
            target_id=payment.id,
            before_data={"sell_item_id": str(sell_item.id), "balance_left": str(before_balance)},
            after_data={
                "amount": str(amount),
                "date": str(payment_date),
                "balance_left": str(updated_balance),
            },
        ))

        party = sell_item.transaction.party if sell_item.transaction else None
        notify_after_commit(uow, sink, NotificationEvent(
            actor_id=actor.id,
            actor_name=actor.display_name,
            action="recorded payment",
            details=f"{format_amount(amount)} for {party.name if party else 'Unknown'}",
            type=NotificationType.CREATE,
        ))

    logger.info(f"[Payment] 등록 완료: id={payment.id}, amount={amount}, balance={updated_balance}")
    return PaymentRecordResult(payment=payment, updated_balance=updated_balance)


async def list_payments(session: AsyncSession, sell_item_id: uuid.UUID) -> List[Payment]:
    """판매 항목의 직접 입금 이력 (입금일 내림차순)"""
    result = await session.execute(
        select(Payment)
        .where(Payment.sell_item_id == sell_item_id)
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_payment(
    uow: UnitOfWork,
    actor: Actor,
    payment_id: uuid.UUID,
) -> Decimal:
    """
    직접 입금 삭제 (관리자 전용, 물리 삭제) 후 판매 항목 잔액 재계산

    Returns:
        재계산된 잔액
    """
    if not actor.is_admin:
        logger.warning(f"[Payment] 삭제 권한 없음: actor={actor.id}, payment={payment_id}")
        raise ForbiddenError("입금 내역은 관리자만 삭제할 수 있습니다")

    async with uow:
        session = uow.session
        payment = await session.get(Payment, payment_id)
        if not payment:
            raise NotFoundError("입금 내역을 찾을 수 없습니다")

        sell_item = await _lock_sell_item(session, payment.sell_item_id)

        session.add(AuditLog(
            user_id=actor.id,
            action=AuditAction.PAYMENT_DELETE,
            target_type="payment",
            target_id=payment.id,
            before_data={
                "sell_item_id": str(payment.sell_item_id),
                "amount": str(payment.amount),
                "date": str(payment.payment_date),
            },
        ))

        await session.delete(payment)
        await session.flush()

        updated_balance = await recompute_payment_received(session, sell_item)

    logger.info(f"[Payment] 삭제 완료: id={payment_id}, balance={updated_balance}")
    return updated_balance
