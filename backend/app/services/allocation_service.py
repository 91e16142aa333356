"""
거래 장부 관리 시스템 - 거래처 일괄 입금 FIFO 배분
일괄 입금을 거래처의 미수 판매 항목에 오래된 거래부터 배분하고, 남는 금액은 적립(credit)

배분 순서: 거래일 ASC → 거래 생성일시 ASC → 항목 생성일시 ASC → 항목 ID ASC
불변식: 배분 합계 + 적립액 == 입금액 (Decimal 정확 일치)
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.core.security import Actor
from app.models.audit_log import AuditLog
from app.models.enums import AuditAction, NotificationType, PartyPaymentStatus, TransactionKind
from app.models.party import Party
from app.models.party_payment import PartyPayment
from app.models.payment_allocation import PaymentAllocation
from app.models.transaction import SellItem, Transaction
from app.services.notification_service import (
    NotificationEvent, NotificationSink, format_amount, notify_after_commit,
)
from app.services.payment_service import validate_amount, validate_date
from app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class AllocationLine:
    sell_item_id: uuid.UUID
    amount: Decimal
    order: int


@dataclass(frozen=True)
class AllocationPlan:
    lines: Tuple[AllocationLine, ...]
    credit: Decimal

    @property
    def allocated_total(self) -> Decimal:
        return sum((line.amount for line in self.lines), ZERO)


@dataclass(frozen=True)
class PartyPaymentResult:
    party_payment: PartyPayment
    allocations: Tuple[PaymentAllocation, ...]
    credit_added: Decimal

    @property
    def allocations_count(self) -> int:
        return len(self.allocations)


def plan_fifo_allocation(
    amount: Decimal,
    open_items: Sequence[Tuple[uuid.UUID, Decimal]],
) -> AllocationPlan:
    """
    FIFO 배분 계획 (순수 함수)

    Args:
        amount: 입금액
        open_items: (판매 항목 ID, 잔액): 이미 FIFO 순서로 정렬된 목록

    Returns:
        AllocationPlan (배분 라인 + 적립액)
    """
    remaining = amount
    lines: List[AllocationLine] = []

    for item_id, balance_left in open_items:
        if remaining <= 0:
            break

        allocatable = min(remaining, balance_left)
        if allocatable <= 0:
            continue

        lines.append(AllocationLine(sell_item_id=item_id, amount=allocatable, order=len(lines) + 1))
        remaining -= allocatable

    return AllocationPlan(lines=tuple(lines), credit=remaining if remaining > 0 else ZERO)


async def fetch_open_sell_items(session: AsyncSession, party_id: uuid.UUID) -> List[SellItem]:
    """거래처의 잔액 > 0 판매 항목 (FIFO 순서, 행 잠금)"""
    result = await session.execute(
        select(SellItem)
        .join(Transaction, SellItem.transaction_id == Transaction.id)
        .where(
            Transaction.party_id == party_id,
            Transaction.kind == TransactionKind.SELL,
            SellItem.balance_left > 0,
        )
        .order_by(
            Transaction.transaction_date.asc(),
            Transaction.created_at.asc(),
            SellItem.created_at.asc(),
            SellItem.id.asc(),
        )
        .with_for_update(of=SellItem)
    )
    return list(result.scalars().all())


async def lock_party(session: AsyncSession, party_id: uuid.UUID) -> Optional[Party]:
    """거래처 행 잠금 (동일 거래처의 배분/역분개를 직렬화)"""
    result = await session.execute(
        select(Party).where(Party.id == party_id).with_for_update()
    )
    return result.scalar_one_or_none()


async def create_party_payment(
    uow: UnitOfWork,
    actor: Actor,
    party_id: uuid.UUID,
    amount: Decimal,
    payment_date: date,
    sink: NotificationSink,
    payment_method: Optional[str] = None,
    notes: Optional[str] = None,
) -> PartyPaymentResult:
    """
    거래처 일괄 입금 등록 + FIFO 자동 배분 (단일 트랜잭션)

    중복 제출 방지 없음: 같은 요청을 두 번 보내면 독립된 입금 2건이 생성된다.

    Raises:
        InvalidArgumentError: 금액/입금일 누락 또는 0 이하
        NotFoundError: 거래처 없음
        StoreFailureError: 커밋 실패 (전체 롤백)
    """
    if party_id is None:
        raise InvalidArgumentError("거래처 ID는 필수입니다")
    amount = validate_amount(amount)
    payment_date = validate_date(payment_date)

    async with uow:
        session = uow.session
        party = await lock_party(session, party_id)
        if not party:
            raise NotFoundError("거래처를 찾을 수 없습니다")

        # 1. 입금 생성
        party_payment = PartyPayment(
            party_id=party.id,
            amount=amount,
            payment_date=payment_date,
            payment_method=payment_method or None,
            notes=notes or None,
            status=PartyPaymentStatus.ACTIVE,
            created_by=actor.id,
        )
        session.add(party_payment)
        await session.flush()

        # 2~3. 오래된 미수부터 배분
        open_items = await fetch_open_sell_items(session, party.id)
        item_map = {si.id: si for si in open_items}
        plan = plan_fifo_allocation(amount, [(si.id, si.balance_left) for si in open_items])

        allocations = []
        for line in plan.lines:
            sell_item = item_map[line.sell_item_id]
            allocation = PaymentAllocation(
                party_payment_id=party_payment.id,
                sell_item_id=sell_item.id,
                amount=line.amount,
                allocation_order=line.order,
            )
            session.add(allocation)
            allocations.append(allocation)
            sell_item.apply_received(sell_item.payment_received + line.amount)

        # 4. 초과분 적립
        if plan.credit > 0:
            party.credit_balance = (party.credit_balance or ZERO) + plan.credit

        await session.flush()

        session.add(AuditLog(
            user_id=actor.id,
            action=AuditAction.PARTY_PAYMENT_CREATE,
            target_type="party_payment",
            target_id=party_payment.id,
            after_data={
                "party_id": str(party.id),
                "amount": str(amount),
                "date": str(payment_date),
                "allocations": [
                    {"sell_item_id": str(a.sell_item_id), "amount": str(a.amount)}
                    for a in allocations
                ],
                "credit_added": str(plan.credit),
            },
        ))

        details = f"{format_amount(amount)} for {party.name}"
        if plan.credit > 0:
            details += f" ({format_amount(plan.credit)} as credit)"
        notify_after_commit(uow, sink, NotificationEvent(
            actor_id=actor.id,
            actor_name=actor.display_name,
            action="recorded party payment",
            details=details,
            type=NotificationType.CREATE,
        ))

    logger.info(
        f"[PartyPayment] 등록 완료: id={party_payment.id}, amount={amount}, "
        f"allocations={len(allocations)}, credit={plan.credit}"
    )
    return PartyPaymentResult(
        party_payment=party_payment,
        allocations=tuple(allocations),
        credit_added=plan.credit,
    )


async def list_party_payments(session: AsyncSession, party_id: uuid.UUID) -> List[PartyPayment]:
    """거래처의 유효 일괄 입금 목록 (입금일 내림차순)"""
    result = await session.execute(
        select(PartyPayment)
        .where(
            PartyPayment.party_id == party_id,
            PartyPayment.status == PartyPaymentStatus.ACTIVE,
        )
        .order_by(PartyPayment.payment_date.desc(), PartyPayment.created_at.desc())
    )
    return list(result.scalars().all())


async def get_party_payment(session: AsyncSession, party_payment_id: uuid.UUID) -> PartyPayment:
    """일괄 입금 상세 (배분 내역 포함, 취소된 건도 조회 가능)"""
    result = await session.execute(
        select(PartyPayment)
        .options(selectinload(PartyPayment.allocations))
        .where(PartyPayment.id == party_payment_id)
    )
    party_payment = result.scalar_one_or_none()
    if not party_payment:
        raise NotFoundError("거래처 입금을 찾을 수 없습니다")
    return party_payment
