"""
거래 장부 관리 시스템 - 거래처 일괄 입금 취소 (역분개)
입금을 REVERSED 상태로 전이하고, 배분된 판매 항목 잔액과 거래처 적립액을 되돌린다.
배분 행은 삭제/수정하지 않는다 (감사 이력 보존).
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.security import Actor
from app.models.audit_log import AuditLog
from app.models.enums import AuditAction, NotificationType
from app.models.party_payment import PartyPayment
from app.models.transaction import SellItem
from app.services.allocation_service import lock_party
from app.services.notification_service import (
    NotificationEvent, NotificationSink, format_amount, notify_after_commit,
)
from app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_DELETE_REASON = "Admin deleted"
ZERO = Decimal("0")


async def delete_party_payment(
    uow: UnitOfWork,
    actor: Actor,
    party_payment_id: uuid.UUID,
    sink: NotificationSink,
    reason: Optional[str] = None,
) -> PartyPayment:
    """
    일괄 입금 취소 + 배분 역분개 (관리자 전용, 단일 트랜잭션)

    Raises:
        ForbiddenError: 관리자가 아님
        NotFoundError: 입금 없음
        AlreadyDeletedError: 이미 취소된 입금
    """
    if not actor.is_admin:
        logger.warning(
            f"[PartyPayment] 취소 권한 없음: actor={actor.id}, party_payment={party_payment_id}"
        )
        raise ForbiddenError("입금 내역은 관리자만 삭제할 수 있습니다")

    async with uow:
        session = uow.session

        # 잠금 순서: 거래처 → 입금 → 판매 항목 (배분 엔진과 동일)
        party_id = (await session.execute(
            select(PartyPayment.party_id).where(PartyPayment.id == party_payment_id)
        )).scalar_one_or_none()
        if party_id is None:
            raise NotFoundError("거래처 입금을 찾을 수 없습니다")

        party = await lock_party(session, party_id)

        result = await session.execute(
            select(PartyPayment)
            .options(selectinload(PartyPayment.allocations))
            .where(PartyPayment.id == party_payment_id)
            .with_for_update(of=PartyPayment)
        )
        party_payment = result.scalar_one()

        # 1. 상태 전이 (이미 취소된 경우 AlreadyDeletedError → 롤백)
        party_payment.reverse(
            actor_id=actor.id,
            reason=reason or DEFAULT_DELETE_REASON,
            at=datetime.utcnow(),
        )

        # 2. 배분 역분개
        allocations = list(party_payment.allocations)
        item_ids = [a.sell_item_id for a in allocations]
        item_map = {}
        if item_ids:
            item_result = await session.execute(
                select(SellItem)
                .where(SellItem.id.in_(item_ids))
                .order_by(SellItem.id)
                .with_for_update()
            )
            item_map = {si.id: si for si in item_result.scalars().all()}

        for allocation in allocations:
            sell_item = item_map.get(allocation.sell_item_id)
            if sell_item is None:
                continue
            sell_item.apply_received(sell_item.payment_received - allocation.amount)

        # 3. 적립분 환원
        allocated_amount = sum((a.amount for a in allocations), ZERO)
        credit_portion = party_payment.amount - allocated_amount
        if credit_portion > 0:
            party.credit_balance = (party.credit_balance or ZERO) - credit_portion

        await session.flush()

        session.add(AuditLog(
            user_id=actor.id,
            action=AuditAction.PARTY_PAYMENT_REVERSE,
            target_type="party_payment",
            target_id=party_payment.id,
            before_data={"status": "active", "amount": str(party_payment.amount)},
            after_data={
                "status": "reversed",
                "reversed_allocations": len(allocations),
                "allocated_amount": str(allocated_amount),
                "credit_reversed": str(max(credit_portion, ZERO)),
            },
            description=party_payment.delete_reason,
        ))

        notify_after_commit(uow, sink, NotificationEvent(
            actor_id=actor.id,
            actor_name=actor.display_name,
            action="deleted party payment",
            details=f"{format_amount(party_payment.amount)} for {party.name} (allocations reversed)",
            type=NotificationType.DELETE,
        ))

    logger.info(
        f"[PartyPayment] 취소 완료: id={party_payment_id}, "
        f"allocations={len(allocations)}, credit_reversed={max(credit_portion, ZERO)}"
    )
    return party_payment
