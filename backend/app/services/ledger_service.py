"""
거래 장부 관리 시스템 - 거래처/거래 등록 및 조회, 요약 통계
판매 거래 등록 시 판매 항목의 채권(잔액)이 생성된다.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.core.security import Actor
from app.models.audit_log import AuditLog
from app.models.enums import AuditAction, NotificationType, PartyPaymentStatus, TransactionKind
from app.models.party import Party
from app.models.party_payment import PartyPayment
from app.models.payment import Payment
from app.models.transaction import BuyItem, SellItem, Transaction
from app.schemas.ledger import PartyCreate, TransactionCreate
from app.services.balance_calculator import (
    AggregateStats, KindTotals, PartySummary,
    compute_aggregate_stats, compute_kind_totals, compute_party_summary,
)
from app.services.notification_service import (
    NotificationEvent, NotificationSink, format_amount, notify_after_commit,
)
from app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
OPENING_PAYMENT_NOTE = "거래 등록 시 수금"


@dataclass(frozen=True)
class PartyDetail:
    party: Party
    transactions: List[Transaction]
    party_payments: List[PartyPayment]
    summary: PartySummary


# =============================================================================
# 거래처
# =============================================================================

async def create_party(uow: UnitOfWork, actor: Actor, data: PartyCreate) -> Party:
    """거래처 등록"""
    async with uow:
        session = uow.session
        party = Party(
            name=data.name,
            phone=data.phone,
            email=data.email,
            address=data.address,
            notes=data.notes,
            image=data.image,
            credit_balance=ZERO,
            created_by=actor.id,
        )
        session.add(party)
        await session.flush()

        session.add(AuditLog(
            user_id=actor.id,
            action=AuditAction.PARTY_CREATE,
            target_type="party",
            target_id=party.id,
            after_data={"name": data.name},
        ))

    return party


async def list_parties(session: AsyncSession) -> List[Party]:
    result = await session.execute(select(Party).order_by(Party.created_at.desc()))
    return list(result.scalars().all())


def _transaction_loader():
    return (
        selectinload(Transaction.party),
        selectinload(Transaction.buy_items),
        selectinload(Transaction.sell_items).selectinload(SellItem.payments),
    )


async def get_party_detail(session: AsyncSession, party_id: uuid.UUID) -> PartyDetail:
    """거래처 상세 (거래 + 유효 일괄 입금 + 요약)"""
    party = await session.get(Party, party_id)
    if not party:
        raise NotFoundError("거래처를 찾을 수 없습니다")

    tx_result = await session.execute(
        select(Transaction)
        .options(*_transaction_loader())
        .where(Transaction.party_id == party_id)
        .order_by(Transaction.transaction_date.desc(), Transaction.created_at.desc())
    )
    transactions = list(tx_result.scalars().all())

    pp_result = await session.execute(
        select(PartyPayment)
        .where(
            PartyPayment.party_id == party_id,
            PartyPayment.status == PartyPaymentStatus.ACTIVE,
        )
        .order_by(PartyPayment.payment_date.desc(), PartyPayment.created_at.desc())
    )
    party_payments = list(pp_result.scalars().all())

    return PartyDetail(
        party=party,
        transactions=transactions,
        party_payments=party_payments,
        summary=compute_party_summary(party, transactions, party_payments),
    )


async def list_party_stats(session: AsyncSession) -> List[tuple[Party, PartySummary]]:
    """거래처별 매입/판매/수금/잔액 통계"""
    parties = await list_parties(session)
    if not parties:
        return []

    tx_result = await session.execute(
        select(Transaction).options(*_transaction_loader())
    )
    by_party: dict[uuid.UUID, list[Transaction]] = {}
    for t in tx_result.scalars().all():
        by_party.setdefault(t.party_id, []).append(t)

    return [
        (party, compute_party_summary(party, by_party.get(party.id, [])))
        for party in parties
    ]


async def aggregate_stats(session: AsyncSession) -> AggregateStats:
    """전체 판매/수금/잔액 + 유효 일괄 입금 건수"""
    sell_items = (await session.execute(select(SellItem))).scalars().all()
    party_payments = (await session.execute(
        select(PartyPayment).where(PartyPayment.status == PartyPaymentStatus.ACTIVE)
    )).scalars().all()
    return compute_aggregate_stats(sell_items, party_payments)


async def report_summary(
    session: AsyncSession,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict[str, KindTotals]:
    """기간별 매입/판매 건수·중량·금액 합계"""
    query = select(Transaction)
    if date_from:
        query = query.where(Transaction.transaction_date >= date_from)
    if date_to:
        query = query.where(Transaction.transaction_date <= date_to)
    transactions = (await session.execute(query)).scalars().all()
    return {
        "buying": compute_kind_totals(transactions, TransactionKind.BUY),
        "selling": compute_kind_totals(transactions, TransactionKind.SELL),
    }


# =============================================================================
# 거래
# =============================================================================

async def create_transaction(
    uow: UnitOfWork,
    actor: Actor,
    data: TransactionCreate,
    sink: NotificationSink,
) -> Transaction:
    """
    매입/판매 거래 등록

    판매 항목의 등록 시 수금액(payment_received)은 직접 입금 1건으로 기록하여
    이후 입금 재계산 시에도 유지되도록 한다.
    """
    kind = TransactionKind(data.kind)

    async with uow:
        session = uow.session
        party = await session.get(Party, data.party_id)
        if not party:
            raise NotFoundError("거래처를 찾을 수 없습니다")

        total_payment = data.total_payment
        if total_payment is None:
            if kind != TransactionKind.SELL:
                raise InvalidArgumentError("매입 거래는 총 금액이 필수입니다")
            total_payment = sum((item.total_amount for item in data.sell_items), ZERO)

        txn = Transaction(
            kind=kind,
            transaction_date=data.date,
            party_id=party.id,
            phone=data.phone,
            total_weight=data.total_weight,
            total_payment=total_payment,
            notes=data.notes,
            invoice_image=data.invoice_image,
            receipt_image=data.receipt_image,
            created_by=actor.id,
        )
        session.add(txn)
        await session.flush()

        for item in data.buy_items:
            session.add(BuyItem(transaction_id=txn.id, **item.model_dump()))

        for item in data.sell_items:
            sell_item = SellItem(
                transaction_id=txn.id,
                item_name=item.item_name,
                count=item.count,
                weight_per_item=item.weight_per_item,
                rate_per_item=item.rate_per_item,
                total_weight=(
                    item.total_weight if item.total_weight is not None
                    else item.count * item.weight_per_item
                ),
                total_amount=item.total_amount,
                transportation_charges=item.transportation_charges,
                payment_due_days=item.payment_due_days,
            )
            sell_item.apply_received(item.payment_received)
            session.add(sell_item)
            await session.flush()

            if item.payment_received > 0:
                session.add(Payment(
                    sell_item_id=sell_item.id,
                    amount=item.payment_received,
                    payment_date=data.date,
                    notes=OPENING_PAYMENT_NOTE,
                    created_by=actor.id,
                ))

        session.add(AuditLog(
            user_id=actor.id,
            action=AuditAction.TRANSACTION_CREATE,
            target_type="transaction",
            target_id=txn.id,
            after_data={
                "kind": kind.value,
                "party_id": str(party.id),
                "total_payment": str(total_payment),
                "date": str(data.date),
            },
        ))

        notify_after_commit(uow, sink, NotificationEvent(
            actor_id=actor.id,
            actor_name=actor.display_name,
            action="created",
            details=f"a {kind.value} transaction for {party.name} ({format_amount(total_payment)})",
            type=NotificationType.CREATE,
        ))

        txn_id = txn.id

    logger.info(f"[Transaction] 등록 완료: id={txn_id}, kind={kind.value}, total={total_payment}")
    return await _reload_transaction(uow, txn_id)


async def _reload_transaction(uow: UnitOfWork, transaction_id: uuid.UUID) -> Transaction:
    async with uow:
        return await get_transaction(uow.session, transaction_id)


async def get_transaction(session: AsyncSession, transaction_id: uuid.UUID) -> Transaction:
    result = await session.execute(
        select(Transaction)
        .options(*_transaction_loader())
        .where(Transaction.id == transaction_id)
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise NotFoundError("거래를 찾을 수 없습니다")
    return txn


async def list_transactions(
    session: AsyncSession,
    kind: Optional[str] = None,
    party_id: Optional[uuid.UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Sequence[Transaction]:
    """거래 목록 (최근 등록순)"""
    query = select(Transaction).options(*_transaction_loader())
    if kind and kind != "all":
        query = query.where(Transaction.kind == TransactionKind(kind))
    if party_id:
        query = query.where(Transaction.party_id == party_id)
    if date_from:
        query = query.where(Transaction.transaction_date >= date_from)
    if date_to:
        query = query.where(Transaction.transaction_date <= date_to)
    query = query.order_by(Transaction.created_at.desc())
    return (await session.execute(query)).scalars().all()
