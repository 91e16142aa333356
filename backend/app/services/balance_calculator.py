"""
거래 장부 관리 시스템 - 잔액 계산
이미 로드된 엔티티만으로 계산하는 순수 함수 (DB 접근/부수효과 없음)

- total_received는 입금 행 합계가 아니라 판매 항목의 payment_received 합계
  (직접 입금과 일괄 입금 배분의 이중 집계 방지, 미배분 적립액 제외)
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from app.models.enums import TransactionKind
from app.models.party import Party
from app.models.party_payment import PartyPayment
from app.models.transaction import SellItem, Transaction

ZERO = Decimal("0")


@dataclass(frozen=True)
class PartySummary:
    buying_total: Decimal
    selling_total: Decimal
    total_received: Decimal
    balance_owed: Decimal
    credit_balance: Decimal
    transaction_count: int
    last_payment: Optional[date]


@dataclass(frozen=True)
class AggregateStats:
    total_selling: Decimal
    total_received: Decimal
    balance_left: Decimal
    party_payments_count: int


@dataclass(frozen=True)
class KindTotals:
    count: int
    sum_weight: Decimal
    sum_payment: Decimal


def compute_balance(sell_item: SellItem) -> Decimal:
    """판매 항목 잔액 = 원 채권액 - 수금 누적액"""
    return sell_item.total_amount - sell_item.payment_received


def _of_kind(transactions: Iterable[Transaction], kind: TransactionKind) -> list[Transaction]:
    return [t for t in transactions if t.kind == kind]


def _sell_items(transactions: Iterable[Transaction]) -> list[SellItem]:
    return [si for t in _of_kind(transactions, TransactionKind.SELL) for si in t.sell_items]


def compute_party_summary(
    party: Party,
    transactions: Sequence[Transaction],
    party_payments: Sequence[PartyPayment] = (),
) -> PartySummary:
    """
    거래처 요약 계산

    Args:
        party: 거래처 (credit_balance 사용)
        transactions: 거래처의 전체 거래 (sell_items, sell_items.payments 로드 필요)
        party_payments: 거래처 일괄 입금 (취소된 건은 제외하고 계산)

    Returns:
        PartySummary
    """
    buying_total = sum(
        (t.total_payment or ZERO for t in _of_kind(transactions, TransactionKind.BUY)), ZERO
    )
    selling_total = sum(
        (t.total_payment or ZERO for t in _of_kind(transactions, TransactionKind.SELL)), ZERO
    )
    sell_items = _sell_items(transactions)
    total_received = sum((si.payment_received or ZERO for si in sell_items), ZERO)

    payment_dates = [p.payment_date for si in sell_items for p in si.payments]
    payment_dates += [pp.payment_date for pp in party_payments if not pp.is_deleted]

    return PartySummary(
        buying_total=buying_total,
        selling_total=selling_total,
        total_received=total_received,
        balance_owed=selling_total - total_received,
        credit_balance=party.credit_balance or ZERO,
        transaction_count=len(transactions),
        last_payment=max(payment_dates) if payment_dates else None,
    )


def compute_aggregate_stats(
    sell_items: Sequence[SellItem],
    party_payments: Sequence[PartyPayment],
) -> AggregateStats:
    """전체 판매/수금/잔액 집계 (대시보드)"""
    total_selling = sum((si.total_amount or ZERO for si in sell_items), ZERO)
    total_received = sum((si.payment_received or ZERO for si in sell_items), ZERO)
    return AggregateStats(
        total_selling=total_selling,
        total_received=total_received,
        balance_left=total_selling - total_received,
        party_payments_count=sum(1 for pp in party_payments if not pp.is_deleted),
    )


def compute_kind_totals(transactions: Sequence[Transaction], kind: TransactionKind) -> KindTotals:
    """거래 타입별 건수/중량/금액 합계 (리포트 요약)"""
    selected = _of_kind(transactions, kind)
    return KindTotals(
        count=len(selected),
        sum_weight=sum((t.total_weight or ZERO for t in selected), ZERO),
        sum_payment=sum((t.total_payment or ZERO for t in selected), ZERO),
    )
