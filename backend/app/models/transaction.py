"""
거래 장부 관리 시스템 - Transaction(거래) + BuyItem/SellItem(거래 항목) 모델
판매 거래의 SellItem이 입금 배분의 최소 단위
"""

import uuid
from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Text, Numeric, Integer,
    ForeignKey, Enum as SQLEnum, Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.enums import TransactionKind


class Transaction(Base):
    """거래 테이블 (매입/판매)"""

    __tablename__ = "transactions"

    # ==================== 기본 키 ====================
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ==================== 거래 정보 ====================
    kind: Mapped[TransactionKind] = mapped_column(
        SQLEnum(TransactionKind, name="transaction_kind"),
        nullable=False,
        comment="buy(매입)/sell(판매)",
    )
    transaction_date: Mapped[date] = mapped_column(
        Date, nullable=False, comment="거래일"
    )
    party_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("parties.id", ondelete="CASCADE"),
        nullable=False,
        comment="거래처 ID",
    )
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    total_weight: Mapped[Decimal] = mapped_column(
        Numeric(18, 3), nullable=False, default=Decimal("0"), comment="총 중량"
    )
    total_payment: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0"), comment="총 금액"
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    invoice_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    receipt_image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # ==================== 시스템 관리 ====================
    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="등록자 ID",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # ==================== 관계 ====================
    party = relationship("Party", back_populates="transactions")
    buy_items = relationship(
        "BuyItem", back_populates="transaction", cascade="all, delete-orphan"
    )
    sell_items = relationship(
        "SellItem", back_populates="transaction", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_transactions_party_date", "party_id", "transaction_date"),
        Index("ix_transactions_kind", "kind"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, kind={self.kind}, date={self.transaction_date})>"


class BuyItem(Base):
    """매입 항목 테이블"""

    __tablename__ = "buy_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hny_weight: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    hny_rate: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    black_weight: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    black_rate: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    transportation_charges: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0")
    )

    transaction = relationship("Transaction", back_populates="buy_items")


class SellItem(Base):
    """판매 항목 테이블 (balance_left = total_amount - payment_received 유지)"""

    __tablename__ = "sell_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    count: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    weight_per_item: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    rate_per_item: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    total_weight: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    transportation_charges: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0")
    )
    payment_due_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # ==================== 금액 ====================
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, comment="원 채권액 (생성 후 불변)"
    )
    payment_received: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0"), comment="수금 누적액"
    )
    balance_left: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, comment="잔액 (total_amount - payment_received)"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    # ==================== 관계 ====================
    transaction = relationship("Transaction", back_populates="sell_items")
    payments = relationship(
        "Payment", back_populates="sell_item", cascade="all, delete-orphan"
    )
    allocations = relationship(
        "PaymentAllocation", back_populates="sell_item", passive_deletes="all"
    )

    __table_args__ = (
        Index("ix_sell_items_balance", "balance_left"),
    )

    def apply_received(self, payment_received: Decimal) -> None:
        """수금 누적액 설정 + 잔액 재계산 (불변식 유지)"""
        self.payment_received = payment_received
        self.balance_left = self.total_amount - payment_received

    def __repr__(self) -> str:
        return (
            f"<SellItem(id={self.id}, total={self.total_amount}, "
            f"received={self.payment_received}, balance={self.balance_left})>"
        )
