"""
거래 장부 관리 시스템 - PaymentAllocation(배분) 모델
거래처 일괄 입금을 개별 판매 항목에 배분한 기록 (생성 후 불변, 감사 이력)
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Integer, DateTime, Numeric,
    ForeignKey, UniqueConstraint, Index, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class PaymentAllocation(Base):
    """일괄 입금 → 판매 항목 배분 매핑 테이블"""

    __tablename__ = "payment_allocations"

    # ==================== 기본 키 ====================
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ==================== 연결 ====================
    party_payment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("party_payments.id", ondelete="RESTRICT"),
        nullable=False,
        comment="거래처 입금 ID",
    )
    sell_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sell_items.id", ondelete="RESTRICT"),
        nullable=False,
        comment="판매 항목 ID",
    )

    # ==================== 배분 정보 ====================
    amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, comment="배분 금액"
    )
    allocation_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, comment="배분 순서 (FIFO 순서 기록)"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    # ==================== 관계 ====================
    party_payment = relationship("PartyPayment", back_populates="allocations")
    sell_item = relationship("SellItem", back_populates="allocations")

    # ==================== 제약 조건 / 인덱스 ====================
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_pa_amount_positive"),
        UniqueConstraint(
            "party_payment_id", "sell_item_id",
            name="uq_pa_payment_item",
        ),
        Index("ix_pa_party_payment", "party_payment_id"),
        Index("ix_pa_sell_item", "sell_item_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentAllocation(payment={self.party_payment_id}, "
            f"item={self.sell_item_id}, amount={self.amount})>"
        )
