"""
거래 장부 관리 시스템 - PartyPayment(거래처 일괄 입금) 모델
판매 항목에 FIFO로 배분되는 일괄 입금. 물리 삭제 없이 REVERSED 상태로만 전이
"""

import uuid
from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Text, Numeric,
    ForeignKey, Enum as SQLEnum, Index, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.core.exceptions import AlreadyDeletedError
from app.models.enums import PartyPaymentStatus


class PartyPayment(Base):
    """거래처 일괄 입금 테이블"""

    __tablename__ = "party_payments"

    # ==================== 기본 키 ====================
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ==================== 거래처 연결 ====================
    party_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("parties.id", ondelete="CASCADE"),
        nullable=False,
        comment="거래처 ID",
    )

    # ==================== 입금 정보 ====================
    amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, comment="입금액 (양수만)"
    )
    payment_date: Mapped[date] = mapped_column(
        Date, nullable=False, comment="입금일"
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="입금 수단"
    )
    notes: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="메모"
    )

    # ==================== 상태 ====================
    status: Mapped[PartyPaymentStatus] = mapped_column(
        SQLEnum(PartyPaymentStatus, name="party_payment_status"),
        default=PartyPaymentStatus.ACTIVE,
        nullable=False,
        comment="ACTIVE / REVERSED",
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    deleted_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=True,
        comment="취소 처리자 ID",
    )
    delete_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

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
    party = relationship("Party", back_populates="party_payments")
    allocations = relationship(
        "PaymentAllocation",
        back_populates="party_payment",
        passive_deletes="all",
        order_by="PaymentAllocation.allocation_order",
    )

    # ==================== 제약 조건 / 인덱스 ====================
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_pp_amount_positive"),
        CheckConstraint(
            "(status = 'ACTIVE' AND deleted_at IS NULL AND deleted_by IS NULL) OR "
            "(status = 'REVERSED' AND deleted_at IS NOT NULL AND deleted_by IS NOT NULL)",
            name="ck_pp_reversal_fields",
        ),
        Index("ix_pp_party_date", "party_id", "payment_date"),
        Index("ix_pp_status", "status"),
    )

    @property
    def is_deleted(self) -> bool:
        return self.status == PartyPaymentStatus.REVERSED

    def reverse(self, actor_id: uuid.UUID, reason: str, at: datetime) -> None:
        """ACTIVE → REVERSED 전이 (재취소 불가)"""
        if self.is_deleted:
            raise AlreadyDeletedError("이미 취소된 입금입니다")
        self.status = PartyPaymentStatus.REVERSED
        self.deleted_at = at
        self.deleted_by = actor_id
        self.delete_reason = reason

    def __repr__(self) -> str:
        return (
            f"<PartyPayment(id={self.id}, amount={self.amount}, status={self.status})>"
        )
