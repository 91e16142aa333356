"""
거래 장부 관리 시스템 - Payment(직접 입금) 모델
하나의 판매 항목에 직접 연결된 입금 이력 (관리자 삭제 시 물리 삭제)
"""

import uuid
from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import Date, DateTime, String, Text, Numeric, ForeignKey, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Payment(Base):
    """직접 입금 이력 테이블"""

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    sell_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sell_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="판매 항목 ID",
    )

    payment_date: Mapped[date] = mapped_column(
        Date, nullable=False, comment="입금일"
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, comment="입금액"
    )

    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="입금 수단"
    )

    notes: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="메모"
    )

    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="등록자 ID",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    # 관계
    sell_item = relationship("SellItem", back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        Index("ix_payments_payment_date", "payment_date"),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, amount={self.amount}, date={self.payment_date})>"
