"""
거래 장부 관리 시스템 - Party(거래처) 모델
고객/공급처 + 초과 입금 적립액(credit_balance)
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, Text, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Party(Base):
    """거래처 테이블"""

    __tablename__ = "parties"

    # 기본 키
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # 거래처 정보
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="거래처명",
    )
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True, comment="전화번호")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, comment="이메일")
    address: Mapped[str | None] = mapped_column(String(500), nullable=True, comment="주소")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True, comment="메모")
    image: Mapped[str | None] = mapped_column(
        String(500), nullable=True, comment="이미지 URL (외부 스토리지)"
    )

    # 미배분 적립액: 배분 엔진/역분개 엔진만 변경
    credit_balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        default=Decimal("0"),
        comment="초과 입금 적립액",
    )

    # 상태
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="활성 상태",
    )

    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="등록자 ID",
    )

    # 타임스탬프
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # 관계
    transactions = relationship("Transaction", back_populates="party")
    party_payments = relationship("PartyPayment", back_populates="party")

    __table_args__ = (
        CheckConstraint("credit_balance >= 0", name="ck_party_credit_nonneg"),
    )

    def __repr__(self) -> str:
        return f"<Party(id={self.id}, name={self.name}, credit={self.credit_balance})>"
