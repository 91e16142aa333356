"""
거래 장부 관리 시스템 - Pydantic 스키마 (전체)
거래처, 거래, 직접 입금, 일괄 입금/배분, 요약/통계
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


# ============================================================================
# 거래처 (Party)
# ============================================================================

class PartyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="거래처명")
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    image: Optional[str] = Field(None, description="외부 스토리지 이미지 URL")


class PartyResponse(BaseModel):
    id: UUID
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    credit_balance: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class PartyStatsItem(BaseModel):
    """거래처별 통계 (목록 화면)"""
    id: UUID
    name: str
    phone: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    buying_total: Decimal
    selling_total: Decimal
    total_received: Decimal
    balance: Decimal
    transaction_count: int


# ============================================================================
# 거래 (Transaction)
# ============================================================================

class SellItemCreate(BaseModel):
    item_name: Optional[str] = Field(None, max_length=200)
    count: Decimal = Decimal("0")
    weight_per_item: Decimal = Decimal("0")
    rate_per_item: Decimal = Decimal("0")
    total_weight: Optional[Decimal] = None
    total_amount: Decimal = Field(..., ge=0, decimal_places=2, description="판매 금액")
    transportation_charges: Decimal = Decimal("0")
    payment_due_days: Optional[int] = Field(None, ge=0)
    payment_received: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="등록 시 수금액")


class BuyItemCreate(BaseModel):
    hny_weight: Decimal = Decimal("0")
    hny_rate: Decimal = Decimal("0")
    black_weight: Decimal = Decimal("0")
    black_rate: Decimal = Decimal("0")
    transportation_charges: Decimal = Decimal("0")


class TransactionCreate(BaseModel):
    kind: str = Field(..., description="buy/sell")
    date: date
    party_id: UUID
    phone: Optional[str] = None
    total_weight: Decimal = Decimal("0")
    total_payment: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    notes: Optional[str] = None
    invoice_image: Optional[str] = None
    receipt_image: Optional[str] = None
    sell_items: List[SellItemCreate] = []
    buy_items: List[BuyItemCreate] = []

    @model_validator(mode="after")
    def check_items_match_kind(self):
        if self.kind not in ("buy", "sell"):
            raise ValueError("kind는 buy 또는 sell이어야 합니다")
        if self.kind == "sell" and (not self.sell_items or self.buy_items):
            raise ValueError("판매 거래는 판매 항목만 1개 이상 포함해야 합니다")
        if self.kind == "buy" and (not self.buy_items or self.sell_items):
            raise ValueError("매입 거래는 매입 항목만 1개 이상 포함해야 합니다")
        return self


class SellItemResponse(BaseModel):
    id: UUID
    item_name: Optional[str] = None
    count: Decimal
    weight_per_item: Decimal
    rate_per_item: Decimal
    total_weight: Decimal
    total_amount: Decimal
    transportation_charges: Decimal
    payment_due_days: Optional[int] = None
    payment_received: Decimal
    balance_left: Decimal

    class Config:
        from_attributes = True


class BuyItemResponse(BaseModel):
    id: UUID
    hny_weight: Decimal
    hny_rate: Decimal
    black_weight: Decimal
    black_rate: Decimal
    transportation_charges: Decimal

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    id: UUID
    kind: str
    date: date
    party_id: UUID
    party_name: Optional[str] = None
    phone: Optional[str] = None
    total_weight: Decimal
    total_payment: Decimal
    notes: Optional[str] = None
    invoice_image: Optional[str] = None
    receipt_image: Optional[str] = None
    created_by: UUID
    created_at: datetime
    sell_items: List[SellItemResponse] = []
    buy_items: List[BuyItemResponse] = []


# ============================================================================
# 직접 입금 (Payment)
# ============================================================================

class PaymentCreate(BaseModel):
    """금액/입금일 검증은 서비스 계층에서 수행 (INVALID_ARGUMENT)"""
    sell_item_id: UUID
    amount: Optional[Decimal] = Field(None, description="입금액")
    payment_date: Optional[date] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: UUID
    sell_item_id: UUID
    amount: Decimal
    payment_date: date
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_by: UUID
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentRecordResponse(PaymentResponse):
    updated_balance: Decimal


class PaymentDeleteResponse(BaseModel):
    success: bool = True
    updated_balance: Decimal


# ============================================================================
# 거래처 일괄 입금 (PartyPayment) / 배분 (PaymentAllocation)
# ============================================================================

class PartyPaymentCreate(BaseModel):
    party_id: UUID
    amount: Optional[Decimal] = Field(None, description="입금액")
    payment_date: Optional[date] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class PartyPaymentDeleteRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500, description="취소 사유")


class AllocationResponse(BaseModel):
    id: UUID
    party_payment_id: UUID
    sell_item_id: UUID
    amount: Decimal
    allocation_order: int
    created_at: datetime

    class Config:
        from_attributes = True


class PartyPaymentResponse(BaseModel):
    id: UUID
    party_id: UUID
    amount: Decimal
    payment_date: date
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    status: str
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[UUID] = None
    delete_reason: Optional[str] = None
    created_by: UUID
    created_at: datetime


class PartyPaymentCreateResponse(PartyPaymentResponse):
    allocations_count: int
    credit_added: Decimal
    allocations: List[AllocationResponse] = []


class PartyPaymentDetailResponse(PartyPaymentResponse):
    allocations: List[AllocationResponse] = []


# ============================================================================
# 거래처 상세 / 요약 / 통계
# ============================================================================

class PartySummaryResponse(BaseModel):
    buying_total: Decimal
    selling_total: Decimal
    total_received: Decimal
    balance_owed: Decimal
    credit_balance: Decimal
    transaction_count: int
    last_payment: Optional[date] = None


class PartyDetailResponse(PartyResponse):
    transactions: List[TransactionResponse] = []
    party_payments: List[PartyPaymentResponse] = []
    summary: PartySummaryResponse


class AggregateStatsResponse(BaseModel):
    total_selling: Decimal
    total_received: Decimal
    balance_left: Decimal
    party_payments_count: int


class KindTotalsResponse(BaseModel):
    count: int
    sum_weight: Decimal
    sum_payment: Decimal


class ReportSummaryResponse(BaseModel):
    buying: KindTotalsResponse
    selling: KindTotalsResponse
