"""
장부 API - ORM 엔티티 → 응답 스키마 변환
"""

from app.models.party_payment import PartyPayment
from app.models.transaction import Transaction
from app.schemas.ledger import (
    AllocationResponse,
    BuyItemResponse,
    PartyPaymentDetailResponse,
    PartyPaymentResponse,
    SellItemResponse,
    TransactionResponse,
)


def transaction_to_response(t: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=t.id,
        kind=t.kind.value,
        date=t.transaction_date,
        party_id=t.party_id,
        party_name=t.party.name if t.party else None,
        phone=t.phone,
        total_weight=t.total_weight,
        total_payment=t.total_payment,
        notes=t.notes,
        invoice_image=t.invoice_image,
        receipt_image=t.receipt_image,
        created_by=t.created_by,
        created_at=t.created_at,
        sell_items=[SellItemResponse.model_validate(si) for si in t.sell_items],
        buy_items=[BuyItemResponse.model_validate(bi) for bi in t.buy_items],
    )


def _party_payment_fields(pp: PartyPayment) -> dict:
    return dict(
        id=pp.id,
        party_id=pp.party_id,
        amount=pp.amount,
        payment_date=pp.payment_date,
        payment_method=pp.payment_method,
        notes=pp.notes,
        status=pp.status.value,
        is_deleted=pp.is_deleted,
        deleted_at=pp.deleted_at,
        deleted_by=pp.deleted_by,
        delete_reason=pp.delete_reason,
        created_by=pp.created_by,
        created_at=pp.created_at,
    )


def party_payment_to_response(pp: PartyPayment) -> PartyPaymentResponse:
    return PartyPaymentResponse(**_party_payment_fields(pp))


def party_payment_to_detail(pp: PartyPayment) -> PartyPaymentDetailResponse:
    """배분 내역 포함 (allocations 로드 필요)"""
    return PartyPaymentDetailResponse(
        **_party_payment_fields(pp),
        allocations=[AllocationResponse.model_validate(a) for a in pp.allocations],
    )
