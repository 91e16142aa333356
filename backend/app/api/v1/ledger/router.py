"""
장부 도메인 - 통합 라우터
거래처, 거래, 직접 입금, 일괄 입금, 통계 하위 라우터를 하나로 통합
"""

from fastapi import APIRouter

from app.api.v1.ledger import (
    parties,
    transactions,
    payments,
    party_payments,
    stats,
)

ledger_router = APIRouter()

# 거래처
ledger_router.include_router(
    parties.router, prefix="/parties", tags=["장부-거래처"]
)

# 거래
ledger_router.include_router(
    transactions.router, prefix="/transactions", tags=["장부-거래"]
)

# 직접 입금
ledger_router.include_router(
    payments.router, prefix="/payments", tags=["장부-직접입금"]
)

# 거래처 일괄 입금
ledger_router.include_router(
    party_payments.router, prefix="/party-payments", tags=["장부-일괄입금"]
)

# 통계/리포트
ledger_router.include_router(
    stats.router, tags=["장부-통계"]
)
