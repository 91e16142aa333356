"""
거래 장부 관리 시스템 - API v1 라우터
모든 v1 엔드포인트를 여기서 통합
"""

from fastapi import APIRouter

from app.api.v1 import notifications
from app.api.v1.ledger.router import ledger_router

api_router = APIRouter()

# 장부 (거래처/거래/입금/통계)
api_router.include_router(ledger_router)

# 관리자 알림함
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["알림"]
)
