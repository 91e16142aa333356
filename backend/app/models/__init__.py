"""
거래 장부 관리 시스템 - SQLAlchemy 모델
모든 모델을 여기서 import하여 Alembic 마이그레이션에서 인식할 수 있도록 함
"""

from app.models.user import User
from app.models.audit_log import AuditLog
from app.models.notification import Notification

# 장부 도메인 모델
from app.models.party import Party
from app.models.transaction import Transaction, BuyItem, SellItem
from app.models.payment import Payment

# 일괄 입금 / 배분
from app.models.party_payment import PartyPayment
from app.models.payment_allocation import PaymentAllocation

__all__ = [
    "User",
    "AuditLog",
    "Notification",
    # 장부 도메인
    "Party",
    "Transaction",
    "BuyItem",
    "SellItem",
    "Payment",
    # 일괄 입금 / 배분
    "PartyPayment",
    "PaymentAllocation",
]
