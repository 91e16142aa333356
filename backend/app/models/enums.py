"""
거래 장부 관리 시스템 - 공통 Enum 정의
프론트엔드와 백엔드에서 동일한 의미로 사용되어야 함
"""

import enum


class UserRole(str, enum.Enum):
    """사용자 역할"""
    ADMIN = "admin"   # 관리자: 입금 삭제/역분개 가능
    STAFF = "staff"   # 일반 사용자: 거래/입금 등록, 조회


class TransactionKind(str, enum.Enum):
    """거래 타입"""
    BUY = "buy"     # 매입 (BuyItem 보유)
    SELL = "sell"   # 판매 (SellItem 보유 → 미수 발생)


class PartyPaymentStatus(str, enum.Enum):
    """거래처 일괄 입금 상태"""
    ACTIVE = "active"       # 유효 (배분 반영 중)
    REVERSED = "reversed"   # 취소됨 (배분 역분개 완료, 이력만 보존)


class NotificationType(str, enum.Enum):
    """관리자 알림 타입"""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AuditAction(str, enum.Enum):
    """감사로그 액션 타입"""
    PARTY_CREATE = "party_create"
    TRANSACTION_CREATE = "transaction_create"
    PAYMENT_CREATE = "payment_create"
    PAYMENT_DELETE = "payment_delete"
    PARTY_PAYMENT_CREATE = "party_payment_create"
    PARTY_PAYMENT_REVERSE = "party_payment_reverse"
