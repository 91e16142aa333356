"""
거래 장부 관리 시스템 - 도메인 예외
서비스 계층에서 발생시키고 main.py의 예외 핸들러가 공통 에러 포맷으로 변환
"""

from typing import Any, Optional


class LedgerError(Exception):
    """장부 도메인 예외 기본 클래스"""

    code = "LEDGER_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidArgumentError(LedgerError):
    """필수 값 누락 / 잘못된 값"""
    code = "INVALID_ARGUMENT"
    status_code = 400


class NotFoundError(LedgerError):
    """참조 대상(거래처/판매 항목/입금 등) 없음"""
    code = "NOT_FOUND"
    status_code = 404


class ForbiddenError(LedgerError):
    """관리자 권한 필요"""
    code = "FORBIDDEN"
    status_code = 403


class AlreadyDeletedError(LedgerError):
    """이미 취소(역분개)된 거래처 입금"""
    code = "ALREADY_DELETED"
    status_code = 409


class StoreFailureError(LedgerError):
    """트랜잭션 커밋 실패 (제약 위반, 직렬화 충돌 등), 부분 반영 없음"""
    code = "STORE_FAILURE"
    status_code = 500
