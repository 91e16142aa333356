"""
거래 장부 관리 시스템 - Unit of Work
금액/잔액을 변경하는 작업 하나를 단일 DB 트랜잭션으로 묶는다.

- 정상 종료 시 커밋, 예외 발생 시 전체 롤백 (부분 반영 없음)
- SQLAlchemyError는 StoreFailureError로 변환 (내부 에러 메시지 비노출)
- after_commit()으로 등록한 훅은 커밋 성공 후에만 실행, 실패해도 작업 결과에 영향 없음
"""

import logging
from typing import Awaitable, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import AsyncSessionLocal
from app.core.exceptions import StoreFailureError

logger = logging.getLogger(__name__)

AfterCommitHook = Callable[[], Awaitable[None]]


class UnitOfWork:
    """트랜잭션 범위 세션 + 커밋 후 훅"""

    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._hooks: List[AfterCommitHook] = []

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork가 시작되지 않았습니다 (async with 필요)")
        return self._session

    def after_commit(self, hook: AfterCommitHook) -> None:
        """커밋 성공 후 실행할 훅 등록 (알림 등)"""
        self._hooks.append(hook)

    async def __aenter__(self) -> "UnitOfWork":
        if self._session is not None:
            raise RuntimeError("UnitOfWork는 중첩해서 시작할 수 없습니다")
        self._session = self._session_factory()
        self._hooks = []
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        session = self.session
        committed = False
        try:
            if exc_type is None:
                try:
                    await session.commit()
                    committed = True
                except SQLAlchemyError as e:
                    await session.rollback()
                    logger.error(f"[UnitOfWork] 커밋 실패: {e}")
                    raise StoreFailureError("저장 중 오류가 발생했습니다. 다시 시도해 주세요") from e
            else:
                await session.rollback()
        finally:
            await session.close()
            self._session = None

        if committed:
            await self._run_hooks()
            return False

        if exc_type is not None and issubclass(exc_type, SQLAlchemyError):
            logger.error(f"[UnitOfWork] 트랜잭션 중단: {exc}")
            raise StoreFailureError("저장 중 오류가 발생했습니다. 다시 시도해 주세요") from exc
        return False

    async def _run_hooks(self) -> None:
        hooks, self._hooks = self._hooks, []
        for hook in hooks:
            try:
                await hook()
            except Exception:
                logger.warning("[UnitOfWork] 커밋 후 훅 실행 실패 (무시)", exc_info=True)
