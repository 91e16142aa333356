"""
거래 장부 관리 시스템 - 관리자 알림함
Worker가 저장한 관리자별 알림 조회/읽음 처리 (본인 알림만)
"""

import uuid
from typing import List

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.enums import UserRole
from app.models.notification import Notification
from app.models.user import User

INBOX_LIMIT = 50


async def list_notifications(session: AsyncSession, user: User, limit: int = INBOX_LIMIT) -> List[Notification]:
    """최근 알림 (관리자 외에는 빈 목록)"""
    if user.role != UserRole.ADMIN:
        return []
    result = await session.execute(
        select(Notification)
        .where(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def mark_read(session: AsyncSession, user: User, notification_id: uuid.UUID) -> Notification:
    notification = (await session.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user.id,
        )
    )).scalar_one_or_none()
    if notification is None:
        raise NotFoundError("알림을 찾을 수 없습니다")

    notification.is_read = True
    await session.flush()
    return notification


async def mark_all_read(session: AsyncSession, user: User) -> int:
    """안 읽은 알림 일괄 읽음 처리 → 처리 건수"""
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    return result.rowcount or 0


async def unread_count(session: AsyncSession, user: User) -> int:
    if user.role != UserRole.ADMIN:
        return 0
    count = (await session.execute(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == user.id,
            Notification.is_read.is_(False),
        )
    )).scalar()
    return count or 0
