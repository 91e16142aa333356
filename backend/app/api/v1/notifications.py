"""
관리자 알림함 API
로그인한 사용자 본인의 알림만 조회/읽음 처리
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from app.services import notification_inbox_service

router = APIRouter()


def _to_response(notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        message=notification.message,
        type=notification.type.value,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """최근 알림 50건 (관리자 전용, 그 외 빈 목록)"""
    notifications = await notification_inbox_service.list_notifications(db, current_user)
    return [_to_response(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    count = await notification_inbox_service.unread_count(db, current_user)
    return UnreadCountResponse(count=count)


@router.put("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = await notification_inbox_service.mark_all_read(db, current_user)
    await db.commit()
    return MarkAllReadResponse(message="모든 알림을 읽음 처리했습니다", updated=updated)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """알림 읽음 처리 (다른 사용자의 알림은 404)"""
    notification = await notification_inbox_service.mark_read(db, current_user, notification_id)
    response = _to_response(notification)
    await db.commit()
    return response
