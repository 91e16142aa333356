"""
거래 장부 관리 시스템 - 관리자 알림 발행
장부 트랜잭션 커밋 후 RQ 큐에 알림 Job을 등록하고, Worker가 관리자별 알림을 저장한다.
알림 실패는 로그만 남기고 금액 처리 결과에 영향을 주지 않는다.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, asdict
from decimal import Decimal
from functools import lru_cache
from typing import Optional, Protocol

import redis as sync_redis_lib
from rq import Queue

from app.core.config import settings
from app.models.enums import NotificationType
from app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DELIVERY_TASK = "tasks.notification_delivery.deliver_notification"


@dataclass(frozen=True)
class NotificationEvent:
    """알림 이벤트 (사람이 읽는 메시지)"""
    actor_id: uuid.UUID
    actor_name: str
    action: str
    details: str
    type: NotificationType

    @property
    def message(self) -> str:
        return f"{self.actor_name} {self.action} {self.details}"

    def to_json(self) -> str:
        data = asdict(self)
        data["actor_id"] = str(self.actor_id)
        data["type"] = self.type.value
        data["message"] = self.message
        return json.dumps(data, ensure_ascii=False)


class NotificationSink(Protocol):
    async def publish(self, event: NotificationEvent) -> None: ...


class QueueNotificationSink:
    """RQ 큐로 알림 전달 (Worker가 소비)"""

    def __init__(self, redis_url: str = settings.REDIS_URL, queue_name: str = settings.NOTIFICATION_QUEUE):
        self.redis_url = redis_url
        self.queue_name = queue_name
        self._queue: Optional[Queue] = None

    def _enqueue(self, payload: str) -> None:
        if self._queue is None:
            sync_redis_conn = sync_redis_lib.Redis.from_url(self.redis_url)
            self._queue = Queue(self.queue_name, connection=sync_redis_conn)
        self._queue.enqueue(DELIVERY_TASK, payload, job_timeout="1m")

    async def publish(self, event: NotificationEvent) -> None:
        # redis/rq 호출은 동기 I/O, 이벤트 루프 밖 스레드에서 실행
        await asyncio.to_thread(self._enqueue, event.to_json())
        logger.info(f"[Notification] enqueue 완료: {event.message}")


class LogNotificationSink:
    """큐 비활성화 시 로그로만 남김"""

    async def publish(self, event: NotificationEvent) -> None:
        logger.info(f"[ADMIN NOTIFICATION] {event.message}")


@lru_cache
def _queue_sink() -> QueueNotificationSink:
    """프로세스당 1개 (Redis 연결 재사용)"""
    return QueueNotificationSink()


def get_notification_sink() -> NotificationSink:
    """설정에 따른 알림 Sink 반환 (FastAPI Depends용)"""
    if settings.NOTIFICATIONS_ENABLED:
        return _queue_sink()
    return LogNotificationSink()


def notify_after_commit(uow: UnitOfWork, sink: NotificationSink, event: NotificationEvent) -> None:
    """커밋 성공 후 알림 발행 예약. 발행 실패는 UnitOfWork 훅에서 로그 후 무시"""

    async def _publish() -> None:
        await sink.publish(event)

    uow.after_commit(_publish)


def format_amount(amount) -> str:
    """알림용 금액 표기 (예: ₹1200.50)"""
    return f"{settings.CURRENCY_SYMBOL}{Decimal(str(amount)).quantize(CENT)}"
