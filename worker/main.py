"""
거래 장부 관리 시스템 - Worker 메인
Redis Queue Worker 실행 (관리자 알림 저장)
"""

import os
import logging

from redis import Redis
from rq import Worker, Queue

# 환경 변수
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
NOTIFICATION_QUEUE = os.getenv("NOTIFICATION_QUEUE", "default")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def main():
    """Worker 실행"""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    redis_conn = Redis.from_url(REDIS_URL)

    worker = Worker(
        queues=[Queue(NOTIFICATION_QUEUE, connection=redis_conn)],
        connection=redis_conn,
    )
    worker.work()


if __name__ == "__main__":
    main()
