"""
테스트 공통 픽스처
인메모리 SQLite(aiosqlite)에 동일한 ORM 모델로 스키마를 생성하고,
서비스 계층은 테스트 전용 세션 팩토리를 쓰는 UnitOfWork로 실행한다.
"""

import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.core.security import Actor
from app.models import Party, SellItem, Transaction, User
from app.models.enums import TransactionKind, UserRole
from app.services.notification_service import NotificationEvent
from app.services.unit_of_work import UnitOfWork


class RecordingSink:
    """발행된 알림 이벤트를 기록하는 테스트용 Sink"""

    def __init__(self, fail: bool = False):
        self.events: List[NotificationEvent] = []
        self.fail = fail

    async def publish(self, event: NotificationEvent) -> None:
        if self.fail:
            raise ConnectionError("redis unavailable")
        self.events.append(event)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.events]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def uow_factory(session_factory):
    def _make() -> UnitOfWork:
        return UnitOfWork(session_factory)
    return _make


@pytest.fixture
def uow(uow_factory):
    return uow_factory()


@pytest.fixture
def sink():
    return RecordingSink()


async def _insert_user(session_factory, role: UserRole, name: str) -> User:
    async with session_factory() as session:
        user = User(email=f"{name.lower()}@ledger.test", name=name, role=role)
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def admin_user(session_factory):
    return await _insert_user(session_factory, UserRole.ADMIN, "Admin")


@pytest.fixture
async def staff_user(session_factory):
    return await _insert_user(session_factory, UserRole.STAFF, "Staff")


@pytest.fixture
def admin_actor(admin_user):
    return Actor(id=admin_user.id, role=UserRole.ADMIN, name=admin_user.name)


@pytest.fixture
def staff_actor(staff_user):
    return Actor(id=staff_user.id, role=UserRole.STAFF, name=staff_user.name)


@pytest.fixture
def make_party(session_factory, admin_user):
    async def _make(name: str = "Sharma Traders", credit: Decimal = Decimal("0")) -> Party:
        async with session_factory() as session:
            party = Party(name=name, credit_balance=credit, created_by=admin_user.id)
            session.add(party)
            await session.commit()
            return party
    return _make


@pytest.fixture
def make_sell_transaction(session_factory, admin_user):
    """
    판매 거래 + 판매 항목 직접 생성

    Returns:
        생성된 판매 항목 ID 목록 (amounts 순서)
    """
    async def _make(
        party: Party,
        amounts: Sequence[Decimal],
        transaction_date: date = date(2024, 1, 1),
        created_at: Optional[datetime] = None,
        received: Sequence[Decimal] = (),
    ) -> List[uuid.UUID]:
        created_at = created_at or datetime.utcnow()
        async with session_factory() as session:
            txn = Transaction(
                kind=TransactionKind.SELL,
                transaction_date=transaction_date,
                party_id=party.id,
                total_payment=sum(amounts, Decimal("0")),
                created_by=admin_user.id,
                created_at=created_at,
            )
            session.add(txn)
            await session.flush()

            ids = []
            for idx, amount in enumerate(amounts):
                item = SellItem(
                    transaction_id=txn.id,
                    item_name=f"item-{idx + 1}",
                    total_amount=amount,
                    created_at=created_at + timedelta(microseconds=idx + 1),
                )
                item.apply_received(received[idx] if idx < len(received) else Decimal("0"))
                session.add(item)
                await session.flush()
                ids.append(item.id)

            await session.commit()
            return ids
    return _make


@pytest.fixture
def fetch(session_factory):
    """새 세션으로 엔티티 재조회 (커밋된 상태 확인용)"""
    async def _fetch(model, pk):
        async with session_factory() as session:
            return await session.get(model, pk)
    return _fetch


@pytest.fixture
def recording_sink_factory():
    return RecordingSink
