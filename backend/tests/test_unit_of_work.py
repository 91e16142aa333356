"""
Unit of Work 트랜잭션 경계 / 저장 제약 테스트
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest

from app.core.exceptions import AlreadyDeletedError, StoreFailureError
from app.models import Party, PartyPayment
from app.models.enums import PartyPaymentStatus

D = Decimal


class TestUnitOfWork:
    """커밋/롤백/예외 변환"""

    async def test_commit_on_clean_exit(self, uow, admin_user, fetch):
        async with uow:
            party = Party(name="A", credit_balance=D("0"), created_by=admin_user.id)
            uow.session.add(party)

        assert (await fetch(Party, party.id)).name == "A"

    async def test_rollback_on_error(self, uow, admin_user, fetch):
        with pytest.raises(ValueError):
            async with uow:
                party = Party(name="A", credit_balance=D("0"), created_by=admin_user.id)
                uow.session.add(party)
                await uow.session.flush()
                raise ValueError("boom")

        assert await fetch(Party, party.id) is None

    async def test_constraint_violation_becomes_store_failure(self, uow, admin_user):
        """적립액 음수 → CHECK 제약 위반 → StoreFailureError"""
        with pytest.raises(StoreFailureError) as exc_info:
            async with uow:
                uow.session.add(Party(name="A", credit_balance=D("-1"), created_by=admin_user.id))

        assert "저장 중 오류" in exc_info.value.message

    async def test_session_outside_scope_and_nesting(self, uow):
        with pytest.raises(RuntimeError):
            uow.session

        async with uow:
            with pytest.raises(RuntimeError):
                async with uow:
                    pass

    async def test_reusable_after_exit(self, uow, admin_user, fetch):
        for name in ("A", "B"):
            async with uow:
                party = Party(name=name, credit_balance=D("0"), created_by=admin_user.id)
                uow.session.add(party)

        assert (await fetch(Party, party.id)).name == "B"


class TestPartyPaymentState:
    """ACTIVE → REVERSED 상태 전이"""

    def test_reverse_sets_deletion_fields_once(self):
        pp = PartyPayment(amount=D("10"), payment_date=date(2024, 1, 1), status=PartyPaymentStatus.ACTIVE)
        at = datetime(2024, 1, 2, 10, 0)
        actor_id = uuid.uuid4()

        pp.reverse(actor_id=actor_id, reason="중복", at=at)

        assert pp.is_deleted
        assert (pp.deleted_by, pp.deleted_at, pp.delete_reason) == (actor_id, at, "중복")
        with pytest.raises(AlreadyDeletedError):
            pp.reverse(actor_id=actor_id, reason="again", at=at)

    async def test_reversed_without_actor_is_rejected_by_store(self, uow, make_party, admin_user):
        party = await make_party()

        with pytest.raises(StoreFailureError):
            async with uow:
                uow.session.add(PartyPayment(
                    party_id=party.id,
                    amount=D("10"),
                    payment_date=date(2024, 1, 1),
                    status=PartyPaymentStatus.REVERSED,
                    created_by=admin_user.id,
                ))
