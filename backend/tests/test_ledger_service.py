"""
거래처 / 거래 등록 및 조회, 요약 통계 테스트
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.models import AuditLog, Payment, SellItem
from app.models.enums import AuditAction, TransactionKind
from app.schemas.ledger import PartyCreate, TransactionCreate
from app.services import ledger_service
from app.services.allocation_service import create_party_payment
from app.services.payment_service import record_payment

D = Decimal


def sell_payload(party_id, items, when=date(2024, 1, 10), **extra):
    return TransactionCreate(
        kind="sell",
        date=when,
        party_id=party_id,
        sell_items=items,
        **extra,
    )


class TestParties:
    """거래처 등록/목록"""

    async def test_create_party_writes_audit_row(self, uow, admin_actor, session_factory):
        party = await ledger_service.create_party(
            uow, admin_actor, PartyCreate(name="Sharma Traders", phone="98100 00000")
        )

        assert party.credit_balance == D("0")
        assert party.is_active
        async with session_factory() as session:
            audit = (await session.execute(
                select(AuditLog).where(AuditLog.action == AuditAction.PARTY_CREATE)
            )).scalar_one()
        assert audit.target_id == party.id
        assert audit.after_data == {"name": "Sharma Traders"}

    async def test_list_parties_newest_first(self, uow_factory, admin_actor, session_factory):
        for name in ("A", "B", "C"):
            await ledger_service.create_party(uow_factory(), admin_actor, PartyCreate(name=name))

        async with session_factory() as session:
            parties = await ledger_service.list_parties(session)

        assert [p.name for p in parties] == ["C", "B", "A"]

    async def test_party_name_required(self):
        with pytest.raises(ValidationError):
            PartyCreate(name="")


class TestCreateTransaction:
    """매입/판매 거래 등록"""

    async def test_sell_transaction_creates_receivables(
        self, uow, sink, staff_actor, make_party
    ):
        # Arrange
        party = await make_party("Kumar Bros")
        data = sell_payload(party.id, [
            {"item_name": "Cotton", "count": "10", "weight_per_item": "2.5", "total_amount": "1000"},
            {"item_name": "Jute", "total_amount": "500", "payment_received": "200"},
        ])

        # Act
        txn = await ledger_service.create_transaction(uow, staff_actor, data, sink)

        # Assert
        assert txn.kind == TransactionKind.SELL
        assert txn.total_payment == D("1500")
        assert txn.party.name == "Kumar Bros"
        items = sorted(txn.sell_items, key=lambda si: si.total_amount, reverse=True)
        assert [(si.total_amount, si.payment_received, si.balance_left) for si in items] == [
            (D("1000"), D("0"), D("1000")),
            (D("500"), D("200"), D("300")),
        ]
        assert items[0].total_weight == D("25")
        assert sink.messages == ["Staff created a sell transaction for Kumar Bros (₹1500.00)"]

    async def test_initial_received_is_kept_as_opening_payment(
        self, uow_factory, sink, staff_actor, make_party, session_factory, fetch
    ):
        """등록 시 수금액은 직접 입금 1건으로 기록되어 재계산 후에도 유지"""
        party = await make_party()
        txn = await ledger_service.create_transaction(
            uow_factory(), staff_actor,
            sell_payload(party.id, [{"total_amount": "500", "payment_received": "200"}]),
            sink,
        )
        item_id = txn.sell_items[0].id

        result = await record_payment(uow_factory(), staff_actor, item_id, D("100"), date(2024, 1, 11), sink)

        assert result.updated_balance == D("200")
        async with session_factory() as session:
            payments = (await session.execute(
                select(Payment).where(Payment.sell_item_id == item_id)
            )).scalars().all()
        assert sorted(p.amount for p in payments) == [D("100"), D("200")]
        assert any(p.notes == ledger_service.OPENING_PAYMENT_NOTE for p in payments)
        assert (await fetch(SellItem, item_id)).payment_received == D("300")

    async def test_buy_transaction(self, uow, sink, admin_actor, make_party):
        party = await make_party()
        data = TransactionCreate(
            kind="buy",
            date=date(2024, 1, 3),
            party_id=party.id,
            total_weight="120.5",
            total_payment="8400",
            buy_items=[{"hny_weight": "100", "hny_rate": "60", "black_weight": "20.5", "black_rate": "40"}],
        )

        txn = await ledger_service.create_transaction(uow, admin_actor, data, sink)

        assert txn.kind == TransactionKind.BUY
        assert txn.sell_items == []
        assert txn.buy_items[0].hny_weight == D("100")
        assert txn.total_payment == D("8400")

    async def test_buy_transaction_requires_total(self, uow, sink, admin_actor, make_party):
        party = await make_party()
        data = TransactionCreate(
            kind="buy", date=date(2024, 1, 3), party_id=party.id, buy_items=[{"hny_weight": "1"}],
        )

        with pytest.raises(InvalidArgumentError):
            await ledger_service.create_transaction(uow, admin_actor, data, sink)

    async def test_unknown_party(self, uow, sink, admin_actor):
        with pytest.raises(NotFoundError):
            await ledger_service.create_transaction(
                uow, admin_actor, sell_payload(uuid.uuid4(), [{"total_amount": "10"}]), sink
            )
        assert sink.events == []

    @pytest.mark.parametrize("payload", [
        {"kind": "gift", "sell_items": [{"total_amount": "1"}]},
        {"kind": "sell", "sell_items": []},
        {"kind": "buy", "sell_items": [{"total_amount": "1"}]},
    ])
    def test_items_must_match_kind(self, payload):
        with pytest.raises(ValidationError):
            TransactionCreate(date=date(2024, 1, 1), party_id=uuid.uuid4(), **payload)


class TestQueries:
    """거래 조회 / 거래처 상세 / 통계 / 리포트"""

    async def test_list_transactions_filters(
        self, uow_factory, sink, admin_actor, make_party, session_factory
    ):
        a = await make_party("A")
        b = await make_party("B")
        await ledger_service.create_transaction(
            uow_factory(), admin_actor, sell_payload(a.id, [{"total_amount": "10"}], when=date(2024, 1, 1)), sink
        )
        await ledger_service.create_transaction(
            uow_factory(), admin_actor, sell_payload(b.id, [{"total_amount": "20"}], when=date(2024, 2, 1)), sink
        )
        await ledger_service.create_transaction(
            uow_factory(), admin_actor,
            TransactionCreate(kind="buy", date=date(2024, 3, 1), party_id=a.id,
                              total_payment="30", buy_items=[{}]),
            sink,
        )

        async with session_factory() as session:
            sells = await ledger_service.list_transactions(session, kind="sell")
            of_a = await ledger_service.list_transactions(session, party_id=a.id)
            feb = await ledger_service.list_transactions(
                session, date_from=date(2024, 2, 1), date_to=date(2024, 2, 28)
            )
            every = await ledger_service.list_transactions(session, kind="all")

        assert {t.total_payment for t in sells} == {D("10"), D("20")}
        assert [t.total_payment for t in of_a] == [D("30"), D("10")]
        assert [t.party_id for t in feb] == [b.id]
        assert len(every) == 3

    async def test_get_transaction_not_found(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(NotFoundError):
                await ledger_service.get_transaction(session, uuid.uuid4())

    async def test_party_detail_summary(
        self, uow_factory, sink, admin_actor, make_party, make_sell_transaction, session_factory
    ):
        # Given
        party = await make_party()
        ids = await make_sell_transaction(party, [D("100"), D("200")], transaction_date=date(2024, 1, 1))
        await record_payment(uow_factory(), admin_actor, ids[1], D("50"), date(2024, 1, 20), sink)
        await create_party_payment(uow_factory(), admin_actor, party.id, D("300"), date(2024, 2, 1), sink)

        # When
        async with session_factory() as session:
            detail = await ledger_service.get_party_detail(session, party.id)

        # Then
        summary = detail.summary
        assert summary.selling_total == D("300")
        assert summary.total_received == D("300")
        assert summary.balance_owed == D("0")
        assert summary.credit_balance == D("50")
        assert summary.transaction_count == 1
        assert summary.last_payment == date(2024, 2, 1)
        assert len(detail.party_payments) == 1

    async def test_party_detail_not_found(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(NotFoundError):
                await ledger_service.get_party_detail(session, uuid.uuid4())

    async def test_party_stats_and_report(
        self, uow_factory, sink, admin_actor, make_party, make_sell_transaction, session_factory
    ):
        a = await make_party("A")
        b = await make_party("B")
        await make_sell_transaction(a, [D("100")], transaction_date=date(2024, 1, 5), received=[D("40")])
        await ledger_service.create_transaction(
            uow_factory(), admin_actor,
            TransactionCreate(kind="buy", date=date(2024, 2, 5), party_id=b.id,
                              total_weight="12", total_payment="600", buy_items=[{}]),
            sink,
        )

        async with session_factory() as session:
            stats = {party.name: s for party, s in await ledger_service.list_party_stats(session)}
            january = await ledger_service.report_summary(
                session, date_from=date(2024, 1, 1), date_to=date(2024, 1, 31)
            )
            overall = await ledger_service.report_summary(session)

        assert (stats["A"].selling_total, stats["A"].total_received, stats["A"].balance_owed) == (
            D("100"), D("40"), D("60")
        )
        assert (stats["B"].buying_total, stats["B"].transaction_count) == (D("600"), 1)
        assert (january["selling"].count, january["buying"].count) == (1, 0)
        assert overall["buying"].sum_weight == D("12")
        assert overall["buying"].sum_payment == D("600")
