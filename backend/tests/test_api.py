"""
장부 API 통합 테스트 (httpx AsyncClient + ASGITransport)
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_uow
from app.core.database import get_db
from app.core.security import create_access_token
from app.main import app
from app.models import Notification
from app.models.enums import NotificationType
from app.services.notification_service import get_notification_sink
from app.services.unit_of_work import UnitOfWork

D = Decimal


@pytest.fixture
async def client(session_factory, sink):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_uow] = lambda: UnitOfWork(session_factory)
    app.dependency_overrides[get_notification_sink] = lambda: sink

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth(user):
    token = create_access_token(str(user.id), user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    return auth(staff_user)


async def create_party(client, headers, name="Sharma Traders"):
    resp = await client.post("/api/v1/parties", json={"name": name}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


async def create_sell(client, headers, party_id, amounts, when="2024-01-10"):
    resp = await client.post("/api/v1/transactions", json={
        "kind": "sell",
        "date": when,
        "party_id": party_id,
        "sell_items": [{"item_name": f"item-{i}", "total_amount": a} for i, a in enumerate(amounts)],
    }, headers=headers)
    assert resp.status_code == 201
    return resp.json()


class TestHealthAndAuth:
    async def test_health(self, client):
        resp = await client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    async def test_requires_bearer_token(self, client):
        resp = await client.get("/api/v1/parties")

        assert resp.status_code in (401, 403)

    async def test_rejects_invalid_token(self, client):
        resp = await client.get("/api/v1/parties", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401


class TestPartyPaymentFlow:
    """일괄 입금 → 배분 → 상세 → 취소"""

    async def test_create_allocate_and_reverse(self, client, admin_headers, staff_headers, sink):
        # Given
        party = await create_party(client, staff_headers)
        await create_sell(client, staff_headers, party["id"], ["100", "50"], when="2024-01-01")

        # When: 미수 150에 200 입금
        resp = await client.post("/api/v1/party-payments", json={
            "party_id": party["id"], "amount": "200", "payment_date": "2024-02-01",
        }, headers=staff_headers)

        # Then
        assert resp.status_code == 201
        body = resp.json()
        assert body["allocations_count"] == 2
        assert D(body["credit_added"]) == D("50")
        assert body["status"] == "active"
        assert [D(a["amount"]) for a in body["allocations"]] == [D("100"), D("50")]

        detail = (await client.get(f"/api/v1/parties/{party['id']}", headers=staff_headers)).json()
        assert D(detail["summary"]["balance_owed"]) == D("0")
        assert D(detail["summary"]["credit_balance"]) == D("50")
        assert detail["summary"]["last_payment"] == "2024-02-01"
        assert detail["transactions"][0]["date"] == "2024-01-01"
        assert len(detail["party_payments"]) == 1

        # When: 관리자 취소
        resp = await client.request(
            "DELETE", f"/api/v1/party-payments/{body['id']}",
            json={"reason": "잘못된 거래처"}, headers=admin_headers,
        )

        # Then
        assert resp.status_code == 200
        assert resp.json()["is_deleted"] is True
        assert resp.json()["delete_reason"] == "잘못된 거래처"

        detail = (await client.get(f"/api/v1/parties/{party['id']}", headers=staff_headers)).json()
        assert D(detail["summary"]["balance_owed"]) == D("150")
        assert D(detail["summary"]["credit_balance"]) == D("0")
        assert detail["party_payments"] == []

        listed = await client.get(
            "/api/v1/party-payments", params={"party_id": party["id"]}, headers=staff_headers
        )
        assert listed.json() == []

        history = await client.get(f"/api/v1/party-payments/{body['id']}", headers=staff_headers)
        assert history.json()["status"] == "reversed"
        assert len(history.json()["allocations"]) == 2

        assert [e.action for e in sink.events] == [
            "created", "recorded party payment", "deleted party payment"
        ]

    async def test_staff_cannot_delete(self, client, staff_headers):
        party = await create_party(client, staff_headers)
        created = (await client.post("/api/v1/party-payments", json={
            "party_id": party["id"], "amount": "10", "payment_date": "2024-02-01",
        }, headers=staff_headers)).json()

        resp = await client.delete(f"/api/v1/party-payments/{created['id']}", headers=staff_headers)

        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "FORBIDDEN"

    async def test_double_delete_conflict(self, client, admin_headers):
        party = await create_party(client, admin_headers)
        created = (await client.post("/api/v1/party-payments", json={
            "party_id": party["id"], "amount": "10", "payment_date": "2024-02-01",
        }, headers=admin_headers)).json()
        await client.delete(f"/api/v1/party-payments/{created['id']}", headers=admin_headers)

        resp = await client.delete(f"/api/v1/party-payments/{created['id']}", headers=admin_headers)

        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "ALREADY_DELETED"

    @pytest.mark.parametrize("payload", [
        {"amount": "0", "payment_date": "2024-02-01"},
        {"amount": "-10", "payment_date": "2024-02-01"},
        {"amount": "10.001", "payment_date": "2024-02-01"},
        {"amount": "10"},
    ])
    async def test_invalid_argument(self, client, staff_headers, payload):
        party = await create_party(client, staff_headers)

        resp = await client.post(
            "/api/v1/party-payments", json={"party_id": party["id"], **payload}, headers=staff_headers
        )

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_ARGUMENT"

    async def test_unknown_party(self, client, staff_headers):
        resp = await client.post("/api/v1/party-payments", json={
            "party_id": str(uuid.uuid4()), "amount": "10", "payment_date": "2024-02-01",
        }, headers=staff_headers)

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"


class TestDirectPaymentFlow:
    """직접 입금 등록/조회/삭제"""

    async def test_record_list_delete(self, client, admin_headers, staff_headers):
        party = await create_party(client, staff_headers)
        txn = await create_sell(client, staff_headers, party["id"], ["500"])
        item_id = txn["sell_items"][0]["id"]

        recorded = await client.post("/api/v1/payments", json={
            "sell_item_id": item_id, "amount": "120.25", "payment_date": "2024-01-15",
            "payment_method": "UPI",
        }, headers=staff_headers)
        assert recorded.status_code == 201
        assert D(recorded.json()["updated_balance"]) == D("379.75")

        listed = await client.get("/api/v1/payments", params={"sell_item_id": item_id}, headers=staff_headers)
        assert [p["payment_method"] for p in listed.json()] == ["UPI"]

        forbidden = await client.delete(f"/api/v1/payments/{recorded.json()['id']}", headers=staff_headers)
        assert forbidden.status_code == 403

        deleted = await client.delete(f"/api/v1/payments/{recorded.json()['id']}", headers=admin_headers)
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True
        assert D(deleted.json()["updated_balance"]) == D("500")


class TestStatsAndReports:
    async def test_stats_summary_and_party_stats(self, client, staff_headers):
        party = await create_party(client, staff_headers, name="Gupta & Sons")
        await create_sell(client, staff_headers, party["id"], ["300", "200"])
        await client.post("/api/v1/party-payments", json={
            "party_id": party["id"], "amount": "350", "payment_date": "2024-02-01",
        }, headers=staff_headers)

        summary = (await client.get("/api/v1/stats/summary", headers=staff_headers)).json()
        party_stats = (await client.get("/api/v1/parties/stats", headers=staff_headers)).json()
        report = (await client.get(
            "/api/v1/reports/summary", params={"date_from": "2024-01-01"}, headers=staff_headers
        )).json()

        assert D(summary["total_selling"]) == D("500")
        assert D(summary["total_received"]) == D("350")
        assert D(summary["balance_left"]) == D("150")
        assert summary["party_payments_count"] == 1
        assert party_stats[0]["name"] == "Gupta & Sons"
        assert D(party_stats[0]["balance"]) == D("150")
        assert report["selling"]["count"] == 1
        assert D(report["selling"]["sum_payment"]) == D("500")

    async def test_validation_error_envelope(self, client, staff_headers):
        resp = await client.post("/api/v1/transactions", json={"kind": "sell"}, headers=staff_headers)

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def add_notifications(session_factory, user, *entries):
    """(message, is_read, 생성 시각 오프셋(분)) 목록 저장"""
    base = datetime(2024, 3, 1, 9, 0)
    async with session_factory() as session:
        rows = [
            Notification(
                user_id=user.id, message=message, type=NotificationType.CREATE,
                is_read=is_read, created_at=base + timedelta(minutes=offset),
            )
            for message, is_read, offset in entries
        ]
        session.add_all(rows)
        await session.commit()
        return [row.id for row in rows]


class TestNotificationInbox:
    """관리자 알림함 (본인 알림만)"""

    async def test_admin_lists_own_notifications_newest_first(
        self, client, session_factory, admin_user, staff_user, admin_headers
    ):
        # Given
        await add_notifications(
            session_factory, admin_user, ("first", False, 0), ("second", True, 5)
        )
        await add_notifications(session_factory, staff_user, ("not mine", False, 10))

        # When
        resp = await client.get("/api/v1/notifications", headers=admin_headers)

        # Then
        assert resp.status_code == 200
        assert [n["message"] for n in resp.json()] == ["second", "first"]
        assert resp.json()[0]["type"] == "create"

    async def test_non_admin_gets_empty_inbox(
        self, client, session_factory, staff_user, staff_headers
    ):
        await add_notifications(session_factory, staff_user, ("hidden", False, 0))

        listed = await client.get("/api/v1/notifications", headers=staff_headers)
        count = await client.get("/api/v1/notifications/unread-count", headers=staff_headers)

        assert listed.json() == []
        assert count.json() == {"count": 0}

    async def test_mark_read_and_unread_count(
        self, client, session_factory, admin_user, admin_headers
    ):
        # Given
        first_id, _ = await add_notifications(
            session_factory, admin_user, ("a", False, 0), ("b", False, 1)
        )

        # When
        resp = await client.put(f"/api/v1/notifications/{first_id}/read", headers=admin_headers)

        # Then
        assert resp.status_code == 200
        assert resp.json()["is_read"] is True
        count = await client.get("/api/v1/notifications/unread-count", headers=admin_headers)
        assert count.json() == {"count": 1}

    async def test_cannot_mark_another_users_notification(
        self, client, session_factory, staff_user, admin_headers
    ):
        [other_id] = await add_notifications(session_factory, staff_user, ("staff only", False, 0))

        resp = await client.put(f"/api/v1/notifications/{other_id}/read", headers=admin_headers)

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"
        async with session_factory() as session:
            assert (await session.get(Notification, other_id)).is_read is False

    async def test_mark_all_read_only_touches_own_rows(
        self, client, session_factory, admin_user, staff_user, admin_headers
    ):
        # Given
        await add_notifications(
            session_factory, admin_user, ("a", False, 0), ("b", False, 1), ("c", True, 2)
        )
        [staff_id] = await add_notifications(session_factory, staff_user, ("s", False, 0))

        # When
        resp = await client.put("/api/v1/notifications/mark-all-read", headers=admin_headers)

        # Then
        assert resp.status_code == 200
        assert resp.json()["updated"] == 2
        count = await client.get("/api/v1/notifications/unread-count", headers=admin_headers)
        assert count.json() == {"count": 0}
        async with session_factory() as session:
            assert (await session.get(Notification, staff_id)).is_read is False
