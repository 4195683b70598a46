"""
Tests for wallet endpoints and the admin credit.

These tests verify:
  - Opening a wallet is idempotent (201 then 200), also under concurrency
  - A new wallet has a zero balance that reconciles with the log
  - Balance reads fail with 404 when no wallet is open
  - Admin credit adds funds and records a completed admin_credit entry
  - The transaction log is newest first and filterable
  - A storage failure mid-operation rolls back every write and returns an
    opaque 500
"""

import asyncio
import uuid

import pytest
from sqlalchemy import func, select

from yieldwallet.config import settings
from yieldwallet.exceptions import PersistenceError
from yieldwallet.models.wallet import Wallet
from yieldwallet.services import transaction_service, wallet_service


class TestOpenWallet:
    """Tests for POST /wallet."""

    async def test_open_wallet(self, client, member_id, member_headers):
        response = await client.post("/wallet", headers=member_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["wallet"]["user_id"] == str(member_id)
        assert data["wallet"]["balance_cents"] == 0
        assert data["wallet"]["last_checkin_date"] is None

    async def test_open_wallet_twice_returns_existing(self, client, member_headers):
        """A second open returns the same wallet with 200 and changes nothing."""
        first = await client.post("/wallet", headers=member_headers)
        second = await client.post("/wallet", headers=member_headers)
        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["wallet"]["user_id"] == first.json()["wallet"]["user_id"]
        assert second.json()["wallet"]["balance_cents"] == 0

    async def test_concurrent_opens_share_one_wallet(self, session_factory, member_id):
        """Simultaneous opens all succeed and exactly one creates the wallet."""

        async def open_wallet():
            async with session_factory() as db:
                return await wallet_service.create_wallet(db, member_id)

        results = await asyncio.gather(*(open_wallet() for _ in range(5)))

        assert [created for _, created in results].count(True) == 1
        assert {wallet.user_id for wallet, _ in results} == {member_id}

        async with session_factory() as db:
            count = await db.scalar(
                select(func.count()).select_from(Wallet).where(Wallet.user_id == member_id)
            )
        assert count == 1


class TestBalance:
    """Tests for GET /wallet."""

    async def test_new_wallet_balance(self, client, member_id, member_headers):
        await client.post("/wallet", headers=member_headers)

        response = await client.get("/wallet", headers=member_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == str(member_id)
        assert data["balance_cents"] == 0
        assert data["computed_balance_cents"] == 0
        assert data["match"] is True
        assert data["currency"] == "NGN"

    async def test_balance_without_wallet(self, client, member_headers):
        response = await client.get("/wallet", headers=member_headers)
        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error_type"] == "not_found"


class TestAdminCredit:
    """Tests for POST /admin/wallets/{user_id}/credit."""

    async def test_admin_credit(self, client, member_id, member_headers, admin_headers):
        await client.post("/wallet", headers=member_headers)

        response = await client.post(
            f"/admin/wallets/{member_id}/credit",
            json={"amount_cents": 100_000, "description": "Welcome bonus"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["new_balance_cents"] == 100_000
        assert data["transaction"]["type"] == "admin_credit"
        assert data["transaction"]["status"] == "completed"
        assert data["transaction"]["amount_cents"] == 100_000
        assert data["transaction"]["description"] == "Welcome bonus"

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 100_000
        assert balance.json()["match"] is True

    async def test_admin_credit_default_description(
        self, client, member_id, member_headers, admin_headers
    ):
        await client.post("/wallet", headers=member_headers)
        response = await client.post(
            f"/admin/wallets/{member_id}/credit",
            json={"amount_cents": 500},
            headers=admin_headers,
        )
        assert response.json()["transaction"]["description"] == "Admin manual credit"

    async def test_admin_credit_rejects_non_positive(
        self, client, member_id, member_headers, admin_headers
    ):
        await client.post("/wallet", headers=member_headers)
        for amount in (0, -100):
            response = await client.post(
                f"/admin/wallets/{member_id}/credit",
                json={"amount_cents": amount},
                headers=admin_headers,
            )
            assert response.status_code == 422

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 0

    async def test_admin_credit_unknown_wallet(self, client, admin_headers):
        response = await client.post(
            f"/admin/wallets/{uuid.uuid4()}/credit",
            json={"amount_cents": 500},
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"

    async def test_admin_views_any_wallet(
        self, client, member_id, admin_headers, fund_wallet
    ):
        await fund_wallet(member_id, 2_500)

        response = await client.get(f"/admin/wallets/{member_id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["balance_cents"] == 2_500
        assert response.json()["match"] is True


class TestTransactionLog:
    """Tests for GET /wallet/transactions."""

    async def test_newest_first(self, client, member_id, member_headers, admin_headers):
        await client.post("/wallet", headers=member_headers)
        for amount in (100, 200, 300):
            await client.post(
                f"/admin/wallets/{member_id}/credit",
                json={"amount_cents": amount},
                headers=admin_headers,
            )

        response = await client.get("/wallet/transactions", headers=member_headers)
        assert response.status_code == 200
        amounts = [txn["amount_cents"] for txn in response.json()]
        assert amounts == [300, 200, 100]

    async def test_filter_by_type_and_status(
        self, client, member_id, member_headers, fund_wallet
    ):
        await fund_wallet(member_id, 1_000)
        await client.post("/wallet/checkin-bonus", headers=member_headers)
        await client.post("/recharges", json={"amount_cents": 700}, headers=member_headers)

        bonus = await client.get(
            "/wallet/transactions", params={"type": "checkin_bonus"}, headers=member_headers
        )
        assert len(bonus.json()) == 1
        assert bonus.json()[0]["type"] == "checkin_bonus"

        pending = await client.get(
            "/wallet/transactions", params={"status": "pending"}, headers=member_headers
        )
        assert len(pending.json()) == 1
        assert pending.json()[0]["type"] == "recharge"

    async def test_pagination(self, client, member_id, member_headers, admin_headers):
        await client.post("/wallet", headers=member_headers)
        for amount in range(1, 6):
            await client.post(
                f"/admin/wallets/{member_id}/credit",
                json={"amount_cents": amount},
                headers=admin_headers,
            )

        page = await client.get(
            "/wallet/transactions", params={"limit": 2, "offset": 1}, headers=member_headers
        )
        assert [txn["amount_cents"] for txn in page.json()] == [4, 3]

    async def test_log_is_scoped_to_caller(
        self, client, member_id, other_member_id, other_member_headers, fund_wallet
    ):
        await fund_wallet(member_id, 1_000)
        await fund_wallet(other_member_id, 0)

        response = await client.get("/wallet/transactions", headers=other_member_headers)
        assert response.status_code == 200
        assert response.json() == []


class TestStorageFailure:
    """A storage error part-way through an operation rolls back all of it."""

    async def test_failed_log_write_rolls_back_credit(
        self, client, monkeypatch, member_id, member_headers, admin_headers, fund_wallet
    ):
        await fund_wallet(member_id, 500)

        # The wallet UPDATE succeeds, then the log insert violates the
        # positive-amount CHECK on flush
        original_append = transaction_service.append

        async def append_zero_amount(db, **fields):
            fields["amount_cents"] = 0
            return await original_append(db, **fields)

        monkeypatch.setattr(transaction_service, "append", append_zero_amount)

        response = await client.post(
            f"/admin/wallets/{member_id}/credit",
            json={"amount_cents": 1_000},
            headers=admin_headers,
        )
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "detail": "The operation could not be completed",
            "error_type": "persistence_failure",
        }

        monkeypatch.undo()

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 500
        assert balance.json()["computed_balance_cents"] == 500
        assert balance.json()["match"] is True

        log = await client.get("/wallet/transactions", headers=member_headers)
        assert [txn["amount_cents"] for txn in log.json()] == [500]

    async def test_service_raises_persistence_error(
        self, session_factory, monkeypatch, member_id, fund_wallet
    ):
        await fund_wallet(member_id, 500)
        original_append = transaction_service.append

        async def append_zero_amount(db, **fields):
            fields["amount_cents"] = 0
            return await original_append(db, **fields)

        monkeypatch.setattr(transaction_service, "append", append_zero_amount)

        async with session_factory() as db:
            with pytest.raises(PersistenceError):
                await wallet_service.claim_checkin_bonus(db, member_id)

        monkeypatch.undo()

        # Nothing was written, so the bonus is still claimable today
        async with session_factory() as db:
            _, new_balance = await wallet_service.claim_checkin_bonus(db, member_id)
        assert new_balance == 500 + settings.CHECKIN_BONUS_CENTS
