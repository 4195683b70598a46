"""
Tests for admin-confirmed recharges.

These tests verify:
  - A recharge request is logged as pending and does not touch the balance
  - Approval completes the entry and credits the wallet
  - Rejection cancels the entry with a reason and credits nothing
  - Only pending recharge entries can be settled
"""

import uuid


async def _request(client, headers, amount_cents=700):
    response = await client.post(
        "/recharges", json={"amount_cents": amount_cents}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["transaction"]


class TestRequestRecharge:
    """Tests for POST /recharges."""

    async def test_request_is_pending(self, client, member_id, member_headers, fund_wallet):
        await fund_wallet(member_id, 100)

        txn = await _request(client, member_headers)
        assert txn["type"] == "recharge"
        assert txn["status"] == "pending"
        assert txn["amount_cents"] == 700
        assert txn["description"] == "Online payment request"

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 100
        assert balance.json()["computed_balance_cents"] == 100
        assert balance.json()["match"] is True

    async def test_request_without_wallet(self, client, member_headers):
        response = await client.post(
            "/recharges", json={"amount_cents": 700}, headers=member_headers
        )
        assert response.status_code == 404

    async def test_non_positive_amount(self, client, member_id, member_headers, fund_wallet):
        await fund_wallet(member_id, 0)
        response = await client.post(
            "/recharges", json={"amount_cents": 0}, headers=member_headers
        )
        assert response.status_code == 422


class TestSettleRecharge:
    """Tests for /admin/recharges/{transaction_id}/approve|reject."""

    async def test_approve_credits_wallet(
        self, client, member_id, member_headers, admin_headers, fund_wallet
    ):
        await fund_wallet(member_id, 100)
        txn = await _request(client, member_headers)

        response = await client.post(
            f"/admin/recharges/{txn['id']}/approve", headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["new_balance_cents"] == 800
        assert data["transaction"]["status"] == "completed"

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 800
        assert balance.json()["match"] is True

    async def test_reject_leaves_balance(
        self, client, member_id, member_headers, admin_headers, fund_wallet
    ):
        await fund_wallet(member_id, 100)
        txn = await _request(client, member_headers)

        response = await client.post(
            f"/admin/recharges/{txn['id']}/reject", headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["transaction"]["status"] == "cancelled"
        assert data["transaction"]["description"] == (
            "Online payment request (Rejected: Payment not received)"
        )

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 100
        assert balance.json()["match"] is True

    async def test_settled_recharge_is_final(
        self, client, member_id, member_headers, admin_headers, fund_wallet
    ):
        await fund_wallet(member_id, 100)
        txn = await _request(client, member_headers)
        await client.post(f"/admin/recharges/{txn['id']}/approve", headers=admin_headers)

        again = await client.post(f"/admin/recharges/{txn['id']}/approve", headers=admin_headers)
        assert again.status_code == 409
        assert again.json()["error_type"] == "invalid_state"

        reject = await client.post(f"/admin/recharges/{txn['id']}/reject", headers=admin_headers)
        assert reject.status_code == 409

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 800

    async def test_only_recharge_entries(
        self, client, member_id, member_headers, admin_headers, fund_wallet
    ):
        """A pending withdrawal entry cannot be approved as a recharge."""
        await fund_wallet(member_id, 500)
        filed = await client.post(
            "/withdrawals",
            json={
                "amount_cents": 200,
                "bank_name": "First Demo Bank",
                "account_number": "0123456789",
                "account_name": "Ada Okafor",
            },
            headers=member_headers,
        )
        transaction_id = filed.json()["withdrawal"]["transaction_id"]

        response = await client.post(
            f"/admin/recharges/{transaction_id}/approve", headers=admin_headers
        )
        assert response.status_code == 409
        assert response.json()["error_type"] == "invalid_state"

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 300

    async def test_unknown_transaction(self, client, admin_headers):
        response = await client.post(
            f"/admin/recharges/{uuid.uuid4()}/approve", headers=admin_headers
        )
        assert response.status_code == 404

    async def test_member_cannot_approve(self, client, member_id, member_headers, fund_wallet):
        await fund_wallet(member_id, 0)
        txn = await _request(client, member_headers)

        response = await client.post(
            f"/admin/recharges/{txn['id']}/approve", headers=member_headers
        )
        assert response.status_code == 403
