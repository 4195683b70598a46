"""
Tests for authorization boundaries: token validation and role enforcement.

These tests verify two properties:

1. **Token validation**: every endpoint except /health requires a bearer
   token signed with SECRET_KEY, unexpired, with a UUID subject.

2. **Role enforcement**: members cannot reach any /admin/* endpoint. Only
   tokens carrying the admin claim can move money on someone else's behalf.
"""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from yieldwallet.config import settings
from yieldwallet.security import create_access_token


class TestTokenValidation:
    """Requests without a usable token are rejected with 401."""

    async def test_health_is_public(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/wallet"),
            ("post", "/wallet"),
            ("get", "/wallet/transactions"),
            ("post", "/wallet/checkin-bonus"),
            ("get", "/plans"),
            ("get", "/investments"),
        ],
    )
    async def test_missing_token(self, client, method, path):
        response = await getattr(client, method)(path)
        assert response.status_code == 401

    async def test_expired_token(self, client):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(minutes=-1))
        response = await client.get("/wallet", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_wrong_signature(self, client):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "admin": True},
            "not-the-secret-key",
            algorithm=settings.ALGORITHM,
        )
        response = await client.get("/wallet", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_subject_must_be_uuid(self, client):
        token = jwt.encode({"sub": "alice"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        response = await client.get("/wallet", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_missing_subject(self, client):
        token = jwt.encode({"admin": True}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        response = await client.get("/wallet", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestAdminEnforcement:
    """Members cannot call admin endpoints."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("post", "/admin/wallets/{id}/credit"),
            ("get", "/admin/wallets/{id}"),
            ("get", "/admin/withdrawals"),
            ("post", "/admin/withdrawals/{id}/approve"),
            ("post", "/admin/withdrawals/{id}/reject"),
            ("post", "/admin/recharges/{id}/approve"),
            ("post", "/admin/recharges/{id}/reject"),
            ("post", "/admin/accrual/run"),
        ],
    )
    async def test_member_gets_403(self, client, member_headers, method, path):
        url = path.format(id=uuid.uuid4())
        kwargs = {"headers": member_headers}
        if path.endswith("/credit"):
            kwargs["json"] = {"amount_cents": 100}
        response = await getattr(client, method)(url, **kwargs)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    async def test_member_cannot_credit_self(self, client, member_id, member_headers, fund_wallet):
        await fund_wallet(member_id, 0)

        response = await client.post(
            f"/admin/wallets/{member_id}/credit",
            json={"amount_cents": 1_000_000},
            headers=member_headers,
        )
        assert response.status_code == 403

        balance = await client.get("/wallet", headers=member_headers)
        assert balance.json()["balance_cents"] == 0


class TestCrossUserIsolation:
    """Each member only ever sees their own wallet."""

    async def test_balances_are_separate(
        self, client, member_id, member_headers, other_member_id, other_member_headers, fund_wallet
    ):
        await fund_wallet(member_id, 1_000)
        await fund_wallet(other_member_id, 50)

        mine = await client.get("/wallet", headers=member_headers)
        theirs = await client.get("/wallet", headers=other_member_headers)
        assert mine.json()["user_id"] == str(member_id)
        assert mine.json()["balance_cents"] == 1_000
        assert theirs.json()["user_id"] == str(other_member_id)
        assert theirs.json()["balance_cents"] == 50
