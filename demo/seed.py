#!/usr/bin/env python3
"""
Demo seed script: populates the database with sample data for demos.

!! NOT FOR PRODUCTION !!
This script mints bearer tokens with the local SECRET_KEY and credits
wallets out of thin air. It is intended ONLY for local demos and frontend
development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

What it does:
    1. Inserts the demo plan catalog directly into the database (there is
       no plan administration endpoint)
    2. Opens a wallet for each demo member and credits an opening balance
       through the admin endpoint
    3. Buys a plan, claims the check-in bonus and files a withdrawal for
       some members so every screen has data
    4. Prints a bearer token for the admin and each member
"""

import argparse
import asyncio
import sys
import uuid

import httpx

BASE_URL = "http://localhost:8000"

# Fixed IDs so re-running the script targets the same wallets
NAMESPACE = uuid.UUID("6f1c1a52-3f8e-4a43-9b7c-0d6c1d1d9a10")

ADMIN = {"name": "Admin", "user_id": uuid.uuid5(NAMESPACE, "admin")}

MEMBERS = [
    {"name": "Ada Okafor", "opening_cents": 2_500_000, "plan": "Starter", "withdraw_cents": 300_000},
    {"name": "Bayo Adeyemi", "opening_cents": 10_000_000, "plan": "Silver", "withdraw_cents": None},
    {"name": "Chidi Nwosu", "opening_cents": 50_000_000, "plan": "Gold", "withdraw_cents": 1_000_000},
    {"name": "Dami Bello", "opening_cents": 500_000, "plan": None, "withdraw_cents": None},
]

# (name, price, daily profit, duration in days); all amounts in minor units
PLANS = [
    ("Starter", 1_000_000, 50_000, 30),
    ("Silver", 5_000_000, 275_000, 30),
    ("Gold", 20_000_000, 1_200_000, 45),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


def format_amount(cents: int) -> str:
    from yieldwallet.config import settings

    return f"{settings.CURRENCY} {cents / 100:,.2f}"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def mint_token(user_id: uuid.UUID, is_admin: bool = False) -> str:
    """Sign a long-lived demo token with the local SECRET_KEY."""
    from datetime import timedelta

    from yieldwallet.security import create_access_token

    return create_access_token(user_id, is_admin=is_admin, expires_delta=timedelta(days=7))


async def insert_plans() -> dict[str, int]:
    """Create the demo plans if missing and return {name: plan_id}.

    Goes straight to the database because plans are managed outside the
    API.
    """
    from sqlalchemy import select

    from yieldwallet.database import AsyncSessionLocal, Base, engine
    from yieldwallet.models.plan import InvestmentPlan

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    plan_ids: dict[str, int] = {}
    async with AsyncSessionLocal() as session:
        for name, price, daily, days in PLANS:
            result = await session.execute(
                select(InvestmentPlan).where(InvestmentPlan.name == name)
            )
            plan = result.scalar_one_or_none()
            if plan is None:
                plan = InvestmentPlan(
                    name=name,
                    price_cents=price,
                    daily_profit_cents=daily,
                    duration_days=days,
                    total_roi_cents=daily * days,
                )
                session.add(plan)
                await session.flush()
            plan_ids[name] = plan.id
        await session.commit()

    await engine.dispose()
    return plan_ids


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED: NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print("  Start the server first: uvicorn yieldwallet.main:app --reload\n")
            sys.exit(1)

        print("Creating plans...")
        plan_ids = await insert_plans()
        for name, price, daily, days in PLANS:
            log(f"{name}: {format_amount(price)}, {format_amount(daily)}/day for {days} days")

        admin_token = mint_token(ADMIN["user_id"], is_admin=True)
        tokens: list[tuple[str, str]] = [(ADMIN["name"], admin_token)]

        for member in MEMBERS:
            user_id = uuid.uuid5(NAMESPACE, member["name"])
            token = mint_token(user_id)
            tokens.append((member["name"], token))
            print(f"\nSeeding {member['name']} ({user_id})...")

            resp = await client.post(f"{BASE_URL}/wallet", headers=auth_header(token))
            resp.raise_for_status()
            if resp.status_code == 200:
                log("Wallet already open, skipping")
                continue

            resp = await client.post(
                f"{BASE_URL}/admin/wallets/{user_id}/credit",
                json={"amount_cents": member["opening_cents"], "description": "Opening balance"},
                headers=auth_header(admin_token),
            )
            resp.raise_for_status()
            log(f"Opening balance: {format_amount(member['opening_cents'])}")

            resp = await client.post(f"{BASE_URL}/wallet/checkin-bonus", headers=auth_header(token))
            if resp.status_code == 200:
                log("Check-in bonus claimed")

            if member["plan"]:
                resp = await client.post(
                    f"{BASE_URL}/investments",
                    json={"plan_id": plan_ids[member["plan"]]},
                    headers=auth_header(token),
                )
                resp.raise_for_status()
                log(f"Bought {member['plan']} plan")

            if member["withdraw_cents"]:
                resp = await client.post(
                    f"{BASE_URL}/withdrawals",
                    json={
                        "amount_cents": member["withdraw_cents"],
                        "bank_name": "First Demo Bank",
                        "account_number": "0123456789",
                        "account_name": member["name"],
                    },
                    headers=auth_header(token),
                )
                resp.raise_for_status()
                log(f"Withdrawal of {format_amount(member['withdraw_cents'])} pending")

            resp = await client.get(f"{BASE_URL}/wallet", headers=auth_header(token))
            resp.raise_for_status()
            log(f"Balance: {format_amount(resp.json()['balance_cents'])}")

    print("\n========================================")
    print("  Bearer tokens (valid 7 days)")
    print("========================================")
    for name, token in tokens:
        print(f"\n  {name}:\n    {token}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Seed the demo database")
    parser.add_argument(
        "--base-url",
        default=BASE_URL,
        help=f"API base URL (default: {BASE_URL})",
    )
    args = parser.parse_args()
    asyncio.run(seed(args.base_url))


if __name__ == "__main__":
    main()
