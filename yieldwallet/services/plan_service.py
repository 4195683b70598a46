"""
Plan service: read-only access to the plan catalog.

Creating, editing and retiring plans belongs to the catalog administration
tool, not to this service.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.exceptions import PlanInactiveError, PlanNotFoundError
from yieldwallet.models.plan import InvestmentPlan


async def get_active_plan(
    db: AsyncSession,
    plan_id: int,
) -> InvestmentPlan:
    """
    Look up a plan that is currently offered.

    Raises:
        PlanNotFoundError: If no plan has this ID.
        PlanInactiveError: If the plan exists but is not active.
    """
    plan = await db.get(InvestmentPlan, plan_id)

    if plan is None:
        raise PlanNotFoundError(plan_id)
    if not plan.is_active:
        raise PlanInactiveError(plan_id)

    return plan


async def list_active_plans(db: AsyncSession) -> list[InvestmentPlan]:
    """All plans on offer, cheapest first."""
    result = await db.execute(
        select(InvestmentPlan)
        .where(InvestmentPlan.is_active.is_(True))
        .order_by(InvestmentPlan.price_cents.asc())
    )
    return list(result.scalars().all())
