"""Service for Plans module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.modules.plans.models import Plan
from school_fees.modules.plans.schemas import PlanCreate
from school_fees.shared.utils.money import round_money


class PlanService:
    """Service for managing subscription plans."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_plans(self) -> list[Plan]:
        """List all plans, newest first."""
        result = await self.db.execute(
            select(Plan).order_by(Plan.created_at.desc(), Plan.id.desc())
        )
        return list(result.scalars().all())

    async def create_plan(self, data: PlanCreate) -> Plan:
        """Create a new plan."""
        plan = Plan(
            name=data.name,
            price_per_month=round_money(data.price_per_month),
            max_students=data.max_students,
            features=list(data.features),
            is_active=data.is_active,
        )
        self.db.add(plan)
        await self.db.commit()
        return plan
