from decimal import Decimal

import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.models import User
from school_fees.modules.plans.schemas import PlanCreate
from school_fees.modules.plans.service import PlanService
from tests.helpers import auth_headers


class TestPlanService:
    """Tests for PlanService."""

    async def test_create_plan(self, db_session: AsyncSession):
        plan = await PlanService(db_session).create_plan(
            PlanCreate(
                name="Basic",
                price_per_month=Decimal("1999.999"),
                max_students=200,
                features=["Invoices", "Online payments"],
            )
        )

        assert plan.id is not None
        assert plan.price_per_month == Decimal("2000.00")
        assert plan.features == ["Invoices", "Online payments"]
        assert plan.is_active is True

    async def test_list_plans_newest_first(self, db_session: AsyncSession):
        service = PlanService(db_session)
        basic = await service.create_plan(PlanCreate(name="Basic", price_per_month=Decimal("1000"), max_students=100))
        pro = await service.create_plan(PlanCreate(name="Pro", price_per_month=Decimal("3000"), max_students=1000))

        plans = await service.list_plans()

        assert [p.id for p in plans] == [pro.id, basic.id]

    def test_negative_price_rejected(self):
        with pytest.raises(PydanticValidationError):
            PlanCreate(name="Broken", price_per_month=Decimal("-1"), max_students=10)


class TestPlanEndpoints:
    """Tests for plan API endpoints."""

    async def test_create_and_list(self, client: AsyncClient, super_admin: User):
        headers = auth_headers(super_admin)

        response = await client.post(
            "/api/v1/plans",
            json={
                "name": "Standard",
                "pricePerMonth": 2500,
                "maxStudents": 500,
                "features": ["Reports"],
            },
            headers=headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["pricePerMonth"] == 2500
        assert data["features"] == ["Reports"]

        listing = await client.get("/api/v1/plans", headers=headers)
        assert [p["name"] for p in listing.json()["data"]] == ["Standard"]

    async def test_school_admin_cannot_manage_plans(
        self, client: AsyncClient, school_admin: User
    ):
        response = await client.post(
            "/api/v1/plans",
            json={"name": "Free", "pricePerMonth": 0, "maxStudents": 10},
            headers=auth_headers(school_admin),
        )
        assert response.status_code == 403

    async def test_unauthenticated(self, client: AsyncClient):
        response = await client.get("/api/v1/plans")
        assert response.status_code == 401
