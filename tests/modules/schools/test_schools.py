from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.models import User, UserRole
from school_fees.core.exceptions import NotFoundError
from school_fees.modules.invoices.models import InvoiceStatus
from school_fees.modules.schools.models import School
from school_fees.modules.schools.service import SchoolService
from tests.helpers import auth_headers, make_invoice, make_school, make_student, make_user


async def _billed_school(db_session: AsyncSession, school: School, parent: User) -> None:
    """Two children of one parent plus an unlinked student, with mixed invoice states."""
    first = await make_student(db_session, school.id, "STU-001", parent_id=parent.id)
    second = await make_student(
        db_session, school.id, "STU-002", first_name="Ram", parent_id=parent.id
    )
    unlinked = await make_student(db_session, school.id, "STU-003", first_name="Hari")

    await make_invoice(db_session, first, amount="1000.00", term="April 2025")
    await make_invoice(db_session, first, amount="900.00", term="March 2025", status=InvoiceStatus.PAID)
    await make_invoice(db_session, second, amount="500.00", term="April 2025")
    await make_invoice(db_session, unlinked, amount="300.00", term="April 2025")
    await make_invoice(
        db_session, unlinked, amount="200.00", term="March 2025", status=InvoiceStatus.OVERDUE
    )


class TestSchoolService:
    """Tests for SchoolService."""

    async def test_list_schools(self, db_session: AsyncSession, school: School):
        pending = await make_school(db_session, name="Pending School", approved=False)
        service = SchoolService(db_session)

        everything = await service.list_schools()
        approved = await service.list_schools(approved_only=True)

        assert {s.id for s in everything} == {school.id, pending.id}
        assert [s.id for s in approved] == [school.id]

    async def test_set_approval(self, db_session: AsyncSession):
        pending = await make_school(db_session, name="Pending School", approved=False)
        service = SchoolService(db_session)

        approved = await service.set_approval(pending.id, approved=True)
        assert approved.is_approved is True

        rejected = await service.set_approval(pending.id, approved=False)
        assert rejected.is_approved is False

    async def test_set_approval_unknown_school(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await SchoolService(db_session).set_approval(999, approved=True)

    async def test_details_statistics(
        self, db_session: AsyncSession, school: School, parent_user: User
    ):
        await _billed_school(db_session, school, parent_user)

        details = await SchoolService(db_session).get_details(school.id)
        stats = details["statistics"]

        assert stats["total_students"] == 3
        assert stats["total_invoices"] == 5
        assert stats["total_amount"] == Decimal("2900.00")
        assert stats["paid_amount"] == Decimal("900.00")
        assert stats["pending_amount"] == Decimal("1800.00")
        assert stats["overdue_amount"] == Decimal("200.00")
        assert stats["remaining_amount"] == Decimal("2000.00")

    async def test_details_of_empty_school(self, db_session: AsyncSession, school: School):
        details = await SchoolService(db_session).get_details(school.id)

        assert details["students"] == []
        assert details["statistics"]["total_amount"] == 0
        assert details["statistics"]["remaining_amount"] == 0

    async def test_parent_notifications_grouped(
        self, db_session: AsyncSession, school: School, parent_user: User
    ):
        await _billed_school(db_session, school, parent_user)

        prepared = await SchoolService(db_session).prepare_parent_notifications(school.id)

        [entry] = prepared["notifications"]
        assert entry["parent"].id == parent_user.id
        assert len(entry["invoices"]) == 2
        assert entry["total_amount"] == Decimal("1500.00")
        # Unlinked students still count towards the school total
        assert prepared["total_pending_amount"] == Decimal("1800.00")

    async def test_school_notification(
        self, db_session: AsyncSession, school: School, school_admin: User, parent_user: User
    ):
        await _billed_school(db_session, school, parent_user)

        prepared = await SchoolService(db_session).prepare_school_notification(school.id)

        assert prepared["school_admin"] == {
            "name": "School Admin",
            "email": "schooladmin@example.com",
        }
        assert prepared["pending_invoices_count"] == 3
        assert prepared["total_pending_amount"] == Decimal("1800.00")

    async def test_school_notification_without_admin(
        self, db_session: AsyncSession, school: School
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await SchoolService(db_session).prepare_school_notification(school.id)
        assert exc_info.value.message == "School admin not found"


class TestSchoolEndpoints:
    """Tests for school API endpoints."""

    async def test_approved_schools_is_public(self, client: AsyncClient, db_session: AsyncSession, school: School):
        await make_school(db_session, name="Pending School", approved=False)

        response = await client.get("/api/v1/schools/approved")

        assert response.status_code == 200
        assert [s["name"] for s in response.json()["data"]] == ["Green Valley School"]

    async def test_my_school(self, client: AsyncClient, school_admin: User):
        response = await client.get("/api/v1/schools/my-school", headers=auth_headers(school_admin))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == school_admin.school_id
        assert data["isApproved"] is True

    async def test_list_requires_super_admin(
        self, client: AsyncClient, super_admin: User, parent_user: User
    ):
        allowed = await client.get("/api/v1/schools", headers=auth_headers(super_admin))
        assert allowed.status_code == 200
        assert len(allowed.json()["data"]) == 1

        denied = await client.get("/api/v1/schools", headers=auth_headers(parent_user))
        assert denied.status_code == 403

    async def test_approve_and_reject(
        self, client: AsyncClient, db_session: AsyncSession, super_admin: User
    ):
        pending = await make_school(db_session, name="Pending School", approved=False)
        headers = auth_headers(super_admin)

        approved = await client.patch(f"/api/v1/schools/{pending.id}/approve", headers=headers)
        assert approved.status_code == 200
        assert approved.json()["message"] == "School approved successfully"
        assert approved.json()["data"]["isApproved"] is True

        rejected = await client.patch(f"/api/v1/schools/{pending.id}/reject", headers=headers)
        assert rejected.json()["message"] == "School rejected"
        assert rejected.json()["data"]["isApproved"] is False

    async def test_approve_unknown_school(self, client: AsyncClient, super_admin: User):
        response = await client.patch(
            "/api/v1/schools/999/approve", headers=auth_headers(super_admin)
        )
        assert response.status_code == 404
        assert response.json()["message"] == "School not found"

    async def test_details_endpoint(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        school: School,
        super_admin: User,
        parent_user: User,
    ):
        await _billed_school(db_session, school, parent_user)

        response = await client.get(
            f"/api/v1/schools/{school.id}/details", headers=auth_headers(super_admin)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["school"]["name"] == "Green Valley School"
        assert len(data["students"]) == 3
        assert len(data["invoices"]) == 5
        assert data["statistics"]["remainingAmount"] == 2000
        assert data["statistics"]["paidAmount"] == 900

    async def test_notify_parents_endpoint(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        school: School,
        super_admin: User,
        parent_user: User,
    ):
        await _billed_school(db_session, school, parent_user)

        response = await client.post(
            f"/api/v1/schools/{school.id}/notify-parents", headers=auth_headers(super_admin)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Notifications prepared for 1 parents"
        assert body["data"]["totalPendingAmount"] == 1800
        [notification] = body["data"]["notifications"]
        assert notification["parent"]["email"] == "parent@example.com"
        assert notification["totalAmount"] == 1500

    async def test_notify_school_endpoint(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        school: School,
        super_admin: User,
        school_admin: User,
    ):
        student = await make_student(db_session, school.id, "STU-001")
        await make_invoice(db_session, student, amount="750.00")

        response = await client.post(
            f"/api/v1/schools/{school.id}/notify-school", headers=auth_headers(super_admin)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["schoolAdmin"]["email"] == "schooladmin@example.com"
        assert data["pendingInvoicesCount"] == 1
        assert data["totalPendingAmount"] == 750

    async def test_notify_school_without_admin(
        self, client: AsyncClient, db_session: AsyncSession, super_admin: User
    ):
        lonely = await make_school(db_session, name="Lonely School")
        await make_user(db_session, "p@example.com", UserRole.PARENT, lonely.id)

        response = await client.post(
            f"/api/v1/schools/{lonely.id}/notify-school", headers=auth_headers(super_admin)
        )
        assert response.status_code == 404
