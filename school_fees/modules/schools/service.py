"""Service for Schools module."""

from collections import defaultdict
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_fees.core.auth.models import User, UserRole
from school_fees.core.exceptions import NotFoundError
from school_fees.core.logging import get_logger
from school_fees.modules.invoices.models import Invoice, InvoiceStatus
from school_fees.modules.schools.models import School
from school_fees.modules.students.models import Student
from school_fees.shared.utils.money import ZERO

logger = get_logger(__name__)


def _sum_amounts(invoices: list[Invoice], status: InvoiceStatus | None = None) -> Decimal:
    return sum(
        (inv.amount for inv in invoices if status is None or inv.status == status.value),
        ZERO,
    )


class SchoolService:
    """Service for tenant schools: listing, approval and fee overviews."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_schools(self, approved_only: bool = False) -> list[School]:
        """List schools with their plan, newest first."""
        query = select(School).options(selectinload(School.subscription_plan))
        if approved_only:
            query = query.where(School.is_approved.is_(True))
        query = query.order_by(School.created_at.desc(), School.id.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_school(self, school_id: int) -> School:
        """Get school by ID with its plan."""
        result = await self.db.execute(
            select(School)
            .where(School.id == school_id)
            .options(selectinload(School.subscription_plan))
            .execution_options(populate_existing=True)
        )
        school = result.scalar_one_or_none()
        if not school:
            raise NotFoundError("School not found")
        return school

    async def set_approval(self, school_id: int, approved: bool) -> School:
        """Approve or reject a school. Rejecting blocks its admin's login."""
        school = await self.get_school(school_id)
        school.is_approved = approved
        await self.db.commit()
        logger.info(
            "School %s %s", school_id, "approved" if approved else "rejected"
        )
        return await self.get_school(school_id)

    async def _pending_invoices(self, school_id: int) -> list[Invoice]:
        result = await self.db.execute(
            select(Invoice)
            .where(
                Invoice.school_id == school_id,
                Invoice.status == InvoiceStatus.PENDING.value,
            )
            .options(selectinload(Invoice.student).selectinload(Student.parent))
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        return list(result.scalars().all())

    async def get_details(self, school_id: int) -> dict:
        """
        School with students, invoices and fee statistics.

        Remaining amount is what is still owed: pending plus overdue.
        """
        school = await self.get_school(school_id)

        students_result = await self.db.execute(
            select(Student)
            .where(Student.school_id == school_id)
            .options(selectinload(Student.parent))
            .order_by(Student.created_at.desc(), Student.id.desc())
        )
        students = list(students_result.scalars().all())

        invoices_result = await self.db.execute(
            select(Invoice)
            .where(Invoice.school_id == school_id)
            .options(selectinload(Invoice.student))
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        invoices = list(invoices_result.scalars().all())

        pending = _sum_amounts(invoices, InvoiceStatus.PENDING)
        overdue = _sum_amounts(invoices, InvoiceStatus.OVERDUE)

        return {
            "school": school,
            "students": students,
            "invoices": invoices,
            "statistics": {
                "total_students": len(students),
                "total_invoices": len(invoices),
                "total_amount": _sum_amounts(invoices),
                "paid_amount": _sum_amounts(invoices, InvoiceStatus.PAID),
                "pending_amount": pending,
                "overdue_amount": overdue,
                "remaining_amount": pending + overdue,
            },
        }

    async def prepare_parent_notifications(self, school_id: int) -> dict:
        """
        Group the school's pending invoices by parent.

        Invoices of students without a linked parent count towards the
        total but are not addressed to anyone. Nothing is sent.
        """
        await self.get_school(school_id)
        invoices = await self._pending_invoices(school_id)

        grouped: dict[int, dict] = defaultdict(
            lambda: {"parent": None, "invoices": [], "total_amount": ZERO}
        )
        for invoice in invoices:
            parent = invoice.student.parent if invoice.student else None
            if parent is None:
                continue
            entry = grouped[parent.id]
            entry["parent"] = parent
            entry["invoices"].append(invoice)
            entry["total_amount"] += invoice.amount

        logger.info(
            "Prepared pending fee notifications for %d parents of school %s",
            len(grouped), school_id,
        )
        return {
            "notifications": list(grouped.values()),
            "total_pending_amount": _sum_amounts(invoices),
        }

    async def prepare_school_notification(self, school_id: int) -> dict:
        """Pending invoice summary addressed to the school admin. Nothing is sent."""
        await self.get_school(school_id)

        admin_result = await self.db.execute(
            select(User)
            .where(
                User.school_id == school_id,
                User.role == UserRole.SCHOOL_ADMIN.value,
            )
            .order_by(User.id)
            .limit(1)
        )
        admin = admin_result.scalar_one_or_none()
        if not admin:
            raise NotFoundError("School admin not found")

        invoices = await self._pending_invoices(school_id)
        return {
            "school_admin": {"name": admin.name, "email": admin.email},
            "pending_invoices_count": len(invoices),
            "total_pending_amount": _sum_amounts(invoices),
        }
