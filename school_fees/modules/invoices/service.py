"""Service for Invoices module."""

import calendar
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_fees.core.auth.models import User
from school_fees.core.config import settings
from school_fees.core.exceptions import DuplicateError, NotFoundError
from school_fees.core.logging import get_logger
from school_fees.modules.fee_structures.models import FeeStructure
from school_fees.modules.fee_structures.scholarship import ScholarshipType
from school_fees.modules.invoices.models import Invoice, InvoiceStatus
from school_fees.modules.invoices.schemas import GenerateInvoicesResult, InvoiceCreate
from school_fees.modules.students.models import Student
from school_fees.shared.utils.money import ZERO, format_amount, round_money

logger = get_logger(__name__)


def billing_term(month: int, year: int) -> str:
    """Term label for a calendar month, e.g. ``"April 2025"``."""
    return f"{calendar.month_name[month]} {year}"


def monthly_description(term: str, structure: FeeStructure, currency: str) -> str:
    """Invoice description, with the scholarship noted when there is one."""
    description = f"Monthly fee for {term}"
    if structure.scholarship and structure.scholarship > 0:
        amount = format_amount(structure.scholarship)
        if structure.scholarship_type == ScholarshipType.PERCENTAGE:
            description += f" (Scholarship: {amount}%)"
        else:
            description += f" (Scholarship: {currency} {amount})"
    return description


class InvoiceService:
    """Service for creating, listing and generating invoices."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_invoice(self, invoice_id: int) -> Invoice:
        """Get invoice by ID with its student."""
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .options(selectinload(Invoice.student))
            .execution_options(populate_existing=True)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    async def create_invoice(self, school_id: int, data: InvoiceCreate) -> Invoice:
        """
        Create an ad hoc pending invoice for a student of the school.

        Raises:
            NotFoundError: student is not in the school
            DuplicateError: the student already has an invoice for the term
        """
        result = await self.db.execute(
            select(Student.id).where(
                Student.id == data.student_id, Student.school_id == school_id
            )
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Student not found in your school")

        invoice = Invoice(
            school_id=school_id,
            student_id=data.student_id,
            amount=round_money(data.amount),
            currency=data.currency or settings.default_currency,
            due_date=data.due_date,
            status=InvoiceStatus.PENDING.value,
            term=data.term,
            description=data.description,
        )
        self.db.add(invoice)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateError(
                "Invoice", "term", data.term,
                message=f"Invoice already exists for this student - {data.term}",
            )

        return await self.get_invoice(invoice.id)

    async def list_for_school(self, school_id: int) -> list[Invoice]:
        """All invoices of the school, newest first."""
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.school_id == school_id)
            .options(selectinload(Invoice.student))
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_parent(self, parent: User) -> list[Invoice]:
        """Invoices of the parent's linked children in the parent's school."""
        result = await self.db.execute(
            select(Invoice)
            .join(Student, Invoice.student_id == Student.id)
            .where(
                Student.parent_id == parent.id,
                Student.school_id == parent.school_id,
            )
            .options(selectinload(Invoice.student))
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        )
        return list(result.scalars().all())

    async def _invoice_exists(self, school_id: int, student_id: int, term: str) -> bool:
        result = await self.db.execute(
            select(Invoice.id).where(
                Invoice.school_id == school_id,
                Invoice.student_id == student_id,
                Invoice.term == term,
            )
        )
        return result.first() is not None

    async def generate_monthly_invoices(
        self, school_id: int, month: int, year: int
    ) -> GenerateInvoicesResult:
        """
        Bill every active fee structure of the school for one month.

        Each student is handled independently: an existing invoice for the
        term, a zero amount or a failed insert is reported in ``errors`` and
        the run moves on. Every insert runs in its own savepoint, so one
        failure never undoes the invoices already created.
        """
        term = billing_term(month, year)
        due_date = date(year, month, settings.invoice_due_day)
        currency = settings.default_currency

        result = await self.db.execute(
            select(FeeStructure)
            .where(
                FeeStructure.school_id == school_id,
                FeeStructure.is_active.is_(True),
            )
            .options(selectinload(FeeStructure.student))
            .order_by(FeeStructure.created_at.desc(), FeeStructure.id.desc())
        )
        structures = list(result.scalars().all())

        created = 0
        errors: list[str] = []

        for structure in structures:
            student = structure.student
            student_name = f"{student.first_name} {student.last_name}"

            if await self._invoice_exists(school_id, student.id, term):
                errors.append(f"Invoice already exists for {student_name} - {term}")
                continue

            amount = round_money(structure.actual_fee)
            if amount <= ZERO:
                errors.append(f"No amount due for {student_name} - {term}")
                continue

            invoice = Invoice(
                school_id=school_id,
                student_id=student.id,
                amount=amount,
                currency=currency,
                due_date=due_date,
                status=InvoiceStatus.PENDING.value,
                term=term,
                description=monthly_description(term, structure, currency),
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(invoice)
            except IntegrityError:
                # Created concurrently after the existence check
                errors.append(f"Invoice already exists for {student_name} - {term}")
                continue
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "Failed to create invoice for student %s (%s)", student.id, term
                )
                errors.append(f"Failed to create invoice for {student.first_name}: {exc}")
                continue
            created += 1

        await self.db.commit()
        logger.info(
            "Generated %d invoices for school %s, %s (%d skipped)",
            created, school_id, term, len(errors),
        )
        return GenerateInvoicesResult(created=created, errors=errors or None)
