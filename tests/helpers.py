"""Builders shared by the test modules."""

from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.jwt import create_access_token
from school_fees.core.auth.models import User, UserRole
from school_fees.core.auth.service import AuthService
from school_fees.modules.fee_structures.models import FeeStructure
from school_fees.modules.fee_structures.scholarship import ScholarshipType
from school_fees.modules.invoices.models import Invoice, InvoiceStatus
from school_fees.modules.schools.models import School
from school_fees.modules.students.models import Student

TEST_PASSWORD = "Password123"


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for a user, as issued at login."""
    token = create_access_token(user.id, user.role, user.school_id)
    return {"Authorization": f"Bearer {token}"}


async def make_school(
    db_session: AsyncSession, name: str = "Green Valley School", approved: bool = True
) -> School:
    school = School(
        name=name,
        address="Kathmandu",
        contact_email="info@greenvalley.example.com",
        contact_phone="+977-123456789",
        is_approved=approved,
    )
    db_session.add(school)
    await db_session.commit()
    return school


async def make_user(
    db_session: AsyncSession,
    email: str,
    role: UserRole,
    school_id: int | None = None,
    name: str = "Test User",
) -> User:
    user = await AuthService(db_session).create_user(
        email=email,
        password=TEST_PASSWORD,
        name=name,
        role=role,
        school_id=school_id,
    )
    await db_session.commit()
    return user


async def make_student(
    db_session: AsyncSession,
    school_id: int,
    code: str,
    first_name: str = "Sita",
    last_name: str = "Sharma",
    parent_id: int | None = None,
) -> Student:
    student = Student(
        school_id=school_id,
        first_name=first_name,
        last_name=last_name,
        student_code=code,
        class_name="Grade 5",
        section="A",
        parent_id=parent_id,
    )
    db_session.add(student)
    await db_session.commit()
    return student


async def make_fee_structure(
    db_session: AsyncSession,
    student: Student,
    monthly_fee: str = "1000.00",
    scholarship_type: ScholarshipType = ScholarshipType.NONE,
    scholarship: str = "0",
    is_active: bool = True,
) -> FeeStructure:
    structure = FeeStructure(
        school_id=student.school_id,
        student_id=student.id,
        monthly_fee=Decimal(monthly_fee),
        scholarship=Decimal(scholarship),
        scholarship_type=scholarship_type.value,
        effective_from=date(2025, 1, 1),
        is_active=is_active,
    )
    db_session.add(structure)
    await db_session.commit()
    return structure


async def make_invoice(
    db_session: AsyncSession,
    student: Student,
    amount: str = "1000.00",
    term: str = "April 2025",
    status: InvoiceStatus = InvoiceStatus.PENDING,
) -> Invoice:
    invoice = Invoice(
        school_id=student.school_id,
        student_id=student.id,
        amount=Decimal(amount),
        currency="NPR",
        due_date=date(2025, 4, 15),
        status=status.value,
        term=term,
        description=f"Monthly fee for {term}",
    )
    db_session.add(invoice)
    await db_session.commit()
    return invoice
