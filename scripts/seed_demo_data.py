#!/usr/bin/env python3
"""
Seed the database with a small demo tenant.

Creates a super admin, a subscription plan, an approved school with its
admin, a parent, a few students (one linked to the parent) and an active
fee structure per student.

Usage:
    python scripts/seed_demo_data.py --dry-run   # roll back at the end
    python scripts/seed_demo_data.py --confirm   # write to the database

Requires the migrations to be applied (alembic upgrade head).
"""

import asyncio
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.models import User, UserRole
from school_fees.core.auth.password import hash_password
from school_fees.core.config import settings
from school_fees.core.database.session import async_session
from school_fees.modules.fee_structures.models import FeeStructure
from school_fees.modules.fee_structures.scholarship import ScholarshipType
from school_fees.modules.plans.models import Plan
from school_fees.modules.schools.models import School
from school_fees.modules.students.models import Student

SUPER_ADMIN = ("Super Admin", "superadmin@example.com", "SuperAdmin@123")
SCHOOL_ADMIN = ("School Admin", "schooladmin@example.com", "SchoolAdmin@123")
PARENT = ("Parent User", "parent@example.com", "Parent@123")

# first name, last name, code, class, section, linked to demo parent
STUDENTS_DATA = [
    ("Sita", "Sharma", "STU-001", "Grade 5", "A", True),
    ("Ram", "Thapa", "STU-002", "Grade 5", "B", False),
    ("Gita", "Karki", "STU-003", "Grade 3", "A", False),
]

# code -> (monthly fee, scholarship type, scholarship)
FEES_DATA = {
    "STU-001": (Decimal("5000.00"), ScholarshipType.PERCENTAGE, Decimal("20")),
    "STU-002": (Decimal("5000.00"), ScholarshipType.NONE, Decimal("0")),
    "STU-003": (Decimal("4000.00"), ScholarshipType.FIXED, Decimal("500")),
}


def _user(name: str, email: str, password: str, role: UserRole, school_id: int | None) -> User:
    return User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        school_id=school_id,
        is_active=True,
    )


async def seed_platform(session: AsyncSession) -> Plan | None:
    """Super admin and the basic plan. Returns None if already seeded."""
    result = await session.execute(select(User).where(User.email == SUPER_ADMIN[1]))
    if result.scalar_one_or_none():
        print("  Demo data already present, skip.")
        return None

    session.add(_user(*SUPER_ADMIN, UserRole.SUPER_ADMIN, None))
    plan = Plan(
        name="Basic Plan",
        price_per_month=Decimal("1000.00"),
        max_students=500,
        features=["Invoices", "Online Payments", "Basic Reports"],
        is_active=True,
    )
    session.add(plan)
    await session.flush()
    print("  Created super admin and plan.")
    return plan


async def seed_school(session: AsyncSession, plan: Plan) -> tuple[School, User]:
    """Approved school with its admin and one parent. Returns (school, parent)."""
    school = School(
        name="Green Valley School",
        address="Kathmandu",
        contact_email="info@greenvalley.example.com",
        contact_phone="+977-123456789",
        is_approved=True,
        subscription_plan_id=plan.id,
    )
    session.add(school)
    await session.flush()

    session.add(_user(*SCHOOL_ADMIN, UserRole.SCHOOL_ADMIN, school.id))
    parent = _user(*PARENT, UserRole.PARENT, school.id)
    session.add(parent)
    await session.flush()
    print(f"  Created school {school.name!r} with admin and parent.")
    return school, parent


async def seed_students(session: AsyncSession, school: School, parent: User) -> None:
    """Students and one active fee structure each."""
    effective_from = date(date.today().year, 1, 1)
    for first, last, code, class_name, section, linked in STUDENTS_DATA:
        student = Student(
            school_id=school.id,
            first_name=first,
            last_name=last,
            student_code=code,
            class_name=class_name,
            section=section,
            parent_id=parent.id if linked else None,
        )
        session.add(student)
        await session.flush()

        monthly_fee, scholarship_type, scholarship = FEES_DATA[code]
        session.add(
            FeeStructure(
                school_id=school.id,
                student_id=student.id,
                monthly_fee=monthly_fee,
                scholarship=scholarship,
                scholarship_type=scholarship_type.value,
                effective_from=effective_from,
                is_active=True,
            )
        )
    await session.flush()
    print(f"  Created {len(STUDENTS_DATA)} students with fee structures.")


async def run_seed(session: AsyncSession, dry_run: bool) -> None:
    plan = await seed_platform(session)
    if plan is not None:
        school, parent = await seed_school(session, plan)
        await seed_students(session, school, parent)

    if dry_run:
        await session.rollback()
        print("\n[DRY-RUN] Rolled back, no data written.")
    else:
        await session.commit()
        print("\nSeed completed successfully.")


async def main() -> None:
    import argparse
    parser = argparse.ArgumentParser(description="Seed database with a demo school")
    parser.add_argument("--dry-run", action="store_true", help="Do not commit")
    parser.add_argument("--confirm", action="store_true", help="Commit changes")
    args = parser.parse_args()
    if not args.dry_run and not args.confirm:
        print("Use --dry-run or --confirm")
        sys.exit(1)

    print("Database:", make_url(settings.database_url).render_as_string(hide_password=True))
    print("Mode:", "DRY-RUN" if args.dry_run else "CONFIRM")
    async with async_session() as session:
        await run_seed(session, dry_run=args.dry_run)
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
