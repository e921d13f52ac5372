"""Service for Fee Structures module."""

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_fees.core.exceptions import ConflictError, NotFoundError, ValidationError
from school_fees.core.logging import get_logger
from school_fees.modules.fee_structures.models import FeeStructure
from school_fees.modules.fee_structures.scholarship import ScholarshipType
from school_fees.modules.fee_structures.schemas import (
    FeeStructureCreate,
    FeeStructureUpdate,
)
from school_fees.modules.students.models import Student
from school_fees.shared.utils.money import round_money

logger = get_logger(__name__)


class FeeStructureService:
    """
    Registry of per-student fee structures.

    A student has at most one active structure. Creating a structure retires
    the student's previous active one in the same transaction, with the
    student row locked; the partial unique index on active structures
    catches anything that still interleaves.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_fee_structure(
        self, school_id: int, structure_id: int, with_student: bool = False
    ) -> FeeStructure:
        """Get a fee structure of the given school."""
        query = select(FeeStructure).where(
            FeeStructure.id == structure_id, FeeStructure.school_id == school_id
        )
        if with_student:
            query = query.options(selectinload(FeeStructure.student)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(query)
        structure = result.scalar_one_or_none()
        if not structure:
            raise NotFoundError("Fee structure not found")
        return structure

    async def list_active(self, school_id: int) -> list[FeeStructure]:
        """Active structures of the school, newest first."""
        result = await self.db.execute(
            select(FeeStructure)
            .where(
                FeeStructure.school_id == school_id,
                FeeStructure.is_active.is_(True),
            )
            .options(selectinload(FeeStructure.student))
            .order_by(FeeStructure.created_at.desc(), FeeStructure.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, school_id: int, data: FeeStructureCreate) -> FeeStructure:
        """
        Create the new active fee structure of a student.

        Raises:
            NotFoundError: student is not in the school
            ConflictError: a concurrent create won the race for this student
        """
        # Lock the student row so concurrent creates for one student serialize
        result = await self.db.execute(
            select(Student)
            .where(Student.id == data.student_id, Student.school_id == school_id)
            .with_for_update()
        )
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student not found in your school")

        # Scoped by student only, not by school
        await self.db.execute(
            update(FeeStructure)
            .where(
                FeeStructure.student_id == student.id,
                FeeStructure.is_active.is_(True),
            )
            .values(is_active=False)
        )

        structure = FeeStructure(
            school_id=school_id,
            student_id=student.id,
            monthly_fee=round_money(data.monthly_fee),
            scholarship=round_money(data.scholarship),
            scholarship_type=data.scholarship_type.value,
            effective_from=data.effective_from,
            effective_to=data.effective_to,
            is_active=True,
            notes=data.notes,
        )
        self.db.add(structure)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(
                "Another active fee structure was created for this student, please retry"
            )

        logger.info(
            "Fee structure %s is now active for student %s", structure.id, student.id
        )
        return await self.get_fee_structure(school_id, structure.id, with_student=True)

    async def update(
        self, school_id: int, structure_id: int, data: FeeStructureUpdate
    ) -> FeeStructure:
        """Merge the provided fields into the structure. Other structures are untouched."""
        structure = await self.get_fee_structure(school_id, structure_id)
        changes = data.model_dump(exclude_unset=True)

        # Required columns keep their value when null is sent
        for field in ("monthly_fee", "scholarship", "scholarship_type", "effective_from"):
            if field in changes and changes[field] is None:
                del changes[field]

        scholarship_type = changes.get("scholarship_type", structure.scholarship_type)
        scholarship = changes.get("scholarship", structure.scholarship)
        if scholarship_type == ScholarshipType.PERCENTAGE and scholarship > 100:
            raise ValidationError(
                "Percentage scholarship cannot exceed 100", field="scholarship"
            )

        effective_from = changes.get("effective_from", structure.effective_from)
        effective_to = changes.get("effective_to", structure.effective_to)
        if effective_to is not None and effective_to < effective_from:
            raise ValidationError(
                "effectiveTo cannot be before effectiveFrom", field="effectiveTo"
            )

        for field, value in changes.items():
            if field in ("monthly_fee", "scholarship"):
                value = round_money(value)
            elif field == "scholarship_type":
                value = ScholarshipType(value).value
            setattr(structure, field, value)

        await self.db.commit()
        return await self.get_fee_structure(school_id, structure.id, with_student=True)
