"""Service for Students module."""

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_fees.core.auth.models import User, UserRole
from school_fees.core.exceptions import DuplicateError, NotFoundError, ValidationError
from school_fees.modules.fee_structures.models import FeeStructure
from school_fees.modules.invoices.models import Invoice
from school_fees.modules.students.models import Student
from school_fees.modules.students.schemas import StudentCreate, StudentUpdate


class StudentService:
    """Service for the student roster of a school and parent-child links."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Helpers ---

    async def _ensure_unique_code(self, student_code: str, exclude_id: int | None = None) -> None:
        query = select(Student.id).where(Student.student_code == student_code)
        if exclude_id is not None:
            query = query.where(Student.id != exclude_id)
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise DuplicateError(
                "Student", "student_code", student_code,
                message="Student code already exists",
            )

    async def _validate_parent(self, school_id: int, parent_id: int) -> User:
        """Parent must be a parent account of the same school."""
        parent = await self.db.get(User, parent_id)
        if (
            parent is None
            or parent.role != UserRole.PARENT.value
            or parent.school_id != school_id
        ):
            raise ValidationError("Parent not found in your school", field="parent")
        return parent

    # --- Queries ---

    async def get_school_student(
        self, school_id: int, student_id: int, with_relations: bool = False
    ) -> Student:
        """Get a student of the given school."""
        query = select(Student).where(
            Student.id == student_id, Student.school_id == school_id
        )
        if with_relations:
            query = query.options(selectinload(Student.parent)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student not found")
        return student

    async def list_students(self, school_id: int) -> list[Student]:
        """List the school's students, newest first."""
        result = await self.db.execute(
            select(Student)
            .where(Student.school_id == school_id)
            .options(selectinload(Student.parent))
            .order_by(Student.created_at.desc(), Student.id.desc())
        )
        return list(result.scalars().all())

    async def list_children(self, parent: User) -> list[Student]:
        """Students linked to a parent within the parent's school."""
        result = await self.db.execute(
            select(Student)
            .where(Student.parent_id == parent.id, Student.school_id == parent.school_id)
            .options(selectinload(Student.parent))
            .order_by(Student.created_at.desc(), Student.id.desc())
        )
        return list(result.scalars().all())

    # --- Mutations ---

    async def create_student(self, school_id: int, data: StudentCreate) -> Student:
        """Create a new student in the school."""
        await self._ensure_unique_code(data.student_code)
        if data.parent_id is not None:
            await self._validate_parent(school_id, data.parent_id)

        student = Student(
            school_id=school_id,
            first_name=data.first_name,
            last_name=data.last_name,
            student_code=data.student_code,
            class_name=data.class_name,
            section=data.section,
            parent_id=data.parent_id,
        )
        self.db.add(student)
        await self.db.commit()
        return await self.get_school_student(school_id, student.id, with_relations=True)

    async def update_student(
        self, school_id: int, student_id: int, data: StudentUpdate
    ) -> Student:
        """Update a student. Unset fields are left as they are."""
        student = await self.get_school_student(school_id, student_id)
        changes = data.model_dump(exclude_unset=True)

        code = changes.get("student_code")
        if code is not None and code != student.student_code:
            await self._ensure_unique_code(code, exclude_id=student.id)

        if "parent_id" in changes and changes["parent_id"] is not None:
            await self._validate_parent(school_id, changes["parent_id"])

        for field, value in changes.items():
            # parent_id is the only nullable field; None elsewhere means "not provided"
            if value is None and field != "parent_id":
                continue
            setattr(student, field, value)

        await self.db.commit()
        return await self.get_school_student(school_id, student.id, with_relations=True)

    async def delete_student(self, school_id: int, student_id: int) -> None:
        """Delete a student that has no billing history."""
        student = await self.get_school_student(school_id, student_id)

        has_history = await self.db.scalar(
            select(
                exists().where(Invoice.student_id == student.id)
                | exists().where(FeeStructure.student_id == student.id)
            )
        )
        if has_history:
            raise ValidationError(
                "Cannot delete a student with invoices or fee structures"
            )

        await self.db.delete(student)
        await self.db.commit()

    async def link_child(self, parent: User, student_code: str) -> Student:
        """Link the student with this code in the parent's school to the parent."""
        result = await self.db.execute(
            select(Student).where(
                Student.student_code == student_code,
                Student.school_id == parent.school_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student not found with this code")

        student.parent_id = parent.id
        await self.db.commit()
        return await self.get_school_student(parent.school_id, student.id, with_relations=True)
