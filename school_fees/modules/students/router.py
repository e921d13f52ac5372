"""API endpoints for Students module (school roster and parent links)."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.dependencies import require_capability
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability
from school_fees.core.database.session import get_db
from school_fees.modules.students.models import Student
from school_fees.modules.students.schemas import (
    LinkChildRequest,
    ParentBrief,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)
from school_fees.modules.students.service import StudentService
from school_fees.shared.schemas import ApiResponse

router = APIRouter(prefix="/students", tags=["Students"])
parents_router = APIRouter(prefix="/parents", tags=["Parents"])


def _student_to_response(student: Student) -> StudentResponse:
    """Helper to convert Student to response."""
    return StudentResponse(
        id=student.id,
        school_id=student.school_id,
        first_name=student.first_name,
        last_name=student.last_name,
        full_name=student.full_name,
        student_code=student.student_code,
        class_name=student.class_name,
        section=student.section,
        parent_id=student.parent_id,
        parent=ParentBrief.model_validate(student.parent) if student.parent else None,
        created_at=student.created_at,
    )


# --- School admin: roster ---


@router.get("", response_model=ApiResponse[list[StudentResponse]])
async def list_students(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_STUDENTS, school_scoped=True)
    ),
):
    """List students of the caller's school."""
    service = StudentService(db)
    students = await service.list_students(current_user.school_id)
    return ApiResponse(data=[_student_to_response(s) for s in students])


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    data: StudentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_STUDENTS, school_scoped=True)
    ),
):
    """Create a student in the caller's school."""
    service = StudentService(db)
    student = await service.create_student(current_user.school_id, data)
    return ApiResponse(
        message="Student created successfully",
        data=_student_to_response(student),
    )


@router.put("/{student_id}", response_model=ApiResponse[StudentResponse])
async def update_student(
    student_id: int,
    data: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_STUDENTS, school_scoped=True)
    ),
):
    """Update a student of the caller's school."""
    service = StudentService(db)
    student = await service.update_student(current_user.school_id, student_id, data)
    return ApiResponse(
        message="Student updated successfully",
        data=_student_to_response(student),
    )


@router.delete("/{student_id}", response_model=ApiResponse[None])
async def delete_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_STUDENTS, school_scoped=True)
    ),
):
    """Delete a student without billing history."""
    service = StudentService(db)
    await service.delete_student(current_user.school_id, student_id)
    return ApiResponse(data=None, message="Student deleted successfully")


# --- Parent: linked children ---


@parents_router.get("/children", response_model=ApiResponse[list[StudentResponse]])
async def list_linked_children(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.LINK_CHILDREN, school_scoped=True)
    ),
):
    """List children linked to the caller."""
    service = StudentService(db)
    students = await service.list_children(current_user)
    return ApiResponse(data=[_student_to_response(s) for s in students])


@parents_router.post("/link-child", response_model=ApiResponse[StudentResponse])
async def link_child(
    data: LinkChildRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.LINK_CHILDREN, school_scoped=True)
    ),
):
    """Link a child to the caller using the student code."""
    service = StudentService(db)
    student = await service.link_child(current_user, data.student_code)
    return ApiResponse(
        message="Child linked successfully",
        data=_student_to_response(student),
    )
