import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.models import User, UserRole
from school_fees.core.exceptions import DuplicateError, NotFoundError, ValidationError
from school_fees.modules.schools.models import School
from school_fees.modules.students.schemas import StudentCreate, StudentUpdate
from school_fees.modules.students.service import StudentService
from tests.helpers import (
    auth_headers,
    make_fee_structure,
    make_invoice,
    make_school,
    make_student,
    make_user,
)


def _student_data(code: str = "STU-001", **overrides) -> StudentCreate:
    data = dict(
        first_name="Sita",
        last_name="Sharma",
        student_code=code,
        class_name="Grade 5",
        section="A",
    )
    data.update(overrides)
    return StudentCreate(**data)


class TestStudentSchemas:
    def test_empty_parent_means_none(self):
        assert _student_data(parent="").parent_id is None

    def test_parent_alias(self):
        assert _student_data(parent=7).parent_id == 7


class TestStudentService:
    """Tests for StudentService."""

    async def test_create_student(self, db_session: AsyncSession, school: School, parent_user: User):
        student = await StudentService(db_session).create_student(
            school.id, _student_data(parent=parent_user.id)
        )

        assert student.id is not None
        assert student.full_name == "Sita Sharma"
        assert student.parent.email == "parent@example.com"

    async def test_duplicate_code_across_schools(self, db_session: AsyncSession, school: School):
        other = await make_school(db_session, name="Other School")
        await make_student(db_session, other.id, "STU-001")

        with pytest.raises(DuplicateError) as exc_info:
            await StudentService(db_session).create_student(school.id, _student_data("STU-001"))
        assert exc_info.value.status_code == 409

    async def test_parent_must_belong_to_school(self, db_session: AsyncSession, school: School):
        other = await make_school(db_session, name="Other School")
        foreign_parent = await make_user(db_session, "far@example.com", UserRole.PARENT, other.id)

        with pytest.raises(ValidationError):
            await StudentService(db_session).create_student(
                school.id, _student_data(parent=foreign_parent.id)
            )

    async def test_parent_must_be_parent_role(
        self, db_session: AsyncSession, school: School, school_admin: User
    ):
        with pytest.raises(ValidationError):
            await StudentService(db_session).create_student(
                school.id, _student_data(parent=school_admin.id)
            )

    async def test_update_student(self, db_session: AsyncSession, school: School, parent_user: User):
        student = await make_student(db_session, school.id, "STU-001", parent_id=parent_user.id)

        updated = await StudentService(db_session).update_student(
            school.id, student.id, StudentUpdate(class_name="Grade 6", parent="")
        )

        assert updated.class_name == "Grade 6"
        assert updated.first_name == "Sita"
        assert updated.parent_id is None

    async def test_update_code_collision(self, db_session: AsyncSession, school: School):
        await make_student(db_session, school.id, "STU-001")
        second = await make_student(db_session, school.id, "STU-002")

        with pytest.raises(DuplicateError):
            await StudentService(db_session).update_student(
                school.id, second.id, StudentUpdate(student_code="STU-001")
            )

    async def test_update_keeps_own_code(self, db_session: AsyncSession, school: School):
        student = await make_student(db_session, school.id, "STU-001")

        updated = await StudentService(db_session).update_student(
            school.id, student.id, StudentUpdate(student_code="STU-001", section="B")
        )
        assert updated.section == "B"

    async def test_delete_student(self, db_session: AsyncSession, school: School):
        student = await make_student(db_session, school.id, "STU-001")
        service = StudentService(db_session)

        await service.delete_student(school.id, student.id)

        with pytest.raises(NotFoundError):
            await service.get_school_student(school.id, student.id)

    async def test_delete_refused_with_fee_structure(self, db_session: AsyncSession, school: School):
        student = await make_student(db_session, school.id, "STU-001")
        await make_fee_structure(db_session, student)

        with pytest.raises(ValidationError):
            await StudentService(db_session).delete_student(school.id, student.id)

    async def test_delete_refused_with_invoice(self, db_session: AsyncSession, school: School):
        student = await make_student(db_session, school.id, "STU-001")
        await make_invoice(db_session, student)

        with pytest.raises(ValidationError):
            await StudentService(db_session).delete_student(school.id, student.id)

    async def test_list_scoped_to_school(self, db_session: AsyncSession, school: School):
        other = await make_school(db_session, name="Other School")
        await make_student(db_session, school.id, "STU-001")
        await make_student(db_session, school.id, "STU-002")
        await make_student(db_session, other.id, "OTH-001")

        students = await StudentService(db_session).list_students(school.id)

        assert [s.student_code for s in students] == ["STU-002", "STU-001"]

    async def test_link_child(self, db_session: AsyncSession, school: School, parent_user: User):
        await make_student(db_session, school.id, "STU-001")
        service = StudentService(db_session)

        student = await service.link_child(parent_user, "STU-001")

        assert student.parent_id == parent_user.id
        children = await service.list_children(parent_user)
        assert [c.student_code for c in children] == ["STU-001"]

    async def test_link_child_of_other_school(
        self, db_session: AsyncSession, school: School, parent_user: User
    ):
        other = await make_school(db_session, name="Other School")
        await make_student(db_session, other.id, "OTH-001")

        with pytest.raises(NotFoundError):
            await StudentService(db_session).link_child(parent_user, "OTH-001")


class TestStudentEndpoints:
    """Tests for student and parent API endpoints."""

    async def test_create_and_list(self, client: AsyncClient, school_admin: User, parent_user: User):
        headers = auth_headers(school_admin)

        response = await client.post(
            "/api/v1/students",
            json={
                "firstName": "Sita",
                "lastName": "Sharma",
                "studentCode": "STU-001",
                "className": "Grade 5",
                "section": "A",
                "parent": parent_user.id,
            },
            headers=headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["fullName"] == "Sita Sharma"
        assert data["parent"] == {"id": parent_user.id, "name": "Parent User", "email": "parent@example.com"}

        listing = await client.get("/api/v1/students", headers=headers)
        assert [s["studentCode"] for s in listing.json()["data"]] == ["STU-001"]

    async def test_create_missing_field(self, client: AsyncClient, school_admin: User):
        response = await client.post(
            "/api/v1/students",
            json={"firstName": "Sita", "studentCode": "STU-001", "className": "5", "section": "A"},
            headers=auth_headers(school_admin),
        )
        assert response.status_code == 422
        assert response.json()["message"].startswith("lastName")

    async def test_update_and_delete(
        self, client: AsyncClient, db_session: AsyncSession, school_admin: User
    ):
        student = await make_student(db_session, school_admin.school_id, "STU-001")
        headers = auth_headers(school_admin)

        updated = await client.put(
            f"/api/v1/students/{student.id}", json={"section": "C"}, headers=headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["section"] == "C"

        deleted = await client.delete(f"/api/v1/students/{student.id}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["data"] is None

        missing = await client.put(
            f"/api/v1/students/{student.id}", json={"section": "D"}, headers=headers
        )
        assert missing.status_code == 404

    async def test_parent_links_and_lists_children(
        self, client: AsyncClient, db_session: AsyncSession, school: School, parent_user: User
    ):
        await make_student(db_session, school.id, "STU-001")
        headers = auth_headers(parent_user)

        linked = await client.post(
            "/api/v1/parents/link-child", json={"studentCode": "STU-001"}, headers=headers
        )
        assert linked.status_code == 200
        assert linked.json()["data"]["parentId"] == parent_user.id

        children = await client.get("/api/v1/parents/children", headers=headers)
        assert [c["studentCode"] for c in children.json()["data"]] == ["STU-001"]

    async def test_link_unknown_code(self, client: AsyncClient, parent_user: User):
        response = await client.post(
            "/api/v1/parents/link-child",
            json={"studentCode": "NOPE"},
            headers=auth_headers(parent_user),
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Student not found with this code"
