"""
Tests for tenant scope resolution and clause building.
"""

import pytest

from edutrack.core.errors import BusinessRuleError
from edutrack.core.tenancy import (
    NoAccess,
    ParentScope,
    SchoolScope,
    TeacherScope,
    Unrestricted,
    resolve_school_id,
    resolve_scope,
    scope_school_id,
    tenant_clause,
)
from edutrack.modules.students.models import Student
from edutrack.modules.users.models import UserRole

SCHOOL_ID = "11111111-1111-1111-1111-111111111111"


class TestResolveScope:
    """resolve_scope maps every role to exactly one scope."""

    def test_super_admin_is_unrestricted(self, super_admin):
        assert resolve_scope(super_admin) == Unrestricted()

    @pytest.mark.parametrize("role", [UserRole.PRINCIPAL, UserRole.SCHOOL_ADMIN])
    def test_school_staff_get_their_school(self, actor_factory, role):
        actor = actor_factory(role)
        assert resolve_scope(actor) == SchoolScope(SCHOOL_ID)

    def test_teacher_scope_carries_teacher_and_school(self, teacher):
        assert resolve_scope(teacher) == TeacherScope(teacher_id=teacher.id, school_id=SCHOOL_ID)

    def test_parent_scope(self, parent):
        assert resolve_scope(parent) == ParentScope(parent.id)

    @pytest.mark.parametrize("role", [UserRole.PRINCIPAL, UserRole.SCHOOL_ADMIN, UserRole.TEACHER])
    def test_school_role_without_school_has_no_access(self, actor_factory, role):
        assert resolve_scope(actor_factory(role, school_id=None)) == NoAccess()

    def test_scope_school_id(self, teacher, parent):
        assert scope_school_id(resolve_scope(teacher)) == SCHOOL_ID
        assert scope_school_id(resolve_scope(parent)) is None


class TestTenantClause:
    """tenant_clause turns a scope into a WHERE clause."""

    def test_unrestricted_is_true(self):
        assert str(tenant_clause(Unrestricted(), school_column=Student.school_id)) == "true"

    def test_no_access_is_false(self):
        assert str(tenant_clause(NoAccess(), school_column=Student.school_id)) == "false"

    def test_school_scope_filters_on_school_column(self):
        clause = tenant_clause(SchoolScope(SCHOOL_ID), school_column=Student.school_id)
        assert clause.left.key == "school_id"
        assert clause.right.value == SCHOOL_ID

    def test_school_scope_without_school_column_is_false(self):
        assert str(tenant_clause(SchoolScope(SCHOOL_ID))) == "false"

    def test_parent_without_relationship_sees_nothing(self):
        clause = tenant_clause(ParentScope("p-1"), school_column=Student.school_id)
        assert str(clause) == "false"

    def test_parent_relationship_is_used(self):
        clause = tenant_clause(
            ParentScope("p-1"),
            school_column=Student.school_id,
            parent=lambda parent_id: Student.parent_id == parent_id,
        )
        assert clause.left.key == "parent_id"
        assert clause.right.value == "p-1"

    def test_teacher_without_relationship_sees_whole_school(self):
        clause = tenant_clause(
            TeacherScope(teacher_id="t-1", school_id=SCHOOL_ID), school_column=Student.school_id
        )
        assert clause.right.value == SCHOOL_ID

    def test_teacher_relationship_is_combined_with_school(self):
        seen = []

        def teacher_clause(teacher_id):
            seen.append(teacher_id)
            return Student.class_id == "c-1"

        clause = tenant_clause(
            TeacherScope(teacher_id="t-1", school_id=SCHOOL_ID),
            school_column=Student.school_id,
            teacher=teacher_clause,
        )
        assert seen == ["t-1"]
        assert len(clause.clauses) == 2


class TestResolveSchoolId:
    """resolve_school_id picks the owning school for new records."""

    def test_super_admin_must_name_school(self, super_admin):
        with pytest.raises(BusinessRuleError) as exc_info:
            resolve_school_id(super_admin, None)
        assert exc_info.value.error_code == "SCHOOL_REQUIRED"

    def test_super_admin_uses_requested_school(self, super_admin):
        assert resolve_school_id(super_admin, "school-x") == "school-x"

    def test_staff_always_write_into_own_school(self, principal):
        assert resolve_school_id(principal, "another-school") == SCHOOL_ID

    def test_actor_without_school_is_rejected(self, parent):
        with pytest.raises(BusinessRuleError) as exc_info:
            resolve_school_id(parent, "school-x")
        assert exc_info.value.error_code == "NO_SCHOOL"
